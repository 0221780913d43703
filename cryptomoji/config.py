"""
Cryptomoji Configuration

Family and namespace settings for the transaction processor, with YAML
files, environment variables and validation.

Configuration Sources (in order of precedence):
    1. Environment variables (CRYPTOMOJI_*)
    2. Config file named by CRYPTOMOJI_CONFIG, or ./cryptomoji.yaml
    3. Default values

The processor reads configuration once, through ``get_family_config()``,
and works from the frozen ``FamilyConfig`` snapshot afterwards. Every
validator in the network must agree on these values, so they never change
while the process runs.
"""

from __future__ import annotations

import os
import re
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Generic, List, Optional, Tuple, TypeVar, Union

import yaml

from cryptomoji.core import load_yaml

T = TypeVar("T")

CONFIG_PATH_ENV = "CRYPTOMOJI_CONFIG"
DEFAULT_CONFIG_FILE = "cryptomoji.yaml"

_NAMESPACE_RE = re.compile(r"[0-9a-f]{6}")
_LOG_LEVELS = ("debug", "info", "warning", "error", "critical")


class ConfigError(Exception):
    """Configuration error."""
    pass


class ValidationError(ConfigError):
    """Configuration validation error."""
    pass


@dataclass
class ConfigValue(Generic[T]):
    """
    A single configuration value with metadata.

    Supports default values, environment variable binding and validation.
    """
    default: T
    env_var: Optional[str] = None
    description: str = ""
    validator: Optional[Callable[[T], bool]] = None
    _value: Optional[T] = field(default=None, repr=False)

    def get(self) -> T:
        """Get the current value."""
        if self.env_var and self.env_var in os.environ:
            return self._coerce(os.environ[self.env_var])

        return self._value if self._value is not None else self.default

    def set(self, value: T) -> None:
        """Set the value with validation."""
        value = self._coerce(value) if isinstance(value, str) else value
        if self.validator and not self.validator(value):
            raise ValidationError(f"Invalid value for config: {value!r}")
        self._value = value

    def _coerce(self, value: str) -> T:
        """Coerce string value to target type."""
        target_type = type(self.default)

        if target_type == bool:
            return value.lower() in ("true", "1", "yes", "on")  # type: ignore
        elif target_type == int:
            return int(value)  # type: ignore
        else:
            return value.strip()  # type: ignore


@dataclass
class ProcessorConfig:
    """Mutable configuration tree, filled from files and the environment."""
    family_name: ConfigValue[str] = field(default_factory=lambda: ConfigValue(
        default="cryptomoji",
        env_var="CRYPTOMOJI_FAMILY_NAME",
        description="Transaction family served by this processor",
        validator=lambda x: bool(x),
    ))
    family_version: ConfigValue[str] = field(default_factory=lambda: ConfigValue(
        default="0.1",
        env_var="CRYPTOMOJI_FAMILY_VERSION",
        description="Transaction family version",
        validator=lambda x: bool(x),
    ))
    namespace: ConfigValue[str] = field(default_factory=lambda: ConfigValue(
        default="5f4d76",
        env_var="CRYPTOMOJI_NAMESPACE",
        description="Six hex character state address prefix",
        validator=lambda x: bool(_NAMESPACE_RE.fullmatch(x)),
    ))
    log_level: ConfigValue[str] = field(default_factory=lambda: ConfigValue(
        default="info",
        env_var="CRYPTOMOJI_LOG_LEVEL",
        description="Minimum level for processor logs",
        validator=lambda x: x.lower() in _LOG_LEVELS,
    ))

    def values(self) -> Dict[str, ConfigValue]:
        return {name: getattr(self, name) for name in self.__dataclass_fields__}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary of effective values."""
        return {name: value.get() for name, value in self.values().items()}

    def to_yaml(self) -> str:
        """Convert to YAML string."""
        return yaml.dump(self.to_dict(), default_flow_style=False)

    def apply_dict(self, data: Dict[str, Any]) -> None:
        """Apply file values; unknown keys are rejected."""
        known = self.values()
        for key, value in data.items():
            if key not in known:
                raise ConfigError(f"Unknown configuration key: {key}")
            known[key].set(str(value))

    def validate(self) -> List[str]:
        """
        Validate all effective values, environment included.

        Returns list of validation errors.
        """
        errors: List[str] = []
        for name, value in self.values().items():
            try:
                current = value.get()
                if value.validator and not value.validator(current):
                    errors.append(f"{name}: validation failed for value {current!r}")
            except (TypeError, ValueError) as e:
                errors.append(f"{name}: {e}")
        return errors


@dataclass(frozen=True)
class FamilyConfig:
    """Immutable snapshot of the settings the processor runs with."""
    family_name: str
    family_version: str
    namespace: str
    log_level: str = "info"

    @property
    def family_versions(self) -> Tuple[str, ...]:
        return (self.family_version,)

    @property
    def namespaces(self) -> Tuple[str, ...]:
        return (self.namespace,)


def load_config(path: Optional[Union[str, Path]] = None) -> ProcessorConfig:
    """
    Build a ProcessorConfig from defaults, an optional YAML file and the
    environment.

    An explicit ``path`` must exist. Without one, the file named by
    CRYPTOMOJI_CONFIG is used, then ./cryptomoji.yaml if present.
    """
    config = ProcessorConfig()

    if path is None:
        env_path = os.environ.get(CONFIG_PATH_ENV)
        if env_path:
            path = env_path
        elif Path(DEFAULT_CONFIG_FILE).exists():
            path = DEFAULT_CONFIG_FILE

    if path is not None:
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")
        data = load_yaml(path)
        if data is not None and not isinstance(data, dict):
            raise ConfigError(f"Configuration file must hold a mapping: {path}")
        if data:
            config.apply_dict(data)

    return config


def freeze(config: ProcessorConfig) -> FamilyConfig:
    """Validate a ProcessorConfig and return its immutable snapshot."""
    errors = config.validate()
    if errors:
        raise ValidationError("; ".join(errors))
    return FamilyConfig(
        family_name=config.family_name.get(),
        family_version=config.family_version.get(),
        namespace=config.namespace.get(),
        log_level=config.log_level.get().lower(),
    )


_family_config: Optional[FamilyConfig] = None
_lock = threading.Lock()


def get_family_config() -> FamilyConfig:
    """Get the process-wide configuration, loading it on first use."""
    global _family_config
    with _lock:
        if _family_config is None:
            _family_config = freeze(load_config())
        return _family_config


def reset_config() -> None:
    """Drop the cached snapshot so the next call reloads it."""
    global _family_config
    with _lock:
        _family_config = None
