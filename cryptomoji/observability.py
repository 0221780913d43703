"""
Cryptomoji Observability

Structured logging for the transaction processor. Every record is written as
one JSON object carrying the correlation ID of the transaction being applied,
the layer that emitted it and any structured context.

    logger = get_logger("handlers", Layer.HANDLER)
    logger.info("collection created", signer=pk, addresses=written)

The host typically sets the correlation ID to the transaction signature so
log lines from every layer can be joined per transaction.
"""

from __future__ import annotations

import contextvars
import functools
import inspect
import json
import logging
import sys
import time
import traceback
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Optional, TypeVar

# Context variable for transaction-scoped data
correlation_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "correlation_id", default=""
)


class Layer(Enum):
    """Processor layers for categorization."""
    HANDLER = "handler"
    PROCESSOR = "processor"
    STATE = "state"
    CLIENT = "client"


@dataclass
class LogEvent:
    """Structured log event."""
    timestamp: str
    level: str
    logger: str
    message: str
    correlation_id: str = ""
    layer: str = ""
    operation: str = ""
    duration_ms: Optional[float] = None
    error_code: str = ""
    context: Dict[str, Any] = field(default_factory=dict)
    exception: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary, excluding empty values."""
        d = asdict(self)
        return {k: v for k, v in d.items() if v is not None and v != "" and v != {}}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)


class StructuredHandler(logging.Handler):
    """Logging handler that outputs structured JSON."""

    def __init__(self, stream: Any = None):
        super().__init__()
        self._stream = stream

    @property
    def stream(self) -> Any:
        return self._stream if self._stream is not None else sys.stderr

    def emit(self, record: logging.LogRecord) -> None:
        try:
            event = LogEvent(
                timestamp=datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
                level=record.levelname.lower(),
                logger=record.name,
                message=record.getMessage(),
                correlation_id=correlation_id_var.get(),
                layer=getattr(record, "layer", ""),
                operation=getattr(record, "operation", ""),
                duration_ms=getattr(record, "duration_ms", None),
                error_code=getattr(record, "error_code", ""),
                context=getattr(record, "context", {}),
            )

            if record.exc_info:
                event.exception = "".join(traceback.format_exception(*record.exc_info))

            self.stream.write(event.to_json() + "\n")
            self.stream.flush()
        except Exception:
            self.handleError(record)


class MojiLogger:
    """
    Structured logger for processor components.

    Wraps a stdlib logger named ``cryptomoji.<layer>.<name>`` and attaches
    layer and context information to every record.
    """

    def __init__(self, name: str, layer: Layer, level: Optional[str] = None):
        self.name = name
        self.layer = layer
        self._logger = logging.getLogger(f"cryptomoji.{layer.value}.{name}")
        if level:
            self._logger.setLevel(getattr(logging, level.upper()))

    @property
    def raw(self) -> logging.Logger:
        return self._logger

    def _log(
        self,
        level: int,
        message: str,
        operation: str = "",
        error_code: str = "",
        duration_ms: Optional[float] = None,
        exc_info: bool = False,
        **context: Any,
    ) -> None:
        extra = {
            "layer": self.layer.value,
            "operation": operation,
            "error_code": error_code,
            "duration_ms": duration_ms,
            "context": context,
        }
        self._logger.log(level, message, extra=extra, exc_info=exc_info)

    def debug(self, message: str, **context: Any) -> None:
        self._log(logging.DEBUG, message, **context)

    def info(self, message: str, **context: Any) -> None:
        self._log(logging.INFO, message, **context)

    def warning(self, message: str, error_code: str = "", **context: Any) -> None:
        self._log(logging.WARNING, message, error_code=error_code, **context)

    def error(
        self,
        message: str,
        error_code: str = "",
        exc_info: bool = False,
        **context: Any,
    ) -> None:
        self._log(logging.ERROR, message, error_code=error_code, exc_info=exc_info, **context)

    def operation(
        self,
        name: str,
        duration_ms: float,
        success: bool = True,
        **context: Any,
    ) -> None:
        """Log an operation completion."""
        level = logging.INFO if success else logging.WARNING
        status = "completed" if success else "failed"
        self._log(
            level,
            f"Operation {name} {status}",
            operation=name,
            duration_ms=round(duration_ms, 3),
            **context,
        )


def configure_logging(level: str = "info", stream: Any = None) -> logging.Logger:
    """Install the structured handler on the ``cryptomoji`` logger tree.

    Safe to call more than once. Without ``stream`` an existing structured
    handler is kept; with one, it replaces any previous structured handler.
    """
    root = logging.getLogger("cryptomoji")
    root.setLevel(getattr(logging, level.upper()))
    if stream is not None:
        for h in [h for h in root.handlers if isinstance(h, StructuredHandler)]:
            root.removeHandler(h)
    if not any(isinstance(h, StructuredHandler) for h in root.handlers):
        root.addHandler(StructuredHandler(stream))
    return root


def generate_correlation_id() -> str:
    """Generate a new correlation ID."""
    return f"corr-{uuid.uuid4().hex[:12]}"


def set_correlation_id(correlation_id: str) -> contextvars.Token:
    """Set the correlation ID for the current context."""
    return correlation_id_var.set(correlation_id)


def reset_correlation_id(token: contextvars.Token) -> None:
    correlation_id_var.reset(token)


def get_correlation_id() -> str:
    """Get the current correlation ID, creating one if unset."""
    cid = correlation_id_var.get()
    if not cid:
        cid = generate_correlation_id()
        correlation_id_var.set(cid)
    return cid


def get_logger(name: str, layer: Layer) -> MojiLogger:
    """Get a logger for a processor component."""
    return MojiLogger(name, layer)


T = TypeVar("T")


def timed_operation(
    logger: MojiLogger,
    operation_name: str,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator for timing and logging operations.

    Works on plain functions and on coroutine functions.
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                start = time.monotonic()
                success = True
                try:
                    return await func(*args, **kwargs)
                except Exception:
                    success = False
                    raise
                finally:
                    duration_ms = (time.monotonic() - start) * 1000
                    logger.operation(operation_name, duration_ms, success)
            return async_wrapper  # type: ignore

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            start = time.monotonic()
            success = True
            try:
                return func(*args, **kwargs)
            except Exception:
                success = False
                raise
            finally:
                duration_ms = (time.monotonic() - start) * 1000
                logger.operation(operation_name, duration_ms, success)
        return wrapper
    return decorator
