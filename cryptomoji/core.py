"""Core primitives for the cryptomoji processor.

This module provides the foundational utilities used throughout the package:
- Cryptographic hashing (SHA-512, hex)
- Canonical JSON serialization (sorted keys, compact, UTF-8)
- YAML/JSON loading with consistent encoding

Everything here is a pure function. Two validators hashing the same input
always see the same bytes.
"""

from __future__ import annotations

import hashlib
import json
import pathlib
from typing import Any, Union

import yaml

# Package root, computed once at module load
PACKAGE_ROOT = pathlib.Path(__file__).resolve().parent


def sha512_hex(data: Union[str, bytes]) -> str:
    """Compute SHA-512 of text or bytes, returning lowercase hex string.

    Text is hashed as its UTF-8 encoding.
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.sha512(data).hexdigest()


def load_yaml(path: pathlib.Path) -> Any:
    """Load YAML file with UTF-8 encoding."""
    return yaml.safe_load(pathlib.Path(path).read_text(encoding="utf-8"))


def load_json(path: pathlib.Path) -> Any:
    """Load JSON file with UTF-8 encoding."""
    return json.loads(pathlib.Path(path).read_text(encoding="utf-8"))


def canonical_json_bytes(obj: Any) -> bytes:
    """Serialize object to canonical JSON bytes.

    Properties:
    - Keys sorted lexicographically
    - No whitespace
    - UTF-8 encoded
    - Floats rejected

    State values are compared byte-for-byte across validators, so the same
    record must always encode the same way.
    """
    def _reject_floats(o: Any, path: str = "") -> None:
        if isinstance(o, float):
            raise ValueError(f"Float not allowed in canonical JSON at {path}")
        if isinstance(o, dict):
            for k, v in o.items():
                _reject_floats(v, f"{path}.{k}")
        if isinstance(o, (list, tuple)):
            for i, v in enumerate(o):
                _reject_floats(v, f"{path}[{i}]")

    _reject_floats(obj)
    return json.dumps(
        obj,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    ).encode("utf-8")
