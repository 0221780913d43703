"""Payload codec.

Payloads are canonical JSON objects tagged by ``action``:

    {"action": "CREATE_COLLECTION"}
    {"action": "SELECT_SIRE", "sire": "<moji address>"}

Decoding yields one of the ``Payload`` variants below. Bytes that are not a
JSON object, or that do not match the schema for their action, are
malformed; a missing or unrecognized action is reported separately.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, List, Union

from jsonschema import Draft202012Validator

from cryptomoji.core import PACKAGE_ROOT, canonical_json_bytes, load_json
from cryptomoji.errors import InvalidTransaction, RejectReason

CREATE_COLLECTION = "CREATE_COLLECTION"
SELECT_SIRE = "SELECT_SIRE"

SCHEMA_DIR = PACKAGE_ROOT / "schemas"

_SCHEMA_FILES = {
    CREATE_COLLECTION: "create-collection.payload.schema.json",
    SELECT_SIRE: "select-sire.payload.schema.json",
}


@dataclass(frozen=True)
class CreateCollection:
    action = CREATE_COLLECTION

    def to_dict(self) -> Dict[str, Any]:
        return {"action": self.action}


@dataclass(frozen=True)
class SelectSire:
    sire: str
    action = SELECT_SIRE

    def to_dict(self) -> Dict[str, Any]:
        return {"action": self.action, "sire": self.sire}


Payload = Union[CreateCollection, SelectSire]


@lru_cache(maxsize=None)
def payload_validator(action: str) -> Draft202012Validator:
    """Cached validator for the payload schema of ``action``."""
    schema = load_json(SCHEMA_DIR / _SCHEMA_FILES[action])
    return Draft202012Validator(schema)


def validate_payload(obj: Dict[str, Any], action: str) -> List[str]:
    """Return schema errors for ``obj`` (empty if valid)."""
    return [
        f"{error.json_path}: {error.message}"
        for error in payload_validator(action).iter_errors(obj)
    ]


def encode_payload(payload: Union[Payload, Dict[str, Any]]) -> bytes:
    """Encode a payload variant (or plain dict) to canonical JSON bytes."""
    if isinstance(payload, dict):
        return canonical_json_bytes(payload)
    return canonical_json_bytes(payload.to_dict())


def decode_payload(data: bytes) -> Payload:
    """Decode payload bytes into a ``Payload`` variant.

    Raises:
        InvalidTransaction: MALFORMED_PAYLOAD if the bytes are not a JSON
            object or fail schema validation; UNKNOWN_ACTION if the action
            is missing or unrecognized.
    """
    try:
        obj = json.loads(bytes(data).decode("utf-8"))
    except (TypeError, ValueError, RecursionError) as e:
        raise InvalidTransaction(RejectReason.MALFORMED_PAYLOAD, f"Unable to decode payload: {e}") from e

    if not isinstance(obj, dict):
        raise InvalidTransaction(RejectReason.MALFORMED_PAYLOAD, "Payload must be a JSON object")

    action = obj.get("action")
    if not isinstance(action, str) or action not in _SCHEMA_FILES:
        raise InvalidTransaction(RejectReason.UNKNOWN_ACTION, f"Unknown action: {action!r}", action=action)

    errors = validate_payload(obj, action)
    if errors:
        raise InvalidTransaction(
            RejectReason.MALFORMED_PAYLOAD,
            f"Invalid {action} payload: {errors[0]}",
            errors=errors,
        )

    if action == SELECT_SIRE:
        return SelectSire(sire=obj["sire"])
    return CreateCollection()
