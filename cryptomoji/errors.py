"""Error types surfaced to the host ledger runtime.

Every rejection the processor produces is an ``InvalidTransaction``. The host
treats it as terminal for that transaction: nothing is committed and the
transaction is not retried. ``reason`` tells callers (and tests) which
precondition failed without parsing the message text.

Errors raised by the state store itself are never wrapped here; they
propagate to the host untouched.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class RejectReason(Enum):
    """Why a transaction was rejected."""
    MALFORMED_PAYLOAD = "MalformedPayload"
    UNKNOWN_ACTION = "UnknownAction"
    OWNER_ALREADY_EXISTS = "OwnerAlreadyExists"
    NO_COLLECTION = "NoCollection"
    SIRE_NOT_FOUND = "SireNotFound"


_DEFAULT_MESSAGES = {
    RejectReason.MALFORMED_PAYLOAD: "Unable to decode payload",
    RejectReason.UNKNOWN_ACTION: "Unknown action",
    RejectReason.OWNER_ALREADY_EXISTS: "Owner already exists",
    RejectReason.NO_COLLECTION: "Signer has no collection",
    RejectReason.SIRE_NOT_FOUND: "Sire not found",
}


class InvalidTransaction(Exception):
    """The transaction failed validation and must be rejected."""

    def __init__(self, reason: RejectReason, message: str = "", **details: Any):
        self.reason = reason
        self.message = message or _DEFAULT_MESSAGES[reason]
        self.details = details
        super().__init__(f"{reason.value}: {self.message}")

    @property
    def code(self) -> str:
        return self.reason.value


class InternalError(Exception):
    """The processor or its host is misconfigured; not the client's fault."""
    pass


class UnknownFamily(InternalError):
    """No registered handler serves the requested family/version."""

    def __init__(self, family_name: str, family_version: str):
        self.family_name = family_name
        self.family_version = family_version
        super().__init__(f"no handler registered for {family_name} {family_version}")
