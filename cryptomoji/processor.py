"""Transaction processor entry point.

The host ledger knows handlers only through the ``TransactionHandler``
capability: a family name, the versions and namespaces it serves, and an
``apply`` coroutine. ``MojiHandler`` is the cryptomoji implementation;
``HandlerRegistry`` is the host-side lookup that routes transactions to it.

Flow for one transaction:

    apply(txn, store)
      -> decode_payload(txn.payload)          MalformedPayload / UnknownAction
      -> dispatch(payload, txn, store)
           CreateCollection -> handlers.create_collection
           SelectSire       -> handlers.select_sire
"""

from __future__ import annotations

import threading
from typing import Dict, List, Optional, Protocol, Sequence, Tuple, runtime_checkable

from cryptomoji import handlers
from cryptomoji.config import FamilyConfig, get_family_config
from cryptomoji.encoding import CreateCollection, Payload, SelectSire, decode_payload
from cryptomoji.errors import InvalidTransaction, RejectReason, UnknownFamily
from cryptomoji.observability import (
    Layer,
    configure_logging,
    get_logger,
    reset_correlation_id,
    set_correlation_id,
    timed_operation,
)
from cryptomoji.state import StateStore
from cryptomoji.transactions import Transaction

logger = get_logger("processor", Layer.PROCESSOR)


@runtime_checkable
class TransactionHandler(Protocol):
    """What the host needs to know about a transaction family."""

    @property
    def family_name(self) -> str:
        ...

    @property
    def family_versions(self) -> Sequence[str]:
        ...

    @property
    def namespaces(self) -> Sequence[str]:
        ...

    async def apply(self, transaction: Transaction, store: StateStore) -> List[str]:
        ...


async def dispatch(
    payload: Optional[Payload],
    txn: Transaction,
    store: StateStore,
    namespace: Optional[str] = None,
) -> List[str]:
    """Route a decoded payload to its transition.

    ``None`` stands for a payload that could not be decoded.
    """
    if payload is None:
        raise InvalidTransaction(RejectReason.MALFORMED_PAYLOAD)
    if isinstance(payload, CreateCollection):
        return await handlers.create_collection(store, txn, namespace)
    if isinstance(payload, SelectSire):
        return await handlers.select_sire(store, txn, payload.sire, namespace)
    raise InvalidTransaction(RejectReason.UNKNOWN_ACTION, f"Unknown action: {payload!r}")


class MojiHandler:
    """Handler for the cryptomoji transaction family."""

    def __init__(self, config: Optional[FamilyConfig] = None):
        self._config = config or get_family_config()
        configure_logging(self._config.log_level)
        logger.info("initializing cryptomoji handler", namespace=self._config.namespace)

    @property
    def family_name(self) -> str:
        return self._config.family_name

    @property
    def family_versions(self) -> Tuple[str, ...]:
        return self._config.family_versions

    @property
    def namespaces(self) -> Tuple[str, ...]:
        return self._config.namespaces

    async def apply(self, transaction: Transaction, store: StateStore) -> List[str]:
        """Validate ``transaction`` against current state and apply it.

        Returns the addresses written, all under this handler's namespace.
        Raises ``InvalidTransaction`` when the transaction must be rejected;
        store errors propagate unchanged.
        """
        token = set_correlation_id(transaction.signature[:16])
        try:
            return await self._apply(transaction, store)
        finally:
            reset_correlation_id(token)

    @timed_operation(logger, "apply")
    async def _apply(self, transaction: Transaction, store: StateStore) -> List[str]:
        try:
            payload = decode_payload(transaction.payload)
            return await dispatch(payload, transaction, store, self._config.namespace)
        except InvalidTransaction as e:
            logger.warning(
                f"transaction rejected: {e.message}",
                error_code=e.code,
                signer=transaction.header.signer_public_key,
            )
            raise


class HandlerRegistry:
    """Host-side index of handlers by (family name, version)."""

    def __init__(self):
        self._handlers: Dict[Tuple[str, str], TransactionHandler] = {}
        self._lock = threading.Lock()

    def register(self, handler: TransactionHandler) -> None:
        if not isinstance(handler, TransactionHandler):
            raise TypeError(f"not a transaction handler: {handler!r}")
        with self._lock:
            for version in handler.family_versions:
                key = (handler.family_name, version)
                if key in self._handlers:
                    raise ValueError(f"Handler already registered: {key[0]} {key[1]}")
                self._handlers[key] = handler

    def lookup(self, family_name: str, family_version: str) -> TransactionHandler:
        try:
            return self._handlers[(family_name, family_version)]
        except KeyError:
            raise UnknownFamily(family_name, family_version) from None

    def families(self) -> List[Tuple[str, str]]:
        return sorted(self._handlers)

    async def process(self, transaction: Transaction, store: StateStore) -> List[str]:
        """Route ``transaction`` by the family named in its header."""
        header = transaction.header
        handler = self.lookup(header.family_name, header.family_version)
        return await handler.apply(transaction, store)
