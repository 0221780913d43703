"""Transaction envelopes.

A transaction is what the host hands to the processor:

    Transaction(payload=<bytes>, header=TransactionHeader(...), signature=<hex>)

The header commits to the payload through ``payload_sha512`` and is signed by
the signer's key; ``signature`` is that signature in hex. Handlers only read
``header.signer_public_key`` and ``signature``.

``create_transaction`` is the client side: it encodes a payload, builds the
header and signs it.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

from cryptomoji.config import FamilyConfig, get_family_config
from cryptomoji.core import canonical_json_bytes, sha512_hex
from cryptomoji.encoding import Payload, encode_payload
from cryptomoji.observability import Layer, get_logger
from cryptomoji.signing import get_public_key, sign, verify

logger = get_logger("transactions", Layer.CLIENT)


@dataclass(frozen=True)
class TransactionHeader:
    signer_public_key: str
    family_name: str = ""
    family_version: str = ""
    batcher_public_key: str = ""
    inputs: Tuple[str, ...] = ()
    outputs: Tuple[str, ...] = ()
    dependencies: Tuple[str, ...] = ()
    nonce: str = ""
    payload_sha512: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "signer_public_key": self.signer_public_key,
            "batcher_public_key": self.batcher_public_key,
            "family_name": self.family_name,
            "family_version": self.family_version,
            "inputs": list(self.inputs),
            "outputs": list(self.outputs),
            "dependencies": list(self.dependencies),
            "nonce": self.nonce,
            "payload_sha512": self.payload_sha512,
        }


@dataclass(frozen=True)
class Transaction:
    payload: bytes
    header: TransactionHeader
    signature: str
    header_bytes: bytes = field(default=b"", repr=False)


def encode_header(header: TransactionHeader) -> bytes:
    """Canonical bytes of a header; this is what gets signed."""
    return canonical_json_bytes(header.to_dict())


def create_transaction(
    private_key: str,
    payload: Union[Payload, Dict[str, Any]],
    *,
    config: Optional[FamilyConfig] = None,
    nonce: Optional[str] = None,
) -> Transaction:
    """Encode ``payload`` and wrap it in a header signed by ``private_key``."""
    config = config or get_family_config()
    public_key = get_public_key(private_key)
    payload_bytes = encode_payload(payload)

    header = TransactionHeader(
        signer_public_key=public_key,
        batcher_public_key=public_key,
        family_name=config.family_name,
        family_version=config.family_version,
        inputs=config.namespaces,
        outputs=config.namespaces,
        nonce=nonce if nonce is not None else secrets.token_hex(16),
        payload_sha512=sha512_hex(payload_bytes),
    )
    header_bytes = encode_header(header)
    signature = sign(header_bytes, private_key)

    logger.debug("transaction signed", signer=public_key, family=config.family_name)
    return Transaction(
        payload=payload_bytes,
        header=header,
        signature=signature,
        header_bytes=header_bytes,
    )


def encode_all(private_key: str, payload: Union[Payload, Dict[str, Any]]) -> Transaction:
    """Shorthand for ``create_transaction`` with the process configuration."""
    return create_transaction(private_key, payload)


def verify_transaction(txn: Transaction) -> bool:
    """Check the payload hash and the header signature of ``txn``."""
    if sha512_hex(txn.payload) != txn.header.payload_sha512:
        return False
    header_bytes = encode_header(txn.header)
    if txn.header_bytes and txn.header_bytes != header_bytes:
        return False
    return verify(header_bytes, txn.signature, txn.header.signer_public_key)
