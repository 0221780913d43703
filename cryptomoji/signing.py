"""secp256k1 keys and signatures for cryptomoji clients.

Keys and signatures travel as lowercase hex:

- private key: 32-byte secret scalar (64 hex chars)
- public key:  compressed SEC1 point (66 hex chars)
- signature:   compact ``r || s`` over SHA-256 (128 hex chars), with ``s``
               in the lower half of the curve order

The processor itself never signs or verifies; the host checks transaction
signatures before calling it. These helpers exist for clients and tests that
build signed transactions.
"""

from __future__ import annotations

from typing import Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import (
    decode_dss_signature,
    encode_dss_signature,
)

CURVE = ec.SECP256K1()
CURVE_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
_SCALAR_BYTES = 32


def _as_bytes(message: Union[str, bytes]) -> bytes:
    return message.encode("utf-8") if isinstance(message, str) else bytes(message)


def _load_private_key(private_key_hex: str) -> ec.EllipticCurvePrivateKey:
    try:
        secret = int(private_key_hex, 16)
    except (TypeError, ValueError) as ex:
        raise ValueError("private key must be hex") from ex
    return ec.derive_private_key(secret, CURVE)


def create_private_key() -> str:
    """Generate a new random private key."""
    key = ec.generate_private_key(CURVE)
    return key.private_numbers().private_value.to_bytes(_SCALAR_BYTES, "big").hex()


def get_public_key(private_key_hex: str) -> str:
    """Derive the compressed public key for a private key."""
    pub = _load_private_key(private_key_hex).public_key()
    return pub.public_bytes(
        encoding=serialization.Encoding.X962,
        format=serialization.PublicFormat.CompressedPoint,
    ).hex()


def sign(message: Union[str, bytes], private_key_hex: str) -> str:
    """Sign ``message`` and return the compact hex signature."""
    der = _load_private_key(private_key_hex).sign(_as_bytes(message), ec.ECDSA(hashes.SHA256()))
    r, s = decode_dss_signature(der)
    s = min(s, CURVE_ORDER - s)
    return (r.to_bytes(_SCALAR_BYTES, "big") + s.to_bytes(_SCALAR_BYTES, "big")).hex()


def verify(message: Union[str, bytes], signature_hex: str, public_key_hex: str) -> bool:
    """Check a compact hex signature against a compressed public key."""
    try:
        raw = bytes.fromhex(signature_hex)
        point = bytes.fromhex(public_key_hex)
    except (TypeError, ValueError):
        return False
    if len(raw) != 2 * _SCALAR_BYTES:
        return False

    r = int.from_bytes(raw[:_SCALAR_BYTES], "big")
    s = int.from_bytes(raw[_SCALAR_BYTES:], "big")
    try:
        pub = ec.EllipticCurvePublicKey.from_encoded_point(CURVE, point)
        pub.verify(encode_dss_signature(r, s), _as_bytes(message), ec.ECDSA(hashes.SHA256()))
    except (InvalidSignature, ValueError):
        return False
    return True
