"""State address derivation.

Every record lives at a 70 hex character address:

    namespace (6) | record type (2) | suffix (62)

- collection:   suffix = sha512(owner)[:62]
- moji:         suffix = sha512(owner)[:8] + sha512(dna)[:54]
- sire listing: suffix = sha512(owner)[:62]

The owner part of a moji suffix puts all of one owner's moji under a shared
prefix, so a client can list them with a single prefix query.
"""

from __future__ import annotations

from typing import Dict, Optional

from cryptomoji.config import get_family_config
from cryptomoji.core import sha512_hex

ADDRESS_LENGTH = 70

PREFIXES: Dict[str, str] = {
    "COLLECTION": "00",
    "MOJI": "01",
    "SIRE_LISTING": "02",
}


def _namespace(namespace: Optional[str]) -> str:
    return namespace if namespace is not None else get_family_config().namespace


def collection_address(public_key: str, namespace: Optional[str] = None) -> str:
    """Address of the collection owned by ``public_key``."""
    return _namespace(namespace) + PREFIXES["COLLECTION"] + sha512_hex(public_key)[:62]


def moji_owner_prefix(public_key: str, namespace: Optional[str] = None) -> str:
    """Address prefix shared by every moji owned by ``public_key``."""
    return _namespace(namespace) + PREFIXES["MOJI"] + sha512_hex(public_key)[:8]


def moji_address(public_key: str, dna: str, namespace: Optional[str] = None) -> str:
    """Address of the moji with ``dna`` owned by ``public_key``."""
    return moji_owner_prefix(public_key, namespace) + sha512_hex(dna)[:54]


def sire_address(public_key: str, namespace: Optional[str] = None) -> str:
    """Address of the sire listing made by ``public_key``."""
    return _namespace(namespace) + PREFIXES["SIRE_LISTING"] + sha512_hex(public_key)[:62]


def address_type(address: str, namespace: Optional[str] = None) -> Optional[str]:
    """Return the record type stored at ``address``, or None if it is not ours."""
    ns = _namespace(namespace)
    if len(address) != ADDRESS_LENGTH or not address.startswith(ns):
        return None
    code = address[len(ns):len(ns) + 2]
    for name, prefix in PREFIXES.items():
        if prefix == code:
            return name
    return None
