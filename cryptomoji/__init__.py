"""Cryptomoji transaction processor.

A deterministic state-transition function for a ledger of collectible
"moji". Signers create a collection (three moji derived from the
transaction signature) and may list one moji as their sire.

Architecture:
    cryptomoji/
    ├── __init__.py       # Package entry, version, public API
    ├── core.py           # Primitives: sha512, canonical JSON, YAML
    ├── config.py         # Family/namespace configuration
    ├── observability.py  # Structured logging, correlation IDs
    ├── errors.py         # InvalidTransaction and reject reasons
    ├── addressing.py     # State address derivation
    ├── dna.py            # DNA hash chain
    ├── models.py         # Collection, Moji, SireListing records
    ├── encoding.py       # Payload codec (tagged union + JSON Schema)
    ├── state.py          # State store protocol, in-memory store
    ├── handlers.py       # CREATE_COLLECTION / SELECT_SIRE transitions
    ├── processor.py      # MojiHandler, dispatcher, handler registry
    ├── signing.py        # secp256k1 keys and signatures (clients)
    └── transactions.py   # Transaction envelopes (clients)
"""

__version__ = "0.1.0"

from cryptomoji.addressing import (
    collection_address,
    moji_address,
    moji_owner_prefix,
    sire_address,
)
from cryptomoji.config import FamilyConfig, get_family_config
from cryptomoji.dna import dna_chain
from cryptomoji.encoding import CreateCollection, SelectSire, decode_payload, encode_payload
from cryptomoji.errors import InvalidTransaction, RejectReason
from cryptomoji.models import Collection, Moji, SireListing
from cryptomoji.processor import HandlerRegistry, MojiHandler, TransactionHandler, dispatch
from cryptomoji.state import InMemoryStateStore, StateStore
from cryptomoji.transactions import Transaction, TransactionHeader, create_transaction

__all__ = [
    "__version__",
    "collection_address",
    "moji_address",
    "moji_owner_prefix",
    "sire_address",
    "FamilyConfig",
    "get_family_config",
    "dna_chain",
    "CreateCollection",
    "SelectSire",
    "decode_payload",
    "encode_payload",
    "InvalidTransaction",
    "RejectReason",
    "Collection",
    "Moji",
    "SireListing",
    "HandlerRegistry",
    "MojiHandler",
    "TransactionHandler",
    "dispatch",
    "InMemoryStateStore",
    "StateStore",
    "Transaction",
    "TransactionHeader",
    "create_transaction",
]
