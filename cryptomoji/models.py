"""State records written by the processor.

Records are stored as canonical JSON. Field names on the wire match what
existing clients read, so ``Collection`` serializes its owner as ``key`` and
its moji addresses as ``moji``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from cryptomoji.core import canonical_json_bytes

# Breeding is not implemented yet; new moji carry empty lineage fields.
NO_ADDRESS = ""


def _load(data: bytes, kind: str) -> Dict[str, Any]:
    try:
        obj = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ValueError(f"{kind} record is not valid JSON: {e}") from e
    if not isinstance(obj, dict):
        raise ValueError(f"{kind} record must be a JSON object")
    return obj


@dataclass(frozen=True)
class Moji:
    dna: str
    owner: str
    breeder: str = NO_ADDRESS
    sire: str = NO_ADDRESS
    bred: Tuple[str, ...] = ()
    sired: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dna": self.dna,
            "owner": self.owner,
            "breeder": self.breeder,
            "sire": self.sire,
            "bred": list(self.bred),
            "sired": list(self.sired),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Moji":
        return cls(
            dna=str(data["dna"]),
            owner=str(data["owner"]),
            breeder=str(data.get("breeder") or NO_ADDRESS),
            sire=str(data.get("sire") or NO_ADDRESS),
            bred=tuple(data.get("bred") or ()),
            sired=tuple(data.get("sired") or ()),
        )

    def encode(self) -> bytes:
        return canonical_json_bytes(self.to_dict())

    @classmethod
    def decode(cls, data: bytes) -> "Moji":
        return cls.from_dict(_load(data, "moji"))


@dataclass(frozen=True)
class Collection:
    """The moji an owner received when their collection was created."""
    owner: str
    moji: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {"key": self.owner, "moji": list(self.moji)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Collection":
        return cls(owner=str(data["key"]), moji=tuple(data.get("moji") or ()))

    def encode(self) -> bytes:
        return canonical_json_bytes(self.to_dict())

    @classmethod
    def decode(cls, data: bytes) -> "Collection":
        return cls.from_dict(_load(data, "collection"))


@dataclass(frozen=True)
class SireListing:
    owner: str
    sire: str

    def to_dict(self) -> Dict[str, Any]:
        return {"owner": self.owner, "sire": self.sire}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SireListing":
        return cls(owner=str(data["owner"]), sire=str(data["sire"]))

    def encode(self) -> bytes:
        return canonical_json_bytes(self.to_dict())

    @classmethod
    def decode(cls, data: bytes) -> "SireListing":
        return cls.from_dict(_load(data, "sire listing"))


def new_moji(owner: str, dnas: List[str]) -> List[Moji]:
    """Fresh moji for ``owner``, one per DNA string, in order."""
    return [Moji(dna=dna, owner=owner) for dna in dnas]
