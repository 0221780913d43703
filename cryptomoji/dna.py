"""Moji DNA derivation.

A new collection's three moji get their DNA from the transaction signature:

    dna1 = sha512(signature)[:36]
    dna2 = sha512(dna1)[:36]
    dna3 = sha512(dna2)[:36]

The chain needs no entropy beyond the signature, so every validator that
replays the transaction derives the same three moji.
"""

from __future__ import annotations

import itertools
from typing import Iterator, Tuple

from cryptomoji.core import sha512_hex

DNA_LENGTH = 36
COLLECTION_SIZE = 3


def next_dna(seed: str) -> str:
    """One link of the chain: the truncated SHA-512 hex of ``seed``."""
    return sha512_hex(seed)[:DNA_LENGTH]


def iter_dna(signature: str) -> Iterator[str]:
    """Yield the unbounded DNA chain seeded by ``signature``."""
    current = signature
    while True:
        current = next_dna(current)
        yield current


def dna_chain(signature: str) -> Tuple[str, str, str]:
    """Return the three DNA strings for a collection created by ``signature``."""
    dna1, dna2, dna3 = itertools.islice(iter_dna(signature), COLLECTION_SIZE)
    return dna1, dna2, dna3
