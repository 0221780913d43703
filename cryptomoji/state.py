"""State store interface and an in-memory implementation.

The host ledger owns global state. Handlers see it only through the two
coroutines of ``StateStore``:

- ``get(addresses)`` returns a mapping with an entry for every requested
  address; addresses holding no data map to ``b""``.
- ``set(updates)`` writes every entry in one atomic step and returns the
  addresses written.

``InMemoryStateStore`` implements the same contract over a dict. It backs
the test suite and local replays of transaction logs.
"""

from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Protocol, Sequence, runtime_checkable

from cryptomoji.observability import Layer, get_logger

logger = get_logger("state", Layer.STATE)


@runtime_checkable
class StateStore(Protocol):
    """What handlers need from the host's state."""

    async def get(self, addresses: Sequence[str]) -> Dict[str, bytes]:
        ...

    async def set(self, updates: Mapping[str, bytes]) -> List[str]:
        ...


class InMemoryStateStore:
    """Dict-backed ``StateStore`` with atomic batched writes."""

    def __init__(self, initial: Optional[Mapping[str, bytes]] = None):
        self._data: Dict[str, bytes] = dict(initial or {})
        self.reads = 0
        self.writes = 0

    async def get(self, addresses: Sequence[str]) -> Dict[str, bytes]:
        self.reads += 1
        return {address: self._data.get(address, b"") for address in addresses}

    async def set(self, updates: Mapping[str, bytes]) -> List[str]:
        for address, value in updates.items():
            if not isinstance(value, (bytes, bytearray)):
                raise TypeError(f"state value for {address} must be bytes, got {type(value).__name__}")
        self.writes += 1
        self._data.update({address: bytes(value) for address, value in updates.items()})
        written = list(updates)
        logger.debug("state updated", addresses=written)
        return written

    def snapshot(self) -> Dict[str, bytes]:
        """Copy of the current contents."""
        return dict(self._data)

    def addresses(self, prefix: str = "") -> List[str]:
        """Sorted addresses holding data, optionally filtered by prefix."""
        return sorted(a for a, v in self._data.items() if v and a.startswith(prefix))

    def __contains__(self, address: object) -> bool:
        return bool(self._data.get(address))  # type: ignore[arg-type]

    def __len__(self) -> int:
        return sum(1 for v in self._data.values() if v)


def has_data(state: Mapping[str, bytes], address: str) -> bool:
    """True when ``address`` holds a non-empty value in a ``get`` result."""
    return len(state.get(address) or b"") > 0

