# ghost_complete/core/protocols.py
"""
Protocol interfaces and shared typed structures for the engine.

The blob store is owned by the embedding application (browser storage,
a file directory, a key-value service...). The engine only needs these
three calls from it, so it depends on this Protocol rather than on a
concrete backend.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Protocol, runtime_checkable
from typing_extensions import TypedDict


class WordEntryState(TypedDict):
    """Persisted per-word statistics (inside the words payload)."""
    frequency: int
    last_used_at: float


class WordsPayload(TypedDict, total=False):
    words: List[str]
    entries: Dict[str, WordEntryState]


class PatternsPayload(TypedDict, total=False):
    contexts: Dict[str, Dict[str, int]]


class GroupStats(TypedDict):
    word_count: int
    pattern_count: int
    association_count: int


@runtime_checkable
class BlobStore(Protocol):
    """Opaque get/set-by-key storage for serialized group state."""

    def get(self, key: str) -> Optional[bytes]:
        """Return the stored bytes, or None when nothing is stored under key."""
        ...

    def set(self, key: str, data: bytes) -> bool:
        """Store data under key. Return False when the write did not happen."""
        ...

    def remove(self, key: str) -> None:
        ...


class DirtySource(Protocol):
    """Something the persistence scheduler can flush one group of."""

    def storage_key(self, group: str) -> str:
        ...

    def serialize(self, group: str) -> bytes:
        ...


class CancellableTimer(Protocol):
    def start(self) -> None:
        ...

    def cancel(self) -> None:
        ...


TimerFactory = Callable[[float, Callable[[], None]], CancellableTimer]
Clock = Callable[[], float]
