# ghost_complete/core/persistence.py
"""
PersistenceScheduler
Coalesces "group changed" notifications into one deferred flush.
 - one pending set per kind ("words", "patterns")
 - one debounce timer: every mark_dirty() cancels the pending timer and arms a new one
 - flush() writes each pending group independently; a failed write keeps the
   group pending so the next flush retries it
 - flushing with nothing pending does nothing
"""

from __future__ import annotations

import threading
from typing import Callable, Dict, List, Optional, Set

from ghost_complete.core.protocols import BlobStore, CancellableTimer, DirtySource, TimerFactory
from ghost_complete.utils.logger_utils import Log


def default_timer_factory(delay: float, fn: Callable[[], None]) -> CancellableTimer:
    t = threading.Timer(delay, fn)
    t.daemon = True
    return t


class PersistenceScheduler:
    """
    Public API:
      register(kind, source)
      mark_dirty(group, kind)
      flush() -> number of groups written
      pending(kind) / has_pending()
      cancel()
    """

    def __init__(
        self,
        store: BlobStore,
        delay: Callable[[], float],
        *,
        timer_factory: Optional[TimerFactory] = None,
        lock: Optional[threading.RLock] = None,
    ):
        self.store = store
        self._delay = delay
        self._timer_factory = timer_factory or default_timer_factory
        self._lock = lock or threading.RLock()
        self._sources: Dict[str, DirtySource] = {}
        self._pending: Dict[str, Set[str]] = {}
        self._timer: Optional[CancellableTimer] = None

    def register(self, kind: str, source: DirtySource) -> None:
        self._sources[kind] = source
        self._pending.setdefault(kind, set())

    # Scheduling ---------------------------------------------------------------
    def mark_dirty(self, group: str, kind: str) -> None:
        with self._lock:
            if kind not in self._sources:
                raise KeyError(f"unknown state kind: {kind}")
            self._pending[kind].add(group)
            self._schedule()

    def _schedule(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
        self._timer = self._timer_factory(max(0.0, float(self._delay())), self._on_timer)
        self._timer.start()

    def _on_timer(self) -> None:
        try:
            self.flush()
        except Exception as e:
            Log.error(f"[Persistence] scheduled flush failed: {e}")

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    # Flushing -----------------------------------------------------------------
    def flush(self) -> int:
        """Write every pending group now. Returns how many blobs were written."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            written = 0
            if not self.has_pending():
                return 0
            with Log.time_block("persistence.flush"):
                for kind, groups in self._pending.items():
                    source = self._sources[kind]
                    for group in sorted(groups):
                        if self._write(source, kind, group):
                            groups.discard(group)
                            written += 1
            if self.has_pending():
                Log.warning(f"[Persistence] {sum(len(g) for g in self._pending.values())} "
                            "group(s) left pending for retry")
            return written

    def _write(self, source: DirtySource, kind: str, group: str) -> bool:
        try:
            ok = self.store.set(source.storage_key(group), source.serialize(group))
        except Exception as e:
            Log.warning(f"[Persistence] {kind} write for group '{group}' raised: {e}")
            return False
        if ok is False:
            Log.warning(f"[Persistence] {kind} write for group '{group}' was rejected")
            return False
        return True

    # Introspection ------------------------------------------------------------
    def pending(self, kind: str) -> List[str]:
        with self._lock:
            return sorted(self._pending.get(kind, ()))

    def has_pending(self) -> bool:
        return any(self._pending.values())

    def discard(self, group: str, kind: str) -> None:
        """Forget a pending write (used when a group is cleared)."""
        with self._lock:
            self._pending.get(kind, set()).discard(group)
