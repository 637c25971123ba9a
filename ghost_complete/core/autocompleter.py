# autocompleter.py
"""
GhostComplete - engine facade.

Purpose:
 - Own one VocabularyStore, PatternPredictor, SuggestionService and
   PersistenceScheduler, all sharing one blob store and one ConfigRegistry
 - Observation API for the input layer:
     on_word_finalized, on_word_accepted, on_transition_observed,
     observe_text, finalize_word_at_caret
 - Query API for the UI layer:
     get_completions, get_predictions, get_stats, list_words, list_patterns
 - Admin API: set_group_config, get_group_config, clear_words, clear_patterns, clear_all
 - Lifecycle: start() arms the idle-maintenance tick, flush() persists now,
   close() stops timers and flushes, reset() drops in-memory caches

Public methods never raise: failures are logged and a neutral value is returned,
so a broken store or odd input can never take an input field down with it.
"""

from __future__ import annotations

import atexit
import threading
import time
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from ghost_complete.core.context import context_keys, split_words, word_bounds_at_caret
from ghost_complete.core.pattern_predictor import MAX_CONTEXT, PatternPredictor
from ghost_complete.core.persistence import PersistenceScheduler, default_timer_factory
from ghost_complete.core.protocols import BlobStore, Clock, GroupStats, TimerFactory
from ghost_complete.core.suggestion_service import SuggestionService
from ghost_complete.core.vocabulary import VocabularyStore
from ghost_complete.utils.config_manager import ConfigRegistry, GroupConfig
from ghost_complete.utils.logger_utils import Log
from ghost_complete.utils.model_store import MemoryBlobStore


def _log(msg: str) -> None:
    Log.write(f"[GhostComplete] {msg}", level="WARNING")


class GhostComplete:
    """Application facade exposing the observation, query and admin API."""

    def __init__(
        self,
        store: Optional[BlobStore] = None,
        config: Optional[ConfigRegistry] = None,
        *,
        clock: Clock = time.time,
        timer_factory: Optional[TimerFactory] = None,
        autosave: bool = False,
    ):
        self.store: BlobStore = store if store is not None else MemoryBlobStore()
        self.config = config or ConfigRegistry()
        self._lock = threading.RLock()
        self._timer_factory = timer_factory
        self._maintenance_timer = None
        self._running = False

        self.scheduler = PersistenceScheduler(
            self.store,
            delay=lambda: self.config.resolve("").storage_sync_delay,
            timer_factory=timer_factory,
            lock=self._lock,
        )
        self.vocabulary = VocabularyStore(self.store, self.config, clock=clock,
                                          on_dirty=self.scheduler.mark_dirty)
        self.patterns = PatternPredictor(self.store, self.config,
                                         on_dirty=self.scheduler.mark_dirty)
        self.scheduler.register(VocabularyStore.KIND, self.vocabulary)
        self.scheduler.register(PatternPredictor.KIND, self.patterns)
        self.suggestions = SuggestionService(self.vocabulary, self.config, self.patterns)

        if autosave:
            atexit.register(self.close)
        Log.info("[GhostComplete] engine ready")

    # Observation --------------------------------------------------------------
    def on_word_finalized(self, group: str, word: str) -> None:
        """A word was completed by the user (space, blur, enter...)."""
        try:
            with self._lock:
                self.vocabulary.observe(group or "", word)
        except Exception as e:
            _log(f"on_word_finalized failed: {e}")

    def on_word_accepted(self, group: str, word: str) -> None:
        """A suggestion was accepted; it is learned like a typed word."""
        self.on_word_finalized(group, word)

    def on_transition_observed(self, group: str, context_words: Sequence[str], next_word: str) -> None:
        try:
            with self._lock:
                self.patterns.observe_transition(group or "", list(context_words or []), next_word)
        except Exception as e:
            _log(f"on_transition_observed failed: {e}")

    def observe_text(self, group: str, text: str, checkpoint: int = 0) -> int:
        """
        Learn transitions for the words of `text` past `checkpoint` (the word
        count the caller saw last time for this input) and return the new
        word count to pass in next time.
        """
        words = split_words(text or "")
        try:
            if len(words) <= checkpoint:
                return len(words)
            with self._lock:
                for i in range(max(1, checkpoint), len(words)):
                    ctx = words[max(0, i - MAX_CONTEXT):i]
                    self.patterns.observe_transition(group or "", ctx, words[i])
        except Exception as e:
            _log(f"observe_text failed: {e}")
        return len(words)

    def finalize_word_at_caret(self, group: str, text: str, caret: int, checkpoint: int = 0) -> int:
        """Learn the word under the caret plus any new transitions; returns the new checkpoint."""
        try:
            bounds = word_bounds_at_caret(text or "", caret)
            if bounds.word.strip():
                self.on_word_finalized(group, bounds.word)
        except Exception as e:
            _log(f"finalize_word_at_caret failed: {e}")
        return self.observe_text(group, text, checkpoint)

    # Queries ------------------------------------------------------------------
    def get_completions(self, group: str, token: str) -> List[str]:
        try:
            with self._lock:
                return self.suggestions.suggest_completions(group or "", token)
        except Exception as e:
            _log(f"get_completions failed: {e}")
            return []

    def get_predictions(self, group: str, trailing_context: Union[str, Sequence[str]]) -> List[str]:
        """`trailing_context` is the text before the caret or ready-made context keys."""
        try:
            if isinstance(trailing_context, str):
                keys = context_keys(trailing_context, depth=MAX_CONTEXT)
            else:
                keys = list(trailing_context or [])
            with self._lock:
                return self.suggestions.suggest_predictions(group or "", keys)
        except Exception as e:
            _log(f"get_predictions failed: {e}")
            return []

    def list_words(self, group: str = "") -> List[str]:
        try:
            with self._lock:
                return self.vocabulary.words(group or "")
        except Exception as e:
            _log(f"list_words failed: {e}")
            return []

    def list_patterns(self, group: str = "") -> Dict[str, Dict[str, int]]:
        try:
            with self._lock:
                return self.patterns.patterns(group or "")
        except Exception as e:
            _log(f"list_patterns failed: {e}")
            return {}

    def get_stats(self, group: str = "") -> GroupStats:
        try:
            with self._lock:
                words = self.vocabulary.load(group or "")
                patterns = self.patterns.load(group or "")
                return {
                    "word_count": len(words),
                    "pattern_count": len(patterns),
                    "association_count": sum(len(c) for c in patterns.values()),
                }
        except Exception as e:
            _log(f"get_stats failed: {e}")
            return {"word_count": 0, "pattern_count": 0, "association_count": 0}

    # Administration -------------------------------------------------------------
    def set_group_config(self, group: str = "", params: Optional[Mapping[str, Any]] = None,
                         classes: Optional[Mapping[str, str]] = None) -> GroupConfig:
        try:
            with self._lock:
                return self.config.set_group_config(group or "", params, classes)
        except Exception as e:
            _log(f"set_group_config failed: {e}")
            return self.get_group_config(group)

    def get_group_config(self, group: str = "") -> GroupConfig:
        try:
            return self.config.resolve(group or "")
        except Exception as e:
            _log(f"get_group_config failed: {e}")
            return GroupConfig()

    def clear_words(self, group: str = "") -> None:
        try:
            with self._lock:
                self.scheduler.discard(group or "", VocabularyStore.KIND)
                self.vocabulary.clear(group or "")
        except Exception as e:
            _log(f"clear_words failed: {e}")

    def clear_patterns(self, group: str = "") -> None:
        try:
            with self._lock:
                self.scheduler.discard(group or "", PatternPredictor.KIND)
                self.patterns.clear(group or "")
        except Exception as e:
            _log(f"clear_patterns failed: {e}")

    def clear_all(self, group: str = "") -> None:
        self.clear_words(group)
        self.clear_patterns(group)

    # Lifecycle/maintenance --------------------------------------------------------
    def flush(self) -> int:
        try:
            return self.scheduler.flush()
        except Exception as e:
            _log(f"flush failed: {e}")
            return 0

    def idle_maintenance(self) -> None:
        """Re-check every resident group's bounds, rebuild missing indexes, flush."""
        try:
            with self._lock, Log.time_block("maintenance"):
                for group in self.vocabulary.groups():
                    self.vocabulary.validate(group)
                for group in self.patterns.groups():
                    self.patterns.validate(group)
                self.scheduler.flush()
        except Exception as e:
            _log(f"idle maintenance failed: {e}")

    def start(self) -> None:
        """Arm the repeating idle-maintenance tick."""
        with self._lock:
            if self._running:
                return
            self._running = True
            self._arm_maintenance()

    def _arm_maintenance(self) -> None:
        delay = self.config.resolve("").idle_cleanup_delay
        factory = self._timer_factory or default_timer_factory
        self._maintenance_timer = factory(delay, self._maintenance_tick)
        self._maintenance_timer.start()

    def _maintenance_tick(self) -> None:
        self.idle_maintenance()
        with self._lock:
            if self._running:
                self._arm_maintenance()

    def close(self) -> None:
        """Stop timers and write everything pending."""
        with self._lock:
            self._running = False
            if self._maintenance_timer is not None:
                self._maintenance_timer.cancel()
                self._maintenance_timer = None
            self.scheduler.cancel()
        self.flush()
        Log.info("[GhostComplete] closed")

    def reset(self) -> None:
        """Write pending state, then drop all in-memory caches; the next access reloads."""
        with self._lock:
            self.flush()
            self.vocabulary.reset()
            self.patterns.reset()
