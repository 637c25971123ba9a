# ghost_complete/core/vocabulary.py
"""
VocabularyStore
---------------
Per-group learned vocabulary with frequency/recency statistics.

Each group holds an ordered map normalized form -> WordEntry kept in
most-recently-used order (most recent first). The surface-form list that
gets persisted is read straight off that order, so every normalized form
appears exactly once.

A Trie per group mirrors the vocabulary for prefix search. It is updated
incrementally on observe() and eviction, and rebuilt wholesale on load.
"""

from __future__ import annotations

import json
import time
from collections import OrderedDict
from typing import Callable, Dict, List, Optional, OrderedDict as OrderedDictT

from ghost_complete.core.eviction import WordEntry, select_survivors
from ghost_complete.core.protocols import BlobStore, Clock, WordsPayload
from ghost_complete.core.trie import Trie
from ghost_complete.utils.config_manager import ConfigRegistry
from ghost_complete.utils.logger_utils import Log
from ghost_complete.utils.model_store import storage_keys

Vocabulary = OrderedDictT[str, WordEntry]


class VocabularyStore:
    """
    Public API:
        observe(group, word) -> WordEntry | None
        load(group), clear(group), words(group), entry(group, word)
        trie(group), groups(), validate(group)
        serialize(group), storage_key(group), reset()
    """

    KIND = "words"

    def __init__(self, store: BlobStore, config: ConfigRegistry,
                 clock: Clock = time.time,
                 on_dirty: Optional[Callable[[str, str], None]] = None):
        self.store = store
        self.config = config
        self.clock = clock
        self.on_dirty = on_dirty
        self._vocab: Dict[str, Vocabulary] = {}
        self._tries: Dict[str, Trie] = {}

    # Loading ----------------------------------------------------------------
    def load(self, group: str = "") -> Vocabulary:
        """Return the resident vocabulary, reading it from the blob store on first use."""
        vocab = self._vocab.get(group)
        if vocab is not None:
            return vocab

        vocab = OrderedDict()
        raw = None
        try:
            raw = self.store.get(self.storage_key(group))
        except Exception as e:
            Log.warning(f"[Vocabulary] store read failed for group '{group}': {e}")
        if raw:
            for entry in decode_words(raw, now=self.clock()):
                vocab[entry.normalized] = entry
        self._vocab[group] = vocab
        self._tries.pop(group, None)

        cfg = self.config.resolve(group)
        if len(vocab) > cfg.max_words:
            self._evict(group, vocab)
        else:
            self._rebuild_trie(group)
        Log.debug(f"[Vocabulary] loaded group '{group}' ({len(vocab)} words)")
        return vocab

    # Mutation -----------------------------------------------------------------
    def observe(self, group: str, raw_word: str) -> Optional[WordEntry]:
        """
        Learn one finalized word. Short or empty words are ignored.
        Casing of the latest observation is kept for display.
        """
        word = (raw_word or "").strip()
        cfg = self.config.resolve(group)
        if not word or len(word) < cfg.min_word_length:
            return None

        vocab = self.load(group)
        key = word.lower()
        now = self.clock()
        entry = vocab.get(key)
        if entry is None:
            entry = WordEntry(surface=word, normalized=key, frequency=1, last_used_at=now)
            vocab[key] = entry
        else:
            entry.frequency += 1
            entry.last_used_at = now
            entry.surface = word
        vocab.move_to_end(key, last=False)

        trie = self._tries.get(group)
        if trie is None:
            self._rebuild_trie(group)
        else:
            trie.insert(word)

        if len(vocab) > cfg.max_words:
            self._evict(group, vocab)

        self._mark_dirty(group)
        return entry

    def clear(self, group: str = "") -> None:
        """Forget the group's words in memory and in the blob store."""
        self._vocab[group] = OrderedDict()
        self._tries[group] = Trie()
        try:
            self.store.remove(self.storage_key(group))
        except Exception as e:
            Log.warning(f"[Vocabulary] store remove failed for group '{group}': {e}")
        Log.info(f"[Vocabulary] cleared group '{group}'")

    def reset(self) -> None:
        """Drop every in-memory cache; persisted data is untouched."""
        self._vocab.clear()
        self._tries.clear()

    # Maintenance ----------------------------------------------------------------
    def validate(self, group: str) -> None:
        """Re-check size bounds and make sure the prefix index exists."""
        vocab = self._vocab.get(group)
        if vocab is None:
            return
        if len(vocab) > self.config.resolve(group).max_words:
            self._evict(group, vocab)
            self._mark_dirty(group)
        if group not in self._tries:
            self._rebuild_trie(group)

    def _evict(self, group: str, vocab: Vocabulary) -> None:
        cfg = self.config.resolve(group)
        keep = cfg.eviction_ceiling()
        survivors = select_survivors(vocab.values(), keep, self.clock(),
                                     cfg.decay_window, cfg.recency_floor)
        kept = {e.normalized for e in survivors}
        evicted = [k for k in vocab if k not in kept]
        for key in evicted:
            del vocab[key]
        trie = self._tries.get(group)
        if trie is None:
            self._rebuild_trie(group)
        else:
            for key in evicted:
                trie.remove(key)
        Log.debug(f"[Vocabulary] evicted {len(evicted)} words from group '{group}'")

    def _rebuild_trie(self, group: str) -> None:
        vocab = self._vocab.get(group) or OrderedDict()
        # oldest first, so the most recent casing wins on clashes
        self._tries[group] = Trie.build(e.surface for e in reversed(list(vocab.values())))

    def _mark_dirty(self, group: str) -> None:
        if self.on_dirty is not None:
            self.on_dirty(group, self.KIND)

    # Queries ------------------------------------------------------------------
    def words(self, group: str = "") -> List[str]:
        """Surface forms, most recently used first."""
        return [e.surface for e in self.load(group).values()]

    def entry(self, group: str, word: str) -> Optional[WordEntry]:
        return self.load(group).get((word or "").strip().lower())

    def trie(self, group: str = "") -> Trie:
        self.load(group)
        if group not in self._tries:
            self._rebuild_trie(group)
        return self._tries[group]

    def groups(self) -> List[str]:
        return list(self._vocab)

    # Persistence ------------------------------------------------------------
    def storage_key(self, group: str) -> str:
        return storage_keys(group)[0]

    def serialize(self, group: str) -> bytes:
        return encode_words(list(self.load(group).values()))


def encode_words(entries: List[WordEntry]) -> bytes:
    payload: WordsPayload = {
        "words": [e.surface for e in entries],
        "entries": {
            e.normalized: {"frequency": int(e.frequency), "last_used_at": float(e.last_used_at)}
            for e in entries
        },
    }
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def decode_words(raw: bytes, now: float) -> List[WordEntry]:
    """
    Parse a words blob into entries (MRU order). Accepts the object payload
    or a bare list of surface forms. Anything malformed yields [].
    """
    try:
        data = json.loads(raw.decode("utf-8") if isinstance(raw, (bytes, bytearray)) else raw)
    except (UnicodeDecodeError, ValueError, TypeError) as e:
        Log.warning(f"[Vocabulary] unreadable words payload, starting empty: {e}")
        return []

    if isinstance(data, list):
        surfaces, stats = data, {}
    elif isinstance(data, dict) and isinstance(data.get("words"), list):
        surfaces = data["words"]
        stats = data.get("entries") if isinstance(data.get("entries"), dict) else {}
    else:
        Log.warning("[Vocabulary] words payload has an unexpected shape, starting empty")
        return []

    out: List[WordEntry] = []
    seen = set()
    for s in surfaces:
        if not isinstance(s, str) or not s.strip():
            continue
        surface = s.strip()
        key = surface.lower()
        if key in seen:
            continue
        seen.add(key)
        st = stats.get(key)
        freq, last = 1, now
        if isinstance(st, dict):
            f = st.get("frequency")
            t = st.get("last_used_at")
            if isinstance(f, int) and not isinstance(f, bool) and f >= 1:
                freq = f
            if isinstance(t, (int, float)) and not isinstance(t, bool):
                last = float(t)
        out.append(WordEntry(surface=surface, normalized=key, frequency=freq, last_used_at=last))
    return out
