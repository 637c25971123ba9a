# pattern_predictor.py
# Short-context next-word predictor learned from observed word transitions.

from __future__ import annotations
from collections import Counter
from typing import Callable, Dict, Iterable, List, Optional, Sequence
import json

from ghost_complete.core.protocols import BlobStore, PatternsPayload
from ghost_complete.utils.config_manager import ConfigRegistry
from ghost_complete.utils.logger_utils import Log
from ghost_complete.utils.model_store import storage_keys

Word = str
Patterns = Dict[str, Counter]

MAX_CONTEXT = 3            # unigram, bigram and trigram contexts
CONTEXT_PRUNE_SHARE = 0.2  # share of contexts dropped when a group overflows


def make_context_key(words: Iterable[str]) -> str:
    """Lowercase, single-space-joined context key."""
    return " ".join(w.lower() for w in words if w and w.strip()).strip()


def trim_candidates(counter: Counter, max_total: int, max_stable: int) -> Counter:
    """
    Bound one context's candidate map to `max_total` entries.

    Candidates are ranked by count (ties: word). The first `max_stable` form
    the stable tier, the rest of the top `max_total` the buffer zone. When a
    stable count does not exceed the buffer's minimum the ranking is not
    cleanly separated and the plain top slice is kept; otherwise stable and
    buffer are kept together.
    """
    if len(counter) <= max_total:
        return counter
    ranked = sorted(counter.items(), key=lambda kv: (-kv[1], kv[0]))
    top = ranked[:max_total]
    stable = top[:max_stable]
    buffer = top[max_stable:]
    min_buf = buffer[-1][1] if buffer else 0
    if any(c <= min_buf for _, c in stable):
        return Counter(dict(top))
    return Counter(dict(stable + buffer))


def prune_contexts(patterns: Patterns, max_patterns: int) -> List[str]:
    """
    Drop the least-used contexts (lowest total occurrence mass) once there are
    more than `max_patterns`. Returns the removed keys.
    """
    if len(patterns) <= max_patterns:
        return []
    n = max(1, int(max_patterns * CONTEXT_PRUNE_SHARE))
    by_mass = sorted(patterns, key=lambda k: (sum(patterns[k].values()), k))
    removed = by_mass[:n]
    for k in removed:
        del patterns[k]
    return removed


class PatternPredictor:
    """
    Per-group map: context key -> Counter(next word).

    Every observed transition updates up to three contexts (the last 1, 2
    and 3 words). predict() merges the matching contexts, weighting a
    context of n words by n so that more specific contexts count more.

    Public API:
      observe_transition(group, context_words, next_word)
      predict(group, context_keys, limit=None)
      patterns(group), load(group), clear(group), validate(group)
      serialize(group), storage_key(group), reset()
    """

    KIND = "patterns"

    def __init__(self, store: BlobStore, config: ConfigRegistry,
                 on_dirty: Optional[Callable[[str, str], None]] = None) -> None:
        self.store = store
        self.config = config
        self.on_dirty = on_dirty
        self._patterns: Dict[str, Patterns] = {}

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def load(self, group: str = "") -> Patterns:
        patterns = self._patterns.get(group)
        if patterns is not None:
            return patterns
        raw = None
        try:
            raw = self.store.get(self.storage_key(group))
        except Exception as e:
            Log.warning(f"[Patterns] store read failed for group '{group}': {e}")
        patterns = decode_patterns(raw) if raw else {}
        self._patterns[group] = patterns
        return patterns

    # ------------------------------------------------------------------
    # Training
    # ------------------------------------------------------------------
    def observe_transition(self, group: str, context_words: Sequence[str], next_word: str) -> None:
        word = (next_word or "").strip().lower()
        ctx = [w for w in (context_words or []) if w and w.strip()]
        if not word or not ctx:
            return

        cfg = self.config.resolve(group)
        patterns = self.load(group)
        for n in range(1, min(MAX_CONTEXT, len(ctx)) + 1):
            key = make_context_key(ctx[-n:])
            counter = patterns.get(key)
            if counter is None:
                counter = patterns[key] = Counter()
            counter[word] += 1
            if len(counter) > cfg.max_total:
                patterns[key] = trim_candidates(counter, cfg.max_total, cfg.max_stable)

            removed = prune_contexts(patterns, cfg.max_patterns)
            if removed:
                Log.debug(f"[Patterns] pruned {len(removed)} contexts from group '{group}'")

        if self.on_dirty is not None:
            self.on_dirty(group, self.KIND)

    # ------------------------------------------------------------------
    # Prediction
    # ------------------------------------------------------------------
    def predict(self, group: str, context_keys: Sequence[str], limit: Optional[int] = None) -> List[Word]:
        """
        Rank next-word candidates for the given context keys (least to most
        specific). Score = sum of count * context length; ties by word.
        """
        n = limit if limit is not None else self.config.resolve(group).max_suggestions
        if n <= 0 or not context_keys:
            return []
        patterns = self.load(group)
        scores: Dict[Word, float] = {}
        # each distinct context counts once, however often the caller repeats it
        keys = dict.fromkeys(make_context_key((k or "").split()) for k in context_keys)
        for key in keys:
            counter = patterns.get(key)
            if not counter:
                continue
            weight = min(len(key.split()), MAX_CONTEXT)
            for w, c in counter.items():
                scores[w] = scores.get(w, 0) + c * weight
        ranked = sorted(scores.items(), key=lambda kv: (-kv[1], kv[0]))
        return [w for w, _ in ranked[:n]]

    # ------------------------------------------------------------------
    # Maintenance/admin
    # ------------------------------------------------------------------
    def validate(self, group: str) -> None:
        """Re-apply candidate and context bounds to a resident group."""
        patterns = self._patterns.get(group)
        if patterns is None:
            return
        cfg = self.config.resolve(group)
        changed = False
        for key, counter in list(patterns.items()):
            if len(counter) > cfg.max_total:
                patterns[key] = trim_candidates(counter, cfg.max_total, cfg.max_stable)
                changed = True
        while len(patterns) > cfg.max_patterns:
            prune_contexts(patterns, cfg.max_patterns)
            changed = True
        if changed and self.on_dirty is not None:
            self.on_dirty(group, self.KIND)

    def clear(self, group: str = "") -> None:
        self._patterns[group] = {}
        try:
            self.store.remove(self.storage_key(group))
        except Exception as e:
            Log.warning(f"[Patterns] store remove failed for group '{group}': {e}")
        Log.info(f"[Patterns] cleared group '{group}'")

    def reset(self) -> None:
        self._patterns.clear()

    # ------------------------------------------------------------------
    # Introspection helpers
    # ------------------------------------------------------------------
    def patterns(self, group: str = "") -> Dict[str, Dict[Word, int]]:
        return {k: dict(v) for k, v in self.load(group).items()}

    def groups(self) -> List[str]:
        return list(self._patterns)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def storage_key(self, group: str) -> str:
        return storage_keys(group)[1]

    def serialize(self, group: str) -> bytes:
        payload: PatternsPayload = {
            "contexts": {k: dict(v) for k, v in self.load(group).items()},
        }
        return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def decode_patterns(raw: bytes) -> Patterns:
    """Parse a patterns blob; malformed data yields {} and bad counts are dropped."""
    try:
        data = json.loads(raw.decode("utf-8") if isinstance(raw, (bytes, bytearray)) else raw)
    except (UnicodeDecodeError, ValueError, TypeError) as e:
        Log.warning(f"[Patterns] unreadable patterns payload, starting empty: {e}")
        return {}
    if not isinstance(data, dict):
        return {}
    # payloads written without the "contexts" wrapper are plain context maps
    contexts = data.get("contexts", data)
    if not isinstance(contexts, dict):
        return {}

    out: Patterns = {}
    for key, cands in contexts.items():
        if not isinstance(key, str) or not isinstance(cands, dict):
            continue
        ctr = Counter({
            w: c for w, c in cands.items()
            if isinstance(w, str) and isinstance(c, int) and not isinstance(c, bool) and c > 0
        })
        if ctr:
            out[make_context_key(key.split())] = ctr
    return out
