# eviction.py
# Size-bounded LFU/LRU hybrid for a group's vocabulary.
# A word's score is its frequency scaled by a recency weight that decays
# linearly over `decay_window` seconds but never below `recency_floor`,
# so one fresh touch does not outrank a long-standing frequent word.

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, List


@dataclass
class WordEntry:
    surface: str
    normalized: str
    frequency: int = 1
    last_used_at: float = 0.0


def recency_weight(age: float, decay_window: float, floor: float) -> float:
    if decay_window <= 0:
        return floor
    return max(floor, 1.0 - max(0.0, age) / decay_window)


def score_entry(entry: WordEntry, now: float, decay_window: float, floor: float) -> float:
    """score = frequency * max(floor, 1 - age / decay_window)"""
    return entry.frequency * recency_weight(now - entry.last_used_at, decay_window, floor)


def select_survivors(entries: Iterable[WordEntry], keep: int, now: float,
                     decay_window: float, floor: float) -> List[WordEntry]:
    """
    Rank entries by score (ties: more recently used first, then normalized
    form) and return the best `keep` of them.
    """
    ranked = sorted(
        entries,
        key=lambda e: (-score_entry(e, now, decay_window, floor), -e.last_used_at, e.normalized),
    )
    return ranked[:max(0, keep)]
