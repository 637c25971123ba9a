# ghost_complete/core/context.py
# Text helpers shared by the engine and its callers: word splitting,
# the word under the caret, and the trailing context keys before it.

from __future__ import annotations

import re
from typing import List, NamedTuple, Optional

_ws = re.compile(r"\s+")


class WordBounds(NamedTuple):
    start: int
    end: int
    word: str


def split_words(text: str) -> List[str]:
    """Whitespace split with empty pieces dropped."""
    if not text:
        return []
    return [w for w in _ws.split(text) if w]


def word_bounds_at_caret(text: str, caret: int) -> WordBounds:
    """The run of non-whitespace characters touching `caret`."""
    if not text:
        return WordBounds(0, 0, "")
    caret = max(0, min(len(text), caret))
    start = caret
    while start > 0 and not text[start - 1].isspace():
        start -= 1
    end = caret
    while end < len(text) and not text[end].isspace():
        end += 1
    return WordBounds(start, end, text[start:end])


def context_keys(text: str, caret: Optional[int] = None, depth: int = 3) -> List[str]:
    """
    Context keys for the text before the caret, least specific first:
    "the lazy dog" -> ["dog", "lazy dog", "the lazy dog"].
    """
    before = text if caret is None else text[:max(0, caret)]
    words = split_words(before)
    return [" ".join(words[-n:]).lower() for n in range(1, min(depth, len(words)) + 1)]
