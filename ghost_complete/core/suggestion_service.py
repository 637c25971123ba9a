# ghost_complete/core/suggestion_service.py
# Read-only query side: prefix completions and next-word predictions.
# Nothing here mutates state or marks anything dirty.

from __future__ import annotations

from typing import List, Optional, Sequence

from ghost_complete.core.pattern_predictor import PatternPredictor
from ghost_complete.core.vocabulary import VocabularyStore
from ghost_complete.utils.config_manager import ConfigRegistry


class SuggestionService:
    def __init__(self, vocabulary: VocabularyStore, config: ConfigRegistry,
                 predictor: Optional[PatternPredictor] = None) -> None:
        self.vocabulary = vocabulary
        self.predictor = predictor
        self.config = config

    def suggest_completions(self, group: str, token: str) -> List[str]:
        """
        Words starting with `token` (case-insensitive), never the token itself.
        The index is asked for one extra hit so an exact echo costs no slot.
        """
        token = (token or "").strip()
        if not token:
            return []
        limit = self.config.resolve(group).max_suggestions
        lower = token.lower()
        hits = self.vocabulary.trie(group).search(token, limit + 1)
        return [w for w in hits if w.lower() != lower][:limit]

    def suggest_predictions(self, group: str, trailing_contexts: Sequence[str]) -> List[str]:
        if self.predictor is None or not trailing_contexts:
            return []
        return self.predictor.predict(group, trailing_contexts)
