"""
ghost_complete.core

The learning and suggestion engine:
 - prefix index over learned words (Trie)
 - per-group vocabulary with eviction (VocabularyStore)
 - context -> next-word counts (PatternPredictor)
 - read-only query side (SuggestionService)
 - debounced writes to the blob store (PersistenceScheduler)
 - the GhostComplete facade tying them together
"""

from .trie import Trie
from .vocabulary import VocabularyStore
from .pattern_predictor import PatternPredictor
from .suggestion_service import SuggestionService
from .persistence import PersistenceScheduler
from .autocompleter import GhostComplete

__all__ = [
    "Trie",
    "VocabularyStore",
    "PatternPredictor",
    "SuggestionService",
    "PersistenceScheduler",
    "GhostComplete",
]
