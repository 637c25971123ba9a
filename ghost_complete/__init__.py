"""
ghost_complete

Locally learned word suggestions for text-input fields: a per-group
vocabulary with frequency/recency eviction, a prefix index for instant
completion and a short-context next-word predictor.

Example:
    from ghost_complete import GhostComplete

    engine = GhostComplete()
    engine.on_word_finalized("search", "typescript")
    engine.get_completions("search", "ty")   # ["typescript"]
"""

from .core.autocompleter import GhostComplete
from .utils.config_manager import ConfigRegistry, GroupConfig
from .utils.model_store import FileBlobStore, MemoryBlobStore, storage_keys

__version__ = "2.0.0"
__all__ = [
    "GhostComplete",
    "ConfigRegistry",
    "GroupConfig",
    "FileBlobStore",
    "MemoryBlobStore",
    "storage_keys",
]
