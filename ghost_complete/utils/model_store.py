# model_store.py - blob store backends for group state

# The engine persists two blobs per group (words, patterns) through the
# BlobStore protocol. Two backends live here:
# - MemoryBlobStore: dict-backed, used by tests and embedders with their own storage
# - FileBlobStore: one JSON file per key under a data directory, atomic writes

import os
from typing import Dict, Optional, Tuple
from urllib.parse import quote

from ghost_complete.utils.logger_utils import Log

# Configuration -------------------
DATA_DIRECTORY = "data"
KEY_PREFIX = "ghost_complete"
SCHEMA_VERSION = 2  # bump whenever the persisted payload shape changes


def storage_keys(group: str = "") -> Tuple[str, str]:
    """
    Return (words_key, patterns_key) for a group.
    The default group ("") has no group part: ghost_complete_words_v2.
    """
    base = f"_{group}" if group else ""
    return (
        f"{KEY_PREFIX}_words{base}_v{SCHEMA_VERSION}",
        f"{KEY_PREFIX}_patterns{base}_v{SCHEMA_VERSION}",
    )


# In-memory backend -------------------------
class MemoryBlobStore:
    """Dict-backed blob store. `fail_writes` simulates a full/unavailable store."""

    def __init__(self, initial: Optional[Dict[str, bytes]] = None):
        self.data: Dict[str, bytes] = dict(initial or {})
        self.fail_writes = False
        self.writes = 0

    def get(self, key: str) -> Optional[bytes]:
        return self.data.get(key)

    def set(self, key: str, data: bytes) -> bool:
        if self.fail_writes:
            return False
        self.data[key] = bytes(data)
        self.writes += 1
        return True

    def remove(self, key: str) -> None:
        self.data.pop(key, None)

    def keys(self):
        return sorted(self.data)


# File backend -----------------------------

class FileBlobStore:
    """
    One file per key, named <percent-encoded key>.json inside `directory`.
    The encoding is reversible, so distinct keys never share a file.
    Writes go to a temp file first and are moved into place with os.replace,
    so a crash mid-write never leaves a truncated blob behind.
    """

    def __init__(self, directory: str = DATA_DIRECTORY):
        self.directory = directory
        os.makedirs(self.directory, exist_ok=True)

    def path_for(self, key: str) -> str:
        return os.path.join(self.directory, quote(key, safe="") + ".json")

    def get(self, key: str) -> Optional[bytes]:
        path = self.path_for(key)
        if not os.path.exists(path):
            return None
        try:
            with open(path, "rb") as f:
                return f.read()
        except OSError as e:
            Log.warning(f"[FileBlobStore] read failed for {key}: {e}")
            return None

    def set(self, key: str, data: bytes) -> bool:
        path = self.path_for(key)
        tmp_path = path + ".tmp"
        try:
            with open(tmp_path, "wb") as f:
                f.write(data)
            os.replace(tmp_path, path)
            return True
        except OSError as e:
            Log.warning(f"[FileBlobStore] write failed for {key}: {e}")
            return False

    def remove(self, key: str) -> None:
        try:
            os.remove(self.path_for(key))
        except FileNotFoundError:
            pass
        except OSError as e:
            Log.warning(f"[FileBlobStore] remove failed for {key}: {e}")
