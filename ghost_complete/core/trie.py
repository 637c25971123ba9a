# trie.py
# Trie (prefix tree) over lowercase word forms for instant completion.
# Each terminal node keeps the surface form (original casing) to hand back.
# Derived index only: it can always be rebuilt from a group's vocabulary.

from __future__ import annotations
from collections import defaultdict
from typing import Dict, Iterable, List, Optional


class TrieNode:
    """
    A single node in the Trie.
    children: char -> TrieNode
    surface: original-casing word ending here, or None if no word ends here
    """

    __slots__ = ("children", "surface")

    def __init__(self) -> None:
        self.children: Dict[str, TrieNode] = defaultdict(TrieNode)
        self.surface: Optional[str] = None


class Trie:
    """
    Case-insensitive prefix index.

    search() walks depth-first, emitting a node's own word before its
    children and visiting children in ascending character order, so
    results are deterministic: shorter words before their extensions,
    then alphabetical. It stops the moment `limit` results are collected.
    """

    def __init__(self) -> None:
        self._root = TrieNode()
        self._size = 0

    @classmethod
    def build(cls, words: Iterable[str]) -> "Trie":
        """Build a fresh trie. Later words win the surface form on case clashes."""
        trie = cls()
        for w in words:
            trie.insert(w)
        return trie

    # insertion/removal -----------------------------------------------------
    def insert(self, word: str) -> None:
        """Insert a word; re-inserting only refreshes its surface form."""
        if not word:
            return

        node = self._root
        for ch in word.lower():
            node = node.children[ch]
        if node.surface is None:
            self._size += 1
        node.surface = word

    def remove(self, word: str) -> bool:
        """Remove a word and prune branches left empty. Returns False if absent."""
        if not word:
            return False
        path = [self._root]
        node = self._root
        for ch in word.lower():
            node = node.children.get(ch)
            if node is None:
                return False
            path.append(node)
        if node.surface is None:
            return False

        node.surface = None
        self._size -= 1
        lower = word.lower()
        for i in range(len(lower), 0, -1):
            child = path[i]
            if child.surface is not None or child.children:
                break
            del path[i - 1].children[lower[i - 1]]
        return True

    # search/traversal ---------------------------------------------------------
    def search(self, prefix: str, limit: int) -> List[str]:
        """Return up to `limit` surface forms whose lowercase form starts with `prefix`."""
        if not prefix or limit <= 0:
            return []

        node = self._root
        for ch in prefix.lower():
            nxt = node.children.get(ch)
            if nxt is None:
                return []
            node = nxt

        out: List[str] = []
        self._collect(node, out, limit)
        return out

    def _collect(self, node: TrieNode, results: List[str], limit: int) -> None:
        """DFS collecting words under a prefix node (explicit stack, any word length)."""
        stack = [node]
        while stack:
            cur = stack.pop()
            if cur.surface is not None:
                results.append(cur.surface)
                if len(results) >= limit:
                    return
            # reversed so the smallest character is popped first
            for ch in sorted(cur.children, reverse=True):
                stack.append(cur.children[ch])

    # convenience/debugging -----------------------------------------------------
    def words(self) -> List[str]:
        """All stored surface forms in traversal order. O(N) walk, for inspection."""
        if not self._size:
            return []
        acc: List[str] = []
        self._collect(self._root, acc, limit=self._size)
        return acc

    def __len__(self) -> int:
        return self._size

    def __contains__(self, word: str) -> bool:
        """Simple membership check."""
        if not word:
            return False
        node = self._root
        for ch in word.lower():
            node = node.children.get(ch)
            if node is None:
                return False
        return node.surface is not None
