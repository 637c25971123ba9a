# tests/test_trie.py
from ghost_complete.core.trie import Trie


def test_search_is_case_insensitive_and_keeps_surface():
    t = Trie()
    t.insert("JavaScript")
    assert t.search("java", 5) == ["JavaScript"]
    assert t.search("JAVA", 5) == ["JavaScript"]


def test_empty_prefix_and_zero_limit_return_nothing():
    t = Trie.build(["alpha", "beta"])
    assert t.search("", 5) == []
    assert t.search("a", 0) == []


def test_traversal_order_is_node_first_then_alphabetical():
    t = Trie.build(["card", "car", "cat", "cab"])
    # "car" ends on the node visited before its "card" child
    assert t.search("ca", 10) == ["cab", "car", "card", "cat"]


def test_search_stops_at_limit():
    t = Trie.build(["apple", "apply", "apt", "ape"])
    assert t.search("ap", 2) == ["ape", "apple"]


def test_reinsert_refreshes_surface_without_growing():
    t = Trie()
    t.insert("python")
    t.insert("Python")
    assert len(t) == 1
    assert t.search("py", 5) == ["Python"]


def test_exact_match_is_returned_by_the_index():
    t = Trie.build(["typescript"])
    assert t.search("typescript", 5) == ["typescript"]


def test_remove_prunes_and_keeps_siblings():
    t = Trie.build(["car", "card"])
    assert t.remove("card")
    assert "card" not in t
    assert "car" in t
    assert t.search("car", 5) == ["car"]
    assert not t.remove("card")
    assert len(t) == 1


def test_words_and_missing_prefix():
    t = Trie.build(["beta", "alpha"])
    assert t.words() == ["alpha", "beta"]
    assert t.search("z", 5) == []
    assert Trie().words() == []


def test_very_long_word_does_not_break_search():
    blob = "a" * 5000
    t = Trie.build(["alpha", blob, "apt"])
    assert t.search("a", 10) == [blob, "alpha", "apt"]
    assert t.search("aa", 5) == [blob]
    assert len(t.words()) == 3
