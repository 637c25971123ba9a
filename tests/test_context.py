# tests/test_context.py
from ghost_complete.core.context import WordBounds, context_keys, split_words, word_bounds_at_caret


def test_split_words():
    assert split_words("  the\tquick \n brown  ") == ["the", "quick", "brown"]
    assert split_words("") == []
    assert split_words("   ") == []


def test_word_bounds_at_caret():
    text = "hello wonderful world"
    assert word_bounds_at_caret(text, 9) == WordBounds(6, 15, "wonderful")
    assert word_bounds_at_caret(text, 15).word == "wonderful"
    assert word_bounds_at_caret(text, 0).word == "hello"
    assert word_bounds_at_caret(text, 999).word == "world"
    assert word_bounds_at_caret("a  b", 2) == WordBounds(2, 2, "")
    assert word_bounds_at_caret("", 3) == WordBounds(0, 0, "")


def test_context_keys_least_specific_first():
    assert context_keys("The lazy Dog") == ["dog", "lazy dog", "the lazy dog"]
    assert context_keys("a b c d e") == ["e", "d e", "c d e"]
    assert context_keys("one two", depth=1) == ["two"]
    assert context_keys("") == []


def test_context_keys_respect_caret():
    assert context_keys("alpha beta gamma", caret=10) == ["beta", "alpha beta"]
