# tests/test_vocabulary.py
import json

import pytest

from ghost_complete.core.vocabulary import VocabularyStore, decode_words, encode_words
from ghost_complete.core.eviction import WordEntry
from ghost_complete.utils.model_store import storage_keys


@pytest.fixture
def dirty():
    return []


@pytest.fixture
def vocab(store, config, clock, dirty):
    return VocabularyStore(store, config, clock=clock,
                           on_dirty=lambda g, k: dirty.append((g, k)))


def test_short_and_empty_words_are_ignored(vocab, dirty):
    assert vocab.observe("", "  ") is None
    assert vocab.observe("", "ab") is None
    assert vocab.words("") == []
    assert dirty == []


def test_observe_counts_and_moves_to_front(vocab, clock):
    vocab.observe("g", "alpha")
    vocab.observe("g", "beta")
    clock.advance(5)
    entry = vocab.observe("g", "ALPHA")
    assert entry.frequency == 2
    assert entry.last_used_at == clock.now
    assert vocab.words("g") == ["ALPHA", "beta"]
    assert vocab.entry("g", "alpha") is entry


def test_same_word_n_times_has_one_entry(vocab):
    for _ in range(7):
        vocab.observe("g", "python")
    assert vocab.words("g") == ["python"]
    assert vocab.entry("g", "python").frequency == 7


def test_observe_marks_group_dirty(vocab, dirty):
    vocab.observe("search", "hello")
    assert dirty == [("search", "words")]


def test_trie_follows_observations(vocab):
    vocab.observe("g", "Typescript")
    assert vocab.trie("g").search("ty", 5) == ["Typescript"]


def test_eviction_keeps_frequent_word(vocab, config):
    config.set_group_config("g", {"MAX_WORDS": 1})
    for _ in range(3):
        vocab.observe("g", "cat")
    vocab.observe("g", "car")
    assert vocab.words("g") == ["cat"]
    assert "car" not in vocab.trie("g")


def test_eviction_trims_to_ceiling(vocab, config, clock):
    config.set_group_config("g", {"max_words": 10})
    for i in range(10):
        for _ in range(i + 1):
            vocab.observe("g", f"word{i:02d}")
        clock.advance(1)
    assert len(vocab.words("g")) == 10
    vocab.observe("g", "newcomer")
    words = vocab.words("g")
    assert len(words) == config.resolve("g").eviction_ceiling() == 8
    assert "word09" in words and "word00" not in words
    assert len(vocab.trie("g")) == 8


def test_groups_are_isolated(vocab):
    vocab.observe("a", "shared")
    assert vocab.words("b") == []
    assert vocab.trie("b").search("sha", 5) == []


def test_load_tolerates_garbage(store, vocab):
    store.set(storage_keys("bad")[0], b"\xff not json")
    assert vocab.words("bad") == []
    store.set(storage_keys("odd")[0], b'{"something": 1}')
    assert vocab.words("odd") == []


def test_load_accepts_plain_list(store, vocab):
    store.set(storage_keys("old")[0], json.dumps(["Alpha", "beta", "alpha", 3]).encode())
    assert vocab.words("old") == ["Alpha", "beta"]
    assert vocab.entry("old", "alpha").frequency == 1


def test_load_over_capacity_is_evicted(store, config, vocab):
    config.set_group_config("big", {"max_words": 2, "stable_words": 2})
    store.set(storage_keys("big")[0], json.dumps(["one", "two", "three"]).encode())
    assert len(vocab.words("big")) == 2


def test_serialize_round_trip(vocab, clock):
    vocab.observe("g", "Hello")
    vocab.observe("g", "world")
    vocab.observe("g", "hello")
    raw = vocab.serialize("g")
    decoded = decode_words(raw, now=0.0)
    assert [e.surface for e in decoded] == ["hello", "world"]
    assert {e.normalized: e.frequency for e in decoded} == {"hello": 2, "world": 1}
    assert all(e.last_used_at == clock.now for e in decoded)


def test_encode_is_deterministic():
    entries = [WordEntry("b", "b", 2, 1.0), WordEntry("a", "a", 1, 2.0)]
    assert encode_words(entries) == encode_words(list(entries))
    assert json.loads(encode_words(entries))["words"] == ["b", "a"]


def test_clear_forgets_memory_and_blob(store, vocab):
    vocab.observe("g", "remember")
    store.set(vocab.storage_key("g"), vocab.serialize("g"))
    vocab.clear("g")
    assert vocab.words("g") == []
    assert store.get(vocab.storage_key("g")) is None
    assert vocab.trie("g").search("rem", 5) == []


def test_validate_rebuilds_missing_trie(vocab):
    vocab.observe("g", "index")
    del vocab._tries["g"]
    vocab.validate("g")
    assert vocab.trie("g").search("ind", 5) == ["index"]


def test_eviction_updates_trie_in_place(vocab, config):
    config.set_group_config("g", {"MAX_WORDS": 2, "STABLE_WORDS": 2})
    for w in ("keep", "keep", "also", "also", "Drop"):
        vocab.observe("g", w)
    trie = vocab.trie("g")
    vocab.observe("g", "gone")
    assert vocab.trie("g") is trie
    assert sorted(trie.words()) == ["also", "keep"]
    assert "drop" not in trie and "gone" not in trie
