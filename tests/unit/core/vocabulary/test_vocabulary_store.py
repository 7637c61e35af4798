"""Unit tests for modulartc.core.vocabulary.vocabulary_store module."""

import json

import pytest

from modulartc.core.vocabulary.vocabulary_store import VocabularyStore
from modulartc.utils.errors.exceptions import FeatureStoreWriteError, VocabularyError


# ---------------------------------------------------------------------
# Counting
# ---------------------------------------------------------------------
@pytest.mark.unit
def test_increment_and_membership():
    store = VocabularyStore()
    store.increment("the")
    store.increment("the", 2)
    store.increment_all(["a", "the"])

    assert store.count("the") == 4
    assert store.count("missing") == 0
    assert "a" in store
    assert "missing" not in store
    assert store.total == 5
    assert len(store) == 2


@pytest.mark.unit
def test_zero_counts_are_not_members():
    store = VocabularyStore({"x": 0, "y": 1})
    store.increment("z", 0)
    assert "x" not in store
    assert "z" not in store
    assert store.keys() == ["y"]


@pytest.mark.unit
@pytest.mark.parametrize("bad", [-1, 1.5, True, "2"])
def test_invalid_counts_are_rejected(bad):
    with pytest.raises(VocabularyError):
        VocabularyStore({"k": bad})


@pytest.mark.unit
def test_merge_adds_counts():
    store = VocabularyStore({"a": 1})
    store.merge({"a": 2, "b": 1})
    store.merge(VocabularyStore({"b": 3}))
    assert store.as_dict() == {"a": 3, "b": 4}


@pytest.mark.unit
def test_read_only_store_rejects_mutation():
    store = VocabularyStore({"a": 1}, read_only=True)
    for call in (lambda: store.increment("a"), lambda: store.merge({"a": 1}), lambda: store.increment_all(["a"])):
        with pytest.raises(VocabularyError, match="read-only"):
            call()
    assert store.count("a") == 1


# ---------------------------------------------------------------------
# Ranking
# ---------------------------------------------------------------------
@pytest.mark.unit
def test_ranking_breaks_ties_by_key():
    store = VocabularyStore({"b": 2, "a": 2, "c": 5, "d": 1})
    assert store.keys() == ["c", "a", "b", "d"]
    assert store.items()[0] == ("c", 5)


@pytest.mark.unit
def test_top_k_truncates_and_is_read_only():
    store = VocabularyStore({"b": 2, "a": 2, "c": 5, "d": 1})
    top = store.top_k(2)
    assert top.keys() == ["c", "a"]
    assert top.read_only
    assert store.top_k(10) == store
    assert len(store.top_k(0)) == 0


@pytest.mark.unit
def test_top_k_is_idempotent():
    store = VocabularyStore({f"k{i}": i % 7 + 1 for i in range(50)})
    for k in (1, 5, 17, 50, 80):
        assert store.top_k(k).top_k(k) == store.top_k(k)


@pytest.mark.unit
def test_negative_top_k_raises():
    with pytest.raises(VocabularyError):
        VocabularyStore().top_k(-1)


# ---------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------
@pytest.mark.unit
def test_save_and_load_preserve_counts(tmp_path):
    store = VocabularyStore({"the": 3, "güte": 1, "a_b": 2})
    path = store.save(tmp_path / "sub" / "vocab.json")

    loaded = VocabularyStore.load(path)
    assert loaded == store
    assert loaded.read_only
    assert not path.with_name("vocab.json.tmp").exists()

    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["format_version"] == 1
    assert payload["counts"]["the"] == 3


@pytest.mark.unit
def test_load_missing_file(tmp_path):
    with pytest.raises(VocabularyError, match="not found"):
        VocabularyStore.load(tmp_path / "nope.json")


@pytest.mark.unit
def test_load_rejects_other_json(tmp_path):
    path = tmp_path / "other.json"
    path.write_text(json.dumps({"hello": 1}))
    with pytest.raises(VocabularyError, match="not a vocabulary"):
        VocabularyStore.load(path)

    path.write_text(json.dumps({"format_version": 99, "counts": {}}))
    with pytest.raises(VocabularyError, match="format version"):
        VocabularyStore.load(path)


@pytest.mark.unit
def test_unencodable_key_fails_save_without_leftovers(tmp_path):
    # A lone surrogate cannot be written as UTF-8
    store = VocabularyStore({"\ud83d": 1})
    with pytest.raises(FeatureStoreWriteError) as exc_info:
        store.save(tmp_path / "v.json")

    assert isinstance(exc_info.value.__cause__, UnicodeEncodeError)
    assert list(tmp_path.iterdir()) == []
