"""Unit tests for modulartc.utils.text.ngrams module."""

import pytest

from modulartc.utils.text.ngrams import char_ngrams, char_skip_ngrams, dependency_key, word_ngrams


@pytest.mark.unit
def test_word_ngrams_order_and_lowercase():
    assert list(word_ngrams(["The", "Cat", "sat"], 1, 2, lowercase=True)) == [
        "the",
        "the_cat",
        "cat",
        "cat_sat",
        "sat",
    ]
    assert list(word_ngrams(["The"], 1, 1)) == ["The"]


@pytest.mark.unit
def test_word_ngrams_longer_than_document_yield_nothing():
    assert list(word_ngrams(["a", "b"], 3, 3)) == []


@pytest.mark.unit
@pytest.mark.parametrize(("min_n", "max_n"), [(0, 1), (3, 2)])
def test_invalid_bounds_raise(min_n, max_n):
    with pytest.raises(ValueError, match="Invalid n-gram bounds"):
        list(word_ngrams(["a"], min_n, max_n))


@pytest.mark.unit
def test_char_ngrams_use_boundary_markers():
    assert list(char_ngrams(["ab"], 2, 2)) == ["^a", "ab", "b$"]
    assert "^ab$" in list(char_ngrams(["AB"], 4, 4, lowercase=True))


@pytest.mark.unit
def test_char_skip_ngrams_without_skips_equal_char_ngrams():
    tokens = ["hello", "world"]
    assert sorted(char_skip_ngrams(tokens, 2, 3, 0)) == sorted(char_ngrams(tokens, 2, 3))


@pytest.mark.unit
def test_char_skip_ngrams_with_skips():
    grams = sorted(char_skip_ngrams(["ab"], 2, 2, 1))
    assert grams == ["^a", "^b", "a$", "ab", "b$"]


@pytest.mark.unit
def test_char_skip_ngrams_negative_skip():
    with pytest.raises(ValueError, match="skip_size"):
        list(char_skip_ngrams(["ab"], 2, 2, -1))


@pytest.mark.unit
def test_dependency_key_folds_only_words():
    assert dependency_key("Dog", "nsubj", "Ran", lowercase=True) == "dog-nsubj-ran"
    assert dependency_key("Dog", "NSUBJ", "Ran", lowercase=True) == "dog-NSUBJ-ran"
    assert dependency_key("Dog", "nsubj", "Ran") == "Dog-nsubj-Ran"
