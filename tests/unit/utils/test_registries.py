"""Unit tests for modulartc.utils.registries module."""

import pytest

from modulartc.extractors import WordNgramExtractor, build_extractor, extractor_registry
from modulartc.filters import L2Normalize, build_filter, filter_registry
from modulartc.utils.errors.exceptions import ConfigurationError, UnknownComponentError
from modulartc.utils.registries import CaseInsensitiveRegistry


# ---------------------------------------------------------------------
# CaseInsensitiveRegistry
# ---------------------------------------------------------------------
@pytest.mark.unit
def test_lookup_ignores_case_and_keeps_original_key():
    reg = CaseInsensitiveRegistry("thing")
    reg.register("WordNgram", int)
    assert reg["wordngram"] is int
    assert "WORDNGRAM" in reg
    assert reg.get_original_key("wordNGRAM") == "WordNgram"
    assert list(reg.keys()) == ["WordNgram"]


@pytest.mark.unit
def test_register_rejects_case_insensitive_duplicate():
    reg = CaseInsensitiveRegistry("thing")
    reg.register("tag", int)
    with pytest.raises(KeyError):
        reg.register("TAG", float)


@pytest.mark.unit
def test_resolve_unknown_raises_configuration_error():
    reg = CaseInsensitiveRegistry("feature filter", {"a": int})
    with pytest.raises(UnknownComponentError) as exc_info:
        reg.resolve("nope")
    assert isinstance(exc_info.value, ConfigurationError)
    assert exc_info.value.kind == "feature filter"
    assert "Available: a" in str(exc_info.value)


@pytest.mark.unit
def test_delete_removes_lowercase_mapping():
    reg = CaseInsensitiveRegistry("thing", {"Key": 1})
    del reg["KEY"]
    assert "key" not in reg
    assert reg.get("key", "missing") == "missing"


# ---------------------------------------------------------------------
# Built-in registries
# ---------------------------------------------------------------------
@pytest.mark.unit
def test_builtin_extractors_are_registered():
    for tag in ("word_ngram", "char_ngram", "char_skip_ngram", "dependency", "nr_of_chars", "nr_of_tokens"):
        assert tag in extractor_registry


@pytest.mark.unit
def test_builtin_filters_are_registered():
    for tag in ("class_balance_weighting", "l2_normalize", "adapt_test_to_training"):
        assert tag in filter_registry


@pytest.mark.unit
def test_build_extractor_from_tag_dict_and_instance(tmp_path):
    ex = build_extractor({"type": "Word_Ngram", "vocabulary_path": str(tmp_path / "v.json"), "top_k": 3})
    assert isinstance(ex, WordNgramExtractor)
    assert ex.top_k == 3

    assert build_extractor(ex) is ex
    assert build_extractor("nr_of_chars").name == "nr_of_chars"


@pytest.mark.unit
def test_build_extractor_bad_parameters():
    with pytest.raises(ConfigurationError):
        build_extractor({"type": "nr_of_chars", "unknown_param": 1})
    with pytest.raises(ConfigurationError):
        build_extractor({"name": "no-type"})


@pytest.mark.unit
def test_build_filter_resolves_tags():
    assert isinstance(build_filter("l2_normalize"), L2Normalize)
    with pytest.raises(UnknownComponentError):
        build_filter("does_not_exist")
