"""Unit tests for modulartc.core.vocabulary.frequency_collector module."""

import pytest

from modulartc.core.data.document import Document, Token
from modulartc.core.vocabulary.frequency_collector import FrequencyCollector, collect_vocabularies
from modulartc.core.vocabulary.vocabulary_store import VocabularyStore
from modulartc.extractors import DependencyExtractor, NrOfCharsExtractor, WordNgramExtractor
from modulartc.utils.errors.error_handling import ErrorMode
from modulartc.utils.errors.exceptions import (
    ConfigurationError,
    DocumentAnnotationError,
    SkippedDocumentWarning,
)
from modulartc.utils.logging import catch_warnings
from tests.conftest import make_document


def _broken_document() -> Document:
    return Document(doc_id="broken", text="abc", tokens=(Token("zzz", 0, 3),))


@pytest.mark.unit
def test_counts_every_occurrence():
    collector = WordNgramExtractor(min_n=1, max_n=1, lowercase=True).create_collector()
    collector.process(make_document("The cat and the dog"))
    collector.process(make_document("the end", doc_id="d2"))

    assert collector.store.count("the") == 3
    assert collector.store.count("cat") == 1
    assert collector.n_documents == 2


@pytest.mark.unit
def test_membership_after_processing():
    extractor = WordNgramExtractor(min_n=1, max_n=2)
    collector = FrequencyCollector(extractor)
    doc = make_document("good movie")
    collector.process(doc)
    for key in extractor.extract_keys(doc):
        assert key in collector.store


@pytest.mark.unit
def test_rejects_sources_without_keys():
    with pytest.raises(TypeError):
        FrequencyCollector(NrOfCharsExtractor())


@pytest.mark.unit
def test_malformed_document_is_skipped_with_warning():
    collector = WordNgramExtractor(min_n=1, max_n=1).create_collector()
    collector.process(make_document("kept words"))

    with catch_warnings() as caught:
        committed = collector.process(_broken_document())

    assert committed is False
    assert collector.n_skipped == 1
    assert len(caught.of_category(SkippedDocumentWarning)) == 1
    assert caught.match("broken")
    # Earlier counts untouched, nothing partial added
    assert collector.store.as_dict() == {"kept": 1, "words": 1}


@pytest.mark.unit
def test_error_modes():
    raising = WordNgramExtractor().create_collector(error_mode=ErrorMode.RAISE)
    with pytest.raises(DocumentAnnotationError):
        raising.process(_broken_document())

    silent = WordNgramExtractor().create_collector(error_mode="ignore")
    with catch_warnings() as caught:
        silent.process(_broken_document())
    assert len(caught) == 0
    assert silent.n_skipped == 1


@pytest.mark.unit
def test_save_defaults_to_source_path(tmp_path):
    extractor = WordNgramExtractor(tmp_path / "ngram.json", min_n=1, max_n=1)
    collector = extractor.create_collector()
    collector.process(make_document("a b a"))
    written = collector.save()

    assert written == tmp_path / "ngram.json"
    assert VocabularyStore.load(written).as_dict() == {"a": 2, "b": 1}


@pytest.mark.unit
def test_save_without_path_raises():
    collector = WordNgramExtractor().create_collector()
    with pytest.raises(ConfigurationError):
        collector.save()


@pytest.mark.unit
def test_collect_vocabularies_writes_one_file_per_extractor(tmp_path):
    ngram = WordNgramExtractor(tmp_path / "ngram.json", min_n=1, max_n=1)
    dep = DependencyExtractor(tmp_path / "dep.json")
    docs = [
        make_document("Dog ran", dependencies=[(1, "nsubj", 0)]),
        make_document("dog ran", doc_id="d2", dependencies=[(1, "nsubj", 0)]),
    ]

    collectors = collect_vocabularies(docs, [ngram, dep, NrOfCharsExtractor()])

    assert set(collectors) == {"ngram", "dep"}
    assert VocabularyStore.load(tmp_path / "ngram.json").as_dict() == {"dog": 2, "ran": 2}
    assert VocabularyStore.load(tmp_path / "dep.json").as_dict() == {"ran-nsubj-dog": 2}


@pytest.mark.unit
def test_collect_vocabularies_requires_a_vocabulary_extractor():
    with pytest.raises(ConfigurationError):
        collect_vocabularies([], [NrOfCharsExtractor()])
