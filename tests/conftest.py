"""Shared fixtures and utilities for unit tests."""

import re
from collections.abc import Sequence

import pytest

from modulartc.core.data.document import Dependency, Document, Span, TextUnit, Token
from modulartc.core.vocabulary.vocabulary_store import VocabularyStore
from modulartc.extractors import WordNgramExtractor


def whitespace_tokens(text: str) -> tuple[Token, ...]:
    """Tokenize `text` on whitespace, keeping character offsets."""
    return tuple(Token(m.group(), m.start(), m.end()) for m in re.finditer(r"\S+", text))


def make_document(
    text: str,
    *,
    doc_id: str = "d1",
    outcomes: Sequence[str] = ("pos",),
    sentences: Sequence[str] | None = None,
    sentence_outcomes: Sequence[str] | None = None,
    dependencies: Sequence[tuple[int, str, int]] = (),
) -> Document:
    """
    Build an annotated document.

    Args:
        text (str): Document text, tokenized on whitespace.
        doc_id (str): Document id.
        outcomes (Sequence[str]): Document-level outcomes.
        sentences (Sequence[str] | None): Sentence strings occurring in `text`,
            in order. Each is annotated as a sentence.
        sentence_outcomes (Sequence[str] | None): If given, every sentence is
            also annotated as a unit carrying the corresponding outcome.
        dependencies (Sequence[tuple[int, str, int]]): Edges given as
            ``(governor token index, relation, dependent token index)``.

    """
    tokens = whitespace_tokens(text)
    spans: list[Span] = []
    cursor = 0
    for s in sentences or ():
        begin = text.index(s, cursor)
        spans.append(Span(begin, begin + len(s)))
        cursor = begin + len(s)

    units = ()
    if sentence_outcomes is not None:
        units = tuple(TextUnit(s.begin, s.end, (o,)) for s, o in zip(spans, sentence_outcomes, strict=True))

    deps = tuple(Dependency(tokens[g], tokens[d], rel) for g, rel, d in dependencies)
    return Document(
        doc_id=doc_id,
        text=text,
        tokens=tokens,
        dependencies=deps,
        sentences=tuple(spans),
        units=units,
        outcomes=tuple(outcomes),
    )


# ---------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------
@pytest.fixture
def good_bad_corpus() -> list[Document]:
    """Two single-sentence documents with opposite labels."""
    return [
        make_document("the movie is good", doc_id="1", outcomes=["pos"]),
        make_document("a movie is bad", doc_id="2", outcomes=["neg"]),
    ]


@pytest.fixture
def unigram_vocabulary(tmp_path) -> VocabularyStore:
    """Vocabulary file where 'movie' and 'is' tie with count 2."""
    store = VocabularyStore({"movie": 2, "is": 2, "the": 1, "good": 1, "a": 1, "bad": 1})
    store.save(tmp_path / "vocab" / "ngram.json")
    return store


@pytest.fixture
def unigram_extractor(tmp_path, unigram_vocabulary) -> WordNgramExtractor:
    """Unigram extractor reading the `unigram_vocabulary` file (top 500)."""
    return WordNgramExtractor(tmp_path / "vocab" / "ngram.json", min_n=1, max_n=1)
