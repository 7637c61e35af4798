"""Unit tests for modulartc.core.data.document module."""

import pytest

from modulartc.core.data.document import Dependency, Document, Span, TextUnit, Token
from modulartc.utils.errors.exceptions import DocumentAnnotationError
from tests.conftest import make_document


@pytest.mark.unit
def test_lists_and_strings_are_coerced_to_tuples():
    doc = Document(doc_id="x", text="hi", tokens=[Token("hi", 0, 2)], outcomes="pos")
    assert doc.tokens == (Token("hi", 0, 2),)
    assert doc.outcomes == ("pos",)
    assert TextUnit(0, 2, "neg").outcomes == ("neg",)


@pytest.mark.unit
def test_valid_document_passes_validation():
    doc = make_document("Dog ran", dependencies=[(1, "nsubj", 0)], sentences=["Dog ran"])
    doc.validate()


@pytest.mark.unit
def test_token_offsets_outside_text_are_rejected():
    doc = Document(doc_id="bad", text="abc", tokens=(Token("abcd", 0, 4),))
    with pytest.raises(DocumentAnnotationError, match="Document 'bad'"):
        doc.validate()


@pytest.mark.unit
def test_token_text_mismatch_is_rejected():
    doc = Document(doc_id="bad", text="abc", tokens=(Token("xy", 0, 2),))
    with pytest.raises(DocumentAnnotationError, match="does not match"):
        doc.validate()


@pytest.mark.unit
def test_dependency_on_foreign_token_is_rejected():
    doc = make_document("a b")
    foreign = Token("z", 5, 6)
    broken = Document(
        doc_id=doc.doc_id,
        text=doc.text,
        tokens=doc.tokens,
        dependencies=(Dependency(doc.tokens[0], foreign, "dep"),),
    )
    with pytest.raises(DocumentAnnotationError, match="outside the document"):
        broken.validate()


@pytest.mark.unit
def test_dependency_without_relation_is_rejected():
    doc = make_document("a b", dependencies=[(0, "", 1)])
    with pytest.raises(DocumentAnnotationError, match="without relation"):
        doc.validate()


@pytest.mark.unit
def test_span_outside_text_is_rejected():
    doc = Document(doc_id="bad", text="abc", sentences=(Span(0, 10),))
    with pytest.raises(DocumentAnnotationError, match="outside the text"):
        doc.validate()


@pytest.mark.unit
def test_select_restricts_tokens_and_dependencies():
    doc = make_document(
        "Dog ran . Cat sat .",
        sentences=["Dog ran .", "Cat sat ."],
        dependencies=[(1, "nsubj", 0), (4, "nsubj", 3)],
    )
    second = doc.sentences[1]
    view = doc.select(second.begin, second.end, outcomes=("neg",))

    assert [t.text for t in view.tokens] == ["Cat", "sat", "."]
    assert len(view.dependencies) == 1
    assert view.view_text == "Cat sat ."
    assert view.outcomes == ("neg",)
    assert view.covered_text(view.tokens[0].begin, view.tokens[0].end) == "Cat"


@pytest.mark.unit
def test_units_in_returns_document_order():
    units = (TextUnit(6, 9, "b"), TextUnit(0, 3, "a"), TextUnit(12, 15, "c"))
    doc = Document(doc_id="d", text="aaa . bbb . ccc", units=units)
    assert [u.outcomes for u in doc.units_in(Span(0, 10))] == [("a",), ("b",)]
