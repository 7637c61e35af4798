"""Dependency-triple extractor backed by a top-K vocabulary."""

from __future__ import annotations

from typing import TYPE_CHECKING

from modulartc.core.extraction.feature_extractor import VocabularyBackedExtractor
from modulartc.utils.text.ngrams import dependency_key

if TYPE_CHECKING:
    from collections.abc import Iterator

    from modulartc.core.data.document import Document


class DependencyExtractor(VocabularyBackedExtractor):
    """
    One feature per ``governor-relation-dependent`` triple of the vocabulary.

    The governor and dependent sides use the covered text of the respective
    token. With ``lowercase=True`` only those two sides are folded; the
    relation label is used verbatim (``Dog``/``nsubj``/``Ran`` becomes
    ``dog-nsubj-ran``).
    """

    extractor_type = "dependency"
    default_name = "dep"

    def extract_keys(self, document: Document) -> Iterator[str]:
        for dep in document.dependencies:
            yield dependency_key(
                document.covered_text(dep.governor.begin, dep.governor.end),
                dep.relation,
                document.covered_text(dep.dependent.begin, dep.dependent.end),
                lowercase=self.lowercase,
            )
