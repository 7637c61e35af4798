"""Simple length features that need no vocabulary."""

from __future__ import annotations

from typing import TYPE_CHECKING

from modulartc.core.data.instance import Feature
from modulartc.core.extraction.feature_extractor import FeatureExtractor

if TYPE_CHECKING:
    from modulartc.core.data.document import Document


class NrOfCharsExtractor(FeatureExtractor):
    """Number of characters covered by the document (or unit)."""

    extractor_type = "nr_of_chars"
    default_name = "nr_of_chars"

    def extract(self, document: Document) -> list[Feature]:
        return [Feature(self.name, len(document.view_text))]


class NrOfTokensExtractor(FeatureExtractor):
    """Number of tokens in the document (or unit)."""

    extractor_type = "nr_of_tokens"
    default_name = "nr_of_tokens"

    def extract(self, document: Document) -> list[Feature]:
        return [Feature(self.name, len(document.tokens))]
