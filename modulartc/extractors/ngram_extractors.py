"""Word and character n-gram extractors backed by a top-K vocabulary."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from modulartc.core.extraction.feature_extractor import VocabularyBackedExtractor
from modulartc.utils.errors.exceptions import ConfigurationError
from modulartc.utils.text.ngrams import char_ngrams, char_skip_ngrams, word_ngrams

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from modulartc.core.data.document import Document


class _NgramExtractorBase(VocabularyBackedExtractor):
    """Shared handling of the ``[min_n, max_n]`` bounds."""

    def __init__(
        self,
        vocabulary_path: str | Path | None = None,
        top_k: int = 500,
        *,
        min_n: int = 1,
        max_n: int = 3,
        lowercase: bool = True,
        name: str | None = None,
    ):
        super().__init__(vocabulary_path, top_k, lowercase=lowercase, name=name)
        if min_n < 1 or max_n < min_n:
            msg = f"Invalid n-gram bounds for '{self.name}': min_n={min_n}, max_n={max_n}."
            raise ConfigurationError(msg)
        self.min_n = int(min_n)
        self.max_n = int(max_n)

    def get_config(self) -> dict[str, Any]:
        cfg = super().get_config()
        cfg.update({"min_n": self.min_n, "max_n": self.max_n})
        return cfg


class WordNgramExtractor(_NgramExtractorBase):
    """Token n-grams (tokens joined with ``_``)."""

    extractor_type = "word_ngram"
    default_name = "ngram"

    def extract_keys(self, document: Document) -> Iterator[str]:
        return word_ngrams(
            [t.text for t in document.tokens],
            self.min_n,
            self.max_n,
            lowercase=self.lowercase,
        )


class CharNgramExtractor(_NgramExtractorBase):
    """Contiguous character n-grams of each token, with ``^``/``$`` boundary markers."""

    extractor_type = "char_ngram"
    default_name = "charngram"

    def extract_keys(self, document: Document) -> Iterator[str]:
        return char_ngrams(
            [t.text for t in document.tokens],
            self.min_n,
            self.max_n,
            lowercase=self.lowercase,
        )


class CharSkipNgramExtractor(_NgramExtractorBase):
    """
    Character skip-grams of each token.

    Lengths lie in ``[min_n, max_n]`` and up to ``skip_size`` characters may
    be skipped. Counting and top-K truncation work exactly as for contiguous
    n-grams.
    """

    extractor_type = "char_skip_ngram"
    default_name = "charskipngram"

    def __init__(
        self,
        vocabulary_path: str | Path | None = None,
        top_k: int = 500,
        *,
        min_n: int = 2,
        max_n: int = 3,
        skip_size: int = 2,
        lowercase: bool = True,
        name: str | None = None,
    ):
        super().__init__(
            vocabulary_path,
            top_k,
            min_n=min_n,
            max_n=max_n,
            lowercase=lowercase,
            name=name,
        )
        if skip_size < 0:
            msg = f"skip_size must be non-negative, got {skip_size}."
            raise ConfigurationError(msg)
        self.skip_size = int(skip_size)

    def extract_keys(self, document: Document) -> Iterator[str]:
        return char_skip_ngrams(
            [t.text for t in document.tokens],
            self.min_n,
            self.max_n,
            self.skip_size,
            lowercase=self.lowercase,
        )

    def get_config(self) -> dict[str, Any]:
        cfg = super().get_config()
        cfg["skip_size"] = self.skip_size
        return cfg
