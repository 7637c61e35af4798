"""First-pass visitors that count vocabulary keys over a document stream."""

from __future__ import annotations

from collections import Counter
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from modulartc.core.vocabulary.vocabulary_store import VocabularyStore
from modulartc.utils.errors.error_handling import ErrorMode
from modulartc.utils.errors.exceptions import (
    ConfigurationError,
    DocumentAnnotationError,
    SkippedDocumentWarning,
)
from modulartc.utils.logging import get_logger, warn
from modulartc.utils.progress_bars import ProgressTask

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from modulartc.core.data.document import Document

logger = get_logger("vocabulary")


@runtime_checkable
class KeySource(Protocol):
    """Anything that turns a document into vocabulary keys (see VocabularyBackedExtractor)."""

    name: str
    vocabulary_path: Path | None

    def extract_keys(self, document: Document) -> Iterable[str]: ...


class FrequencyCollector:
    """
    Counts the keys one extractor configuration produces over a corpus.

    Description:
        The collector asks its key source for the keys of each document and
        adds them to a :class:`VocabularyStore`. Counting is
        accumulate-then-commit: a document's keys are gathered in a local
        counter and merged into the store only once the whole document was
        processed, so a failing document never leaves partial counts behind
        and processing can resume with the next document.

        Because the key source is the extractor itself, the keys counted here
        are byte-identical to the keys looked up during extraction (including
        case folding).

    Attributes:
        source (KeySource): Extractor providing keys and the vocabulary path.
        store (VocabularyStore): Store owned by this collector.
        error_mode (ErrorMode): Policy for malformed documents.
        n_documents (int): Committed documents.
        n_skipped (int): Skipped documents.

    """

    def __init__(
        self,
        source: KeySource,
        *,
        store: VocabularyStore | None = None,
        error_mode: ErrorMode | str = ErrorMode.WARN,
    ):
        if not isinstance(source, KeySource):
            msg = f"Expected an object providing `extract_keys`, got {type(source)}."
            raise TypeError(msg)
        self.source = source
        self.store = store if store is not None else VocabularyStore()
        self.error_mode = ErrorMode(error_mode)
        self.n_documents = 0
        self.n_skipped = 0

    def process(self, document: Document) -> bool:
        """
        Count the keys of one document.

        Args:
            document (Document): Annotated input document.

        Returns:
            bool: True if the document's counts were committed, False if it
            was skipped.

        Raises:
            DocumentAnnotationError: Only when ``error_mode`` is RAISE.

        """
        try:
            document.validate()
            local = Counter(self.source.extract_keys(document))
        except DocumentAnnotationError as exc:
            self.n_skipped += 1
            if self.error_mode is ErrorMode.RAISE:
                raise
            if self.error_mode is ErrorMode.WARN:
                warn(
                    f"[{self.source.name}] Skipping document while counting: {exc}",
                    category=SkippedDocumentWarning,
                    hints="Counts of previously processed documents are unaffected.",
                )
            return False

        self.store.merge(local)
        self.n_documents += 1
        return True

    def save(self, path: str | Path | None = None) -> Path:
        """
        Persist the collected counts.

        Args:
            path (str | Path | None, optional): Destination. Defaults to the
                key source's vocabulary path.

        Returns:
            Path: Written vocabulary file.

        Raises:
            ConfigurationError: If no destination is known.
            FeatureStoreWriteError: If writing fails.

        """
        target = path if path is not None else self.source.vocabulary_path
        if target is None:
            msg = f"No vocabulary path configured for extractor '{self.source.name}'."
            raise ConfigurationError(msg)
        written = self.store.save(target)
        logger.info(
            f"Collected {len(self.store)} keys from {self.n_documents} documents "
            f"({self.n_skipped} skipped) -> {written}",
            extra={"title_desc": self.source.name},
        )
        return written


def collect_vocabularies(
    documents: Iterable[Document],
    sources: Sequence[KeySource],
    *,
    error_mode: ErrorMode | str = ErrorMode.WARN,
    show_progress: bool = False,
    save: bool = True,
) -> dict[str, FrequencyCollector]:
    """
    Run the counting pass for several extractors over one document stream.

    Every source gets its own collector and its own vocabulary file. Sources
    that are not vocabulary-backed (no ``extract_keys``) are ignored.

    Args:
        documents (Iterable[Document]): Corpus stream, consumed once.
        sources (Sequence[KeySource]): Configured extractors.
        error_mode (ErrorMode | str, optional): Per-document error policy.
        show_progress (bool, optional): Display a progress bar.
        save (bool, optional): Save every store at the end. Defaults to True.

    Returns:
        dict[str, FrequencyCollector]: Collectors keyed by extractor name.

    """
    collectors = {
        s.name: FrequencyCollector(s, error_mode=error_mode)
        for s in sources
        if isinstance(s, KeySource)
    }
    if not collectors:
        msg = "None of the configured extractors uses a vocabulary."
        raise ConfigurationError(msg)

    task = ProgressTask(description="Counting vocabulary", enabled=show_progress)
    with task:
        for doc in documents:
            for collector in collectors.values():
                collector.process(doc)
            task.tick()

    if save:
        for collector in collectors.values():
            collector.save()
    return collectors
