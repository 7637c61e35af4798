"""Abstract base classes for feature extractors."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar

from modulartc.core.data.instance import Feature
from modulartc.core.data.schema_constants import FEATURE_NAME_SEPARATOR
from modulartc.core.io.protocols import Configurable
from modulartc.core.vocabulary.frequency_collector import FrequencyCollector
from modulartc.core.vocabulary.vocabulary_store import VocabularyStore
from modulartc.utils.errors.exceptions import ConfigurationError, VocabularyError
from modulartc.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable

    from modulartc.core.data.document import Document

logger = get_logger("extraction")


class FeatureExtractor(Configurable, ABC):
    """
    Turns a (view of a) document into a list of named features.

    Description:
        Extractors are constructed with their full configuration and
        prepared once per run via :meth:`initialize`. Every feature an
        extractor emits is name-spaced by its :attr:`name`, which must be
        unique among the extractors of one run.

        Subclasses set :attr:`extractor_type` (the registry tag) and
        :attr:`default_name`.

    Attributes:
        name (str): Feature-name prefix, unique per run.

    """

    extractor_type: ClassVar[str]
    default_name: ClassVar[str]

    def __init__(self, name: str | None = None):
        name = self.default_name if name is None else str(name)
        if not name:
            msg = f"{type(self).__name__} requires a non-empty name."
            raise ConfigurationError(msg)
        self.name = name

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"

    def initialize(self) -> None:  # noqa: B027
        """Prepare run-scoped resources. The default does nothing."""

    def feature_name(self, key: str) -> str:
        """Return the name-spaced feature name for `key`."""
        return f"{self.name}{FEATURE_NAME_SEPARATOR}{key}"

    @abstractmethod
    def extract(self, document: Document) -> list[Feature]:
        """
        Compute the features of `document`.

        Args:
            document (Document): Document or document view (unit mode).

        Returns:
            list[Feature]: Features in a deterministic order.

        """

    # ================================================
    # Configurable
    # ================================================
    def get_config(self) -> dict[str, Any]:
        return {"type": self.extractor_type, "name": self.name}

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> FeatureExtractor:
        cfg = dict(config)
        tag = cfg.pop("type", cls.extractor_type)
        if tag.lower() != cls.extractor_type.lower():
            msg = f"Config of type '{tag}' cannot build a {cls.__name__}."
            raise ConfigurationError(msg)
        try:
            return cls(**cfg)
        except TypeError as exc:
            msg = f"Invalid parameters for extractor '{tag}': {exc}"
            raise ConfigurationError(msg) from exc


class VocabularyBackedExtractor(FeatureExtractor):
    """
    Extractor whose feature space is a top-K vocabulary built in a prior pass.

    Description:
        :meth:`extract_keys` is the single definition of how a document is
        turned into vocabulary keys. The counting pass
        (:class:`FrequencyCollector`, see :meth:`create_collector`) and the
        extraction pass (:meth:`extract`) both call it, so case folding and
        key formatting are identical in both passes.

        :meth:`initialize` loads the vocabulary file and truncates it to
        :attr:`top_k`. :meth:`extract` then emits one feature per vocabulary
        entry, in rank order, with value 1 if the key occurs in the document
        and 0 otherwise.

    Attributes:
        vocabulary_path (Path | None): Vocabulary file written by pass 1.
        top_k (int): Vocabulary size used for extraction.
        lowercase (bool): Case-folding flag shared by both passes.

    """

    def __init__(
        self,
        vocabulary_path: str | Path | None = None,
        top_k: int = 500,
        *,
        lowercase: bool = True,
        name: str | None = None,
    ):
        super().__init__(name=name)
        if top_k < 1:
            msg = f"top_k must be positive, got {top_k}."
            raise ConfigurationError(msg)
        self.vocabulary_path = None if vocabulary_path is None else Path(vocabulary_path)
        self.top_k = int(top_k)
        self.lowercase = bool(lowercase)
        self._vocabulary: VocabularyStore | None = None

    @abstractmethod
    def extract_keys(self, document: Document) -> Iterable[str]:
        """Yield one vocabulary key per occurrence in `document`."""

    # ================================================
    # Vocabulary handling
    # ================================================
    def initialize(self) -> None:
        """
        Load the vocabulary file and truncate it to ``top_k``.

        Raises:
            ConfigurationError: If no path is configured or the file is unusable.

        """
        if self.vocabulary_path is None:
            if self._vocabulary is not None:
                return
            msg = f"Extractor '{self.name}' has no vocabulary_path configured."
            raise ConfigurationError(msg)
        try:
            store = VocabularyStore.load(self.vocabulary_path)
        except VocabularyError as exc:
            msg = f"Extractor '{self.name}' cannot load its vocabulary: {exc}"
            raise ConfigurationError(msg) from exc
        self.set_vocabulary(store)
        logger.debug(f"[{self.name}] using {len(self._vocabulary)} of {len(store)} keys.")

    def set_vocabulary(self, store: VocabularyStore) -> None:
        """Use `store` (truncated to ``top_k``) as the extraction vocabulary."""
        self._vocabulary = store.top_k(self.top_k)
        self._vocabulary_keys = self._vocabulary.keys()

    @property
    def vocabulary(self) -> VocabularyStore:
        if self._vocabulary is None:
            msg = f"Extractor '{self.name}' was not initialized."
            raise ConfigurationError(msg)
        return self._vocabulary

    def create_collector(self, **kwargs) -> FrequencyCollector:
        """Return a :class:`FrequencyCollector` counting this extractor's keys."""
        return FrequencyCollector(self, **kwargs)

    # ================================================
    # Extraction
    # ================================================
    def extract(self, document: Document) -> list[Feature]:
        # Raises if the extractor was never initialized
        self.vocabulary  # noqa: B018
        present = set(self.extract_keys(document))
        return [
            Feature(self.feature_name(key), 1 if key in present else 0)
            for key in self._vocabulary_keys
        ]

    # ================================================
    # Configurable
    # ================================================
    def get_config(self) -> dict[str, Any]:
        cfg = super().get_config()
        cfg.update(
            {
                "vocabulary_path": None if self.vocabulary_path is None else str(self.vocabulary_path),
                "top_k": self.top_k,
                "lowercase": self.lowercase,
            },
        )
        return cfg
