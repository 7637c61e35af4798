"""Configuration surface of one extraction run."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from modulartc.core.data.schema_constants import (
    FILENAME_EXTRACTION_CONFIG,
    FeatureEncoding,
    FeatureMode,
    LearningMode,
    RunMode,
)
from modulartc.utils.errors.exceptions import ConfigurationError, FeatureStoreWriteError

if TYPE_CHECKING:
    from modulartc.core.extraction.feature_extractor import FeatureExtractor
    from modulartc.core.filtering.base_filter import FeatureFilter


@dataclass
class ExtractionConfig:
    """
    Everything a StreamingExtractionConnector needs to run.

    Attributes:
        output_dir (Path): Directory receiving the FeatureStore and name files.
        extractors (list): Extractor instances, ``{"type": ...}`` dicts or tags.
        add_instance_id (bool): Attach an identifier to every instance.
        filters (list): Filter instances, dicts or tags, in application order.
        learning_mode (LearningMode): Outcome interpretation.
        feature_mode (FeatureMode): Instances per document.
        use_sparse_features (bool): Sparse instead of dense encoding.
        is_testing (bool): Testing run (reconcile against training names).
        train_feature_names_path (Path | None): Training feature-name file,
            required for testing runs.
        show_progress (bool): Display a progress bar over the documents.

    """

    output_dir: Path
    extractors: list[FeatureExtractor | dict[str, Any] | str] = field(default_factory=list)
    add_instance_id: bool = True
    filters: list[FeatureFilter | dict[str, Any] | str] = field(default_factory=list)
    learning_mode: LearningMode = LearningMode.SINGLE_LABEL
    feature_mode: FeatureMode = FeatureMode.DOCUMENT
    use_sparse_features: bool = False
    is_testing: bool = False
    train_feature_names_path: Path | None = None
    show_progress: bool = False

    def __post_init__(self):
        self.output_dir = Path(self.output_dir)
        try:
            self.learning_mode = LearningMode(self.learning_mode)
            self.feature_mode = FeatureMode(self.feature_mode)
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc
        if self.train_feature_names_path is not None:
            self.train_feature_names_path = Path(self.train_feature_names_path)
        if self.is_testing and self.train_feature_names_path is None:
            msg = "A testing run requires `train_feature_names_path`."
            raise ConfigurationError(msg)
        self.extractors = list(self.extractors)
        self.filters = list(self.filters)

    @property
    def encoding(self) -> FeatureEncoding:
        return FeatureEncoding.SPARSE if self.use_sparse_features else FeatureEncoding.DENSE

    @property
    def run_mode(self) -> RunMode:
        return RunMode.TEST if self.is_testing else RunMode.TRAIN

    # ================================================
    # Configurable
    # ================================================
    def get_config(self) -> dict[str, Any]:
        from modulartc.extractors import build_extractor
        from modulartc.filters import build_filter

        return {
            "output_dir": str(self.output_dir),
            "extractors": [build_extractor(e).get_config() for e in self.extractors],
            "add_instance_id": self.add_instance_id,
            "filters": [build_filter(f).get_config() for f in self.filters],
            "learning_mode": self.learning_mode.value,
            "feature_mode": self.feature_mode.value,
            "use_sparse_features": self.use_sparse_features,
            "is_testing": self.is_testing,
            "train_feature_names_path": (
                None if self.train_feature_names_path is None else str(self.train_feature_names_path)
            ),
            "show_progress": self.show_progress,
        }

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> ExtractionConfig:
        try:
            return cls(**config)
        except TypeError as exc:
            msg = f"Invalid extraction config: {exc}"
            raise ConfigurationError(msg) from exc

    # ================================================
    # Persistence
    # ================================================
    def save(self, path: str | Path | None = None) -> Path:
        """
        Write this configuration as JSON.

        Args:
            path (str | Path, optional): File or directory. Defaults to
                ``<output_dir>/extraction_config.json``.

        Returns:
            Path: Written file.

        """
        path = self.output_dir if path is None else Path(path)
        if path.is_dir() or path.suffix != ".json":
            path = path / FILENAME_EXTRACTION_CONFIG
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("w", encoding="utf-8") as f:
                json.dump(self.get_config(), f, indent=2, sort_keys=True)
        except OSError as exc:
            raise FeatureStoreWriteError(path, str(exc)) from exc
        return path

    @classmethod
    def load(cls, path: str | Path, **overrides: Any) -> ExtractionConfig:
        """
        Read a configuration written by :meth:`save`.

        Keyword overrides replace stored values, e.g. to reuse a training
        setup for a testing run::

            ExtractionConfig.load(train_dir, output_dir=test_dir, is_testing=True,
                                  train_feature_names_path=train_dir / "feature_names.txt")

        Raises:
            ConfigurationError: If the file is missing or not valid JSON.

        """
        path = Path(path)
        if path.is_dir():
            path = path / FILENAME_EXTRACTION_CONFIG
        if not path.exists():
            msg = f"No extraction config found at '{path}'."
            raise ConfigurationError(msg)
        try:
            with path.open(encoding="utf-8") as f:
                config = json.load(f)
        except json.JSONDecodeError as exc:
            msg = f"Extraction config '{path}' is not valid JSON: {exc}"
            raise ConfigurationError(msg) from exc
        config.update(overrides)
        return cls.from_config(config)
