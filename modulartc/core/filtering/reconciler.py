"""Alignment of a testing run's feature space with the training run's."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from modulartc.core.data.instance import Feature
from modulartc.core.data.schema_constants import DEFAULT_FEATURE_VALUE, FILENAME_FEATURES, FeatureEncoding
from modulartc.core.filtering.base_filter import FeatureFilter, FilterApplicability
from modulartc.utils.errors.exceptions import (
    ConfigurationError,
    FeatureSpaceMismatchWarning,
    FeatureStoreWriteError,
)
from modulartc.utils.logging import get_logger, warn

if TYPE_CHECKING:
    from collections.abc import Iterable

    from modulartc.core.data.feature_store import FeatureStore
    from modulartc.core.data.instance import Instance

logger = get_logger("reconciler")


class ReconcilerState(str, Enum):
    COLLECTING = "collecting"
    PERSISTED = "persisted"
    RECONCILED = "reconciled"


class FeatureSpaceReconciler(FeatureFilter):
    """
    Persists the training feature space and projects test stores onto it.

    Description:
        A training run ends with :meth:`persist`, which writes the sorted
        feature names to ``feature_names.txt``. A testing run ends with
        :meth:`reconcile`, which compares the names seen in the test store
        with the persisted training names (as sets):

        - Equal sets leave the store untouched.
        - Otherwise, features that only occur in the test data are removed
          from every instance. Training features that never occurred in the
          test data are reported. In dense encoding every instance is
          projected onto the sorted training names, padding absent features
          with 0; in sparse encoding absent features stay absent.

        Reconciling an already reconciled store changes nothing.

        Registered as the test-only ``adapt_test_to_training`` filter.

    Attributes:
        train_feature_names_path (Path | None): Training name file used by
            :meth:`apply`.
        state (ReconcilerState): Lifecycle state.

    """

    filter_type = "adapt_test_to_training"
    applicability = FilterApplicability.TEST

    def __init__(self, train_feature_names_path: str | Path | None = None):
        self.train_feature_names_path = (
            None if train_feature_names_path is None else Path(train_feature_names_path)
        )
        self.state = ReconcilerState.COLLECTING

    def __repr__(self) -> str:
        return f"FeatureSpaceReconciler(state={self.state.value})"

    # ================================================
    # Feature-name files
    # ================================================
    def persist(self, feature_names: Iterable[str], path: str | Path) -> Path:
        """
        Write the training feature space, sorted, one name per line.

        Args:
            feature_names (Iterable[str]): Names collected during training.
            path (str | Path): Destination file or directory.

        Returns:
            Path: Written file.

        """
        path = Path(path)
        if path.is_dir():
            path = path / FILENAME_FEATURES
        names = sorted(set(feature_names))
        tmp = path.with_name(path.name + ".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text("".join(f"{n}\n" for n in names), encoding="utf-8")
            tmp.replace(path)
        except (OSError, ValueError) as exc:
            tmp.unlink(missing_ok=True)
            raise FeatureStoreWriteError(path, str(exc)) from exc
        self.state = ReconcilerState.PERSISTED
        logger.info(f"Persisted {len(names)} training feature names to '{path}'.")
        return path

    @staticmethod
    def read_feature_names(path: str | Path) -> list[str]:
        """
        Read a feature-name file written by :meth:`persist`.

        Raises:
            ConfigurationError: If the file does not exist.

        """
        path = Path(path)
        if path.is_dir():
            path = path / FILENAME_FEATURES
        if not path.exists():
            msg = f"Training feature-name file not found: '{path}'."
            raise ConfigurationError(msg)
        with path.open(encoding="utf-8") as f:
            return [line.rstrip("\n") for line in f if line.strip()]

    # ================================================
    # Reconciliation
    # ================================================
    def reconcile(
        self,
        store: FeatureStore,
        train_names_path: str | Path,
        test_feature_names: Iterable[str] | None = None,
    ) -> bool:
        """
        Align `store` with the persisted training feature space.

        Args:
            store (FeatureStore): Test store, rewritten in place if needed.
            train_names_path (str | Path): Training feature-name file.
            test_feature_names (Iterable[str], optional): Names seen during
                the test run. Collected from the store if omitted.

        Returns:
            bool: True if the store was rewritten, False on the equal-sets path.

        """
        train_names = sorted(set(self.read_feature_names(train_names_path)))
        test_names = set(store.feature_names() if test_feature_names is None else test_feature_names)
        train_set = set(train_names)

        if test_names == train_set:
            self.state = ReconcilerState.RECONCILED
            logger.debug("Test feature space equals the training feature space.")
            return False

        extra = test_names - train_set
        missing = train_set - test_names
        if missing:
            warn(
                f"{len(missing)} training features never occurred in the test data.",
                category=FeatureSpaceMismatchWarning,
                hints=(
                    "Dense stores pad them with 0."
                    if store.encoding is FeatureEncoding.DENSE
                    else "Sparse stores leave them absent."
                ),
            )
        if extra:
            logger.info(f"Dropping {len(extra)} features unseen during training.")

        if store.encoding is FeatureEncoding.DENSE:

            def _project(inst: Instance) -> Instance:
                values = inst.feature_dict()
                return inst.with_features(
                    Feature(n, values.get(n, DEFAULT_FEATURE_VALUE)) for n in train_names
                )

            store.rewrite(_project)
        else:

            def _drop_extra(inst: Instance) -> Instance:
                return inst.with_features(f for f in inst.features if f.name in train_set)

            store.rewrite(_drop_extra)

        self.state = ReconcilerState.RECONCILED
        return True

    def apply(self, store: FeatureStore) -> None:
        if self.train_feature_names_path is None:
            msg = "adapt_test_to_training requires `train_feature_names_path`."
            raise ConfigurationError(msg)
        self.reconcile(store, self.train_feature_names_path)

    def get_config(self) -> dict[str, Any]:
        cfg = super().get_config()
        cfg["train_feature_names_path"] = (
            None if self.train_feature_names_path is None else str(self.train_feature_names_path)
        )
        return cfg
