"""Abstract base class for post-extraction feature-store filters."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar

from modulartc.core.data.schema_constants import RunMode
from modulartc.core.io.protocols import Configurable
from modulartc.utils.errors.exceptions import ConfigurationError

if TYPE_CHECKING:
    from modulartc.core.data.feature_store import FeatureStore


class FilterApplicability(str, Enum):
    """Which runs a filter takes part in."""

    TRAIN = "train"
    TEST = "test"
    BOTH = "both"


class FeatureFilter(Configurable, ABC):
    """
    Rewrites a completed instance file in place.

    Description:
        Filters run after the last document was written and before the
        feature-name file and the feature table are produced. They must
        stream: read instances from the store and write a replacement via
        :meth:`FeatureStore.rewrite`.

        Subclasses set :attr:`filter_type` (the registry tag) and
        :attr:`applicability`.

    """

    filter_type: ClassVar[str]
    applicability: ClassVar[FilterApplicability] = FilterApplicability.BOTH

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"

    def applies_to(self, run_mode: RunMode | str) -> bool:
        """Return True if this filter runs during `run_mode`."""
        run_mode = RunMode(run_mode)
        if self.applicability is FilterApplicability.BOTH:
            return True
        return self.applicability.value == run_mode.value

    @abstractmethod
    def apply(self, store: FeatureStore) -> None:
        """
        Filter the instances of `store`.

        Args:
            store (FeatureStore): Store whose instance file is rewritten.

        """

    # ================================================
    # Configurable
    # ================================================
    def get_config(self) -> dict[str, Any]:
        return {"type": self.filter_type}

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> FeatureFilter:
        cfg = dict(config)
        tag = cfg.pop("type", cls.filter_type)
        if tag.lower() != cls.filter_type.lower():
            msg = f"Config of type '{tag}' cannot build a {cls.__name__}."
            raise ConfigurationError(msg)
        try:
            return cls(**cfg)
        except TypeError as exc:
            msg = f"Invalid parameters for filter '{tag}': {exc}"
            raise ConfigurationError(msg) from exc
