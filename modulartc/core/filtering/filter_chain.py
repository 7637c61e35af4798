"""Ordered application of feature-store filters."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from modulartc.core.data.schema_constants import RunMode
from modulartc.core.filtering.base_filter import FeatureFilter
from modulartc.utils.errors.exceptions import AbortedRunError, ConfigurationError
from modulartc.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable

    from modulartc.core.data.feature_store import FeatureStore

logger = get_logger("filtering")


class FilterChain:
    """
    Ordered list of filters applied to a completed FeatureStore.

    Filters run in configuration order. Each one runs only if its
    applicability matches the current run mode.
    """

    def __init__(self, filters: Iterable[FeatureFilter] = ()):
        self.filters: list[FeatureFilter] = list(filters)
        for f in self.filters:
            if not isinstance(f, FeatureFilter):
                msg = f"FilterChain expects FeatureFilter instances, got {type(f).__name__}."
                raise ConfigurationError(msg)

    def __len__(self) -> int:
        return len(self.filters)

    def __repr__(self) -> str:
        return f"FilterChain({[f.filter_type for f in self.filters]})"

    @classmethod
    def from_config(cls, specs: Iterable[str | dict[str, Any] | FeatureFilter]) -> FilterChain:
        """
        Build a chain from filter tags or config dicts.

        Every tag is resolved immediately, so an unknown filter fails when
        the run is configured rather than after all documents were processed.

        Raises:
            UnknownComponentError: If a tag is not registered.

        """
        from modulartc.filters import build_filter

        return cls([build_filter(s) for s in specs])

    def get_config(self) -> list[dict[str, Any]]:
        return [f.get_config() for f in self.filters]

    def apply(self, store: FeatureStore, run_mode: RunMode | str) -> bool:
        """
        Run every filter applicable to `run_mode` on `store`, in order.

        Args:
            store (FeatureStore): Store whose instance file is rewritten.
            run_mode (RunMode | str): Current run mode.

        Returns:
            bool: True if at least one filter ran.

        Raises:
            AbortedRunError: If a filter fails. The filter's exception is
                attached as the cause.

        """
        run_mode = RunMode(run_mode)
        applied = False
        for f in self.filters:
            if not f.applies_to(run_mode):
                logger.debug(f"Skipping filter '{f.filter_type}' in {run_mode.value} run.")
                continue
            try:
                f.apply(store)
            except Exception as exc:
                msg = f"Filter '{f.filter_type}' failed: {exc}"
                raise AbortedRunError("filter", msg) from exc
            logger.info(f"Applied filter '{f.filter_type}'.")
            applied = True
        return applied
