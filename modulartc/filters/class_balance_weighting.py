"""Instance weighting inversely proportional to outcome frequency."""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING

from modulartc.core.filtering.base_filter import FeatureFilter, FilterApplicability
from modulartc.utils.logging import get_logger

if TYPE_CHECKING:
    from modulartc.core.data.feature_store import FeatureStore
    from modulartc.core.data.instance import Instance

logger = get_logger("filtering")


class ClassBalanceWeighting(FeatureFilter):
    """
    Sets each instance's weight to ``n_instances / (n_classes * count(outcome))``.

    The class of an instance is its tuple of outcomes, so multi-label
    instances with the same label set share a class. Only applied to
    training runs.
    """

    filter_type = "class_balance_weighting"
    applicability = FilterApplicability.TRAIN

    def apply(self, store: FeatureStore) -> None:
        counts: Counter[tuple[str, ...]] = Counter(inst.outcomes for inst in store.iter_instances())
        if not counts:
            return
        n_instances = sum(counts.values())
        n_classes = len(counts)

        def _weigh(inst: Instance) -> Instance:
            return inst.with_weight(n_instances / (n_classes * counts[inst.outcomes]))

        store.rewrite(_weigh)
        logger.debug(f"Weighted {n_instances} instances over {n_classes} classes.")
