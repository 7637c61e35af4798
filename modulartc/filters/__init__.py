"""Built-in feature-store filter registrations."""

from __future__ import annotations

from typing import Any

from modulartc.core.filtering.base_filter import FeatureFilter
from modulartc.core.filtering.reconciler import FeatureSpaceReconciler
from modulartc.utils.errors.exceptions import ConfigurationError
from modulartc.utils.registries import CaseInsensitiveRegistry

from .class_balance_weighting import ClassBalanceWeighting
from .l2_normalize import L2Normalize, l2_normalize_instance

__all__ = [
    "ClassBalanceWeighting",
    "FeatureSpaceReconciler",
    "L2Normalize",
    "build_filter",
    "filter_registry",
    "l2_normalize_instance",
]

# Create registry
filter_registry = CaseInsensitiveRegistry("feature filter")


def filter_naming_fn(x: type[FeatureFilter]) -> str:
    """Return the configuration tag of a filter class."""
    return x.filter_type


# Register modulartc filters
mtc_filters: list[type[FeatureFilter]] = [
    ClassBalanceWeighting,
    L2Normalize,
    FeatureSpaceReconciler,
]
for t in mtc_filters:
    filter_registry.register(filter_naming_fn(t), t)


def build_filter(spec: FeatureFilter | dict[str, Any] | str) -> FeatureFilter:
    """
    Resolve a filter definition to a constructed filter.

    Args:
        spec (FeatureFilter | dict[str, Any] | str):
            A filter instance (returned as-is), a config dict with a
            ``"type"`` tag plus constructor arguments, or a bare tag.

    Returns:
        FeatureFilter: Constructed filter.

    Raises:
        UnknownComponentError: If the tag is not registered.

    """
    if isinstance(spec, FeatureFilter):
        return spec
    if isinstance(spec, str):
        spec = {"type": spec}
    if not isinstance(spec, dict) or "type" not in spec:
        msg = f"Filter definition needs a 'type' entry, got {spec!r}."
        raise ConfigurationError(msg)
    cls = filter_registry.resolve(spec["type"])
    return cls.from_config(spec)
