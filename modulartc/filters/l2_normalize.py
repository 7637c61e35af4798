"""Per-instance L2 normalization of numeric feature values."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
from sklearn.preprocessing import normalize

from modulartc.core.data.instance import Feature
from modulartc.core.filtering.base_filter import FeatureFilter, FilterApplicability

if TYPE_CHECKING:
    from modulartc.core.data.feature_store import FeatureStore
    from modulartc.core.data.instance import Instance


def l2_normalize_instance(instance: Instance) -> Instance:
    """
    Scale the numeric features of `instance` to unit L2 norm.

    String-valued features are kept unchanged. An instance whose numeric
    features are all zero is returned unchanged.

    Args:
        instance (Instance): Instance to normalize.

    Returns:
        Instance: Normalized instance, features in their original order.

    """
    numeric = [i for i, f in enumerate(instance.features) if not isinstance(f.value, str)]
    if not numeric:
        return instance

    X = np.asarray([[float(instance.features[i].value) for i in numeric]], dtype=np.float64)
    scaled = normalize(X, norm="l2", axis=1)[0]

    features = list(instance.features)
    for col, i in enumerate(numeric):
        features[i] = Feature(features[i].name, float(scaled[col]))
    return instance.with_features(features)


class L2Normalize(FeatureFilter):
    """Applies :func:`l2_normalize_instance` to every instance (training and testing)."""

    filter_type = "l2_normalize"
    applicability = FilterApplicability.BOTH

    def apply(self, store: FeatureStore) -> None:
        store.rewrite(l2_normalize_instance)
