"""Feature and Instance records written to a FeatureStore."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

from modulartc.core.data.schema_constants import (
    DEFAULT_FEATURE_VALUE,
    DOMAIN_FEATURES,
    DOMAIN_INSTANCE_ID,
    DOMAIN_OUTCOMES,
    DOMAIN_POSITION,
    DOMAIN_SEQUENCE_ID,
    DOMAIN_WEIGHT,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

FeatureValue = float | int | str


@dataclass(frozen=True)
class Feature:
    """A named feature value. The name carries the extractor prefix."""

    name: str
    value: FeatureValue

    @property
    def is_default(self) -> bool:
        """True if the value equals the default that sparse encoding omits."""
        return not isinstance(self.value, str) and self.value == DEFAULT_FEATURE_VALUE


@dataclass(frozen=True)
class Instance:
    """
    One labeled feature vector.

    Description:
        Instances are immutable: once built they are written to the
        FeatureStore and never changed in place. Filters derive new
        instances via :meth:`with_features` or :meth:`with_weight`.

    Attributes:
        features (tuple[Feature, ...]): Ordered features.
        outcomes (tuple[str, ...]): One label, or several in multi-label mode.
        instance_id (str | None): Identifier, when instance ids are requested.
        sequence_id (int | None): Index of the sequence (sequence mode only).
        position (int | None): Position within the sequence (sequence mode only).
        weight (float): Instance weight used by weighting filters.

    """

    features: tuple[Feature, ...]
    outcomes: tuple[str, ...]
    instance_id: str | None = None
    sequence_id: int | None = None
    position: int | None = None
    weight: float = 1.0

    def __post_init__(self):
        if not isinstance(self.features, tuple):
            object.__setattr__(self, "features", tuple(self.features))
        if not isinstance(self.outcomes, tuple):
            object.__setattr__(self, "outcomes", tuple(self.outcomes))

    @property
    def feature_names(self) -> list[str]:
        return [f.name for f in self.features]

    def feature_dict(self) -> dict[str, FeatureValue]:
        return {f.name: f.value for f in self.features}

    def with_features(self, features: Iterable[Feature]) -> Instance:
        return replace(self, features=tuple(features))

    def with_weight(self, weight: float) -> Instance:
        return replace(self, weight=float(weight))

    # ================================================
    # Serialization
    # ================================================
    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable representation (features keep their order)."""
        return {
            DOMAIN_FEATURES: [[f.name, f.value] for f in self.features],
            DOMAIN_OUTCOMES: list(self.outcomes),
            DOMAIN_INSTANCE_ID: self.instance_id,
            DOMAIN_SEQUENCE_ID: self.sequence_id,
            DOMAIN_POSITION: self.position,
            DOMAIN_WEIGHT: self.weight,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Instance:
        """Rebuild an Instance from :meth:`to_dict` output."""
        return cls(
            features=tuple(Feature(name, value) for name, value in data[DOMAIN_FEATURES]),
            outcomes=tuple(data[DOMAIN_OUTCOMES]),
            instance_id=data.get(DOMAIN_INSTANCE_ID),
            sequence_id=data.get(DOMAIN_SEQUENCE_ID),
            position=data.get(DOMAIN_POSITION),
            weight=float(data.get(DOMAIN_WEIGHT, 1.0)),
        )
