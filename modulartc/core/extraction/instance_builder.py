"""Assembly of instances from the outputs of all configured extractors."""

from __future__ import annotations

from typing import TYPE_CHECKING

from modulartc.core.data.document import Span, TextUnit
from modulartc.core.data.instance import Feature, Instance
from modulartc.core.data.schema_constants import FeatureEncoding, FeatureMode, LearningMode
from modulartc.utils.errors.exceptions import (
    ConfigurationError,
    DocumentAnnotationError,
    FeatureNameCollisionError,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from modulartc.core.data.document import Document
    from modulartc.core.extraction.feature_extractor import FeatureExtractor


class InstanceBuilder:
    """
    Builds the instance(s) of one document.

    Description:
        The feature mode decides how many instances a document yields:

        - ``DOCUMENT``: one instance over the whole document.
        - ``UNIT``: one instance per unit; the outcome is the unit's own.
        - ``SEQUENCE``: for each sequence (the whole document if none is
          annotated), one instance per unit inside it, in document order,
          carrying ``sequence_id`` and ``position``.

        When a document has no units, its sentences act as units and carry
        the document outcomes.

        Every extractor contributes independently. A feature name produced
        twice for the same instance raises :class:`FeatureNameCollisionError`.
        In sparse encoding, default-valued features are dropped here.

    Attributes:
        extractors (list[FeatureExtractor]): Extractors in configuration order.
        feature_mode (FeatureMode): Instances-per-document mode.
        learning_mode (LearningMode): Outcome validation mode.
        encoding (FeatureEncoding): Dense or sparse encoding.
        add_instance_id (bool): Whether instances carry an identifier.

    """

    def __init__(
        self,
        extractors: Sequence[FeatureExtractor],
        *,
        feature_mode: FeatureMode | str = FeatureMode.DOCUMENT,
        learning_mode: LearningMode | str = LearningMode.SINGLE_LABEL,
        encoding: FeatureEncoding | str = FeatureEncoding.DENSE,
        add_instance_id: bool = True,
    ):
        if not extractors:
            msg = "No feature extractors have been defined."
            raise ConfigurationError(msg)

        names = [ex.name for ex in extractors]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            msg = (
                f"Feature extractor names must be unique, duplicated: {duplicates}. "
                "Pass a distinct `name` to each extractor of the same type."
            )
            raise ConfigurationError(msg)

        self.extractors = list(extractors)
        self.feature_mode = FeatureMode(feature_mode)
        self.learning_mode = LearningMode(learning_mode)
        self.encoding = FeatureEncoding(encoding)
        self.add_instance_id = add_instance_id

    def build(self, document: Document) -> list[Instance]:
        """
        Build all instances of `document` according to the feature mode.

        Args:
            document (Document): Annotated input document.

        Returns:
            list[Instance]: Instances in document (and sequence) order.

        Raises:
            DocumentAnnotationError: If annotations required by the mode are
                missing or outcomes do not fit the learning mode.
            FeatureNameCollisionError: If two features share a name.

        """
        document.validate()
        if self.feature_mode is FeatureMode.DOCUMENT:
            return [
                self._instance(
                    document,
                    document.outcomes,
                    instance_id=document.doc_id,
                ),
            ]
        if self.feature_mode is FeatureMode.UNIT:
            return self._build_units(document)
        return self._build_sequences(document)

    # ================================================
    # Modes
    # ================================================
    def _units(self, document: Document, span: Span | None = None) -> list[TextUnit]:
        if document.units:
            units = document.units_in(span) if span is not None else sorted(
                document.units,
                key=lambda u: (u.begin, u.end),
            )
        else:
            sentences = sorted(document.sentences, key=lambda s: (s.begin, s.end))
            if span is not None:
                sentences = [s for s in sentences if s.begin >= span.begin and s.end <= span.end]
            units = [TextUnit(s.begin, s.end, document.outcomes) for s in sentences]
        return units

    def _build_units(self, document: Document) -> list[Instance]:
        units = self._units(document)
        if not units:
            raise DocumentAnnotationError(
                document.doc_id,
                "unit mode requires unit or sentence annotations.",
            )
        return [
            self._instance(
                document.select(unit.begin, unit.end, unit.outcomes),
                unit.outcomes,
                instance_id=f"{document.doc_id}_{idx}",
            )
            for idx, unit in enumerate(units)
        ]

    def _build_sequences(self, document: Document) -> list[Instance]:
        sequences = sorted(document.sequences, key=lambda s: (s.begin, s.end)) or [
            Span(0, len(document.text)),
        ]
        instances: list[Instance] = []
        for seq_id, seq in enumerate(sequences):
            units = self._units(document, seq)
            if not units:
                msg = f"sequence {seq_id} [{seq.begin}, {seq.end}) contains no units."
                raise DocumentAnnotationError(document.doc_id, msg)
            instances.extend(
                self._instance(
                    document.select(unit.begin, unit.end, unit.outcomes),
                    unit.outcomes,
                    instance_id=f"{document.doc_id}_{seq_id}_{pos}",
                    sequence_id=seq_id,
                    position=pos,
                )
                for pos, unit in enumerate(units)
            )
        return instances

    # ================================================
    # Helpers
    # ================================================
    def _instance(
        self,
        view: Document,
        outcomes: Sequence[str],
        *,
        instance_id: str,
        sequence_id: int | None = None,
        position: int | None = None,
    ) -> Instance:
        return Instance(
            features=self.extract_features(view),
            outcomes=self._check_outcomes(view.doc_id, outcomes),
            instance_id=instance_id if self.add_instance_id else None,
            sequence_id=sequence_id,
            position=position,
        )

    def extract_features(self, view: Document) -> tuple[Feature, ...]:
        """Run every extractor on `view` and merge their features."""
        seen: set[str] = set()
        features: list[Feature] = []
        for extractor in self.extractors:
            for feature in extractor.extract(view):
                if feature.name in seen:
                    raise FeatureNameCollisionError(feature.name)
                seen.add(feature.name)
                if self.encoding is FeatureEncoding.SPARSE and feature.is_default:
                    continue
                features.append(feature)
        return tuple(features)

    def _check_outcomes(self, doc_id: str, outcomes: Sequence[str]) -> tuple[str, ...]:
        outcomes = tuple(str(o) for o in outcomes)
        if self.learning_mode is LearningMode.MULTI_LABEL:
            if not outcomes:
                raise DocumentAnnotationError(doc_id, "multi-label mode requires at least one outcome.")
            # Keep first occurrence order, drop repeats
            return tuple(dict.fromkeys(outcomes))

        if len(outcomes) != 1:
            msg = f"{self.learning_mode.value} mode requires exactly one outcome, got {len(outcomes)}."
            raise DocumentAnnotationError(doc_id, msg)
        if self.learning_mode is LearningMode.REGRESSION:
            try:
                float(outcomes[0])
            except ValueError as exc:
                msg = f"regression outcome '{outcomes[0]}' is not numeric."
                raise DocumentAnnotationError(doc_id, msg) from exc
        return outcomes
