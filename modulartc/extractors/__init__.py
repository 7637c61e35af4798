"""Built-in feature extractor registrations."""

from __future__ import annotations

from typing import Any

from modulartc.core.extraction.feature_extractor import FeatureExtractor
from modulartc.utils.errors.exceptions import ConfigurationError
from modulartc.utils.registries import CaseInsensitiveRegistry

from .dependency_extractor import DependencyExtractor
from .length_extractors import NrOfCharsExtractor, NrOfTokensExtractor
from .ngram_extractors import CharNgramExtractor, CharSkipNgramExtractor, WordNgramExtractor

__all__ = [
    "CharNgramExtractor",
    "CharSkipNgramExtractor",
    "DependencyExtractor",
    "NrOfCharsExtractor",
    "NrOfTokensExtractor",
    "WordNgramExtractor",
    "build_extractor",
    "extractor_registry",
]

# Create registry
extractor_registry = CaseInsensitiveRegistry("feature extractor")


def extractor_naming_fn(x: type[FeatureExtractor]) -> str:
    """Return the configuration tag of an extractor class."""
    return x.extractor_type


# Register modulartc extractors
mtc_extractors: list[type[FeatureExtractor]] = [
    WordNgramExtractor,
    CharNgramExtractor,
    CharSkipNgramExtractor,
    DependencyExtractor,
    NrOfCharsExtractor,
    NrOfTokensExtractor,
]
for t in mtc_extractors:
    extractor_registry.register(extractor_naming_fn(t), t)


def build_extractor(spec: FeatureExtractor | dict[str, Any] | str) -> FeatureExtractor:
    """
    Resolve an extractor definition to a constructed extractor.

    Args:
        spec (FeatureExtractor | dict[str, Any] | str):
            An extractor instance (returned as-is), a config dict with a
            ``"type"`` tag plus constructor arguments, or a bare tag.

    Returns:
        FeatureExtractor: Constructed extractor.

    Raises:
        UnknownComponentError: If the tag is not registered.
        ConfigurationError: If the definition is malformed.

    """
    if isinstance(spec, FeatureExtractor):
        return spec
    if isinstance(spec, str):
        spec = {"type": spec}
    if not isinstance(spec, dict) or "type" not in spec:
        msg = f"Extractor definition needs a 'type' entry, got {spec!r}."
        raise ConfigurationError(msg)
    cls = extractor_registry.resolve(spec["type"])
    return cls.from_config(spec)
