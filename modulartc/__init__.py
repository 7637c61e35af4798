from modulartc.api import (
    Dependency,
    Document,
    ExtractionConfig,
    Feature,
    FeatureEncoding,
    FeatureExtractor,
    FeatureFilter,
    FeatureMode,
    FeatureSpaceReconciler,
    FeatureStore,
    FilterApplicability,
    FilterChain,
    FrequencyCollector,
    Instance,
    InstanceBuilder,
    InstanceStreamWriter,
    LearningMode,
    LinewiseTextReader,
    ReconcilerState,
    RunAccumulator,
    RunMode,
    Span,
    StreamingExtractionConnector,
    TextUnit,
    Token,
    VocabularyBackedExtractor,
    VocabularyStore,
    collect_vocabularies,
)

# Populate component registries
import modulartc.extractors
import modulartc.filters
