# ================================================
# Documents & Instances
# ================================================
from modulartc.core.data.document import Dependency, Document, Span, TextUnit, Token
from modulartc.core.data.instance import Feature, Instance
from modulartc.core.data.schema_constants import FeatureEncoding, FeatureMode, LearningMode, RunMode


# ================================================
# Vocabulary (pass 1)
# ================================================
from modulartc.core.vocabulary.vocabulary_store import VocabularyStore
from modulartc.core.vocabulary.frequency_collector import FrequencyCollector, collect_vocabularies


# ================================================
# Extraction (pass 2)
# ================================================
from modulartc.core.extraction.feature_extractor import FeatureExtractor, VocabularyBackedExtractor
from modulartc.core.extraction.instance_builder import InstanceBuilder
from modulartc.core.extraction.extraction_config import ExtractionConfig
from modulartc.core.extraction.connector import RunAccumulator, StreamingExtractionConnector

"""
All built-in extractors are accessed with:

```python
    from modulartc.extractors import ...
```
"""


# ================================================
# Feature stores & Filtering
# ================================================
from modulartc.core.data.feature_store import FeatureStore, InstanceStreamWriter
from modulartc.core.filtering.base_filter import FeatureFilter, FilterApplicability
from modulartc.core.filtering.filter_chain import FilterChain
from modulartc.core.filtering.reconciler import FeatureSpaceReconciler, ReconcilerState

"""
All built-in filters are accessed with:

```python
    from modulartc.filters import ...
```
"""


# ================================================
# Readers
# ================================================
from modulartc.readers.linewise_reader import LinewiseTextReader


__all__ = [
    "Dependency",
    "Document",
    "ExtractionConfig",
    "Feature",
    "FeatureEncoding",
    "FeatureExtractor",
    "FeatureFilter",
    "FeatureMode",
    "FeatureSpaceReconciler",
    "FeatureStore",
    "FilterApplicability",
    "FilterChain",
    "FrequencyCollector",
    "Instance",
    "InstanceBuilder",
    "InstanceStreamWriter",
    "LearningMode",
    "LinewiseTextReader",
    "ReconcilerState",
    "RunAccumulator",
    "RunMode",
    "Span",
    "StreamingExtractionConnector",
    "TextUnit",
    "Token",
    "VocabularyBackedExtractor",
    "VocabularyStore",
    "collect_vocabularies",
]
