from enum import Enum
from typing import Final

# ======================================================
# File names inside a run's output directory
# ======================================================
FILENAME_INSTANCES: Final[str] = "instances.jsonl"
FILENAME_FEATURE_TABLE: Final[str] = "features.arrow"
FILENAME_MANIFEST: Final[str] = "manifest.json"
FILENAME_FEATURES: Final[str] = "feature_names.txt"
FILENAME_OUTCOMES: Final[str] = "outcomes.txt"
FILENAME_EXTRACTION_CONFIG: Final[str] = "extraction_config.json"
PARTIAL_SUFFIX: Final[str] = ".part"

# ======================================================
# Feature table domains
# ======================================================
DOMAIN_FEATURES: Final[str] = "features"
DOMAIN_OUTCOMES: Final[str] = "outcomes"
DOMAIN_INSTANCE_ID: Final[str] = "instance_id"
DOMAIN_SEQUENCE_ID: Final[str] = "sequence_id"
DOMAIN_POSITION: Final[str] = "position"
DOMAIN_WEIGHT: Final[str] = "weight"

ALL_DOMAINS: Final[tuple[str, ...]] = (
    DOMAIN_FEATURES,
    DOMAIN_OUTCOMES,
    DOMAIN_INSTANCE_ID,
    DOMAIN_SEQUENCE_ID,
    DOMAIN_POSITION,
    DOMAIN_WEIGHT,
)

# ======================================================
# Feature naming
# ======================================================
FEATURE_NAME_SEPARATOR: Final[str] = "_"
DEFAULT_FEATURE_VALUE: Final[int] = 0
VOCABULARY_FORMAT_VERSION: Final[int] = 1
STORE_FORMAT_VERSION: Final[int] = 1


# ======================================================
# Run vocabulary
# ======================================================
class LearningMode(str, Enum):
    """How outcomes are interpreted by the downstream learner."""

    SINGLE_LABEL = "single_label"
    MULTI_LABEL = "multi_label"
    REGRESSION = "regression"


class FeatureMode(str, Enum):
    """How many instances one input document yields."""

    DOCUMENT = "document"
    UNIT = "unit"
    SEQUENCE = "sequence"


class FeatureEncoding(str, Enum):
    """Whether every instance stores every feature (dense) or only non-defaults."""

    DENSE = "dense"
    SPARSE = "sparse"


class RunMode(str, Enum):
    """Which corpus split the current extraction run processes."""

    TRAIN = "train"
    TEST = "test"
