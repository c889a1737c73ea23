"""Core types, constants and errors for MoodTagger."""

from .constants import (
    DEFAULT_SR,
    DEFAULT_HOP_LENGTH,
    DEFAULT_WINDOW_SIZE,
    DEFAULT_BPM,
    MIN_BPM,
    MAX_BPM,
)
from .errors import (
    MoodTaggerError,
    ResourceError,
    DecodeError,
    InferenceError,
    TagStoreError,
    ConfigError,
    AnalysisCancelled,
)
from .features import (
    FeatureVector,
    ExtractionResult,
    ExtractionStatus,
    default_feature_vector,
)
from .mood import MoodAnalysis, MoodDimension, MOOD_DIMENSIONS, get_dimension

__all__ = [
    # Constants
    "DEFAULT_SR",
    "DEFAULT_HOP_LENGTH",
    "DEFAULT_WINDOW_SIZE",
    "DEFAULT_BPM",
    "MIN_BPM",
    "MAX_BPM",
    # Errors
    "MoodTaggerError",
    "ResourceError",
    "DecodeError",
    "InferenceError",
    "TagStoreError",
    "ConfigError",
    "AnalysisCancelled",
    # Features
    "FeatureVector",
    "ExtractionResult",
    "ExtractionStatus",
    "default_feature_vector",
    # Mood
    "MoodAnalysis",
    "MoodDimension",
    "MOOD_DIMENSIONS",
    "get_dimension",
]
