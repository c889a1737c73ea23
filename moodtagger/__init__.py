"""MoodTagger - Audio feature extraction and mood tagging for music files.

Architecture Layers:
    1. input/     - Audio decoding and tag metadata
    2. analysis/  - Time-domain, spectral-proxy, onset, rhythm and tempo analysis
    3. pipeline   - Assembles one immutable FeatureVector per file
    4. inference/ - Mood ratings from a text-generation service
    5. tags/      - Mood tag persistence, backup and restore
    6. analyzer   - Single-file, batch and directory orchestration
"""

__version__ = "0.1.0"

# Core types
from .core import (
    FeatureVector,
    ExtractionResult,
    ExtractionStatus,
    MoodAnalysis,
    MoodTaggerError,
)

# Configuration
from .config import AppConfig

# Input layer
from .input import AudioLoader, read_metadata

# Analysis layer
from .analysis import (
    TimeDomainExtractor,
    SpectralApproximator,
    OnsetDetector,
    RhythmAnalyzer,
    TempoAnalyzer,
)

# Pipeline
from .pipeline import FeaturePipeline

# Inference layer
from .inference import OllamaClient

# Tags layer
from .tags import TagStore

# Orchestration
from .analyzer import MoodAnalyzer, BatchProgress, BatchResult

__all__ = [
    # Core
    "FeatureVector",
    "ExtractionResult",
    "ExtractionStatus",
    "MoodAnalysis",
    "MoodTaggerError",
    "AppConfig",
    # Input
    "AudioLoader",
    "read_metadata",
    # Analysis
    "TimeDomainExtractor",
    "SpectralApproximator",
    "OnsetDetector",
    "RhythmAnalyzer",
    "TempoAnalyzer",
    # Pipeline
    "FeaturePipeline",
    # Inference
    "OllamaClient",
    # Tags
    "TagStore",
    # Orchestration
    "MoodAnalyzer",
    "BatchProgress",
    "BatchResult",
]
