"""Analysis layer - Low-level signal analysis.

This layer extracts features from decoded samples:
- Time-domain features (RMS, zero crossings, envelope, band presence)
- Spectral proxies (centroid, flux, rolloff, flatness)
- Onset strength function
- Rhythm descriptors and tempo
"""

from .features import TimeDomainExtractor, TimeDomainFeatures, BandPresence
from .spectral import SpectralApproximator, SpectralFeatures
from .onset import OnsetDetector
from .rhythm import RhythmAnalyzer, RhythmFeatures
from .tempo import TempoAnalyzer, TempoEstimate

__all__ = [
    "TimeDomainExtractor",
    "TimeDomainFeatures",
    "BandPresence",
    "SpectralApproximator",
    "SpectralFeatures",
    "OnsetDetector",
    "RhythmAnalyzer",
    "RhythmFeatures",
    "TempoAnalyzer",
    "TempoEstimate",
]
