"""Rhythm descriptors derived from the onset function."""

from dataclasses import dataclass

import numpy as np

from ..core.constants import (
    BEAT_HISTOGRAM_BINS,
    BEAT_HISTOGRAM_MIN_BPM,
    DEFAULT_HOP_LENGTH,
    DEFAULT_SR,
)

# Onset peaks must exceed this multiple of the mean strength
ONSET_THRESHOLD_FACTOR = 1.5


@dataclass(frozen=True)
class RhythmFeatures:
    """Container for rhythm analysis results."""

    strength: float  # variance of the onset function
    regularity: float  # mean normalized autocorrelation at its peaks
    onset_density: float  # onsets per second


def autocorrelation(onset: np.ndarray, max_lag: int) -> np.ndarray:
    """Unnormalized autocorrelation for lags 0..max_lag-1."""
    n = len(onset)
    max_lag = min(max_lag, n)
    return np.array(
        [float(np.dot(onset[:n - lag], onset[lag:])) for lag in range(max_lag)],
        dtype=np.float64,
    )


def local_maxima(values: np.ndarray) -> np.ndarray:
    """Indices of interior points strictly greater than both neighbours."""
    if len(values) < 3:
        return np.array([], dtype=np.int64)
    interior = values[1:-1]
    mask = (interior > values[:-2]) & (interior > values[2:])
    return np.nonzero(mask)[0] + 1


class RhythmAnalyzer:
    """Measures how strong, regular and dense the rhythm is."""

    def __init__(self, hop_length: int = DEFAULT_HOP_LENGTH, sr: int = DEFAULT_SR):
        """
        Initialize RhythmAnalyzer.

        Args:
            hop_length: Hop size the onset function was computed with
            sr: Configured sample rate
        """
        self.hop_length = hop_length
        self.sr = sr

    def strength(self, onset: np.ndarray) -> float:
        """Population variance of the onset function."""
        if len(onset) == 0:
            return 0.0
        return float(np.var(onset))

    def regularity(self, onset: np.ndarray) -> float:
        """
        Periodicity of the onset function.

        Autocorrelation over lags 0..len/3 is normalized by its zero-lag
        value (when non-zero); the result is the mean value at its local
        maxima, or 0 when there are none.
        """
        autocorr = autocorrelation(onset, len(onset) // 3)
        if len(autocorr) == 0:
            return 0.0
        if autocorr[0] > 0:
            autocorr = autocorr / autocorr[0]

        peaks = local_maxima(autocorr)
        if len(peaks) == 0:
            return 0.0
        return float(np.mean(autocorr[peaks]))

    def onset_density(self, onset: np.ndarray) -> float:
        """Peaks above 1.5x the mean strength, per second."""
        if len(onset) == 0:
            return 0.0
        threshold = ONSET_THRESHOLD_FACTOR * float(np.mean(onset))
        peaks = local_maxima(onset)
        count = int(np.count_nonzero(onset[peaks] > threshold))

        duration = len(onset) * self.hop_length / self.sr
        return count / duration

    def beat_histogram(self, center_bpm: float) -> np.ndarray:
        """
        Gaussian over integer BPM 60..159 centred on ``center_bpm``.

        Returns:
            Array of BEAT_HISTOGRAM_BINS values in (0, 1]
        """
        bpms = BEAT_HISTOGRAM_MIN_BPM + np.arange(BEAT_HISTOGRAM_BINS, dtype=np.float64)
        return np.exp(-np.square(bpms - center_bpm) / 100.0)

    def analyze(self, onset: np.ndarray) -> RhythmFeatures:
        """
        Compute strength, regularity and onset density.

        Args:
            onset: Onset strength function

        Returns:
            RhythmFeatures
        """
        return RhythmFeatures(
            strength=self.strength(onset),
            regularity=self.regularity(onset),
            onset_density=self.onset_density(onset),
        )
