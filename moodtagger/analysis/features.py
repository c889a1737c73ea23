"""Time-domain feature extraction."""

from dataclasses import dataclass

import numpy as np

from ..core.constants import ENVELOPE_POINTS, WAVEFORM_PREVIEW_POINTS


@dataclass(frozen=True)
class BandPresence:
    """Bass/mid/high presence in [0, 1]."""

    bass: float
    mid: float
    high: float


@dataclass(frozen=True)
class TimeDomainFeatures:
    """Container for time-domain features of a whole buffer."""

    rms_energy: float
    zero_crossing_rate: float
    energy_envelope: np.ndarray  # ENVELOPE_POINTS values
    waveform: np.ndarray  # at most WAVEFORM_PREVIEW_POINTS values
    presence: BandPresence


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return float(min(high, max(low, value)))


class TimeDomainExtractor:
    """Computes energy, zero crossings and their derived proxies."""

    def __init__(
        self,
        envelope_points: int = ENVELOPE_POINTS,
        preview_points: int = WAVEFORM_PREVIEW_POINTS,
    ):
        """
        Initialize TimeDomainExtractor.

        Args:
            envelope_points: Number of energy envelope bins
            preview_points: Maximum length of the waveform preview
        """
        self.envelope_points = envelope_points
        self.preview_points = preview_points

    def rms(self, samples: np.ndarray) -> float:
        """Root mean square over the whole buffer."""
        if len(samples) == 0:
            return 0.0
        return float(np.sqrt(np.mean(np.square(samples))))

    def zero_crossing_rate(self, samples: np.ndarray) -> float:
        """Sign changes between consecutive samples per sample.

        Zero counts as positive, so silence has no crossings.
        """
        if len(samples) == 0:
            return 0.0
        positive = samples >= 0
        crossings = np.count_nonzero(positive[1:] != positive[:-1])
        return crossings / len(samples)

    def energy_envelope(self, samples: np.ndarray) -> np.ndarray:
        """
        Mean absolute amplitude over equal-length windows.

        The last window absorbs the remainder. Buffers shorter than the
        envelope are stretched so that every bin covers at least one sample.

        Returns:
            Array of exactly ``envelope_points`` values
        """
        n = len(samples)
        points = self.envelope_points
        if n == 0:
            return np.zeros(points)

        magnitude = np.abs(samples)
        window = n // points
        if window > 0:
            starts = np.arange(points) * window
            ends = np.append(starts[1:], n)
        else:
            starts = (np.arange(points) * n) // points
            ends = np.maximum(((np.arange(1, points + 1)) * n) // points, starts + 1)

        sums = np.concatenate(([0.0], np.cumsum(magnitude)))
        return (sums[ends] - sums[starts]) / (ends - starts)

    def band_presence(self, zcr: float) -> BandPresence:
        """
        Bass/mid/high presence derived from the zero-crossing rate alone.

        A cheap stand-in for a filter bank: more crossings means more
        high-frequency content.
        """
        return BandPresence(
            bass=_clamp(1.0 - zcr * 5),
            mid=_clamp(1.0 - abs(zcr * 10 - 1)),
            high=_clamp(zcr * 5),
        )

    def waveform_preview(self, samples: np.ndarray) -> np.ndarray:
        """Downsample by picking evenly strided samples."""
        n = len(samples)
        if n <= self.preview_points:
            return np.array(samples, dtype=np.float64)
        step = n / self.preview_points
        indices = (np.arange(self.preview_points) * step).astype(np.int64)
        return samples[indices]

    def extract(self, samples: np.ndarray) -> TimeDomainFeatures:
        """
        Compute all time-domain features.

        Args:
            samples: Float samples in [-1, 1]

        Returns:
            TimeDomainFeatures
        """
        zcr = self.zero_crossing_rate(samples)
        return TimeDomainFeatures(
            rms_energy=self.rms(samples),
            zero_crossing_rate=zcr,
            energy_envelope=self.energy_envelope(samples),
            waveform=self.waveform_preview(samples),
            presence=self.band_presence(zcr),
        )

