"""Spectral descriptors approximated in the time domain.

None of these values come from a transform. They are deliberately cheap
proxies and keep these names because prompt text and stored tags were
built on them:

- centroid = zcr * 10000
- rolloff  = zcr * 15000
- flux     = mean absolute difference between consecutive samples
- flatness = 0.5 (constant)
"""

from dataclasses import dataclass

import numpy as np

CENTROID_SCALE = 10000.0
ROLLOFF_SCALE = 15000.0
FLATNESS = 0.5


@dataclass(frozen=True)
class SpectralFeatures:
    """Container for the spectral proxies."""

    centroid: float
    flux: float
    rolloff: float
    flatness: float


class SpectralApproximator:
    """Derives spectral proxies from zero-crossing rate and sample deltas."""

    def flux(self, samples: np.ndarray) -> float:
        """Mean of |sample[i] - sample[i-1]|."""
        if len(samples) < 2:
            return 0.0
        return float(np.mean(np.abs(np.diff(samples))))

    def extract(self, samples: np.ndarray, zcr: float) -> SpectralFeatures:
        """
        Compute the spectral proxies.

        Args:
            samples: Float samples in [-1, 1]
            zcr: Zero-crossing rate of the same buffer

        Returns:
            SpectralFeatures
        """
        return SpectralFeatures(
            centroid=zcr * CENTROID_SCALE,
            flux=self.flux(samples),
            rolloff=zcr * ROLLOFF_SCALE,
            flatness=FLATNESS,
        )
