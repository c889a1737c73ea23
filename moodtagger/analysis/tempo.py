"""Tempo estimation with a deterministic fallback chain."""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..core.constants import (
    DEFAULT_BPM,
    DEFAULT_HOP_LENGTH,
    DEFAULT_SR,
    GENRE_TEMPOS,
    MAX_BPM,
    MIN_BPM,
)


@dataclass(frozen=True)
class TempoEstimate:
    """Resolved tempo and the step of the fallback chain that produced it."""

    bpm: float
    source: str  # "tag" | "detected" | "genre" | "default"


class TempoAnalyzer:
    """Estimate a single global tempo from an onset function."""

    def __init__(
        self,
        sr: int = DEFAULT_SR,
        hop_length: int = DEFAULT_HOP_LENGTH,
        min_bpm: float = MIN_BPM,
        max_bpm: float = MAX_BPM,
    ):
        self.sr = sr
        self.hop_length = hop_length
        self.min_bpm = min_bpm
        self.max_bpm = max_bpm

    def lag_range(self, n_frames: int) -> Optional[range]:
        """
        Lags (in frames) that correspond to the BPM search range.

        Returns:
            Inclusive lag range, or None when the range is degenerate
        """
        min_lag = int(self.sr * 60 // (self.max_bpm * self.hop_length))
        max_lag = int(self.sr * 60 // (self.min_bpm * self.hop_length))
        max_lag = min(max_lag, n_frames // 2)

        if min_lag >= max_lag or min_lag < 1:
            return None
        return range(min_lag, max_lag + 1)

    def lag_to_bpm(self, lag: int) -> float:
        return self.sr * 60.0 / (lag * self.hop_length)

    def detect(self, onset: np.ndarray) -> Optional[float]:
        """
        Detect tempo by autocorrelating the onset function.

        Args:
            onset: Onset strength function

        Returns:
            Tempo in BPM, or None if detection failed
        """
        if len(onset) < 2:
            return None

        lags = self.lag_range(len(onset))
        if lags is None:
            return None

        n = len(onset)
        autocorr = np.array(
            [float(np.dot(onset[:n - lag], onset[lag:])) for lag in lags]
        )
        if len(autocorr) == 0 or autocorr.max() <= 0:
            return None

        # First maximum wins on ties
        peak_lag = lags[int(np.argmax(autocorr))]
        bpm = self.lag_to_bpm(peak_lag)

        if not self.min_bpm <= bpm <= self.max_bpm:
            return None
        return bpm

    def bpm_from_genre(self, genre: Optional[str]) -> float:
        """Typical tempo for a genre string; 128 when nothing matches."""
        if not genre:
            return DEFAULT_BPM
        genre = genre.lower()
        for keywords, bpm in GENRE_TEMPOS:
            if any(keyword in genre for keyword in keywords):
                return bpm
        return DEFAULT_BPM

    def resolve(
        self,
        onset: np.ndarray,
        tag_bpm: Optional[float] = None,
        genre: Optional[str] = None,
    ) -> TempoEstimate:
        """
        Resolve the track tempo.

        Order: tag BPM within range, autocorrelation detection, genre
        table, then the 128 BPM default. Always returns a positive BPM.

        Args:
            onset: Onset strength function
            tag_bpm: BPM stored in the file's tags, if any
            genre: Genre string from the file's tags, if any

        Returns:
            TempoEstimate
        """
        if tag_bpm is not None and self.min_bpm <= tag_bpm <= self.max_bpm:
            return TempoEstimate(float(tag_bpm), "tag")

        detected = self.detect(onset)
        if detected is not None:
            return TempoEstimate(detected, "detected")

        if genre:
            return TempoEstimate(self.bpm_from_genre(genre), "genre")
        return TempoEstimate(DEFAULT_BPM, "default")
