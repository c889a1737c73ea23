"""Feature extraction pipeline - decode, analyze and assemble a FeatureVector.

Stages run strictly in sequence:

    decode -> time domain -> spectral -> onset -> rhythm -> tempo -> assemble

The pipeline has no side effects: it neither logs nor touches shared state,
so several files may be processed concurrently on separate threads. A decode
failure or any error raised by a stage yields a degraded result carrying the
fixed default vector instead of an exception.
"""

import threading
from pathlib import Path
from typing import List, Optional

import numpy as np

from .analysis import (
    OnsetDetector,
    RhythmAnalyzer,
    SpectralApproximator,
    TempoAnalyzer,
    TimeDomainExtractor,
)
from .config import AppConfig
from .core.constants import MFCC_COEFFICIENTS, SPECTRAL_DATA_POINTS
from .core.errors import AnalysisCancelled, DecodeError, ResourceError
from .core.features import ExtractionResult, FeatureVector
from .input import AudioLoader, TrackMetadata


def _check_cancelled(cancel: Optional[threading.Event], stage: str) -> None:
    if cancel is not None and cancel.is_set():
        raise AnalysisCancelled(f"Cancelled before {stage}")


class FeaturePipeline:
    """Turns one audio file into an immutable FeatureVector."""

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        loader: Optional[AudioLoader] = None,
    ):
        """
        Initialize FeaturePipeline.

        Args:
            config: Application configuration (defaults if None)
            loader: Audio decoder; built from ``config`` if None
        """
        self.config = config or AppConfig()
        self.loader = loader or AudioLoader(
            target_sr=self.config.sample_rate,
            mono=self.config.mono,
        )
        self.time_domain = TimeDomainExtractor()
        self.spectral = SpectralApproximator()
        self.onsets = OnsetDetector(
            window_size=self.config.frame_size,
            hop_length=self.config.hop_size,
        )
        self.rhythm = RhythmAnalyzer(
            hop_length=self.config.hop_size,
            sr=self.config.sample_rate,
        )
        self.tempo = TempoAnalyzer(
            sr=self.config.sample_rate,
            hop_length=self.config.hop_size,
        )

    def extract(
        self,
        path: str,
        metadata: Optional[TrackMetadata] = None,
        cancel: Optional[threading.Event] = None,
    ) -> ExtractionResult:
        """
        Decode and analyze an audio file.

        Args:
            path: Path to the audio file
            metadata: Tags read from the file (title, genre, BPM, ...)
            cancel: Event checked between stages

        Returns:
            ExtractionResult, degraded if the audio could not be decoded

        Raises:
            ResourceError: If the file doesn't exist
            AnalysisCancelled: If ``cancel`` is set between stages
        """
        metadata = metadata or TrackMetadata()
        file_path = str(path)
        if not Path(path).is_file():
            raise ResourceError(f"Audio file not found: {path}")

        _check_cancelled(cancel, "decoding")
        try:
            decoded = self.loader.load(file_path)
        except DecodeError as e:
            return ExtractionResult.degraded(str(e), file_path, metadata.fields)

        return self.from_samples(decoded.samples, metadata, file_path, cancel)

    def from_samples(
        self,
        samples: np.ndarray,
        metadata: Optional[TrackMetadata] = None,
        file_path: str = "",
        cancel: Optional[threading.Event] = None,
    ) -> ExtractionResult:
        """
        Analyze an already-decoded buffer at the configured sample rate.

        Args:
            samples: Float samples in [-1, 1]
            metadata: Tags read from the file
            file_path: Path recorded in the vector
            cancel: Event checked between stages

        Returns:
            ExtractionResult
        """
        metadata = metadata or TrackMetadata()
        try:
            return self._analyze(np.asarray(samples, dtype=np.float64), metadata, file_path, cancel)
        except AnalysisCancelled:
            raise
        except Exception as e:
            return ExtractionResult.degraded(
                f"Analysis failed: {type(e).__name__}: {e}",
                file_path,
                metadata.fields,
            )

    def _analyze(
        self,
        samples: np.ndarray,
        metadata: TrackMetadata,
        file_path: str,
        cancel: Optional[threading.Event],
    ) -> ExtractionResult:
        warnings: List[str] = []
        if samples.ndim != 1:
            raise ValueError(f"Expected a 1-D sample buffer, got shape {samples.shape}")
        if len(samples) == 0:
            warnings.append("Decoded audio is empty")

        _check_cancelled(cancel, "time-domain features")
        basic = self.time_domain.extract(samples)

        _check_cancelled(cancel, "spectral features")
        spectral = self.spectral.extract(samples, basic.zero_crossing_rate)

        _check_cancelled(cancel, "onset detection")
        onset = self.onsets.onset_function(samples)

        _check_cancelled(cancel, "rhythm analysis")
        rhythm = self.rhythm.analyze(onset)

        _check_cancelled(cancel, "tempo estimation")
        if metadata.bpm is not None and not (
            self.tempo.min_bpm <= metadata.bpm <= self.tempo.max_bpm
        ):
            warnings.append(f"Ignoring out-of-range tag BPM {metadata.bpm:g}")
        tempo = self.tempo.resolve(onset, tag_bpm=metadata.bpm, genre=metadata.genre)
        if tempo.source in ("genre", "default"):
            warnings.append(
                f"Tempo detection failed; using {tempo.source} tempo {tempo.bpm:g} BPM"
            )

        _check_cancelled(cancel, "assembly")
        vector = FeatureVector(
            file_path=file_path,
            bpm=tempo.bpm,
            rms_energy=basic.rms_energy,
            zero_crossing_rate=basic.zero_crossing_rate,
            spectral_centroid=spectral.centroid,
            spectral_flux=spectral.flux,
            spectral_rolloff=spectral.rolloff,
            spectral_flatness=spectral.flatness,
            bass_presence=basic.presence.bass,
            mid_presence=basic.presence.mid,
            high_presence=basic.presence.high,
            rhythm_strength=rhythm.strength,
            rhythm_regularity=rhythm.regularity,
            onset_density=rhythm.onset_density,
            waveform=basic.waveform,
            energy_envelope=basic.energy_envelope,
            beat_histogram=self.rhythm.beat_histogram(tempo.bpm),
            mfcc=np.zeros(MFCC_COEFFICIENTS),
            spectral_data=np.zeros(SPECTRAL_DATA_POINTS),
            metadata=metadata.fields,
        )
        return ExtractionResult.ok(vector, tuple(warnings), tempo.source)
