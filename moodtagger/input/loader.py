"""Audio decoding and resampling."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import librosa
import numpy as np

from ..core.constants import DEFAULT_SR
from ..core.errors import DecodeError, ResourceError


@dataclass(frozen=True)
class DecodedAudio:
    """Normalized samples at the target rate plus the file's native rate."""

    samples: np.ndarray
    sample_rate: int
    native_sample_rate: Optional[int] = None

    @property
    def duration(self) -> float:
        """Duration in seconds."""
        if self.sample_rate <= 0:
            return 0.0
        return len(self.samples) / self.sample_rate


class AudioLoader:
    """Decodes compressed audio into float samples at a target sample rate."""

    SUPPORTED_FORMATS = {".wav", ".mp3", ".flac", ".ogg", ".m4a", ".mp4", ".aiff", ".aif"}

    def __init__(self, target_sr: int = DEFAULT_SR, mono: bool = True):
        """
        Initialize AudioLoader.

        Args:
            target_sr: Target sample rate for resampling
            mono: Downmix to mono if True, otherwise interleave channels
        """
        self.target_sr = target_sr
        self.mono = mono

    def load(self, path: str) -> DecodedAudio:
        """
        Decode an audio file.

        Args:
            path: Path to audio file

        Returns:
            DecodedAudio with samples in [-1, 1] at ``target_sr``

        Raises:
            ResourceError: If the file doesn't exist
            DecodeError: If the format is unsupported or decoding fails
        """
        path = Path(path)

        if not path.is_file():
            raise ResourceError(f"Audio file not found: {path}")

        if path.suffix.lower() not in self.SUPPORTED_FORMATS:
            raise DecodeError(
                f"Unsupported format: {path.suffix}. "
                f"Supported: {sorted(self.SUPPORTED_FORMATS)}"
            )

        try:
            native_sr = librosa.get_samplerate(str(path))
            audio, sr = librosa.load(str(path), sr=self.target_sr, mono=self.mono)
        except Exception as e:
            raise DecodeError(f"Could not decode {path.name}: {e}") from e

        return DecodedAudio(
            samples=self._to_buffer(audio),
            sample_rate=int(sr),
            native_sample_rate=int(native_sr),
        )

    def _to_buffer(self, audio: np.ndarray) -> np.ndarray:
        """Flatten multichannel audio into interleaved frames (L, R, L, R ...)."""
        if audio.ndim > 1:
            audio = audio.T.reshape(-1)
        return np.clip(audio.astype(np.float64), -1.0, 1.0)
