"""Feature vector - the immutable summary of one track's audio."""

from dataclasses import dataclass, field, fields
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

import numpy as np

from .constants import (
    BEAT_HISTOGRAM_BINS,
    DEFAULT_BPM,
    ENVELOPE_POINTS,
    MFCC_COEFFICIENTS,
    SPECTRAL_DATA_POINTS,
)

# Length of the zero waveform carried by the default vector
DEFAULT_WAVEFORM_POINTS = 1000

ARRAY_FIELDS = (
    "waveform",
    "energy_envelope",
    "beat_histogram",
    "mfcc",
    "spectral_data",
)


def _frozen_array(values) -> np.ndarray:
    array = np.array(values, dtype=np.float64)
    array.flags.writeable = False
    return array


@dataclass(frozen=True, eq=False)
class FeatureVector:
    """Audio features handed to mood inference.

    Spectral values are time-domain proxies (see ``analysis.spectral``),
    not transform-based measurements.
    """

    file_path: str
    bpm: float
    rms_energy: float
    zero_crossing_rate: float
    spectral_centroid: float
    spectral_flux: float
    spectral_rolloff: float
    spectral_flatness: float
    bass_presence: float
    mid_presence: float
    high_presence: float
    rhythm_strength: float
    rhythm_regularity: float
    onset_density: float
    waveform: np.ndarray  # <= 10000 points
    energy_envelope: np.ndarray  # exactly 1000 points
    beat_histogram: np.ndarray  # 100 bins, BPM 60..159
    mfcc: np.ndarray = field(default_factory=lambda: np.zeros(MFCC_COEFFICIENTS))  # reserved
    spectral_data: np.ndarray = field(default_factory=lambda: np.zeros(SPECTRAL_DATA_POINTS))  # reserved
    metadata: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        for name in ARRAY_FIELDS:
            object.__setattr__(self, name, _frozen_array(getattr(self, name)))
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

        if len(self.energy_envelope) != ENVELOPE_POINTS:
            raise ValueError(
                f"energy_envelope must have {ENVELOPE_POINTS} points, "
                f"got {len(self.energy_envelope)}"
            )
        if len(self.beat_histogram) != BEAT_HISTOGRAM_BINS:
            raise ValueError(
                f"beat_histogram must have {BEAT_HISTOGRAM_BINS} bins, "
                f"got {len(self.beat_histogram)}"
            )
        if self.bpm <= 0:
            raise ValueError(f"bpm must be positive, got {self.bpm}")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FeatureVector):
            return NotImplemented
        for f in fields(self):
            mine, theirs = getattr(self, f.name), getattr(other, f.name)
            if f.name in ARRAY_FIELDS:
                if not np.array_equal(mine, theirs):
                    return False
            elif f.name == "metadata":
                if dict(mine) != dict(theirs):
                    return False
            elif mine != theirs:
                return False
        return True

    __hash__ = None

    def scalars(self) -> Dict[str, float]:
        """Scalar features keyed by field name."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name not in ARRAY_FIELDS and f.name not in ("file_path", "metadata")
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        data: Dict[str, Any] = {"file_path": self.file_path}
        data.update(self.scalars())
        for name in ARRAY_FIELDS:
            data[name] = getattr(self, name).tolist()
        data["metadata"] = dict(self.metadata)
        return data


def default_feature_vector(
    file_path: str = "",
    metadata: Optional[Mapping[str, str]] = None,
) -> FeatureVector:
    """Fixed vector used when a file cannot be analyzed."""
    return FeatureVector(
        file_path=file_path,
        bpm=DEFAULT_BPM,
        rms_energy=0.5,
        zero_crossing_rate=0.1,
        spectral_centroid=1000.0,
        spectral_flux=0.1,
        spectral_rolloff=5000.0,
        spectral_flatness=0.5,
        bass_presence=0.5,
        mid_presence=0.5,
        high_presence=0.5,
        rhythm_strength=0.5,
        rhythm_regularity=0.5,
        onset_density=1.0,
        waveform=np.zeros(DEFAULT_WAVEFORM_POINTS),
        energy_envelope=np.zeros(ENVELOPE_POINTS),
        beat_histogram=np.zeros(BEAT_HISTOGRAM_BINS),
        mfcc=np.zeros(MFCC_COEFFICIENTS),
        spectral_data=np.zeros(SPECTRAL_DATA_POINTS),
        metadata=metadata or {},
    )


class ExtractionStatus(Enum):
    """Outcome of one pipeline run."""
    OK = "ok"
    DEGRADED = "degraded"


@dataclass(frozen=True)
class ExtractionResult:
    """Feature vector plus the diagnostics of the run that produced it.

    The pipeline never logs; callers decide what to do with ``warnings``
    and with a degraded ``reason``.
    """

    status: ExtractionStatus
    vector: FeatureVector
    reason: Optional[str] = None
    warnings: Tuple[str, ...] = ()
    tempo_source: str = "default"

    @property
    def is_degraded(self) -> bool:
        return self.status is ExtractionStatus.DEGRADED

    @classmethod
    def ok(
        cls,
        vector: FeatureVector,
        warnings: Tuple[str, ...] = (),
        tempo_source: str = "detected",
    ) -> "ExtractionResult":
        return cls(ExtractionStatus.OK, vector, None, tuple(warnings), tempo_source)

    @classmethod
    def degraded(
        cls,
        reason: str,
        file_path: str = "",
        metadata: Optional[Mapping[str, str]] = None,
    ) -> "ExtractionResult":
        return cls(
            ExtractionStatus.DEGRADED,
            default_feature_vector(file_path, metadata),
            reason,
            (),
            "default",
        )
