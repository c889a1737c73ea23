"""Mood analysis - the ratings produced by the inference service."""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class MoodDimension:
    """One rated dimension of a track's mood."""

    name: str  # label used in prompts and replies, e.g. "Funk/Swing"
    attribute: str  # MoodAnalysis field name
    tag_key: str  # TXXX description in the tag store
    low: float
    high: float
    description: str
    signed: bool = False

    @property
    def scale(self) -> str:
        low = f"{self.low:+g}" if self.signed else f"{self.low:g}"
        high = f"{self.high:+g}" if self.signed else f"{self.high:g}"
        return f"{low} to {high}"


MOOD_DIMENSIONS: Tuple[MoodDimension, ...] = (
    MoodDimension(
        "Mood Valence", "mood_valence", "MoodValence", -5, 5,
        "Emotional tone. -5 = very dark, 0 = neutral, +5 = euphoric", signed=True,
    ),
    MoodDimension(
        "Energy", "energy", "Energy", 1, 10,
        "Intensity & drive. 1 = ambient, 10 = rave monster",
    ),
    MoodDimension(
        "Groove Tightness", "groove_tightness", "GrooveTightness", -5, 5,
        "-5 = highly swung/broken, 0 = straight, +5 = extremely tight quantized",
        signed=True,
    ),
    MoodDimension(
        "Funk/Swing", "funk_swing", "FunkSwing", 0, 10,
        "Groove funkiness. More swing, syncopation = higher score",
    ),
    MoodDimension(
        "Tempo", "tempo", "Tempo", 0, 1000,
        "Exact BPM value. If the provided BPM is 0 or seems incorrect, "
        "estimate a reasonable BPM based on other features",
    ),
    MoodDimension(
        "Dancefloor Use", "dancefloor_use", "DancefloorUse", 1, 5,
        "1 = ambient opener, 3 = peak groover, 5 = main drop bomb",
    ),
    MoodDimension(
        "Layering Potential", "layering_potential", "LayeringPotential", 0, 10,
        "How well it layers over others; e.g., tool tracks score high",
    ),
    MoodDimension(
        "Tension", "tension", "Tension", -5, 5,
        "-5 = deeply relaxing, +5 = anxiety-inducing / suspenseful", signed=True,
    ),
    MoodDimension(
        "Rhythmic Complexity", "rhythmic_complexity", "RhythmicComplexity", 0, 10,
        "Polyrhythms, syncopation, odd time = high score",
    ),
    MoodDimension(
        "Sound Palette", "sound_palette", "SoundPalette", -5, 5,
        "-5 = organic/acoustic, +5 = synthetic/futuristic", signed=True,
    ),
)


def get_dimension(name: str) -> Optional[MoodDimension]:
    """Look up a dimension by label, attribute or tag key."""
    for dimension in MOOD_DIMENSIONS:
        if name in (dimension.name, dimension.attribute, dimension.tag_key):
            return dimension
    return None


@dataclass
class MoodAnalysis:
    """Mood ratings for one audio file."""

    file_path: str = ""
    mood_valence: float = 0.0
    energy: float = 0.0
    groove_tightness: float = 0.0
    funk_swing: float = 0.0
    tempo: float = 0.0
    dancefloor_use: float = 0.0
    layering_potential: float = 0.0
    tension: float = 0.0
    rhythmic_complexity: float = 0.0
    sound_palette: float = 0.0
    explanations: Dict[str, str] = field(default_factory=dict)
    analysis_timestamp: datetime = field(default_factory=datetime.now)
    model_used: str = ""

    @property
    def ratings(self) -> Dict[str, float]:
        """Ratings keyed by dimension label."""
        return {d.name: getattr(self, d.attribute) for d in MOOD_DIMENSIONS}

    def validate_ranges(self) -> bool:
        """Check that every rating lies within its scale."""
        if self.tempo <= 0:
            return False
        for dimension in MOOD_DIMENSIONS:
            if dimension.attribute == "tempo":
                continue
            value = getattr(self, dimension.attribute)
            if not dimension.low <= value <= dimension.high:
                return False
        return True

    def summary(self) -> str:
        """Human-readable summary of the analysis."""
        lines = [f"Mood Analysis for {Path(self.file_path).name}:"]
        for dimension in MOOD_DIMENSIONS:
            value = getattr(self, dimension.attribute)
            if dimension.attribute == "tempo":
                lines.append(f"  Tempo: {value:.1f} BPM")
            else:
                lines.append(f"  {dimension.name}: {value:.1f} ({dimension.scale})")
        lines.append(
            f"  Analyzed with: {self.model_used} at {self.analysis_timestamp.isoformat(timespec='seconds')}"
        )
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, object]:
        """Convert to a JSON-serializable dictionary."""
        data: Dict[str, object] = {"file_path": self.file_path}
        for dimension in MOOD_DIMENSIONS:
            data[dimension.attribute] = getattr(self, dimension.attribute)
        data["explanations"] = dict(self.explanations)
        data["analysis_timestamp"] = self.analysis_timestamp.isoformat()
        data["model_used"] = self.model_used
        return data
