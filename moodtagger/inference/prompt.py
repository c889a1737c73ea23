"""Prompt construction for mood inference."""

from pathlib import Path
from typing import List, Tuple

from ..core.features import FeatureVector
from ..core.mood import MOOD_DIMENSIONS

# (label, FeatureVector attribute) in prompt order
PROMPT_FEATURES: Tuple[Tuple[str, str], ...] = (
    ("BPM", "bpm"),
    ("Spectral Centroid", "spectral_centroid"),
    ("Spectral Flux", "spectral_flux"),
    ("Rhythm Strength", "rhythm_strength"),
    ("Bass Presence", "bass_presence"),
    ("Mid Presence", "mid_presence"),
    ("High Presence", "high_presence"),
    ("RMS Energy", "rms_energy"),
    ("Zero Crossing Rate", "zero_crossing_rate"),
    ("Rhythm Regularity", "rhythm_regularity"),
)


def feature_block(vector: FeatureVector) -> List[str]:
    """Render the feature vector as fixed-order, two-decimal lines."""
    return [f"- {label}: {getattr(vector, attr):.2f}" for label, attr in PROMPT_FEATURES]


def build_prompt(vector: FeatureVector) -> str:
    """
    Build the mood-rating prompt for one track.

    Args:
        vector: Features of the track

    Returns:
        Prompt text
    """
    lines = [
        "You are an expert music analyzer. Analyze the following audio features "
        "and rate them according to the specified scales:",
        "",
        "[Audio Features]",
    ]
    lines.extend(feature_block(vector))
    lines.append("")

    lines.append("Rate each dimension:")
    for i, dimension in enumerate(MOOD_DIMENSIONS, start=1):
        if dimension.attribute == "tempo":
            lines.append(f"{i}. {dimension.name} (BPM): {dimension.description}")
        else:
            lines.append(f"{i}. {dimension.name} ({dimension.scale}): {dimension.description}")
    lines.append("")

    lines.append(
        "For each dimension, provide a rating and a brief explanation. "
        "Format your response as follows, one dimension per line:"
    )
    for dimension in MOOD_DIMENSIONS:
        placeholder = "[BPM]" if dimension.attribute == "tempo" else "[rating]"
        lines.append(f"{dimension.name}: {placeholder} - [explanation]")
    lines.append("")
    lines.append(f"The track is: {Path(vector.file_path).name}")

    if vector.metadata:
        lines.append("")
        lines.append("Additional track metadata:")
        for key, value in vector.metadata.items():
            lines.append(f"- {key}: {value}")

    return "\n".join(lines) + "\n"
