"""Parse free-text mood ratings into a MoodAnalysis."""

import re
from datetime import datetime
from typing import Dict, Optional

from ..core.mood import MOOD_DIMENSIONS, MoodAnalysis, MoodDimension

NUMBER = r"([-+]?\d+(?:\.\d+)?)"
RATING = r"\[?" + NUMBER + r"\]?"
FALLBACK_TEMPO = 120.0


def _label_pattern(dimension: MoodDimension) -> str:
    # Match at a line start, tolerating list markers and markdown emphasis
    return r"^[ \t>*#\-\d.)]*\**" + re.escape(dimension.name) + r"\**[ \t]*:[ \t]*\**[ \t]*"


def extract_rating(text: str, dimension: MoodDimension) -> Optional[float]:
    """Rating for one dimension, or None if its line is missing or malformed."""
    match = re.search(
        _label_pattern(dimension) + RATING,
        text,
        re.IGNORECASE | re.MULTILINE,
    )
    if not match:
        return None
    try:
        return float(match.group(1))
    except ValueError:
        return None


def extract_explanation(text: str, dimension: MoodDimension) -> Optional[str]:
    """Explanation text following ``<Dimension>: <number> - ``."""
    match = re.search(
        _label_pattern(dimension) + RATING + r"[^\S\n]*(?:/[^\S\n]*\d+)?[^\S\n]*[-–—:][^\S\n]*(.+)$",
        text,
        re.IGNORECASE | re.MULTILINE,
    )
    if not match:
        return None
    explanation = match.group(2).strip()
    return explanation or None


def parse_response(
    text: str,
    file_path: str = "",
    detected_bpm: float = 0.0,
    model: str = "",
    timestamp: Optional[datetime] = None,
) -> MoodAnalysis:
    """
    Parse a model reply into ratings and explanations.

    Each dimension is parsed independently; a missing or malformed line
    leaves that dimension at 0. Tempo falls back to the detected BPM, then
    to 120.

    Args:
        text: Raw reply from the inference service
        file_path: Analyzed file
        detected_bpm: Tempo of the feature vector
        model: Model identifier recorded with the analysis
        timestamp: Analysis time (now if None)

    Returns:
        MoodAnalysis
    """
    values: Dict[str, float] = {}
    explanations: Dict[str, str] = {}

    for dimension in MOOD_DIMENSIONS:
        rating = extract_rating(text, dimension)
        values[dimension.attribute] = rating if rating is not None else 0.0

        explanation = extract_explanation(text, dimension)
        if explanation:
            explanations[dimension.name] = explanation

    if values["tempo"] <= 0:
        values["tempo"] = detected_bpm if detected_bpm > 0 else FALLBACK_TEMPO

    return MoodAnalysis(
        file_path=file_path,
        explanations=explanations,
        analysis_timestamp=timestamp or datetime.now(),
        model_used=model,
        **values,
    )
