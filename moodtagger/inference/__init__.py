"""Inference layer - Mood ratings from a text-generation service.

Pipeline: FeatureVector -> prompt -> model reply -> MoodAnalysis
"""

from .prompt import build_prompt, feature_block, PROMPT_FEATURES
from .parser import parse_response, extract_rating, extract_explanation
from .client import OllamaClient

__all__ = [
    "build_prompt",
    "feature_block",
    "PROMPT_FEATURES",
    "parse_response",
    "extract_rating",
    "extract_explanation",
    "OllamaClient",
]
