"""Input layer - Audio decoding and tag metadata."""

from .loader import AudioLoader, DecodedAudio
from .metadata import TrackMetadata, read_metadata, metadata_from_tags

__all__ = [
    "AudioLoader",
    "DecodedAudio",
    "TrackMetadata",
    "read_metadata",
    "metadata_from_tags",
]
