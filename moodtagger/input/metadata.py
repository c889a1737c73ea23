"""Track metadata read from file tags."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional, Union

import mutagen
from mutagen import MutagenError

from ..core.errors import ResourceError

# Easy-tag key -> metadata key
TAG_FIELDS = {
    "title": "Title",
    "artist": "Artist",
    "album": "Album",
    "date": "Year",
    "genre": "Genre",
}


@dataclass(frozen=True)
class TrackMetadata:
    """Descriptive tags plus the tag-embedded BPM, if any."""

    fields: Dict[str, str] = field(default_factory=dict)
    bpm: Optional[float] = None
    error: Optional[str] = None  # set when the tags could not be read

    @property
    def genre(self) -> Optional[str]:
        return self.fields.get("Genre")


def _first(value: Union[str, Iterable[str], None]) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value.strip() or None
    values = [str(v).strip() for v in value if str(v).strip()]
    return ", ".join(values) if values else None


def _parse_bpm(raw: Optional[str]) -> Optional[float]:
    if not raw:
        return None
    try:
        bpm = float(raw.split(",")[0])
    except ValueError:
        return None
    return bpm if bpm > 0 else None


def metadata_from_tags(tags: Mapping[str, Union[str, Iterable[str]]]) -> TrackMetadata:
    """
    Build TrackMetadata from an easy-tag style mapping.

    Args:
        tags: Mapping such as ``{"title": ["Song"], "bpm": ["128"]}``

    Returns:
        TrackMetadata; absent fields are simply left out
    """
    lowered = {str(k).lower(): v for k, v in tags.items()}
    fields: Dict[str, str] = {}
    for tag_key, meta_key in TAG_FIELDS.items():
        value = _first(lowered.get(tag_key))
        if value:
            if meta_key == "Year":
                value = value[:4]
            fields[meta_key] = value
    return TrackMetadata(fields=fields, bpm=_parse_bpm(_first(lowered.get("bpm"))))


def read_metadata(path: str) -> TrackMetadata:
    """
    Read metadata from an audio file's tags.

    Unreadable tags are not fatal: an empty TrackMetadata carrying the
    error message is returned instead.

    Raises:
        ResourceError: If the file doesn't exist
    """
    path = Path(path)
    if not path.is_file():
        raise ResourceError(f"Audio file not found: {path}")

    try:
        audio = mutagen.File(str(path), easy=True)
    except MutagenError as e:
        return TrackMetadata(error=str(e))

    if audio is None or audio.tags is None:
        return TrackMetadata()
    return metadata_from_tags(audio.tags)
