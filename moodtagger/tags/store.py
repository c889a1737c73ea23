"""Mood tag persistence in ID3v2 user text frames."""

import shutil
from datetime import datetime
from pathlib import Path
from typing import Optional

from mutagen import MutagenError
from mutagen.id3 import ID3, ID3NoHeaderError, TBPM, TXXX

from ..config import AppConfig
from ..core.errors import ResourceError, TagStoreError
from ..core.mood import MOOD_DIMENSIONS, MoodAnalysis, get_dimension

TIMESTAMP_KEY = "AnalysisTimestamp"
MODEL_KEY = "AnalysisModel"
EXPLANATION_PREFIX = "Explanation_"
BACKUP_SUFFIX = ".bak"

# UTF-8
TEXT_ENCODING = 3


def backup_path(path: Path) -> Path:
    return path.with_name(path.name + BACKUP_SUFFIX)


def _is_mood_frame(desc: str) -> bool:
    if desc in (TIMESTAMP_KEY, MODEL_KEY) or desc.startswith(EXPLANATION_PREFIX):
        return True
    return any(desc == d.tag_key for d in MOOD_DIMENSIONS)


class TagStore:
    """Reads and writes MoodAnalysis results as file tags."""

    def __init__(self, config: Optional[AppConfig] = None):
        self.config = config or AppConfig()

    def write(self, analysis: MoodAnalysis) -> bool:
        """
        Write an analysis to its file's tags.

        Args:
            analysis: Ratings to store; ``file_path`` selects the file

        Returns:
            True if tags were written, False in test mode

        Raises:
            ResourceError: If the file doesn't exist
            TagStoreError: If the tags cannot be written
        """
        path = Path(analysis.file_path)
        if not path.is_file():
            raise ResourceError(f"File not found: {path}")

        if not self.config.write_tags:
            return False

        if self.config.create_backups:
            self.create_backup(path)

        try:
            tags = self._load(path)
            if tags is None:
                tags = ID3()

            if not self.config.preserve_existing_tags:
                for frame in tags.getall("TXXX"):
                    if _is_mood_frame(frame.desc):
                        tags.delall(frame.HashKey)

            for dimension in MOOD_DIMENSIONS:
                if dimension.attribute == "tempo":
                    continue
                self._set_text(tags, dimension.tag_key, f"{getattr(analysis, dimension.attribute):.1f}")

            if analysis.tempo > 0:
                tags.setall("TBPM", [TBPM(encoding=TEXT_ENCODING, text=[str(int(round(analysis.tempo)))])])

            self._set_text(tags, TIMESTAMP_KEY, analysis.analysis_timestamp.isoformat())
            self._set_text(tags, MODEL_KEY, analysis.model_used)

            for name, explanation in analysis.explanations.items():
                dimension = get_dimension(name)
                key = dimension.tag_key if dimension else name
                self._set_text(tags, f"{EXPLANATION_PREFIX}{key}", explanation)

            tags.save(str(path))
        except (MutagenError, OSError) as e:
            raise TagStoreError(f"Could not write tags to {path}: {e}") from e

        return True

    def read(self, path: str) -> Optional[MoodAnalysis]:
        """
        Read mood tags from a file.

        Returns:
            MoodAnalysis, or None if the file carries no ID3 tag

        Raises:
            ResourceError: If the file doesn't exist
            TagStoreError: If the tag exists but cannot be parsed
        """
        path = Path(path)
        if not path.is_file():
            raise ResourceError(f"File not found: {path}")

        try:
            tags = self._load(path)
        except MutagenError as e:
            raise TagStoreError(f"Could not read tags from {path}: {e}") from e
        if tags is None:
            return None

        analysis = MoodAnalysis(file_path=str(path))
        for dimension in MOOD_DIMENSIONS:
            if dimension.attribute == "tempo":
                continue
            setattr(analysis, dimension.attribute, self._get_float(tags, dimension.tag_key))

        if "TBPM" in tags:
            try:
                analysis.tempo = float(tags["TBPM"].text[0])
            except (ValueError, IndexError):
                analysis.tempo = 0.0

        timestamp = self._get_text(tags, TIMESTAMP_KEY)
        if timestamp:
            try:
                analysis.analysis_timestamp = datetime.fromisoformat(timestamp)
            except ValueError:
                pass
        analysis.model_used = self._get_text(tags, MODEL_KEY)

        for frame in tags.getall("TXXX"):
            if frame.desc.startswith(EXPLANATION_PREFIX) and frame.text:
                key = frame.desc[len(EXPLANATION_PREFIX):]
                dimension = get_dimension(key)
                analysis.explanations[dimension.name if dimension else key] = str(frame.text[0])

        return analysis

    def create_backup(self, path: Path) -> Path:
        """Copy ``path`` to ``<path>.bak``, replacing an older backup."""
        target = backup_path(Path(path))
        try:
            shutil.copyfile(path, target)
        except OSError as e:
            raise TagStoreError(f"Could not back up {path}: {e}") from e
        return target

    def restore_backup(self, path: str) -> bool:
        """
        Restore a file from its ``.bak`` copy.

        Returns:
            True if restored, False if no backup exists
        """
        path = Path(path)
        source = backup_path(path)
        if not source.is_file():
            return False
        try:
            shutil.copyfile(source, path)
        except OSError as e:
            raise TagStoreError(f"Could not restore {path} from backup: {e}") from e
        return True

    def _load(self, path: Path) -> Optional[ID3]:
        try:
            return ID3(str(path))
        except ID3NoHeaderError:
            return None

    def _set_text(self, tags: ID3, description: str, value: str) -> None:
        tags.setall(
            f"TXXX:{description}",
            [TXXX(encoding=TEXT_ENCODING, desc=description, text=[value])],
        )

    def _get_text(self, tags: ID3, description: str) -> str:
        frame = tags.get(f"TXXX:{description}")
        if frame is None or not frame.text:
            return ""
        return str(frame.text[0])

    def _get_float(self, tags: ID3, description: str) -> float:
        try:
            return float(self._get_text(tags, description))
        except ValueError:
            return 0.0
