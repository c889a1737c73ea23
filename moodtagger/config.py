"""Application configuration and its JSON persistence."""

import json
import os
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Tuple

from .core.constants import DEFAULT_HOP_LENGTH, DEFAULT_SR, DEFAULT_WINDOW_SIZE
from .core.errors import ConfigError

CONFIG_ENV_VAR = "MOODTAGGER_CONFIG"


def default_config_path() -> Path:
    """``$MOODTAGGER_CONFIG`` if set, else ``~/.config/moodtagger/config.json``."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "moodtagger" / "config.json"


@dataclass(frozen=True)
class AppConfig:
    """Settings for analysis, inference, tagging and batch processing.

    Attributes:
        sample_rate: Target sample rate for decoding
        frame_size: Onset analysis window in samples
        hop_size: Samples between onset frames
        mono: Downmix to mono when decoding
        ollama_base_url: Base URL of the text-generation API
        ollama_model: Model used for mood analysis
        temperature: Sampling temperature sent with each request
        max_tokens: Maximum tokens to generate per reply
        request_timeout: HTTP timeout in seconds
        max_workers: Files analyzed concurrently in a batch
        create_backups: Copy each file to ``<file>.bak`` before tagging
        preserve_existing_tags: Keep previously written mood frames
        write_tags: Write tags at all (False = test mode)
        recursive: Descend into subdirectories in batch mode
        verbose_output: Log per-file progress
        file_extensions: Extensions picked up in batch mode
        reanalyze: Analyze files that already carry mood tags
    """

    # Audio processing
    sample_rate: int = DEFAULT_SR
    frame_size: int = DEFAULT_WINDOW_SIZE
    hop_size: int = DEFAULT_HOP_LENGTH
    mono: bool = True

    # Inference service
    ollama_base_url: str = "http://localhost:11434/api"
    ollama_model: str = "llama3"
    temperature: float = 0.1
    max_tokens: int = 1000
    request_timeout: float = 120.0

    # Resources
    max_workers: int = 1

    # Tags
    create_backups: bool = True
    preserve_existing_tags: bool = True
    write_tags: bool = True

    # Processing
    recursive: bool = False
    verbose_output: bool = False
    file_extensions: Tuple[str, ...] = (".mp3",)
    reanalyze: bool = False

    def __post_init__(self):
        for name in ("sample_rate", "frame_size", "hop_size", "max_workers", "max_tokens"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise ConfigError(f"{name} must be a positive integer, got {value!r}")
        if self.hop_size > self.frame_size:
            raise ConfigError(
                f"hop_size ({self.hop_size}) must not exceed frame_size ({self.frame_size})"
            )
        if self.request_timeout <= 0:
            raise ConfigError(f"request_timeout must be positive, got {self.request_timeout!r}")
        object.__setattr__(
            self,
            "file_extensions",
            tuple(ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in self.file_extensions),
        )

    def with_overrides(self, **overrides: Any) -> "AppConfig":
        """Return a copy with the given fields replaced."""
        return replace(self, **overrides)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["file_extensions"] = list(self.file_extensions)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppConfig":
        """Build a config from a mapping; unknown keys are ignored."""
        if not isinstance(data, dict):
            raise ConfigError("Configuration must be a JSON object")
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        if "file_extensions" in values:
            extensions = values["file_extensions"]
            if isinstance(extensions, str):
                extensions = [extensions]
            values["file_extensions"] = tuple(extensions)
        try:
            return cls(**values)
        except (TypeError, AttributeError) as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

    @classmethod
    def load(cls, path: Path) -> "AppConfig":
        """
        Load configuration from a JSON file.

        Raises:
            ConfigError: If the file is missing, unreadable or invalid
        """
        path = Path(path)
        if not path.is_file():
            raise ConfigError(f"Configuration file not found: {path}")
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Could not read configuration {path}: {e}") from e
        return cls.from_dict(data)

    def save(self, path: Path) -> None:
        """Write configuration as indented JSON, creating parent directories."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_dict(), indent=2) + "\n", encoding="utf-8")

    @classmethod
    def create_default_if_missing(cls, path: Path) -> "AppConfig":
        """Load the configuration at ``path``, writing defaults first if absent."""
        path = Path(path)
        if path.is_file():
            return cls.load(path)
        config = cls()
        config.save(path)
        return config
