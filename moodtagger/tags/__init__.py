"""Tags layer - Mood tag persistence, backup and restore."""

from .store import TagStore, backup_path

__all__ = ["TagStore", "backup_path"]
