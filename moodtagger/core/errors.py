"""Exception types raised across MoodTagger."""


class MoodTaggerError(Exception):
    """Base class for all MoodTagger errors."""


class ResourceError(MoodTaggerError):
    """A file or directory is missing or unreadable."""


class DecodeError(MoodTaggerError):
    """Audio could not be decoded (corrupt or unsupported file)."""


class InferenceError(MoodTaggerError):
    """The mood inference service failed or answered with an error."""


class TagStoreError(MoodTaggerError):
    """Mood tags could not be read from or written to a file."""


class ConfigError(MoodTaggerError):
    """Configuration is missing, malformed or invalid."""


class AnalysisCancelled(MoodTaggerError):
    """Cancellation was requested between pipeline stages or files."""
