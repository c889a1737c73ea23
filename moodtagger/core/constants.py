"""Global constants for MoodTagger."""

# Audio processing defaults
DEFAULT_SR = 44100
DEFAULT_HOP_LENGTH = 512
DEFAULT_WINDOW_SIZE = 1024

# Fixed array lengths of the feature vector
WAVEFORM_PREVIEW_POINTS = 10000
ENVELOPE_POINTS = 1000
BEAT_HISTOGRAM_MIN_BPM = 60
BEAT_HISTOGRAM_BINS = 100  # one bin per integer BPM, 60..159
MFCC_COEFFICIENTS = 13
SPECTRAL_DATA_POINTS = 1000

# Tempo search
MIN_BPM = 60.0
MAX_BPM = 180.0
DEFAULT_BPM = 128.0  # electronic music default

# Genre keyword -> typical tempo, checked in order
GENRE_TEMPOS = (
    (("house", "dance", "edm"), 128.0),
    (("techno",), 130.0),
    (("trance",), 138.0),
    (("drum and bass", "drum & bass", "drum&bass", "drum n bass", "dnb", "jungle"), 174.0),
    (("dubstep",), 140.0),
    (("hip hop", "hip-hop", "hiphop", "rap"), 95.0),
    (("rock",), 120.0),
    (("metal",), 140.0),
    (("jazz",), 100.0),
    (("ambient", "chill"), 85.0),
)
