"""Music Triage - rate a queue of audio files one keystroke at a time."""

__version__ = "0.1.0"
