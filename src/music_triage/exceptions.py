"""Exceptions raised by the queue, playback and triage layers."""

from typing import Optional


class TriageError(Exception):
    """Base exception for music-triage operations."""

    pass


class QueueIOError(TriageError):
    """Raised when a playlist file cannot be read or written."""

    def __init__(self, path: str, message: Optional[str] = None):
        self.path = path
        super().__init__(message or f"Playlist file error: {path}")


class PlaybackError(TriageError):
    """Base exception for failures while opening or driving a session."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message)


class MediaReadError(PlaybackError):
    """Raised when an audio file cannot be read from disk."""

    pass


class DecoderError(PlaybackError):
    """Raised when the audio payload is unsupported or corrupt."""

    pass


class TagParseError(PlaybackError):
    """Raised when the container's tag block is malformed."""

    pass


class AudioDeviceError(PlaybackError):
    """Raised when no output is available or the output rejects a session."""

    pass
