"""
A single playback session: one file, one sink, looping until torn down.
"""

from pathlib import Path
from typing import Optional

from loguru import logger

from music_triage.exceptions import MediaReadError

from .metadata import TrackMetadata, extract_metadata
from .sink import AudioSink, SinkFactory


class PlaybackSession:
    """Binds one file to its own sink.

    Sessions start paused; the engine calls ``activate`` once the previous
    session has been closed. A session never finishes by itself.
    """

    def __init__(self, path: str, sink: AudioSink):
        self.path = path
        self._sink: Optional[AudioSink] = sink
        self._paused = True

    @classmethod
    def open(
        cls, path: str, sink_factory: SinkFactory
    ) -> tuple["PlaybackSession", TrackMetadata]:
        """Read the file, extract its tags and bind it to a fresh sink.

        Args:
            path: File to play
            sink_factory: Creates the sink that will own the audio

        Returns:
            Tuple of (session, metadata lines)

        Raises:
            MediaReadError: If the file cannot be read
            DecoderError: If the audio is unsupported or corrupt
            TagParseError: If the tag block is malformed
            AudioDeviceError: If no sink could be created
        """
        try:
            data = Path(path).read_bytes()
        except OSError as e:
            raise MediaReadError(f"Cannot read {path}: {e}", path=path) from e

        metadata = extract_metadata(data, path)

        sink = sink_factory()
        try:
            sink.load(path)
        except BaseException:
            sink.close()
            raise

        logger.debug(f"Session opened for {path} ({len(data)} bytes)")
        return cls(path, sink), metadata

    @property
    def is_paused(self) -> bool:
        return self._paused

    @property
    def is_closed(self) -> bool:
        return self._sink is None

    def activate(self) -> None:
        """Start audible playback."""
        if self._sink is None:
            return
        if self._sink.set_paused(False):
            self._paused = False

    def toggle_pause(self) -> bool:
        """Flip paused/playing and return the new paused flag."""
        if self._sink is None:
            return self._paused
        if self._sink.set_paused(not self._paused):
            self._paused = not self._paused
        return self._paused

    def close(self) -> None:
        if self._sink is None:
            return
        sink, self._sink = self._sink, None
        sink.close()
        logger.debug(f"Session closed for {self.path}")
