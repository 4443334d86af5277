"""
Triage state machine.

The item being played is always the front of ``todo``. Rating it pops it,
prepares the next item, and files the popped path into the chosen bucket.
"""

from enum import Enum
from typing import Optional

from loguru import logger

from music_triage.domain.playback import PlaybackSession, SinkFactory, TrackMetadata
from music_triage.domain.queues import MediaPath, QueueSet, Rating
from music_triage.exceptions import AudioDeviceError, PlaybackError


class EngineState(Enum):
    LOADED = "loaded"
    STALLED = "stalled"  # todo has items but the front could not be opened
    EXHAUSTED = "exhausted"


class TriageEngine:
    """Owns the playlists and the single active playback session.

    All methods must be called from one thread.
    """

    def __init__(self, queues: QueueSet, sink_factory: SinkFactory):
        """Bind the front of todo, if any.

        A front item that fails to open leaves the engine STALLED rather than
        raising, except when there is no audio output at all.

        Raises:
            AudioDeviceError: If the first session cannot get a sink
        """
        self._queues = queues
        self._sink_factory = sink_factory
        self._session: Optional[PlaybackSession] = None
        self._metadata: Optional[TrackMetadata] = None
        self._last_error: Optional[PlaybackError] = None

        try:
            self._advance()
        except AudioDeviceError:
            raise
        except PlaybackError as e:
            logger.error(f"Could not open first item: {e}")

    # Snapshot accessors used by the render layer

    @property
    def state(self) -> EngineState:
        if self._session is not None:
            return EngineState.LOADED
        if self._queues.todo:
            return EngineState.STALLED
        return EngineState.EXHAUSTED

    def is_done(self) -> bool:
        return self.state is EngineState.EXHAUSTED

    @property
    def current_path(self) -> Optional[MediaPath]:
        return self._session.path if self._session else None

    @property
    def last_error(self) -> Optional[PlaybackError]:
        return self._last_error

    @property
    def is_paused(self) -> bool:
        return self._session.is_paused if self._session else False

    @property
    def queues(self) -> QueueSet:
        return self._queues

    def paths(self) -> tuple[MediaPath, ...]:
        """Remaining todo paths, current item first."""
        return self._queues.todo.paths()

    def metadata(self) -> TrackMetadata:
        return list(self._metadata or [])

    def counts(self) -> dict[str, int]:
        return self._queues.counts()

    # Transitions

    def _teardown(self) -> None:
        session, self._session = self._session, None
        self._metadata = None
        if session is not None:
            session.close()

    def _advance(self) -> None:
        """Bind the current front of todo, replacing any previous session.

        The replacement is fully built before the predecessor is closed, and
        only starts playing once the predecessor is gone.
        """
        path = self._queues.todo.peek()
        if path is None:
            self._teardown()
            self._last_error = None
            logger.info("todo exhausted")
            return

        try:
            session, metadata = PlaybackSession.open(path, self._sink_factory)
        except PlaybackError as e:
            self._teardown()
            self._last_error = e
            raise

        previous = self._session
        self._session, self._metadata = session, metadata
        self._last_error = None
        if previous is not None:
            previous.close()
        session.activate()
        logger.info(f"Now playing: {path}")

    def rate(self, rating: Rating) -> bool:
        """File the current item under ``rating`` and move on to the next.

        The rating is recorded even if the next item fails to open; that
        failure is re-raised afterwards and leaves the engine STALLED.

        Returns:
            False if there was no current item to rate

        Raises:
            PlaybackError: If the next item could not be opened
        """
        if self._session is None:
            return False

        item = self._queues.todo.pop_front()
        try:
            self._advance()
        finally:
            self._queues.bucket(rating).push_back(item)
            logger.info(f"Rated {item} -> {rating.queue_name}")
        return True

    def retry(self) -> bool:
        """Re-attempt opening the front of todo after a failure.

        Returns:
            False if the engine was not STALLED

        Raises:
            PlaybackError: If the item still cannot be opened
        """
        if self.state is not EngineState.STALLED:
            return False
        logger.info(f"Retrying {self._queues.todo.peek()}")
        self._advance()
        return True

    def toggle_pause(self) -> Optional[bool]:
        """Toggle the active session; returns the new paused flag or None."""
        if self._session is None:
            return None
        return self._session.toggle_pause()

    def persist(self) -> None:
        """Write every playlist to disk.

        Raises:
            QueueIOError: If a playlist cannot be written
        """
        self._queues.save_all()
        logger.info("Playlists written: " + ", ".join(
            f"{name}={count}" for name, count in self.counts().items()
        ))

    def close(self) -> None:
        """Stop playback; playlists are left untouched."""
        self._teardown()
