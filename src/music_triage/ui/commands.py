"""Command execution against the triage engine."""

from loguru import logger

from music_triage.core.output import log
from music_triage.domain.triage import EngineState, TriageEngine
from music_triage.exceptions import PlaybackError, QueueIOError

from . import keys
from .keys import Command


def execute_command(engine: TriageEngine, command: Command) -> tuple[bool, bool]:
    """
    Run one command.

    Playback failures and write failures are reported through log() and
    leave the engine usable.

    Args:
        engine: The triage engine
        command: Decoded command

    Returns:
        Tuple of (should_quit, needs_full_redraw)
    """
    match command.action:
        case keys.QUIT:
            return True, False

        case keys.WRITE:
            try:
                engine.persist()
                log("Playlists written", "success")
            except QueueIOError as e:
                log(f"Write failed: {e}", "error")
            return False, False

        case keys.TOGGLE_PAUSE:
            paused = engine.toggle_pause()
            if paused is not None:
                logger.debug(f"Paused={paused}")
            return False, False

        case keys.RATE:
            current = engine.current_path
            try:
                if engine.rate(command.rating):
                    log(f"Rated {command.rating.value}: {current}")
            except PlaybackError as e:
                logger.exception("Next item failed to open")
                log(f"Rated {command.rating.value}, but next item failed: {e}", "error")
            return False, True

        case keys.RETRY:
            if engine.state is not EngineState.STALLED:
                return False, False
            try:
                engine.retry()
                log(f"Now playing: {engine.current_path}", "success")
            except PlaybackError as e:
                log(f"Still cannot open: {e}", "error")
            return False, True

        case keys.REDRAW:
            return False, True

    return False, False
