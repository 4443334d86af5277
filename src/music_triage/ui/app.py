"""Main event loop and entry point for the blessed UI."""

import sys
from typing import Optional

from blessed import Terminal
from loguru import logger

from music_triage.core.config import Config
from music_triage.core.output import clear_ui_mode, drain_pending_messages, set_ui_mode
from music_triage.domain.triage import TriageEngine

from .commands import execute_command
from .events import TICK, EventSource
from .keys import parse_key
from .render import render_screen


def run_interactive_ui(
    engine: TriageEngine,
    config: Config,
    term: Optional[Terminal] = None,
    events: Optional[EventSource] = None,
) -> None:
    """
    Run the interactive loop, then stop playback and write the playlists.

    On quit, exhaustion or Ctrl+C, playback is stopped first and the
    playlists are written before the terminal is released. A write failure
    propagates once the terminal has been restored.

    Raises:
        QueueIOError: If the final write fails
    """
    if term is None:
        term = Terminal()

    with term.fullscreen(), term.cbreak(), term.hidden_cursor():
        set_ui_mode()
        try:
            main_loop(term, engine, config, events)
        except KeyboardInterrupt:
            logger.info("Ctrl+C detected - writing playlists before exit")
        finally:
            clear_ui_mode()
            engine.close()
        engine.persist()


def main_loop(
    term: Terminal, engine: TriageEngine, config: Config, events: Optional[EventSource] = None
) -> None:
    """
    Render, wait for an event, act on it; until quit or todo is exhausted.

    Args:
        term: blessed Terminal instance
        engine: Triage engine; only touched from this thread
        config: Application configuration
        events: Event source (created from the terminal if not given)
    """
    if events is None:
        events = EventSource(term.inkey, config.ui.tick_interval).start()

    status: Optional[tuple[str, str]] = None
    needs_full_redraw = True

    while not engine.is_done():
        for message, color in drain_pending_messages():
            status = (message, color)

        if needs_full_redraw:
            sys.stdout.write(term.clear)
            needs_full_redraw = False
        render_screen(term, engine, status, config.ui.show_bucket_counts)

        event = events.next()
        if event.kind == TICK:
            continue

        command = parse_key(event.key)
        if command is None:
            continue

        should_quit, needs_full_redraw = execute_command(engine, command)
        if should_quit:
            logger.info("Quit requested")
            break
    else:
        logger.info("All items rated")
