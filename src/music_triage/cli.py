"""
Music Triage CLI - entry point

Loads the seven playlists from the playlist directory, starts playback of
the first todo item and hands control to the interactive UI.
"""

import argparse
import sys

from loguru import logger

from music_triage.core.config import get_log_file_path, load_config
from music_triage.core.console import print_error, print_notice
from music_triage.core.output import setup_loguru
from music_triage.domain.playback import check_mpv_available, mpv_sink_factory
from music_triage.domain.queues import QueueSet
from music_triage.domain.triage import TriageEngine
from music_triage.exceptions import AudioDeviceError, QueueIOError


def main() -> None:
    """Main entry point for the music-triage command."""
    parser = argparse.ArgumentParser(
        prog="music-triage",
        description=(
            "Play todo.m3u8 one track at a time and file each into a rating "
            "playlist. Keys: 1 2 4 6 8 0 rate, space pause, w write, "
            "r retry, Ctrl+L redraw, Esc/q quit."
        ),
    )
    parser.parse_args()

    sys.exit(run())


def run() -> int:
    """Run a triage session; returns the process exit code."""
    config = load_config()
    setup_loguru(get_log_file_path(config), config.logging.level)

    playlist_dir = config.playlist_dir()
    try:
        queues = QueueSet.load_all(playlist_dir, config.playlists.extension)
    except QueueIOError as e:
        logger.error(f"Startup failed: {e}")
        print_error(str(e))
        print_error(
            f"Expected todo.{config.playlists.extension} and rating-01..rating-10 "
            f"playlists in {playlist_dir.resolve()}"
        )
        return 1

    if queues.todo and not check_mpv_available(config.player.mpv_path):
        logger.error(f"mpv not found: {config.player.mpv_path}")
        print_error(f"mpv is required for playback but '{config.player.mpv_path}' was not found")
        return 1

    try:
        engine = TriageEngine(queues, mpv_sink_factory(config.player))
    except AudioDeviceError as e:
        logger.error(f"No audio output: {e}")
        print_error(f"No audio output: {e}")
        return 1

    # Imported late so non-interactive failures above never touch the terminal
    from music_triage.ui import run_interactive_ui

    try:
        run_interactive_ui(engine, config)
    except QueueIOError as e:
        logger.exception("Final write failed")
        print_error(f"Could not write playlists: {e}")
        return 1

    counts = engine.counts()
    print_notice(
        f"Playlists written. Remaining: {counts['todo']}, rated so far: "
        f"{sum(count for name, count in counts.items() if name != 'todo')}",
        style="green",
    )
    return 0


if __name__ == "__main__":
    main()
