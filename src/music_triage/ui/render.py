"""Screen rendering: Stats, Metadata and Playlist panes plus a status line."""

import sys
from typing import Optional

from blessed import Terminal

from music_triage.domain.queues import BUCKET_NAMES
from music_triage.domain.triage import EngineState, TriageEngine

STATS_HEIGHT = 4
STATUS_HEIGHT = 1

STATE_LABELS = {
    EngineState.LOADED: "playing",
    EngineState.STALLED: "stalled (r to retry)",
    EngineState.EXHAUSTED: "done",
}


def write_at(
    term: Terminal, x: int, y: int, content: str, *, clear: bool = True
) -> None:
    """Write content at position, clearing the rest of the line by default."""
    if clear:
        sys.stdout.write(term.move_xy(x, y) + term.clear_eol + content)
    else:
        sys.stdout.write(term.move_xy(x, y) + content)


def display_path(path: str) -> str:
    """Printable form of a path whose bytes may not be valid UTF-8."""
    return path.encode("utf-8", "surrogateescape").decode("utf-8", "replace")


def calculate_layout(height: int) -> dict[str, int]:
    """
    Pure function: calculate y-positions for all regions.

    Metadata takes a quarter of the space below Stats, Playlist the rest.
    """
    body_height = max(0, height - STATS_HEIGHT - STATUS_HEIGHT)
    metadata_height = max(3, body_height // 4) if body_height >= 6 else body_height // 2
    playlist_height = max(0, body_height - metadata_height)

    return {
        "stats_y": 0,
        "stats_height": STATS_HEIGHT,
        "metadata_y": STATS_HEIGHT,
        "metadata_height": metadata_height,
        "playlist_y": STATS_HEIGHT + metadata_height,
        "playlist_height": playlist_height,
        "status_y": max(0, height - STATUS_HEIGHT),
    }


def _render_pane(
    term: Terminal, title: str, lines: list[str], y_start: int, height: int
) -> None:
    """Title row followed by as many lines as fit; remaining rows are cleared."""
    if height <= 0:
        return
    write_at(term, 0, y_start, term.bold_cyan(f"── {title} ".ljust(term.width, "─")[: term.width]))
    visible = lines[: height - 1]
    for i, line in enumerate(visible):
        write_at(term, 1, y_start + 1 + i, line[: max(0, term.width - 1)])
    for i in range(len(visible), height - 1):
        write_at(term, 0, y_start + 1 + i, "")


def stats_lines(engine: TriageEngine, show_bucket_counts: bool = True) -> list[str]:
    counts = engine.counts()
    state = STATE_LABELS[engine.state]
    if engine.state is EngineState.LOADED and engine.is_paused:
        state = "paused"

    lines = [f"Remaining: {counts['todo']}    State: {state}"]
    if show_bucket_counts:
        lines.append(
            "  ".join(f"{name}: {counts[name]}" for name in BUCKET_NAMES)
        )
    return lines


def render_screen(
    term: Terminal,
    engine: TriageEngine,
    status: Optional[tuple[str, str]] = None,
    show_bucket_counts: bool = True,
) -> None:
    """Draw every pane from the engine's current snapshot."""
    layout = calculate_layout(term.height)

    _render_pane(
        term,
        "Stats",
        stats_lines(engine, show_bucket_counts),
        layout["stats_y"],
        layout["stats_height"],
    )
    _render_pane(
        term,
        "Metadata",
        engine.metadata(),
        layout["metadata_y"],
        layout["metadata_height"],
    )
    _render_pane(
        term,
        "Playlist",
        [display_path(path) for path in engine.paths()],
        layout["playlist_y"],
        layout["playlist_height"],
    )

    if status:
        text, color = status
        color_func = getattr(term, color, term.white)
        write_at(term, 0, layout["status_y"], color_func(text[: term.width]))
    else:
        write_at(term, 0, layout["status_y"], "")

    sys.stdout.flush()
