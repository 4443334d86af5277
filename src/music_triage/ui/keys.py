"""Keystroke decoding into triage commands.

Key map:
    Esc / q     quit (playlists are written on the way out)
    w           write playlists now
    space       pause / resume
    1 2 4 6 8 0 rate 1, 2, 4, 6, 8, 10
    r           retry opening the current item after an error
    Ctrl+L      redraw the screen
"""

from dataclasses import dataclass
from typing import Optional

from blessed.keyboard import Keystroke

from music_triage.domain.queues import Rating

QUIT = "quit"
WRITE = "write"
TOGGLE_PAUSE = "toggle_pause"
RATE = "rate"
RETRY = "retry"
REDRAW = "redraw"

RATING_KEYS = {
    "1": Rating.R01,
    "2": Rating.R02,
    "4": Rating.R04,
    "6": Rating.R06,
    "8": Rating.R08,
    "0": Rating.R10,
}

CHAR_ACTIONS = {
    "q": QUIT,
    "w": WRITE,
    " ": TOGGLE_PAUSE,
    "r": RETRY,
    "\x0c": REDRAW,  # Ctrl+L
}


@dataclass(frozen=True)
class Command:
    """A logical command decoded from one keystroke."""

    action: str
    rating: Optional[Rating] = None


def is_quit_key(key: Keystroke) -> bool:
    return key.name == "KEY_ESCAPE" or str(key) == "q"


def parse_key(key: Keystroke) -> Optional[Command]:
    """
    Decode a keystroke.

    Args:
        key: blessed Keystroke

    Returns:
        The matching Command, or None for unmapped keys
    """
    if not key:
        return None
    if is_quit_key(key):
        return Command(QUIT)

    # Sequences (arrows, function keys) never map to a command
    if key.is_sequence:
        return None

    char = str(key)
    if char in RATING_KEYS:
        return Command(RATE, RATING_KEYS[char])
    action = CHAR_ACTIONS.get(char)
    if action is None:
        return None
    return Command(action)
