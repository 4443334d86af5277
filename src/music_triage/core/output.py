"""
Unified output system using Loguru.
User-facing messages go to the log file and either stdout or the blessed status line.
"""

import threading
from pathlib import Path

from loguru import logger

# Set while the blessed UI owns the terminal
_ui_mode_active = False
_ui_mode_lock = threading.Lock()

# Messages waiting for the driving loop to show them on the status line
_pending_messages: list[tuple[str, str]] = []
_pending_messages_lock = threading.Lock()

LEVEL_COLORS = {
    "debug": "cyan",
    "info": "white",
    "success": "green",
    "warning": "yellow",
    "error": "red",
}


def setup_loguru(log_file: Path, level: str = "INFO") -> None:
    """
    Configure loguru for file-only logging (blessed UI handles console display).

    Args:
        log_file: Path to log file
        level: Minimum level for file logging (DEBUG, INFO, WARNING, ERROR)
    """
    logger.remove()

    log_file.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_file,
        rotation="10 MB",
        retention=5,
        level=level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} | {message}",
        enqueue=False,  # Synchronous writes
    )

    logger.info(f"Loguru initialized: {log_file} (level={level})")


def set_ui_mode() -> None:
    """Enable UI mode - suppresses stdout printing, queues messages for the status line."""
    global _ui_mode_active
    with _ui_mode_lock:
        _ui_mode_active = True
    logger.debug("UI mode enabled - log() will queue status messages")


def clear_ui_mode() -> None:
    """Disable UI mode - restores stdout printing."""
    global _ui_mode_active
    with _ui_mode_lock:
        _ui_mode_active = False
    logger.debug("UI mode disabled - log() will print to stdout")


def drain_pending_messages() -> list[tuple[str, str]]:
    """
    Get and clear all pending status messages.

    Returns:
        List of (message, color) tuples, oldest first
    """
    global _pending_messages
    with _pending_messages_lock:
        messages = _pending_messages[:]
        _pending_messages = []
        return messages


def log(message: str, level: str = "info") -> None:
    """
    Unified logging: writes to file AND shows the message to the operator.

    Args:
        message: User-facing message
        level: Log level (debug, info, success, warning, error)
    """
    # opt(depth=1) attributes the record to the caller, not this helper
    logger.opt(depth=1).log(level.upper(), message)

    with _ui_mode_lock:
        ui_mode = _ui_mode_active

    if ui_mode:
        with _pending_messages_lock:
            _pending_messages.append((message, LEVEL_COLORS.get(level, "white")))
    else:
        print(message)
