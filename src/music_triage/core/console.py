"""Rich consoles for output outside the blessed UI (startup, shutdown, fatal errors)."""

from rich.console import Console

_console: Console | None = None
_error_console: Console | None = None


def get_console() -> Console:
    """Get or create the stdout Rich Console."""
    global _console
    if _console is None:
        _console = Console(highlight=False)
    return _console


def get_error_console() -> Console:
    """Get or create the stderr Rich Console."""
    global _error_console
    if _error_console is None:
        _error_console = Console(stderr=True, highlight=False)
    return _error_console


def print_error(message: str) -> None:
    """Print an error to stderr in bold red.

    Markup in the message is not interpreted; paths may contain brackets.
    """
    get_error_console().print(message, style="bold red", markup=False)


def print_notice(message: str, style: str | None = None) -> None:
    """Print an informational line to stdout."""
    get_console().print(message, style=style, markup=False)
