"""Terminal UI built on blessed: input events, rendering and the driving loop."""

from .app import main_loop, run_interactive_ui

__all__ = ["main_loop", "run_interactive_ui"]
