"""Keyboard and timer events merged into one queue for the driving loop."""

import queue
import threading
import time
from typing import Callable, NamedTuple, Optional

from blessed.keyboard import Keystroke
from loguru import logger

from .keys import is_quit_key

INPUT = "input"
TICK = "tick"


class Event(NamedTuple):
    kind: str  # INPUT or TICK
    key: Optional[Keystroke] = None


class EventSource:
    """Two background producers feeding one consumer.

    The input thread returns after forwarding the quit key. The tick thread
    runs until the process exits; it is a daemon and never joined.
    """

    def __init__(self, read_key: Callable[[], Keystroke], tick_interval: float = 0.25):
        """
        Args:
            read_key: Blocking call returning the next keystroke (e.g. Terminal.inkey)
            tick_interval: Seconds between tick events
        """
        self._read_key = read_key
        self._tick_interval = tick_interval
        self._queue: "queue.Queue[Event]" = queue.Queue()
        self.input_thread = threading.Thread(
            target=self._input_loop, daemon=True, name="InputThread"
        )
        self.tick_thread = threading.Thread(
            target=self._tick_loop, daemon=True, name="TickThread"
        )

    def start(self) -> "EventSource":
        self.input_thread.start()
        self.tick_thread.start()
        return self

    def _input_loop(self) -> None:
        while True:
            try:
                key = self._read_key()
            except Exception:
                logger.exception("Keyboard reader failed")
                return
            if not key:
                continue
            self._queue.put(Event(INPUT, key))
            if is_quit_key(key):
                logger.debug("Quit key read - input thread exiting")
                return

    def _tick_loop(self) -> None:
        while True:
            self._queue.put(Event(TICK))
            time.sleep(self._tick_interval)

    def next(self, timeout: Optional[float] = None) -> Event:
        """Block for the next event.

        Raises:
            queue.Empty: If timeout elapses first
        """
        return self._queue.get(timeout=timeout)
