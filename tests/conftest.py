"""Shared fixtures: tagged audio files, a recording sink and a scripted terminal."""

import io
import struct
from pathlib import Path
from typing import Optional

import pytest
from blessed import Terminal
from blessed.keyboard import Keystroke

from music_triage.domain.queues import QueueSet
from music_triage.exceptions import DecoderError
from music_triage.ui.events import INPUT, TICK, Event


def make_flac(tags: Optional[list[tuple[str, str]]] = None) -> bytes:
    """Build a minimal FLAC stream: STREAMINFO plus an optional Vorbis comment block."""
    # 20-bit sample rate, 3-bit channels-1, 5-bit bps-1, 36-bit total samples
    packed = (44100 << 44) | (1 << 41) | (15 << 36)
    streaminfo = (
        struct.pack(">HH", 4096, 4096)
        + (0).to_bytes(3, "big")
        + (0).to_bytes(3, "big")
        + packed.to_bytes(8, "big")
        + bytes(16)
    )

    blocks = []
    if tags is None:
        blocks.append((0, streaminfo))
    else:
        vendor = b"music-triage tests"
        comment = struct.pack("<I", len(vendor)) + vendor + struct.pack("<I", len(tags))
        for key, value in tags:
            entry = f"{key}={value}".encode("utf-8")
            comment += struct.pack("<I", len(entry)) + entry
        blocks.append((0, streaminfo))
        blocks.append((4, comment))

    data = b"fLaC"
    for i, (block_type, payload) in enumerate(blocks):
        last = 0x80 if i == len(blocks) - 1 else 0
        data += bytes([last | block_type]) + len(payload).to_bytes(3, "big") + payload
    return data


def write_track(directory: Path, name: str, title: Optional[str] = None) -> str:
    """Write a tagged FLAC file and return its path as stored in playlists."""
    path = directory / name
    path.write_bytes(make_flac([("TITLE", title or name), ("ARTIST", "Test Artist")]))
    return str(path)


def write_playlists(directory: Path, todo: list[str], **buckets: list[str]) -> QueueSet:
    """Create all seven playlist files (empty unless given) and load them."""
    QueueSet.ensure_files(directory)
    (directory / "todo.m3u8").write_bytes(
        "".join(f"{path}\n" for path in todo).encode()
    )
    for name, paths in buckets.items():
        queue_name = name.replace("_", "-")
        (directory / f"{queue_name}.m3u8").write_bytes(
            "".join(f"{path}\n" for path in paths).encode()
        )
    return QueueSet.load_all(directory)


class FakeSink:
    """Stands in for mpv; records what happens to it in a shared journal."""

    def __init__(self, journal: list, fail_paths: set):
        self.journal = journal
        self.fail_paths = fail_paths
        self.loaded: Optional[str] = None
        self.paused = True
        self.closed = False

    def load(self, path: str) -> None:
        if path in self.fail_paths:
            raise DecoderError(f"cannot decode {path}", path=path)
        self.loaded = path
        self.journal.append(("load", path))

    def set_paused(self, paused: bool) -> bool:
        self.paused = paused
        self.journal.append(("pause" if paused else "play", self.loaded))
        return True

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self.journal.append(("close", self.loaded))


class SinkRecorder:
    """Sink factory that keeps every sink it made."""

    def __init__(self):
        self.journal: list = []
        self.sinks: list[FakeSink] = []
        self.fail_paths: set = set()

    def __call__(self) -> FakeSink:
        sink = FakeSink(self.journal, self.fail_paths)
        self.sinks.append(sink)
        return sink

    def open_sinks(self) -> list[FakeSink]:
        return [sink for sink in self.sinks if not sink.closed]


@pytest.fixture
def sinks() -> SinkRecorder:
    return SinkRecorder()


@pytest.fixture
def flac():
    """Builder for in-memory FLAC payloads."""
    return make_flac


@pytest.fixture
def make_track(tmp_path):
    """Write a tagged track into tmp_path and return its path."""

    def _make(name: str, title: Optional[str] = None) -> str:
        return write_track(tmp_path, name, title)

    return _make


@pytest.fixture
def make_playlists(tmp_path):
    """Write the seven playlists into tmp_path and load them as a QueueSet."""

    def _make(todo: list[str], **buckets: list[str]) -> QueueSet:
        return write_playlists(tmp_path, todo, **buckets)

    return _make


class ScriptedEvents:
    """Event source replaying fixed keys; running out behaves like Ctrl+C."""

    def __init__(self, *chars: str):
        self._events = []
        for char in chars:
            self._events.append(Event(TICK))
            self._events.append(Event(INPUT, Keystroke(char)))

    def next(self, timeout=None) -> Event:
        if not self._events:
            raise KeyboardInterrupt
        return self._events.pop(0)


@pytest.fixture
def scripted_events():
    return ScriptedEvents


@pytest.fixture
def term():
    """A styled terminal writing into memory instead of a tty."""
    return Terminal(kind="xterm-256color", stream=io.StringIO(), force_styling=True)
