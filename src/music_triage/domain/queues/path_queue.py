"""
Line-delimited playlist files backed by an in-memory FIFO.

Each line of a playlist file is one path, byte-for-byte. Paths are held as
``os.fsdecode`` strings so undecodable bytes survive a load/save cycle.
"""

import os
from collections import deque
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, Union

from loguru import logger

from music_triage.exceptions import QueueIOError

MediaPath = str

Source = Union[str, os.PathLike, BinaryIO]


class PathQueue:
    """Ordered sequence of media paths: push to the back, pop from the front."""

    def __init__(self, paths: Optional[list[MediaPath]] = None):
        self._paths: deque[MediaPath] = deque()
        for path in paths or []:
            self.push_back(path)

    @classmethod
    def load(cls, source: Source) -> "PathQueue":
        """Read a playlist from a file path or binary stream.

        Blank lines are dropped; order is preserved.

        Raises:
            QueueIOError: If the file is missing or unreadable
        """
        if hasattr(source, "read"):
            name = getattr(source, "name", "<stream>")
            try:
                data = source.read()
            except OSError as e:
                raise QueueIOError(name, f"Cannot read playlist {name}: {e}") from e
        else:
            name = os.fspath(source)
            try:
                data = Path(name).read_bytes()
            except OSError as e:
                raise QueueIOError(name, f"Cannot read playlist {name}: {e}") from e

        queue = cls(
            [os.fsdecode(line) for line in data.split(b"\n") if line]
        )
        logger.debug(f"Loaded {len(queue)} paths from {name}")
        return queue

    def to_bytes(self) -> bytes:
        """Serialized form: one path per line, trailing newline, or empty."""
        if not self._paths:
            return b""
        return b"\n".join(os.fsencode(path) for path in self._paths) + b"\n"

    def save(self, destination: Union[str, os.PathLike]) -> None:
        """Overwrite destination with this queue.

        Writes a sibling temp file and renames it into place so readers
        never observe a partially written playlist.

        Raises:
            QueueIOError: If the file cannot be written
        """
        dest = Path(destination)
        temp_path = dest.with_name(f".{dest.name}.tmp")
        content = self.to_bytes()

        try:
            with open(temp_path, "wb") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, dest)
        except OSError as e:
            if temp_path.exists():
                try:
                    temp_path.unlink()
                except OSError:
                    logger.warning(f"Could not remove temp file: {temp_path}")
            raise QueueIOError(str(dest), f"Cannot write playlist {dest}: {e}") from e

        logger.debug(f"Saved {len(self._paths)} paths to {dest}")

    def pop_front(self) -> Optional[MediaPath]:
        if not self._paths:
            return None
        return self._paths.popleft()

    def peek(self) -> Optional[MediaPath]:
        """The front path without removing it, or None when empty."""
        if not self._paths:
            return None
        return self._paths[0]

    def push_back(self, path: MediaPath) -> None:
        """Append a path.

        Raises:
            ValueError: If the path contains a newline (unrepresentable on disk)
        """
        if "\n" in path:
            raise ValueError(f"Path contains a newline: {path!r}")
        self._paths.append(path)

    def paths(self) -> tuple[MediaPath, ...]:
        """Snapshot of the stored paths; later mutations do not show through."""
        return tuple(self._paths)

    def __iter__(self) -> Iterator[MediaPath]:
        return iter(self.paths())

    def __len__(self) -> int:
        return len(self._paths)

    def __bool__(self) -> bool:
        return bool(self._paths)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PathQueue):
            return NotImplemented
        return self._paths == other._paths

    def __repr__(self) -> str:
        return f"PathQueue({list(self._paths)!r})"
