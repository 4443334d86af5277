"""
The fixed set of seven playlists: ``todo`` plus six rating buckets.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Union

from loguru import logger

from .path_queue import PathQueue

TODO = "todo"


class Rating(Enum):
    """Rating buckets an item can be filed into."""

    R01 = 1
    R02 = 2
    R04 = 4
    R06 = 6
    R08 = 8
    R10 = 10

    @property
    def queue_name(self) -> str:
        return f"rating-{self.value:02d}"


# Buckets in save order; todo is written after all of them
BUCKET_NAMES = tuple(rating.queue_name for rating in Rating)
QUEUE_NAMES = (TODO,) + BUCKET_NAMES


@dataclass
class QueueSet:
    """All seven playlists plus where they live on disk.

    Attributes:
        directory: Directory holding the playlist files
        extension: File extension shared by every playlist (without dot)
        queues: Mapping of queue name to PathQueue, always all seven names
    """

    directory: Path
    extension: str = "m3u8"
    queues: dict[str, PathQueue] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.directory = Path(self.directory)
        for name in QUEUE_NAMES:
            self.queues.setdefault(name, PathQueue())
        unknown = set(self.queues) - set(QUEUE_NAMES)
        if unknown:
            raise ValueError(f"Unknown queue names: {sorted(unknown)}")

    @classmethod
    def load_all(
        cls, directory: Union[str, Path], extension: str = "m3u8"
    ) -> "QueueSet":
        """Load every playlist; the first unreadable file aborts the load.

        Raises:
            QueueIOError: If any playlist file is missing or unreadable
        """
        directory = Path(directory)
        queues = {}
        for name in QUEUE_NAMES:
            queues[name] = PathQueue.load(directory / f"{name}.{extension}")

        queue_set = cls(directory=directory, extension=extension, queues=queues)
        logger.info(
            f"Loaded playlists from {directory}: "
            + ", ".join(f"{name}={count}" for name, count in queue_set.counts().items())
        )
        return queue_set

    @staticmethod
    def ensure_files(directory: Union[str, Path], extension: str = "m3u8") -> list[Path]:
        """Create any missing playlist files as empty files.

        Returns:
            Paths of the files that were created
        """
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        created = []
        for name in QUEUE_NAMES:
            path = directory / f"{name}.{extension}"
            if not path.exists():
                path.touch()
                created.append(path)
        return created

    def save_all(self) -> None:
        """Write all buckets, then todo.

        If the process dies part way through, an item may appear both in a
        bucket and in todo, but never in neither.

        Raises:
            QueueIOError: On the first file that fails to write
        """
        for name in BUCKET_NAMES + (TODO,):
            self.queues[name].save(self.file_path(name))
        logger.debug(f"Saved all playlists to {self.directory}")

    def file_path(self, name: str) -> Path:
        if name not in self.queues:
            raise KeyError(name)
        return self.directory / f"{name}.{self.extension}"

    @property
    def todo(self) -> PathQueue:
        return self.queues[TODO]

    def bucket(self, rating: Rating) -> PathQueue:
        return self.queues[rating.queue_name]

    def counts(self) -> dict[str, int]:
        """Queue name to number of entries, todo first."""
        return {name: len(self.queues[name]) for name in QUEUE_NAMES}
