"""Persistence of a dataset to its JSON file."""

import asyncio
import os
import stat
import tempfile
from pathlib import Path
from typing import Callable, TypeVar

from ..models.dataset import Dataset

T = TypeVar("T")


class DatasetStore:
    """A dataset and the file it was read from.

    All changes go through :meth:`commit`, which applies the change and
    rewrites the file under one lock, so concurrently confirming chunks are
    written one after the other.
    """

    def __init__(self, path: Path | str, dataset: Dataset):
        self.path = Path(path)
        self.dataset = dataset
        self.writes = 0
        self._lock = asyncio.Lock()

    @classmethod
    def load(cls, path: Path | str) -> "DatasetStore":
        return cls(path, Dataset.load(path))

    def save(self) -> None:
        """Write the dataset to a temporary file, then rename it over the target."""
        fd, tmp_path = tempfile.mkstemp(
            prefix=f".{self.path.name}.",
            suffix=".tmp",
            dir=self.path.parent,
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(self.dataset.dumps())
                f.flush()
                os.fsync(f.fileno())
            if self.path.exists():
                os.chmod(tmp_path, stat.S_IMODE(self.path.stat().st_mode))
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
        self.writes += 1

    async def commit(self, mutate: Callable[[Dataset], T]) -> T:
        """Apply a change to the dataset and persist it."""
        async with self._lock:
            result = mutate(self.dataset)
            self.save()
            return result
