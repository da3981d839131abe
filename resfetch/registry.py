"""
Resource registration for staged directories.

The pipeline reports the parent of every published destination to a
registry. Two implementations are provided:
* ``ResourceList`` keeps registrations in memory for the current process
* ``ResourceDatabase`` persists them to a JSON file shared across runs
"""

import json
from pathlib import Path
from threading import RLock
from typing import List, Protocol, Union

from .errors import CorruptedRegistryError
from .logging_config import get_logger

PathLike = Union[str, Path]


class ResourceRegistry(Protocol):
    """Anything that accepts resource root directories."""

    def register(self, path: PathLike) -> None:
        ...


class ResourceList:
    """In-memory registry; records every call, duplicates included."""

    def __init__(self) -> None:
        self.directories: List[str] = []
        self._lock = RLock()

    def register(self, path: PathLike) -> None:
        with self._lock:
            self.directories.append(str(path))


class ResourceDatabase:
    """Persists registered resource directories to a JSON array."""

    def __init__(self, database_path: PathLike):
        self.database_path = Path(database_path)
        self.directories: List[str] = []
        self._lock = RLock()
        self._log = get_logger(__name__)
        self._load_database()

    def _load_database(self) -> None:
        try:
            with open(self.database_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            self.directories = []
            return
        except json.JSONDecodeError as e:
            raise CorruptedRegistryError(
                f"{self.database_path} is corrupted and cannot be parsed: {e}. Delete it to start over."
            ) from e
        if not isinstance(data, list) or not all(isinstance(item, str) for item in data):
            raise CorruptedRegistryError(
                f"{self.database_path} must contain a JSON array of directory paths."
            )
        self.directories = list(data)
        self._log.debug("Loaded %d resource directories", len(self.directories))

    def _write_database(self) -> None:
        self.database_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.database_path, 'w', encoding='utf-8') as f:
            json.dump(self.directories, f, indent=2)

    def register(self, path: PathLike) -> None:
        """Add ``path``; registering the same directory twice is a no-op."""
        directory = str(path)
        with self._lock:
            if directory in self.directories:
                self._log.debug("Resource directory %s already registered", directory)
                return
            self.directories.append(directory)
            self._write_database()
        self._log.debug("Persisted resource directory %s to %s", directory, self.database_path)

    def get_all(self) -> List[str]:
        return list(self.directories)


__all__ = ["ResourceRegistry", "ResourceList", "ResourceDatabase"]
