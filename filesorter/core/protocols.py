"""Interfaces the sort engine depends on."""
from __future__ import annotations

from abc import abstractmethod
from datetime import datetime
from pathlib import Path
from typing import AbstractSet, Callable, Optional, Protocol

from .models import FileTimestamps, ProgressReport


# Receives one snapshot per file, on the thread running the sort.
ProgressCallback = Callable[[ProgressReport], None]


class TimestampReader(Protocol):
    """Returns the dates used to order and bucket a file.

    Implementations:
    - services.timestamps.read_timestamps: os.stat, birth time where available
    - Test doubles returning fixed dates
    """

    def __call__(self, path: Path) -> FileTimestamps:
        ...


class ProgressReporter(Protocol):
    """Receives batch progress and user-facing messages from the engine.

    A phase is one rule's batch: start_phase gets the category and the
    number of files in it, update_phase the count handled so far.
    """

    @abstractmethod
    def start_phase(self, name: str, total: int) -> None:
        ...

    @abstractmethod
    def update_phase(self, completed: int, description: Optional[str] = None) -> None:
        ...

    @abstractmethod
    def end_phase(self) -> None:
        ...

    @abstractmethod
    def info(self, message: str) -> None:
        ...

    @abstractmethod
    def warning(self, message: str) -> None:
        ...

    @abstractmethod
    def error(self, message: str) -> None:
        ...


class FileOperations(Protocol):
    """Filesystem side of a transfer.

    No method replaces an existing file unless told to, and every failure
    is raised as OSError. In dry run every method is a no-op.
    """

    @property
    def dry_run(self) -> bool:
        ...

    @abstractmethod
    def build_output_directory(self, category: str, date: datetime) -> Path:
        """Folder a file of this category and selected date goes to."""
        ...

    @abstractmethod
    def copy_file(self, source: Path, target: Path, overwrite: bool = False) -> None:
        """Copy content and metadata; FileExistsError if target exists and not overwrite."""
        ...

    @abstractmethod
    def move_file(self, source: Path, target: Path) -> None:
        """Move source to a target that must not exist yet."""
        ...

    @abstractmethod
    def delete_file(self, path: Path) -> None:
        ...

    @abstractmethod
    def ensure_directory(self, path: Path) -> None:
        """Create path and its parents; existing folders are fine."""
        ...

    @abstractmethod
    def find_unique_path(
        self,
        directory: Path,
        filename: str,
        taken: AbstractSet[Path] = frozenset(),
    ) -> Path:
        """First free name of the form ``stem (n).ext``, skipping paths in taken."""
        ...
