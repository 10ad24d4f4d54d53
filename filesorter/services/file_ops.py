"""File operations service."""
from __future__ import annotations

import logging
import shutil
from datetime import datetime
from pathlib import Path
from typing import AbstractSet


logger = logging.getLogger(__name__)


# English month names so folder names do not depend on the user's locale
MONTH_NAMES = {
    1: "January", 2: "February", 3: "March", 4: "April",
    5: "May", 6: "June", 7: "July", 8: "August",
    9: "September", 10: "October", 11: "November", 12: "December"
}


def month_folder_name(date: datetime) -> str:
    """Folder name for a month, e.g. ``03 March``."""
    return f"{date.month:02d} {MONTH_NAMES[date.month]}"


def suffixed_name(filename: str, counter: int) -> str:
    """Insert `` (counter)`` before the extension: ``a.txt`` -> ``a (1).txt``.

    Everything from the last dot is the extension, so a file named ``.txt``
    becomes `` (1).txt``.
    """
    stem, dot, extension = filename.rpartition(".")
    if not dot:
        return f"{filename} ({counter})"
    return f"{stem} ({counter}).{extension}"


class FileManager:
    """Handles file operations for the sort engine.

    Failures are not caught here: every method raises OSError and the
    caller decides what that means for the running operation.
    """

    def __init__(self, output_root: Path, dry_run: bool = False):
        """Initialize file manager.

        Args:
            output_root: Root directory for output.
            dry_run: If True, never create folders or touch files.
        """
        self._output_root = output_root
        self._dry_run = dry_run

    @property
    def output_root(self) -> Path:
        return self._output_root

    @property
    def dry_run(self) -> bool:
        return self._dry_run

    def copy_file(self, source: Path, target: Path, overwrite: bool = False) -> None:
        """Copy a file with metadata preservation.

        Args:
            source: Source file path.
            target: Target file path.
            overwrite: Replace target if it already exists.

        Raises:
            FileExistsError: If target exists and overwrite is False.
        """
        if self._dry_run:
            return
        if target.exists() and not overwrite:
            raise FileExistsError(f"Target already exists: {target}")
        shutil.copy2(source, target)
        logger.debug("Copied %s -> %s", source, target)

    def move_file(self, source: Path, target: Path) -> None:
        """Move a file, renaming in place when on the same filesystem.

        Raises:
            FileExistsError: If target already exists.
        """
        if self._dry_run:
            return
        if target.exists():
            raise FileExistsError(f"Target already exists: {target}")
        shutil.move(str(source), str(target))
        logger.debug("Moved %s -> %s", source, target)

    def delete_file(self, path: Path) -> None:
        """Delete a file."""
        if self._dry_run:
            return
        path.unlink()
        logger.debug("Deleted %s", path)

    def ensure_directory(self, path: Path) -> None:
        """Ensure directory exists.

        Args:
            path: Directory to create.
        """
        if self._dry_run:
            return
        path.mkdir(parents=True, exist_ok=True)

    def build_output_directory(self, category: str, date: datetime) -> Path:
        """Build output directory path for a category and date.

        Args:
            category: Category folder of the rule.
            date: Selected date of the file.

        Returns:
            ``output_root/category/YYYY/MM MonthName``.
        """
        return self._output_root / category / f"{date.year:04d}" / month_folder_name(date)

    def find_unique_path(
        self,
        directory: Path,
        filename: str,
        taken: AbstractSet[Path] = frozenset(),
    ) -> Path:
        """Find a unique filename in directory.

        Tries ``name (1).ext``, ``name (2).ext``, ... until one is free.

        Args:
            directory: Target directory.
            filename: Original file name.
            taken: Paths to treat as occupied even if absent on disk.

        Returns:
            Full path to a file name not present in directory.
        """
        candidate = directory / filename
        counter = 1
        while candidate.exists() or candidate in taken:
            candidate = directory / suffixed_name(filename, counter)
            counter += 1
        return candidate
