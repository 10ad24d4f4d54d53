"""Test fixtures for sort tests.

Creation time cannot be set on most filesystems, so tests create files
on disk and register the dates the engine should see in a FixedTimestamps
reader that is injected in place of os.stat.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional

from filesorter.core.models import FileTimestamps


class FixedTimestamps:
    """TimestampReader returning dates registered per path."""

    def __init__(self, default: Optional[datetime] = None):
        self._times: dict[Path, FileTimestamps] = {}
        self._default = default or datetime(2024, 1, 15, 12, 0, 0)

    def set(self, path: Path, created: datetime, modified: Optional[datetime] = None) -> None:
        self._times[path.resolve()] = FileTimestamps(created=created, modified=modified or created)

    def __call__(self, path: Path) -> FileTimestamps:
        if not path.exists():
            raise FileNotFoundError(path)
        return self._times.get(
            path.resolve(),
            FileTimestamps(created=self._default, modified=self._default),
        )


@dataclass
class FileFixture:
    """A source file with the dates the engine should see."""
    relpath: str
    created: datetime = field(default_factory=lambda: datetime(2024, 3, 1, 9, 0, 0))
    modified: Optional[datetime] = None
    content: Optional[bytes] = None

    def create(self, root: Path, clock: FixedTimestamps) -> Path:
        path = root / self.relpath
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.content if self.content is not None else self.relpath.encode())
        clock.set(path, self.created, self.modified)
        return path


def make_tree(root: Path, fixtures: list[FileFixture], clock: FixedTimestamps) -> list[Path]:
    """Create every fixture under root and return their paths."""
    root.mkdir(parents=True, exist_ok=True)
    return [fixture.create(root, clock) for fixture in fixtures]


def list_tree(root: Path) -> list[str]:
    """Relative POSIX paths of all files under root, sorted."""
    if not root.exists():
        return []
    return sorted(p.relative_to(root).as_posix() for p in root.rglob("*") if p.is_file())
