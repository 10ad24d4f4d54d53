"""Domain models - immutable data classes."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional


class TransferAction(Enum):
    """What happened to a single source file."""
    MOVED = "moved"
    COPIED = "copied"
    OVERWRITTEN = "overwritten"
    SKIPPED = "skipped"
    PLANNED = "planned"  # dry run


class SortOutcome(Enum):
    """How a sort operation ended."""
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class ProgressReport:
    """Snapshot of progress within the batch currently being processed.

    ``total_files`` is the size of the current rule's batch, not of the
    whole operation, and ``processed_files`` is the 0-based index of the
    file about to be transferred.
    """
    total_files: int
    processed_files: int
    category: str = ""


@dataclass(frozen=True, slots=True)
class FileTimestamps:
    """Creation and last-modification time of a file."""
    created: datetime
    modified: datetime

    @property
    def selected(self) -> datetime:
        """The earlier of the two, used for year/month bucketing."""
        return min(self.created, self.modified)

    @property
    def sort_key(self) -> tuple[datetime, datetime]:
        return (self.created, self.modified)


@dataclass(frozen=True, slots=True)
class TransferResult:
    """Result of handling a single file."""
    source: Path
    action: TransferAction
    target: Optional[Path] = None
    category: str = ""
    renamed: bool = False

    @property
    def transferred(self) -> bool:
        return self.action in (
            TransferAction.MOVED,
            TransferAction.COPIED,
            TransferAction.OVERWRITTEN,
        )


@dataclass(slots=True)
class SortStats:
    """Mutable statistics for a sort run."""
    discovered: int = 0
    processed: int = 0
    moved: int = 0
    copied: int = 0
    overwritten: int = 0
    renamed: int = 0
    skipped: int = 0
    planned: int = 0
    elapsed_seconds: float = 0.0

    @property
    def transferred(self) -> int:
        return self.moved + self.copied + self.overwritten

    def record(self, result: TransferResult) -> None:
        """Record a transfer result."""
        self.processed += 1
        if result.renamed:
            self.renamed += 1
        match result.action:
            case TransferAction.MOVED:
                self.moved += 1
            case TransferAction.COPIED:
                self.copied += 1
            case TransferAction.OVERWRITTEN:
                self.overwritten += 1
            case TransferAction.SKIPPED:
                self.skipped += 1
            case TransferAction.PLANNED:
                self.planned += 1

    def summary(self) -> dict[str, int]:
        return {
            "discovered": self.discovered,
            "processed": self.processed,
            "moved": self.moved,
            "copied": self.copied,
            "overwritten": self.overwritten,
            "renamed": self.renamed,
            "skipped": self.skipped,
            "planned": self.planned,
        }


@dataclass(slots=True)
class SortResult:
    """Terminal state of a sort operation started in the background."""
    outcome: SortOutcome
    stats: SortStats
    error: Optional[BaseException] = None

    @property
    def is_success(self) -> bool:
        return self.outcome == SortOutcome.COMPLETED

    @property
    def is_cancelled(self) -> bool:
        return self.outcome == SortOutcome.CANCELLED
