"""Core domain models and protocols."""
from .protocols import (
    ProgressCallback,
    ProgressReporter,
    TimestampReader,
    FileOperations,
)
from .models import (
    ProgressReport,
    FileTimestamps,
    TransferAction,
    TransferResult,
    SortOutcome,
    SortResult,
    SortStats,
)
from .config import (
    SorterConfig,
    SortRule,
    ConflictResolution,
    MoveMode,
    DuplicateExtensionPolicy,
    DEFAULT_RULES,
)
from .cancellation import CancellationToken, SortCancelled, SortInProgressError

__all__ = [
    # Protocols
    "ProgressCallback",
    "ProgressReporter",
    "TimestampReader",
    "FileOperations",
    # Models
    "ProgressReport",
    "FileTimestamps",
    "TransferAction",
    "TransferResult",
    "SortOutcome",
    "SortResult",
    "SortStats",
    # Config
    "SorterConfig",
    "SortRule",
    "ConflictResolution",
    "MoveMode",
    "DuplicateExtensionPolicy",
    "DEFAULT_RULES",
    # Cancellation
    "CancellationToken",
    "SortCancelled",
    "SortInProgressError",
]
