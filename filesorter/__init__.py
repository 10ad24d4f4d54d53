"""Sort files into category/year/month folders by extension.

Rules map extensions to categories; the engine moves or copies every
matching file under the source into ``<category>/<YYYY>/<MM MonthName>``.
"""

__version__ = "1.0.0"

# Core exports
from .core.config import (
    SorterConfig,
    SortRule,
    ConflictResolution,
    MoveMode,
    DuplicateExtensionPolicy,
    DEFAULT_RULES,
)
from .core.models import ProgressReport, SortOutcome, SortResult, SortStats
from .core.cancellation import CancellationToken, SortCancelled, SortInProgressError
from .core.rules_file import load_rules_file, RulesFileError

# Service exports
from .services.sorter import FileSorter, SortOperation, SorterDependencies

# Logging exports
from .logging.rich_logger import RichProgressReporter

__all__ = [
    # Core
    "SorterConfig",
    "SortRule",
    "ConflictResolution",
    "MoveMode",
    "DuplicateExtensionPolicy",
    "DEFAULT_RULES",
    "ProgressReport",
    "SortOutcome",
    "SortResult",
    "SortStats",
    "CancellationToken",
    "SortCancelled",
    "SortInProgressError",
    "load_rules_file",
    "RulesFileError",
    # Services
    "FileSorter",
    "SortOperation",
    "SorterDependencies",
    # Logging
    "RichProgressReporter",
]
