"""Service layer - discovery, file operations and the sort engine."""
from .scanner import Batch, DirectoryScanner, resolve_extension_owners
from .timestamps import read_timestamps
from .file_ops import FileManager, MONTH_NAMES, month_folder_name
from .sorter import FileSorter, SortOperation, SorterDependencies

__all__ = [
    "Batch",
    "DirectoryScanner",
    "resolve_extension_owners",
    "read_timestamps",
    "FileManager",
    "MONTH_NAMES",
    "month_folder_name",
    "FileSorter",
    "SortOperation",
    "SorterDependencies",
]
