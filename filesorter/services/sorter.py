"""Sort engine - moves files into category/year/month folders."""
from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import wait as wait_futures
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Optional

from ..core.cancellation import CancellationToken, SortCancelled, SortInProgressError
from ..core.config import (
    ConflictResolution,
    DuplicateExtensionPolicy,
    MoveMode,
    SorterConfig,
    SortRule,
)
from ..core.models import (
    FileTimestamps,
    ProgressReport,
    SortOutcome,
    SortResult,
    SortStats,
    TransferAction,
    TransferResult,
)
from ..core.protocols import FileOperations, ProgressCallback, ProgressReporter, TimestampReader
from .file_ops import FileManager
from .scanner import Batch, DirectoryScanner
from .timestamps import read_timestamps


logger = logging.getLogger(__name__)


@dataclass
class SorterDependencies:
    """Collaborators of the sort engine.

    Everything is passed in explicitly - no globals or singletons.
    """
    scanner: DirectoryScanner = field(default_factory=DirectoryScanner)
    read_timestamps: TimestampReader = read_timestamps
    file_ops: Callable[[Path, bool], FileOperations] = FileManager
    progress: Optional[ProgressReporter] = None


class SortOperation:
    """Handle for a sort running on the engine's worker thread."""

    def __init__(self, token: CancellationToken, future: "Future[SortResult]"):
        self._token = token
        self._future = future

    def cancel(self) -> None:
        """Request cooperative cancellation. Idempotent."""
        self._token.cancel()

    def done(self) -> bool:
        return self._future.done()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the operation ends or timeout expires.

        Returns:
            True if the operation has finished.
        """
        wait_futures([self._future], timeout=timeout)
        return self._future.done()

    def result(self, timeout: Optional[float] = None) -> SortResult:
        """Terminal result; blocks until available."""
        return self._future.result(timeout=timeout)

    def add_done_callback(self, fn: Callable[[SortResult], None]) -> None:
        """Call fn with the SortResult once the operation ends."""
        self._future.add_done_callback(lambda future: fn(future.result()))


class FileSorter:
    """Sorts files from a source tree into dated category folders.

    For every rule, in order, the files matching its extensions are sorted
    by creation time (then modification time) and transferred to
    ``destination/<category>/<YYYY>/<MM MonthName>/``.

    ``conflict_resolution`` and ``move_mode`` are read for every file, so
    changing them while a sort runs affects only files not yet handled.
    One operation runs at a time per engine.
    """

    def __init__(
        self,
        conflict_resolution: ConflictResolution = ConflictResolution.ADD_SUFFIX,
        move_mode: MoveMode = MoveMode.MOVE,
        duplicate_extensions: DuplicateExtensionPolicy = DuplicateExtensionPolicy.LAST_RULE_WINS,
        dry_run: bool = False,
        deps: Optional[SorterDependencies] = None,
    ):
        """Initialize the engine.

        Args:
            conflict_resolution: What to do when the target name is taken.
            move_mode: Move or copy files.
            duplicate_extensions: Which rule owns a repeated extension.
            dry_run: Compute destinations without touching the filesystem.
            deps: Scanner, timestamp reader and progress reporter.
        """
        self.conflict_resolution = conflict_resolution
        self.move_mode = move_mode
        self.duplicate_extensions = duplicate_extensions
        self.dry_run = dry_run
        self._deps = deps or SorterDependencies()

        self._lock = threading.Lock()
        self._active: Optional[CancellationToken] = None
        self._executor: Optional[ThreadPoolExecutor] = None

    @classmethod
    def from_config(
        cls,
        config: SorterConfig,
        deps: Optional[SorterDependencies] = None,
    ) -> "FileSorter":
        return cls(
            conflict_resolution=config.conflict_resolution,
            move_mode=config.move_mode,
            duplicate_extensions=config.duplicate_extensions,
            dry_run=config.dry_run,
            deps=deps,
        )

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._active is not None

    # --- Public API ---

    def sort_files_and_move(
        self,
        source: Path,
        rules: Iterable[SortRule],
        destination: Path,
        token: Optional[CancellationToken] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> SortStats:
        """Run a sort on the calling thread.

        Args:
            source: Directory to scan recursively. A missing directory
                yields nothing to sort.
            rules: Rules in processing order.
            destination: Root of the category folders.
            token: Cancellation token checked before every file.
            on_progress: Called with a ProgressReport before every file.

        Returns:
            Statistics of the completed run.

        Raises:
            SortCancelled: If the token was cancelled. Files already
                transferred stay at their destination.
            SortInProgressError: If another sort is running on this engine.
            OSError: Any filesystem failure; the run stops where it failed.
        """
        token = token or CancellationToken()
        self._begin(token)
        try:
            return self._run(Path(source), tuple(rules), Path(destination), token, on_progress, SortStats())
        finally:
            self._finish(token)

    def start_sort(
        self,
        source: Path,
        rules: Iterable[SortRule],
        destination: Path,
        on_progress: Optional[ProgressCallback] = None,
    ) -> SortOperation:
        """Start a sort on the worker thread and return immediately.

        The returned handle resolves to a SortResult whose outcome tells
        completion, cancellation and failure apart.

        Raises:
            SortInProgressError: If another sort is running on this engine.
        """
        token = CancellationToken()
        self._begin(token)
        try:
            future = self._get_executor().submit(
                self._run_to_result,
                Path(source),
                tuple(rules),
                Path(destination),
                token,
                on_progress,
            )
        except BaseException:
            self._finish(token)
            raise
        return SortOperation(token, future)

    def cancel_sort(self) -> None:
        """Cancel the running sort, if any."""
        with self._lock:
            if self._active is not None:
                self._active.cancel()

    def shutdown(self, wait: bool = True) -> None:
        """Stop the worker thread."""
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
            self._executor = None

    def __enter__(self) -> "FileSorter":
        return self

    def __exit__(self, *args) -> None:
        self.cancel_sort()
        self.shutdown()

    # --- Operation bookkeeping ---

    def _begin(self, token: CancellationToken) -> None:
        with self._lock:
            if self._active is not None:
                raise SortInProgressError("A sort operation is already running")
            self._active = token

    def _finish(self, token: CancellationToken) -> None:
        with self._lock:
            if self._active is token:
                self._active = None

    def _get_executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="filesorter")
        return self._executor

    def _run_to_result(
        self,
        source: Path,
        rules: tuple[SortRule, ...],
        destination: Path,
        token: CancellationToken,
        on_progress: Optional[ProgressCallback],
    ) -> SortResult:
        stats = SortStats()
        try:
            self._run(source, rules, destination, token, on_progress, stats)
            return SortResult(outcome=SortOutcome.COMPLETED, stats=stats)
        except SortCancelled:
            logger.info("Sort cancelled after %d files", stats.processed)
            return SortResult(outcome=SortOutcome.CANCELLED, stats=stats)
        except Exception as e:
            logger.error("Sort failed after %d files: %s", stats.processed, e)
            return SortResult(outcome=SortOutcome.FAILED, stats=stats, error=e)
        finally:
            self._finish(token)

    # --- Sorting ---

    def _run(
        self,
        source: Path,
        rules: tuple[SortRule, ...],
        destination: Path,
        token: CancellationToken,
        on_progress: Optional[ProgressCallback],
        stats: SortStats,
    ) -> SortStats:
        start = time.monotonic()
        try:
            batches = self._deps.scanner.scan(source, rules, self.duplicate_extensions)
            stats.discovered = sum(len(batch) for batch in batches)
            self._info(f"Found {stats.discovered} files for {len(rules)} rules in {source}")

            # Scanned paths are absolute, so targets must be too for the in-place check
            destination = destination.resolve()
            file_manager = self._deps.file_ops(destination, self.dry_run)
            planned: set[Path] = set()

            for batch in batches:
                ordered = self._sort_by_date(batch)
                self._process_batch(
                    batch.category, ordered, file_manager, token, on_progress, stats, planned
                )
            logger.info("Sort finished: %s", stats.summary())
            return stats
        finally:
            stats.elapsed_seconds = time.monotonic() - start

    def _sort_by_date(self, batch: Batch) -> list[tuple[Path, FileTimestamps]]:
        """Order a batch by creation time, then modification time.

        The path is the last key so equal dates still give a stable order.
        """
        dated = [(path, self._deps.read_timestamps(path)) for path in batch.files]
        dated.sort(key=lambda item: (*item[1].sort_key, str(item[0])))
        return dated

    def _process_batch(
        self,
        category: str,
        ordered: list[tuple[Path, FileTimestamps]],
        file_manager: FileOperations,
        token: CancellationToken,
        on_progress: Optional[ProgressCallback],
        stats: SortStats,
        planned: set[Path],
    ) -> None:
        total = len(ordered)
        if total == 0:
            return

        reporter = self._deps.progress
        if reporter is not None:
            reporter.start_phase(category, total)
        try:
            for index, (path, timestamps) in enumerate(ordered):
                token.raise_if_cancelled(stats)

                if on_progress is not None:
                    on_progress(ProgressReport(total_files=total, processed_files=index, category=category))

                result = self._transfer(path, timestamps, category, file_manager, planned)
                stats.record(result)
                logger.debug("%s %s -> %s", result.action.value, path, result.target)

                if reporter is not None:
                    reporter.update_phase(index + 1)
        finally:
            if reporter is not None:
                reporter.end_phase()

    def _transfer(
        self,
        source: Path,
        timestamps: FileTimestamps,
        category: str,
        file_manager: FileOperations,
        planned: set[Path],
    ) -> TransferResult:
        """Move or copy one file, applying the conflict policy."""
        folder = file_manager.build_output_directory(category, timestamps.selected)
        file_manager.ensure_directory(folder)

        target = folder / source.name
        if target == source:
            # Already in place
            return TransferResult(source, TransferAction.SKIPPED, target, category)

        renamed = False
        if target.exists() or target in planned:
            policy = self.conflict_resolution

            if policy == ConflictResolution.SKIP:
                return TransferResult(source, TransferAction.SKIPPED, target, category)

            if policy == ConflictResolution.OVERWRITE:
                if file_manager.dry_run:
                    planned.add(target)
                    return TransferResult(source, TransferAction.PLANNED, target, category)
                # Copy then delete, never a native move onto an existing file
                file_manager.copy_file(source, target, overwrite=True)
                if self.move_mode == MoveMode.MOVE:
                    file_manager.delete_file(source)
                return TransferResult(source, TransferAction.OVERWRITTEN, target, category)

            target = file_manager.find_unique_path(folder, source.name, planned)
            renamed = True

        if file_manager.dry_run:
            planned.add(target)
            return TransferResult(source, TransferAction.PLANNED, target, category, renamed)

        if self.move_mode == MoveMode.COPY:
            file_manager.copy_file(source, target)
            action = TransferAction.COPIED
        else:
            file_manager.move_file(source, target)
            action = TransferAction.MOVED

        return TransferResult(source, action, target, category, renamed)

    def _info(self, message: str) -> None:
        if self._deps.progress is not None:
            self._deps.progress.info(message)
        else:
            logger.info(message)
