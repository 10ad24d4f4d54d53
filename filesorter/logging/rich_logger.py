"""Terminal output for sort runs, built on Rich."""
from __future__ import annotations

import logging
import sys
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    ProgressColumn,
    SpinnerColumn,
    Task,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table
from rich.text import Text

from ..core.config import SortRule
from ..core.models import SortStats


class FilesPerSecondColumn(ProgressColumn):
    """Transfer rate of the batch in files per second."""

    def render(self, task: Task) -> Text:
        speed = task.finished_speed or task.speed
        if not speed:
            return Text("-- f/s", style="magenta")
        return Text(f"{speed:.1f} f/s", style="magenta")


def configure_logging(verbose: bool = False, console: Optional[Console] = None) -> None:
    """Route log records of the package through Rich.

    Args:
        verbose: Show debug records (one line per transferred file).
        console: Console to write to; stderr by default.
    """
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    package_logger = logging.getLogger("filesorter")
    package_logger.handlers.clear()
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


class RichProgressReporter:
    """ProgressReporter drawing one bar per category batch.

    The engine calls start_phase / update_phase / end_phase from its worker
    thread; a finished bar is left on screen before the next one starts.
    """

    def __init__(
        self,
        verbose: bool = False,
        quiet: bool = False,
        console: Optional[Console] = None,
    ):
        """Initialize the reporter.

        Args:
            verbose: Also print debug lines.
            quiet: Print warnings and errors only, no bars.
            console: Console to write to; stderr by default.
        """
        self._console = console or Console(stderr=True)
        self._verbose = verbose
        self._quiet = quiet
        self._progress: Optional[Progress] = None
        self._task: Optional[TaskID] = None

    @property
    def console(self) -> Console:
        return self._console

    # --- Batches ---

    def _new_progress(self) -> Progress:
        return Progress(
            SpinnerColumn(finished_text="[green]✓"),
            TextColumn("[bold blue]{task.description:<12}"),
            BarColumn(bar_width=None),
            MofNCompleteColumn(),
            FilesPerSecondColumn(),
            TimeElapsedColumn(),
            console=self._console,
        )

    def start_phase(self, name: str, total: int) -> None:
        if self._quiet:
            return

        self.end_phase()
        self._progress = self._new_progress()
        self._progress.start()
        self._task = self._progress.add_task(name, total=total)

    def update_phase(self, completed: int, description: Optional[str] = None) -> None:
        if self._progress is None or self._task is None:
            return

        fields = {"completed": completed}
        if description:
            fields["description"] = description
        self._progress.update(self._task, **fields)

    def end_phase(self) -> None:
        if self._progress is None:
            return

        self._progress.stop()
        self._progress = None
        self._task = None

    # --- Messages ---

    def _line(self, mark: str, style: str, message: str) -> None:
        self._console.print(Text.assemble((mark, style), " ", message))

    def info(self, message: str) -> None:
        if not self._quiet:
            self._line("•", "blue", message)

    def success(self, message: str) -> None:
        if not self._quiet:
            self._line("✓", "green", message)

    def warning(self, message: str) -> None:
        self._line("!", "bold yellow", message)

    def error(self, message: str) -> None:
        self._console.print(Text.assemble(("✗", "bold red"), " ", (message, "red")))

    def debug(self, message: str) -> None:
        if self._verbose:
            self._console.print(Text(f"  {message}", style="dim"))

    # --- Summaries ---

    def print_header(self, title: str) -> None:
        if not self._quiet:
            self._console.rule(Text(title, style="bold cyan"))

    def print_config(self, config_items: dict) -> None:
        """Print run settings as a two-column panel."""
        if self._quiet:
            return

        grid = Table.grid(padding=(0, 2))
        grid.add_column(style="cyan")
        grid.add_column()
        for key, value in config_items.items():
            grid.add_row(key, str(value))

        self._console.print(Panel(grid, title="Configuration", expand=False))

    def print_rules(self, rules: tuple[SortRule, ...]) -> None:
        """Print rules in processing order, regardless of quiet."""
        table = Table(title="Rules", show_header=True, header_style="bold")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Category", style="cyan")
        table.add_column("Extensions")

        for index, rule in enumerate(rules, start=1):
            table.add_row(str(index), rule.category, " ".join(rule.extensions))

        self._console.print(table)

    def print_stats(self, stats: SortStats, title: str = "Sort Complete") -> None:
        """Print the counters of a finished, cancelled or failed run."""
        if self._quiet:
            return

        rows = [
            ("Files Found", str(stats.discovered)),
            ("Moved", str(stats.moved)),
            ("Copied", str(stats.copied)),
            ("Overwritten", str(stats.overwritten)),
            ("Skipped", str(stats.skipped)),
        ]
        if stats.renamed:
            rows.append(("Renamed (suffix)", str(stats.renamed)))
        if stats.planned:
            rows.append(("Planned (dry run)", str(stats.planned)))
        if stats.elapsed_seconds > 0:
            rows.append(("Time Elapsed", f"{stats.elapsed_seconds:.1f}s"))
            rows.append(("Rate", f"{stats.processed / stats.elapsed_seconds:.1f} files/sec"))

        table = Table(title=title, show_header=False, title_style="bold")
        table.add_column(style="cyan")
        table.add_column(style="green", justify="right")
        for label, value in rows:
            table.add_row(label, value)

        self._console.print(table)

    def __enter__(self) -> "RichProgressReporter":
        return self

    def __exit__(self, *args) -> None:
        self.end_phase()


class QuietProgressReporter:
    """ProgressReporter for --quiet runs: plain warnings and errors only."""

    def start_phase(self, name: str, total: int) -> None:
        pass

    def update_phase(self, completed: int, description: Optional[str] = None) -> None:
        pass

    def end_phase(self) -> None:
        pass

    def info(self, message: str) -> None:
        pass

    def success(self, message: str) -> None:
        pass

    def debug(self, message: str) -> None:
        pass

    def warning(self, message: str) -> None:
        self._plain("WARNING", message)

    def error(self, message: str) -> None:
        self._plain("ERROR", message)

    @staticmethod
    def _plain(level: str, message: str) -> None:
        print(f"{level}: {message}", file=sys.stderr)

    def print_header(self, title: str) -> None:
        pass

    def print_config(self, config_items: dict) -> None:
        pass

    def print_rules(self, rules: tuple[SortRule, ...]) -> None:
        for rule in rules:
            print(f"{rule.category}: {' '.join(rule.extensions)}")

    def print_stats(self, stats: SortStats, title: str = "Sort Complete") -> None:
        pass
