"""Tests for Rich progress reporter."""
import logging
import pytest
from io import StringIO

from rich.console import Console

from filesorter.core.config import DEFAULT_RULES
from filesorter.core.models import SortStats
from filesorter.logging.rich_logger import (
    RichProgressReporter,
    QuietProgressReporter,
    configure_logging,
)


def make_console() -> Console:
    return Console(file=StringIO(), width=120, force_terminal=False)


def output_of(reporter: RichProgressReporter) -> str:
    return reporter.console.file.getvalue()


class TestRichProgressReporter:
    """Tests for Rich progress reporter."""

    @pytest.fixture
    def reporter(self):
        """Create a reporter writing to a buffer."""
        return RichProgressReporter(console=make_console())

    @pytest.fixture
    def quiet_reporter(self):
        return RichProgressReporter(quiet=True, console=make_console())

    def test_create_default(self):
        """Test default creation."""
        reporter = RichProgressReporter()
        assert reporter._verbose is False
        assert reporter._quiet is False

    def test_start_and_end_phase(self, reporter):
        """Test starting and ending a batch."""
        reporter.start_phase("Photo", 10)
        assert reporter._progress is not None
        assert reporter._task is not None

        reporter.update_phase(5)
        reporter.end_phase()

        assert reporter._progress is None

    def test_phase_restarts_per_batch(self, reporter):
        """Test every batch gets a fresh bar."""
        reporter.start_phase("Photo", 2)
        first = reporter._progress
        reporter.end_phase()
        reporter.start_phase("Music", 3)

        assert reporter._progress is not first
        reporter.end_phase()

    def test_quiet_has_no_progress_bar(self, quiet_reporter):
        """Test quiet mode never starts a bar."""
        quiet_reporter.start_phase("Photo", 10)
        quiet_reporter.update_phase(1)

        assert quiet_reporter._progress is None
        quiet_reporter.end_phase()

    def test_info(self, reporter):
        """Test info output."""
        reporter.info("Found 3 files")
        assert "Found 3 files" in output_of(reporter)

    def test_quiet_suppresses_info(self, quiet_reporter):
        """Test quiet mode suppresses non-essential output."""
        quiet_reporter.info("Suppressed")
        quiet_reporter.success("Suppressed")
        quiet_reporter.print_header("Suppressed")
        quiet_reporter.print_config({"Mode": "move"})
        quiet_reporter.print_stats(SortStats())

        assert output_of(quiet_reporter) == ""

    def test_quiet_keeps_warnings(self, quiet_reporter):
        """Test warnings and errors survive quiet mode."""
        quiet_reporter.warning("Careful")
        quiet_reporter.error("Broken")

        output = output_of(quiet_reporter)
        assert "Careful" in output
        assert "Broken" in output

    def test_debug_only_when_verbose(self):
        """Test debug output depends on verbose."""
        quiet = RichProgressReporter(console=make_console())
        loud = RichProgressReporter(verbose=True, console=make_console())

        quiet.debug("detail")
        loud.debug("detail")

        assert output_of(quiet) == ""
        assert "detail" in output_of(loud)

    def test_print_config(self, reporter):
        """Test config printing."""
        reporter.print_config({"Source": "/downloads", "Mode": "copy"})

        output = output_of(reporter)
        assert "/downloads" in output
        assert "copy" in output

    def test_print_rules(self, reporter):
        """Test rules are listed in order with their extensions."""
        reporter.print_rules(DEFAULT_RULES)

        output = output_of(reporter)
        assert output.index("Photo") < output.index("Documents")
        assert ".jpg .jpeg .png" in output

    def test_print_stats(self, reporter):
        """Test stats printing."""
        stats = SortStats(discovered=5, processed=5, moved=4, skipped=1, renamed=2, elapsed_seconds=2.0)

        reporter.print_stats(stats)

        output = output_of(reporter)
        assert "Sort Complete" in output
        assert "Renamed (suffix)" in output
        assert "Planned (dry run)" not in output
        assert "2.5 files/sec" in output

    def test_print_stats_title(self, reporter):
        """Test a custom title."""
        reporter.print_stats(SortStats(planned=3), title="Sort Cancelled")

        output = output_of(reporter)
        assert "Sort Cancelled" in output
        assert "Planned (dry run)" in output

    def test_context_manager_ends_phase(self):
        """Test leaving the context stops an open bar."""
        with RichProgressReporter(console=make_console()) as reporter:
            reporter.start_phase("Photo", 1)

        assert reporter._progress is None


class TestQuietProgressReporter:
    """Tests for quiet progress reporter."""

    @pytest.fixture
    def reporter(self):
        """Create a quiet reporter."""
        return QuietProgressReporter()

    def test_methods_no_op(self, reporter, capsys):
        """Test non-error output is dropped."""
        reporter.start_phase("Photo", 100)
        reporter.update_phase(50)
        reporter.end_phase()
        reporter.info("Suppressed")
        reporter.success("Suppressed")
        reporter.debug("Suppressed")
        reporter.print_header("Suppressed")
        reporter.print_config({})
        reporter.print_stats(SortStats())

        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == ""

    def test_print_rules_plain(self, reporter, capsys):
        """Test rules are printed as plain lines on stdout."""
        reporter.print_rules(DEFAULT_RULES)

        lines = capsys.readouterr().out.splitlines()
        assert lines[0] == "Photo: .jpg .jpeg .png"
        assert len(lines) == len(DEFAULT_RULES)

    def test_warning_outputs(self, reporter, capsys):
        """Test warning still outputs."""
        reporter.warning("Test warning")
        assert "WARNING: Test warning" in capsys.readouterr().err

    def test_error_outputs(self, reporter, capsys):
        """Test error still outputs."""
        reporter.error("Test error")
        assert "ERROR: Test error" in capsys.readouterr().err


class TestConfigureLogging:
    """Tests for configure_logging."""

    @pytest.fixture(autouse=True)
    def restore_logger(self):
        package_logger = logging.getLogger("filesorter")
        handlers = list(package_logger.handlers)
        level = package_logger.level
        yield
        package_logger.handlers[:] = handlers
        package_logger.setLevel(level)

    def test_default_level(self):
        """Test only warnings pass by default."""
        configure_logging(console=make_console())
        assert logging.getLogger("filesorter").level == logging.WARNING

    def test_verbose_level(self):
        """Test verbose enables debug records."""
        configure_logging(verbose=True, console=make_console())
        assert logging.getLogger("filesorter").level == logging.DEBUG

    def test_single_handler(self):
        """Test repeated configuration does not stack handlers."""
        configure_logging(console=make_console())
        configure_logging(console=make_console())

        assert len(logging.getLogger("filesorter").handlers) == 1

    def test_records_reach_console(self):
        """Test package records are rendered on the given console."""
        console = make_console()
        configure_logging(console=console)

        logging.getLogger("filesorter.services.scanner").warning("Extension .png listed twice")

        assert "Extension .png listed twice" in console.file.getvalue()
