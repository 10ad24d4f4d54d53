"""CLI with subcommands: sort, rules."""
from __future__ import annotations

import argparse
import signal
import sys
from pathlib import Path
from typing import Optional

from .core.config import (
    DEFAULT_RULES,
    ConflictResolution,
    DuplicateExtensionPolicy,
    MoveMode,
    SorterConfig,
    SortRule,
)
from .core.models import SortOutcome
from .core.rules_file import load_rules_file
from .logging.rich_logger import RichProgressReporter, QuietProgressReporter, configure_logging


EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CANCELLED = 130


def parse_rule(value: str) -> SortRule:
    """Parse ``.jpg,.png=Photo`` into a SortRule."""
    extensions, sep, category = value.rpartition("=")
    if not sep:
        raise argparse.ArgumentTypeError(f"Rule must look like '.ext1,.ext2=Category': {value!r}")

    exts = tuple(ext.strip() for ext in extensions.split(",") if ext.strip())
    try:
        return SortRule(extensions=exts, category=category.strip())
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="filesorter",
        description="Sort files into category/year/month folders by extension.",
    )

    # Global options
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress non-essential output",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # ============ SORT command ============
    sort_parser = subparsers.add_parser(
        "sort",
        help="Move or copy files from a source directory into dated category folders",
    )
    sort_parser.add_argument(
        "source",
        type=Path,
        help="Directory to scan (recursively)",
    )
    sort_parser.add_argument(
        "-o", "--output",
        type=Path,
        required=True,
        help="Destination root for category folders",
    )
    sort_parser.add_argument(
        "--mode",
        type=str,
        choices=[m.value for m in MoveMode],
        default=MoveMode.MOVE.value,
        help="Move files or keep the originals (default: move)",
    )
    sort_parser.add_argument(
        "--conflict",
        type=str,
        choices=[c.value for c in ConflictResolution],
        default=ConflictResolution.ADD_SUFFIX.value,
        help="What to do when the target name exists (default: add-suffix)",
    )
    _add_rule_arguments(sort_parser)
    sort_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be done without touching any file",
    )

    # ============ RULES command ============
    rules_parser = subparsers.add_parser(
        "rules",
        help="Show the rules a sort would use",
    )
    _add_rule_arguments(rules_parser)

    return parser


def _add_rule_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-r", "--rule",
        dest="rules",
        type=parse_rule,
        action="append",
        default=[],
        help="Rule as '.ext1,.ext2=Category' (repeatable, applied in order)",
    )
    parser.add_argument(
        "--rules-file",
        type=Path,
        default=None,
        help="JSON file with rules; --rule entries are appended after it",
    )
    parser.add_argument(
        "--duplicate-extensions",
        type=str,
        choices=[p.value for p in DuplicateExtensionPolicy],
        default=DuplicateExtensionPolicy.LAST_RULE_WINS.value,
        help="Which rule gets an extension listed twice (default: last)",
    )


def resolve_rules(args: argparse.Namespace) -> tuple[SortRule, ...]:
    """Rules from --rules-file and --rule, or the defaults if neither is given."""
    rules: list[SortRule] = []
    if args.rules_file is not None:
        rules.extend(load_rules_file(args.rules_file))
    rules.extend(args.rules)
    return tuple(rules) if rules else DEFAULT_RULES


# ============ Command Handlers ============

def cmd_sort(args: argparse.Namespace, reporter) -> int:
    """Handle the sort command."""
    from .services.sorter import FileSorter, SorterDependencies

    config = SorterConfig(
        source=args.source,
        destination=args.output,
        rules=resolve_rules(args),
        duplicate_extensions=DuplicateExtensionPolicy(args.duplicate_extensions),
        conflict_resolution=ConflictResolution(args.conflict),
        move_mode=MoveMode(args.mode),
        dry_run=args.dry_run,
    )

    reporter.print_header("filesorter sort")
    reporter.print_config({
        "Source": str(config.source),
        "Destination": str(config.destination),
        "Mode": config.move_mode.value,
        "Conflicts": config.conflict_resolution.value,
        "Rules": len(config.rules),
        "Dry Run": config.dry_run,
    })

    sorter = FileSorter.from_config(config, SorterDependencies(progress=reporter))
    operation = sorter.start_sort(config.source, config.rules, config.destination)

    def _on_interrupt(signum, frame):
        reporter.warning("Cancelling after the current file...")
        operation.cancel()

    previous_handler = signal.signal(signal.SIGINT, _on_interrupt)
    try:
        while not operation.wait(timeout=0.2):
            pass
    finally:
        signal.signal(signal.SIGINT, previous_handler)
        sorter.shutdown()

    result = operation.result()

    if result.outcome == SortOutcome.COMPLETED:
        reporter.print_stats(result.stats)
        return EXIT_OK

    if result.outcome == SortOutcome.CANCELLED:
        reporter.print_stats(result.stats, title="Sort Cancelled")
        reporter.warning(
            f"Cancelled after {result.stats.processed} of {result.stats.discovered} files"
            f" ({result.stats.transferred} transferred)"
        )
        return EXIT_CANCELLED

    reporter.print_stats(result.stats, title="Sort Failed")
    reporter.error(f"Sort failed: {result.error}")
    return EXIT_FAILED


def cmd_rules(args: argparse.Namespace, reporter) -> int:
    """Handle the rules command."""
    rules = resolve_rules(args)
    reporter.print_rules(rules)
    return EXIT_OK


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=getattr(args, "verbose", False))

    # Create reporter
    if getattr(args, "quiet", False):
        reporter = QuietProgressReporter()
    else:
        reporter = RichProgressReporter(verbose=getattr(args, "verbose", False))

    # No command specified - show help
    if not args.command:
        parser.print_help()
        return EXIT_OK

    try:
        if args.command == "sort":
            return cmd_sort(args, reporter)
        elif args.command == "rules":
            return cmd_rules(args, reporter)
        else:
            reporter.error(f"Unknown command: {args.command}")
            return EXIT_FAILED

    except KeyboardInterrupt:
        return EXIT_CANCELLED
    except Exception as e:
        reporter.error(f"Error: {e}")
        if getattr(args, "verbose", False):
            import traceback
            traceback.print_exc()
        return EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
