"""Directory scanning service."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Sequence

from ..core.config import SortRule, DuplicateExtensionPolicy, find_duplicate_extensions


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Batch:
    """Files claimed by one rule, in discovery order."""
    rule: SortRule
    files: tuple[Path, ...]

    @property
    def category(self) -> str:
        return self.rule.category

    def __len__(self) -> int:
        return len(self.files)


def resolve_extension_owners(
    rules: Sequence[SortRule],
    policy: DuplicateExtensionPolicy = DuplicateExtensionPolicy.LAST_RULE_WINS,
) -> dict[str, int]:
    """Map every extension to the index of the rule that processes it.

    With LAST_RULE_WINS a later rule takes the extension away from an
    earlier one, which then sees no files for it. FIRST_RULE_WINS keeps the
    first owner. REJECT raises if any extension is listed twice.
    """
    duplicates = find_duplicate_extensions(rules)
    if duplicates:
        if policy == DuplicateExtensionPolicy.REJECT:
            raise ValueError(
                f"Extensions listed by more than one rule: {', '.join(duplicates)}"
            )
        logger.warning(
            "Extensions listed by more than one rule (%s): %s",
            policy.value,
            ", ".join(duplicates),
        )

    owners: dict[str, int] = {}
    for index, rule in enumerate(rules):
        for ext in rule.extensions:
            if policy == DuplicateExtensionPolicy.FIRST_RULE_WINS:
                owners.setdefault(ext, index)
            else:
                owners[ext] = index
    return owners


class DirectoryScanner:
    """Finds files under a source directory by extension."""

    def __init__(self, follow_symlinks: bool = False):
        """Initialize scanner.

        Args:
            follow_symlinks: Descend into symlinked directories.
        """
        self._follow_symlinks = follow_symlinks

    def iter_files(self, directory: Path) -> Iterator[Path]:
        """Yield every regular file below directory, in sorted order.

        Symlinks to files are yielded as the link itself. Symlinked
        directories are only descended into with follow_symlinks.
        """
        pending = [directory]
        while pending:
            current = pending.pop()
            with os.scandir(current) as it:
                entries = sorted(it, key=lambda entry: entry.name)

            subdirs: list[Path] = []
            for entry in entries:
                if entry.is_dir(follow_symlinks=self._follow_symlinks):
                    subdirs.append(Path(entry.path))
                elif entry.is_file():
                    # Broken links and special files are not sortable
                    yield Path(entry.path)

            # Depth-first, in name order
            pending.extend(reversed(subdirs))

    def find_files_by_extensions(
        self,
        source: Path,
        rules: Sequence[SortRule],
    ) -> dict[str, list[Path]]:
        """Group the files under source by the rule extensions they end with.

        Matching is case-sensitive on the file name suffix, so ``.tar.gz``
        and ``.gz`` both match ``a.tar.gz``.

        Args:
            source: Directory to search recursively.
            rules: Rules whose extensions to look for.

        Returns:
            Mapping of extension to absolute file paths. Empty if source
            does not exist.
        """
        if not source.is_dir():
            logger.warning("Source directory not found: %s", source)
            return {}

        extensions: list[str] = []
        for rule in rules:
            for ext in rule.extensions:
                if ext not in extensions:
                    extensions.append(ext)

        found: dict[str, list[Path]] = {ext: [] for ext in extensions}
        for path in self.iter_files(source.resolve()):
            name = path.name
            for ext in extensions:
                if name.endswith(ext):
                    found[ext].append(path)

        logger.debug(
            "Discovered %d files for %d extensions under %s",
            sum(len(files) for files in found.values()),
            len(extensions),
            source,
        )
        return found

    def build_batches(
        self,
        found: dict[str, list[Path]],
        rules: Sequence[SortRule],
        policy: DuplicateExtensionPolicy = DuplicateExtensionPolicy.LAST_RULE_WINS,
    ) -> list[Batch]:
        """Split discovered files into one batch per rule.

        A path lands in at most one batch: if it matches extensions of
        several rules (``.gz`` and ``.tar.gz``) the first batch claiming it
        keeps it.
        """
        owners = resolve_extension_owners(rules, policy)
        claimed: set[Path] = set()
        batches: list[Batch] = []

        for index, rule in enumerate(rules):
            files: list[Path] = []
            for ext in rule.extensions:
                if owners.get(ext) != index:
                    continue
                for path in found.get(ext, []):
                    if path in claimed:
                        continue
                    claimed.add(path)
                    files.append(path)
            batches.append(Batch(rule=rule, files=tuple(files)))

        return batches

    def scan(
        self,
        source: Path,
        rules: Sequence[SortRule],
        policy: DuplicateExtensionPolicy = DuplicateExtensionPolicy.LAST_RULE_WINS,
    ) -> list[Batch]:
        """Discover files and group them into per-rule batches."""
        found = self.find_files_by_extensions(source, rules)
        return self.build_batches(found, rules, policy)
