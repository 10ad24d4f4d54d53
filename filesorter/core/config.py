"""Configuration dataclasses with validation."""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path


class ConflictResolution(Enum):
    """What to do when the target file name is already taken."""
    ADD_SUFFIX = "add-suffix"  # photo (1).jpg, photo (2).jpg, ...
    OVERWRITE = "overwrite"
    SKIP = "skip"


class MoveMode(Enum):
    """Whether the source file is kept after transfer."""
    MOVE = "move"
    COPY = "copy"


class DuplicateExtensionPolicy(Enum):
    """Which rule owns an extension listed by more than one rule."""
    LAST_RULE_WINS = "last"
    FIRST_RULE_WINS = "first"
    REJECT = "reject"


@dataclass(frozen=True, slots=True)
class SortRule:
    """A set of extensions routed to one category folder."""
    extensions: tuple[str, ...]
    category: str

    def __post_init__(self) -> None:
        # Accept any iterable of extensions but store a tuple
        object.__setattr__(self, "extensions", tuple(self.extensions))

        if not self.extensions:
            raise ValueError(f"Rule '{self.category}' has no extensions")

        for ext in self.extensions:
            if not ext.startswith(".") or len(ext) < 2:
                raise ValueError(f"Extension must look like '.ext': {ext!r}")

        if not self.category or not self.category.strip():
            raise ValueError("Rule category must not be empty")

        if "/" in self.category or "\\" in self.category:
            raise ValueError(f"Rule category must be a single folder name: {self.category!r}")

    @classmethod
    def from_dict(cls, data: dict) -> "SortRule":
        return cls(
            extensions=tuple(data["extensions"]),
            category=data["category"],
        )


DEFAULT_RULES: tuple[SortRule, ...] = (
    SortRule((".jpg", ".jpeg", ".png"), "Photo"),
    SortRule((".mp4", ".avi"), "Video"),
    SortRule((".gif",), "Gif"),
    SortRule((".mp3",), "Music"),
    SortRule((".zip", ".rar"), "Archives"),
    SortRule((".doc", ".docs", ".pdf"), "Documents"),
)


@dataclass(slots=True)
class SorterConfig:
    """Settings for a single sort run.

    Built by the CLI and handed to the engine; the rule set is
    validated here so no file is touched with a broken configuration.
    """
    # Required
    source: Path
    destination: Path

    # Rules
    rules: tuple[SortRule, ...] = DEFAULT_RULES
    duplicate_extensions: DuplicateExtensionPolicy = DuplicateExtensionPolicy.LAST_RULE_WINS

    # Transfer options
    conflict_resolution: ConflictResolution = ConflictResolution.ADD_SUFFIX
    move_mode: MoveMode = MoveMode.MOVE

    # Execution mode
    dry_run: bool = False

    def __post_init__(self) -> None:
        """Validate configuration."""
        self.source = Path(self.source).expanduser()
        self.destination = Path(self.destination).expanduser()
        self.rules = tuple(self.rules)

        if self.source.resolve() == self.destination.resolve():
            raise ValueError("Source and destination must be different directories")

        if self.duplicate_extensions == DuplicateExtensionPolicy.REJECT:
            duplicates = find_duplicate_extensions(self.rules)
            if duplicates:
                raise ValueError(
                    f"Extensions listed by more than one rule: {', '.join(duplicates)}"
                )

    def with_overrides(self, **kwargs) -> "SorterConfig":
        """Create a new config with some values overridden."""
        return replace(self, **kwargs)


def find_duplicate_extensions(rules: tuple[SortRule, ...] | list[SortRule]) -> list[str]:
    """Extensions that appear in more than one rule, in first-seen order."""
    owners: dict[str, int] = {}
    duplicates: list[str] = []
    for index, rule in enumerate(rules):
        for ext in rule.extensions:
            if ext in owners and owners[ext] != index and ext not in duplicates:
                duplicates.append(ext)
            owners.setdefault(ext, index)
    return duplicates
