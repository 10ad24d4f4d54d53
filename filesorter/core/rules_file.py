"""Loading rule sets from JSON files."""
from __future__ import annotations

from pathlib import Path
from typing import List

from pydantic import BaseModel, Field, ValidationError, field_validator

from .config import SortRule


class RulesFileError(ValueError):
    """Raised when a rules file cannot be read or fails validation."""


class RuleEntry(BaseModel):
    """One rule as written in a rules file."""
    extensions: List[str] = Field(..., min_length=1, description="Dot-prefixed extensions, e.g. '.jpg'")
    category: str = Field(..., min_length=1, description="Destination category folder")

    @field_validator("extensions")
    @classmethod
    def check_extensions(cls, value: List[str]) -> List[str]:
        for ext in value:
            if not ext.startswith(".") or len(ext) < 2:
                raise ValueError(f"extension must start with '.': {ext!r}")
        return value

    @field_validator("category")
    @classmethod
    def check_category(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("category must not be blank")
        if "/" in value or "\\" in value:
            raise ValueError(f"category must be a single folder name: {value!r}")
        return value

    def to_rule(self) -> SortRule:
        return SortRule.from_dict(self.model_dump())


class RuleSet(BaseModel):
    """Top-level document of a rules file."""
    rules: List[RuleEntry] = Field(default_factory=list, description="Rules in processing order")

    def to_rules(self) -> tuple[SortRule, ...]:
        return tuple(entry.to_rule() for entry in self.rules)


def load_rules_file(path: Path) -> tuple[SortRule, ...]:
    """Read and validate a JSON rules file.

    Args:
        path: File of the form ``{"rules": [{"extensions": [...], "category": "..."}]}``.

    Returns:
        Rules in file order.

    Raises:
        RulesFileError: If the file is missing, unreadable or invalid.
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise RulesFileError(f"Cannot read rules file {path}: {e}") from e

    try:
        rule_set = RuleSet.model_validate_json(text)
    except ValidationError as e:
        raise RulesFileError(f"Invalid rules file {path}:\n{e}") from e

    return rule_set.to_rules()
