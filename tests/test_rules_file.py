"""Tests for JSON rules files."""
import json
import pytest
from pathlib import Path

from filesorter.core.config import SortRule
from filesorter.core.rules_file import RuleEntry, RuleSet, RulesFileError, load_rules_file


def write_rules(path: Path, data) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestRuleEntry:
    """Tests for the pydantic rule model."""

    def test_to_rule(self):
        """Test conversion to SortRule."""
        entry = RuleEntry(extensions=[".mp4", ".avi"], category="Video")

        assert entry.to_rule() == SortRule((".mp4", ".avi"), "Video")

    def test_category_is_stripped(self):
        """Test surrounding whitespace is removed from category."""
        entry = RuleEntry(extensions=[".mp3"], category=" Music ")
        assert entry.category == "Music"

    def test_rule_set_keeps_order(self):
        """Test rules stay in document order."""
        rule_set = RuleSet.model_validate({
            "rules": [
                {"extensions": [".gif"], "category": "Gif"},
                {"extensions": [".jpg"], "category": "Photo"},
            ]
        })

        assert [r.category for r in rule_set.to_rules()] == ["Gif", "Photo"]


class TestLoadRulesFile:
    """Tests for load_rules_file."""

    def test_load(self, tmp_path: Path):
        """Test loading a valid file."""
        path = write_rules(tmp_path / "rules.json", {
            "rules": [
                {"extensions": [".jpg", ".png"], "category": "Photo"},
                {"extensions": [".pdf"], "category": "Documents"},
            ]
        })

        rules = load_rules_file(path)

        assert rules == (
            SortRule((".jpg", ".png"), "Photo"),
            SortRule((".pdf",), "Documents"),
        )

    def test_empty_rule_list(self, tmp_path: Path):
        """Test an empty rule list is valid."""
        path = write_rules(tmp_path / "rules.json", {"rules": []})
        assert load_rules_file(path) == ()

    def test_missing_dot_rejected(self, tmp_path: Path):
        """Test extensions without a dot are not silently fixed."""
        path = write_rules(tmp_path / "rules.json", {
            "rules": [{"extensions": ["jpg"], "category": "Photo"}]
        })

        with pytest.raises(RulesFileError, match="must start with"):
            load_rules_file(path)

    def test_empty_extensions_rejected(self, tmp_path: Path):
        """Test a rule needs at least one extension."""
        path = write_rules(tmp_path / "rules.json", {
            "rules": [{"extensions": [], "category": "Photo"}]
        })

        with pytest.raises(RulesFileError):
            load_rules_file(path)

    def test_nested_category_rejected(self, tmp_path: Path):
        """Test category must be a single folder name."""
        path = write_rules(tmp_path / "rules.json", {
            "rules": [{"extensions": [".jpg"], "category": "a/b"}]
        })

        with pytest.raises(RulesFileError, match="single folder name"):
            load_rules_file(path)

    def test_invalid_json(self, tmp_path: Path):
        """Test malformed JSON raises RulesFileError."""
        path = tmp_path / "rules.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(RulesFileError, match="Invalid rules file"):
            load_rules_file(path)

    def test_missing_file(self, tmp_path: Path):
        """Test missing file raises RulesFileError."""
        with pytest.raises(RulesFileError, match="Cannot read"):
            load_rules_file(tmp_path / "nope.json")

    def test_is_value_error(self):
        """Test RulesFileError can be caught as ValueError."""
        assert issubclass(RulesFileError, ValueError)
