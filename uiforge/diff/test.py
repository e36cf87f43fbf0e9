"""Unit tests for the code differ."""

import pytest

from .lib import ChangeType, LineChange, change_summary, diff_code


class TestDiffCode:
    """Tests for positional line diffs."""

    @pytest.mark.unit
    def test_identical(self):
        result = diff_code("a\nb", "a\nb")
        assert not result.has_changes
        assert result.changes == []

    @pytest.mark.unit
    def test_addition(self):
        result = diff_code("a", "a\nb")
        assert result.additions == 1
        assert result.changes == [LineChange(ChangeType.ADD, 2, "b")]

    @pytest.mark.unit
    def test_removal(self):
        result = diff_code("a\nb\nc", "a")
        assert result.deletions == 2
        assert [c.content for c in result.changes] == ["b", "c"]
        assert all(c.type == ChangeType.REMOVE for c in result.changes)

    @pytest.mark.unit
    def test_modification(self):
        result = diff_code("a\nb", "a\nB")
        assert result.modifications == 1
        assert result.additions == 0
        assert result.changes[0].line == 2
        assert result.changes[0].content == "B"

    @pytest.mark.unit
    def test_to_dict(self):
        data = diff_code("", "x").to_dict()
        assert data["hasChanges"] is True
        assert data["changes"] == [{"type": "modify", "line": 1, "content": "x"}]


class TestChangeSummary:
    """Tests for human summaries."""

    @pytest.mark.unit
    def test_no_changes(self):
        assert change_summary("same", "same") == "No changes detected"

    @pytest.mark.unit
    def test_mixed(self):
        assert change_summary("a\nb", "a\nc\nd\ne") == "2 lines added, 1 line modified"

    @pytest.mark.unit
    def test_removed(self):
        assert change_summary("a\nb", "a") == "1 line removed"
