"""Line diffs between generated versions.

Lines are compared by position, which matches how regenerated source shifts:
a modification that adds a child shows up as modified lines followed by
added ones.
"""

from dataclasses import dataclass, field
from enum import Enum


class ChangeType(str, Enum):
    """Kind of line change."""

    ADD = "add"
    REMOVE = "remove"
    MODIFY = "modify"


@dataclass(frozen=True)
class LineChange:
    """A single changed line.

    Attributes:
        type: Kind of change.
        line: 1-based line number.
        content: New line for add/modify, old line for remove.
    """

    type: ChangeType
    line: int
    content: str

    def to_dict(self) -> dict:
        return {"type": self.type.value, "line": self.line, "content": self.content}


@dataclass
class DiffResult:
    """Differences between two sources."""

    has_changes: bool
    additions: int = 0
    deletions: int = 0
    changes: list[LineChange] = field(default_factory=list)

    @property
    def modifications(self) -> int:
        return sum(1 for c in self.changes if c.type == ChangeType.MODIFY)

    def to_dict(self) -> dict:
        return {
            "hasChanges": self.has_changes,
            "additions": self.additions,
            "deletions": self.deletions,
            "changes": [c.to_dict() for c in self.changes],
        }


def diff_code(old_code: str, new_code: str) -> DiffResult:
    """Compare two sources line by line.

    Args:
        old_code: Previous source.
        new_code: New source.

    Returns:
        DiffResult with per-line changes.
    """
    old_lines = old_code.split("\n")
    new_lines = new_code.split("\n")

    changes: list[LineChange] = []
    additions = 0
    deletions = 0

    for i in range(max(len(old_lines), len(new_lines))):
        if i >= len(old_lines):
            changes.append(LineChange(ChangeType.ADD, i + 1, new_lines[i]))
            additions += 1
        elif i >= len(new_lines):
            changes.append(LineChange(ChangeType.REMOVE, i + 1, old_lines[i]))
            deletions += 1
        elif old_lines[i] != new_lines[i]:
            changes.append(LineChange(ChangeType.MODIFY, i + 1, new_lines[i]))

    return DiffResult(
        has_changes=bool(changes),
        additions=additions,
        deletions=deletions,
        changes=changes,
    )


def _plural(count: int, what: str) -> str:
    return f"{count} line{'s' if count > 1 else ''} {what}"


def change_summary(old_code: str, new_code: str) -> str:
    """Summarize what changed between two sources.

    Example:
        >>> change_summary("a\\nb", "a\\nc\\nd")
        '1 line added, 1 line modified'
    """
    diff = diff_code(old_code, new_code)
    if not diff.has_changes:
        return "No changes detected"

    parts = []
    if diff.additions:
        parts.append(_plural(diff.additions, "added"))
    if diff.deletions:
        parts.append(_plural(diff.deletions, "removed"))
    if diff.modifications:
        parts.append(_plural(diff.modifications, "modified"))
    return ", ".join(parts)


__all__ = [
    "ChangeType",
    "LineChange",
    "DiffResult",
    "diff_code",
    "change_summary",
]
