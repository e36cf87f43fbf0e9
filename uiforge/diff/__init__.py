"""Line diffs between generated versions."""

from uiforge.diff.lib import ChangeType, DiffResult, LineChange, change_summary, diff_code

__all__ = [
    "ChangeType",
    "LineChange",
    "DiffResult",
    "diff_code",
    "change_summary",
]
