"""Static validation of generated component source."""

from uiforge.lint.lib import (
    EXTERNAL_UI_LIBRARIES,
    WRAPPER_SIGNATURE,
    LintResult,
    is_valid_source,
    lint_source,
)

__all__ = [
    "WRAPPER_SIGNATURE",
    "EXTERNAL_UI_LIBRARIES",
    "LintResult",
    "lint_source",
    "is_valid_source",
]
