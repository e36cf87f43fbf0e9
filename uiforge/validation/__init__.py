"""Layout tree validation utilities."""

from uiforge.validation.lib import (
    TreeValidationResult,
    ValidationError,
    is_valid_tree,
    validate_tree,
)

__all__ = [
    "ValidationError",
    "TreeValidationResult",
    "validate_tree",
    "is_valid_tree",
]
