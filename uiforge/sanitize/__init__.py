"""Prompt-injection redaction and user text checks."""

from uiforge.sanitize.lib import (
    INJECTION_PATTERNS,
    REDACTION_MARKER,
    InputError,
    check_user_text,
    find_injection_patterns,
    sanitize,
)

__all__ = [
    "REDACTION_MARKER",
    "INJECTION_PATTERNS",
    "InputError",
    "find_injection_patterns",
    "sanitize",
    "check_user_text",
]
