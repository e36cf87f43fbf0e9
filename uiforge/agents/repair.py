"""JSON repair for malformed model output.

Models wrap JSON in markdown fences, prefix it with prose, or leave
trailing commas. JsonRepair undoes the common cases.
"""

import json
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)


class JsonRepair:
    """Best-effort recovery of a JSON object from model output.

    Example:
        >>> JsonRepair().repair('```json\\n{"intent": "login",}\\n```')
        {'intent': 'login'}
    """

    # (pattern, replacement)
    REPAIR_PATTERNS: list[tuple[str, str]] = [
        # Markdown code blocks
        (r"^```json\s*", ""),
        (r"^```\s*", ""),
        (r"\s*```$", ""),
        # Trailing commas before closing braces/brackets
        (r",\s*}", "}"),
        (r",\s*]", "]"),
    ]

    PROSE_PREFIXES: tuple[str, ...] = (
        "Here is the JSON:",
        "Here's the JSON:",
        "Here is the plan:",
        "JSON output:",
        "Output:",
        "Result:",
    )

    def repair(self, content: str) -> dict[str, Any] | None:
        """Attempt to recover a JSON object.

        Tries, in order: pattern cleanup, the outermost ``{...}`` span,
        known prose prefixes, then the first balanced-brace object.

        Returns:
            Parsed dict if repair succeeded, None otherwise.
        """
        cleaned = content.strip()
        for pattern, replacement in self.REPAIR_PATTERNS:
            cleaned = re.sub(pattern, replacement, cleaned, flags=re.MULTILINE)

        for candidate in self._candidates(cleaned):
            try:
                data = json.loads(candidate)
            except json.JSONDecodeError:
                continue
            if isinstance(data, dict):
                logger.debug("JSON repair successful")
                return data

        return None

    def _candidates(self, content: str):
        yield content

        match = re.search(r"\{[\s\S]*\}", content)
        if match:
            yield match.group()

        for prefix in self.PROSE_PREFIXES:
            if content.lower().startswith(prefix.lower()):
                yield content[len(prefix) :].strip()

        balanced = self._first_balanced_object(content)
        if balanced:
            yield balanced

    @staticmethod
    def _first_balanced_object(content: str) -> str | None:
        """First ``{...}`` span with balanced braces, ignoring braces in strings."""
        start = content.find("{")
        if start < 0:
            return None

        depth = 0
        in_string = False
        escaped = False
        for i, char in enumerate(content[start:], start):
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
            elif char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return content[start : i + 1]
        return None


__all__ = ["JsonRepair"]
