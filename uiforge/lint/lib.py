"""Static validation of generated component source.

A second, independent gate over the emitted text. It does not trust the
generator or the planner: every check runs on the source itself, all
violations are collected, and each distinct offending construct yields its
own error entry.

The scan is regex based and therefore approximate; it errs on the side of
rejecting. Only the import lines and the wrapper may appear at module scope.
Before the wrapper body checks run, JSX text, quoted attribute values and
string-only text expressions are blanked out when they hold no characters
that could end the literal or call anything. Text containing quotes,
parentheses, slashes, braces or ``=`` is scanned as is, so copy such as
"let them (all) in" can still be reported.
"""

import logging
import re
from dataclasses import dataclass, field

from uiforge.codegen import ROOT_COMPONENT_NAME
from uiforge.schema import (
    COMPONENT_MODULE_PREFIX,
    STRUCTURAL_TAGS,
    allowed_component_names,
    is_registered,
)

logger = logging.getLogger(__name__)

# =============================================================================
# Patterns
# =============================================================================

WRAPPER_SIGNATURE = f"export default function {ROOT_COMPONENT_NAME}()"

_WRAPPER_OPEN = re.compile(
    rf"export\s+default\s+function\s+{ROOT_COMPONENT_NAME}\s*\(\s*\)\s*\{{"
)
_WRAPPER_CLOSE_LINE = re.compile(r"^\}[ \t]*;?[ \t]*$", re.MULTILINE)
_RETURN = re.compile(r"\breturn\b")

# Inside the wrapper body
_HOOK = re.compile(r"\b(use[A-Z]\w*)\s*\(")
_ARROW = re.compile(r"=>")
_FUNCTION = re.compile(r"\bfunction\b")
_EVENT_HANDLER = re.compile(r"\b(on[A-Z]\w*)\s*=")
_BINDING = re.compile(r"\b(const|let|var)\s+([A-Za-z_$][\w$]*)")
_CONSOLE = re.compile(r"\bconsole\s*\.\s*(\w+)")
_DEBUGGER = re.compile(r"\bdebugger\b")

# Literal content blanked before the body checks
_INERT = r"[^<>{}()=;'\"`/*\\\n]"
_JSX_TEXT = re.compile(rf"(?<=[^=]>){_INERT}+(?=\s*<)")
_ATTRIBUTE_STRING = re.compile(rf'(?<==")({_INERT}+)(?=")')
_TEXT_EXPRESSION = re.compile(rf'(?<=\{{"){_INERT}+(?="\}})')

# Anywhere in the source
_IMPORT_LINE = re.compile(r"^[ \t]*import\b.*$", re.MULTILINE)
_ALLOWED_IMPORT = re.compile(
    r"^import\s+([A-Z]\w*)\s+from\s+(['\"])"
    + re.escape(COMPONENT_MODULE_PREFIX)
    + r"\1\2;?$"
)
_REACT_IMPORT = re.compile(
    r"\bimport\s+(?:\*\s+as\s+)?React\b|from\s+['\"]react(?:-dom)?(?:/[^'\"]*)?['\"]"
)
_DYNAMIC_IMPORT = re.compile(r"\b(import|require)\s*\(")
_INLINE_STYLE = re.compile(r"\bstyle\s*(=\s*\{|=\s*['\"]|:\s*\{)")
_INNER_HTML = re.compile(r"\bdangerouslySetInnerHTML\b")
_DYNAMIC_CLASS = re.compile(r"className\s*=\s*\{\s*`([^`]*\$\{[^`]*)`")
_COMPONENT_DECL = re.compile(
    r"\b(?:(?:const|let|var)\s+(\w+Component)\s*=|function\s+(\w+Component)\s*\(|class\s+(\w+Component)\b)",
    re.IGNORECASE,
)
_TAG = re.compile(r"<(?!/)([A-Za-z][\w.]*)")

EXTERNAL_UI_LIBRARIES: tuple[str, ...] = (
    "@mui",
    "@chakra",
    "antd",
    "react-bootstrap",
    "semantic-ui",
)


@dataclass
class LintResult:
    """Outcome of statically validating generated source.

    Attributes:
        valid: True when no errors were found.
        errors: Must-fix violations, one per distinct construct.
        warnings: Should-review findings.
    """

    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


class _Collector:
    """Ordered, de-duplicated message lists."""

    def __init__(self) -> None:
        self.errors: dict[str, None] = {}
        self.warnings: dict[str, None] = {}

    def error(self, message: str) -> None:
        self.errors.setdefault(message, None)

    def warn(self, message: str) -> None:
        self.warnings.setdefault(message, None)


# =============================================================================
# Checks
# =============================================================================


def _check_wrapper(source: str, out: _Collector) -> str | None:
    """Verify the wrapper and return its body, if any.

    The body ends at the first line holding only ``}``, or at the last
    closing brace when no such line exists. Module scope around the wrapper
    may hold import lines and blank lines only.
    """
    match = _WRAPPER_OPEN.search(source)
    close = _WRAPPER_CLOSE_LINE.search(source, match.end()) if match else None
    end = close.start() if close else source.rfind("}")
    if match is None or end < match.end():
        out.error(
            f"Code must have: {WRAPPER_SIGNATURE} {{ return (...) }}"
        )
        return None

    outside = source[: match.start()].splitlines() + source[end + 1 :].splitlines()
    for line in outside:
        line = line.strip()
        if line and not _IMPORT_LINE.match(line):
            out.error(f"Code outside {ROOT_COMPONENT_NAME} is prohibited: {line}")

    body = source[match.end() : end]
    if not _RETURN.search(body):
        out.error(f"{ROOT_COMPONENT_NAME} must return the rendered layout.")
    return body


def _mask_literals(body: str) -> str:
    """Blank out inert text and string literals, keeping offsets."""
    for pattern in (_JSX_TEXT, _ATTRIBUTE_STRING, _TEXT_EXPRESSION):
        body = pattern.sub(lambda m: " " * len(m.group(0)), body)
    return body


def _check_body(body: str, out: _Collector) -> None:
    """Only declarative markup is allowed inside the wrapper."""
    for match in _HOOK.finditer(body):
        out.error(
            f"React hook '{match.group(1)}' is prohibited inside the component. "
            "Only static JSX is allowed."
        )
    if _ARROW.search(body):
        out.error(
            "Arrow functions are prohibited inside the component. "
            "Only static JSX is allowed."
        )
    if _FUNCTION.search(body):
        out.error(
            "Function definitions are prohibited inside the component. "
            "Only static JSX is allowed."
        )
    for match in _EVENT_HANDLER.finditer(body):
        out.error(
            f"Event handler '{match.group(1)}' is prohibited. Only static JSX is allowed."
        )
    for match in _BINDING.finditer(body):
        out.error(
            f"Variable declaration '{match.group(1)} {match.group(2)}' is prohibited "
            "inside the component. Only static JSX is allowed."
        )
    for match in _CONSOLE.finditer(body):
        out.error(
            f"Console statement 'console.{match.group(1)}' is prohibited. "
            "Only static JSX is allowed."
        )
    if _DEBUGGER.search(body):
        out.error("Debugger statements are prohibited. Only static JSX is allowed.")


def _check_imports(source: str, out: _Collector) -> None:
    """Only whitelisted component imports are allowed."""
    for match in _IMPORT_LINE.finditer(source):
        line = match.group(0).strip()

        if _REACT_IMPORT.search(line):
            out.error(
                f"Importing React is prohibited. Only import UI components: {line}"
            )
            continue

        external = [
            lib
            for lib in EXTERNAL_UI_LIBRARIES
            if f"from '{lib}" in line or f'from "{lib}' in line
        ]
        if external:
            for lib in external:
                out.error(
                    f"External UI library '{lib}' is prohibited. "
                    "Use only the fixed component library."
                )
            continue

        allowed = _ALLOWED_IMPORT.match(line)
        if allowed is None or not is_registered(allowed.group(1)):
            out.error(
                f"Import is not a whitelisted component import: {line}"
            )

    for match in _DYNAMIC_IMPORT.finditer(source):
        out.error(f"Dynamic '{match.group(1)}()' calls are prohibited.")


def _check_styles(source: str, out: _Collector) -> None:
    for match in _INLINE_STYLE.finditer(source):
        out.error(
            f"Inline styles are prohibited ('style{match.group(1)}'). "
            "Use only the fixed component library with predefined styling."
        )
    if _INNER_HTML.search(source):
        out.error("dangerouslySetInnerHTML is prohibited.")
    for match in _DYNAMIC_CLASS.finditer(source):
        out.warn(
            f"Dynamic className generation detected (`{match.group(1)}`). "
            "Ensure only fixed classes from components are used."
        )


def _check_component_declarations(source: str, out: _Collector) -> None:
    for match in _COMPONENT_DECL.finditer(source):
        name = next(group for group in match.groups() if group)
        out.error(
            f"Creating new components is prohibited ('{name}'). "
            "Use only the allowed component library."
        )


def _check_tags(source: str, out: _Collector) -> None:
    allowed = ", ".join(allowed_component_names())
    for match in _TAG.finditer(source):
        name = match.group(1)
        if name in STRUCTURAL_TAGS or is_registered(name):
            continue
        out.error(
            f"Component '{name}' is not in the allowed component list. "
            f"Only {allowed} are permitted."
        )


# =============================================================================
# Main Interface
# =============================================================================


def lint_source(source_code: str) -> LintResult:
    """Validate generated source against the component whitelist.

    Performs the following checks, collecting every violation:
        - Wrapper ``export default function GeneratedUI()`` with a return,
          and nothing but imports outside it
        - No hooks, functions, event handlers, bindings or console/debugger
          statements inside the wrapper body
        - No React, dynamic or non-whitelisted imports
        - No inline styles (dynamic className is a warning)
        - No ad hoc ``*Component`` declarations
        - No external UI library imports
        - Every opening tag is a registered component or a fragment

    Args:
        source_code: Generated module text.

    Returns:
        LintResult with errors and warnings.

    Example:
        >>> result = lint_source(generate(plan).source_code)
        >>> result.valid
        True
    """
    if not isinstance(source_code, str):
        return LintResult(valid=False, errors=["Source code must be a string."])

    out = _Collector()
    body = _check_wrapper(source_code, out)
    if body is not None:
        _check_body(_mask_literals(body), out)
    _check_imports(source_code, out)
    _check_styles(source_code, out)
    _check_component_declarations(source_code, out)
    _check_tags(source_code, out)

    errors = list(out.errors)
    if errors:
        logger.debug(f"Static validation found {len(errors)} error(s)")
    return LintResult(valid=not errors, errors=errors, warnings=list(out.warnings))


def is_valid_source(source_code: str) -> bool:
    """Check if generated source passes static validation."""
    return lint_source(source_code).valid


__all__ = [
    "WRAPPER_SIGNATURE",
    "EXTERNAL_UI_LIBRARIES",
    "LintResult",
    "lint_source",
    "is_valid_source",
]
