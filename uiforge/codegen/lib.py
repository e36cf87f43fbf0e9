"""Deterministic layout tree to JSX code generator.

Converts a validated Plan into the source of a single ``GeneratedUI``
component. Generation is pure: the same plan always yields byte-identical
output, and the plan is only read.

Output shape::

    import Container from '@/components/ui/Container';
    import Table from '@/components/ui/Table';

    export default function GeneratedUI() {
      return (
        <Container>
          <Table columns={[{"header":"Name","key":"name"}]} data={[{"name":"Ada"}]} />
        </Container>
      );
    }
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any

from uiforge.config import EnvVar, get_environment
from uiforge.ir import PROP_NAME_PATTERN, LayoutNode, Plan
from uiforge.schema import component_import_path, is_registered

logger = logging.getLogger(__name__)

ROOT_COMPONENT_NAME = "GeneratedUI"

# Indentation of the root element inside ``return (``.
_ROOT_INDENT = 4
_INDENT_STEP = 2

# Characters that cannot appear in a quoted attribute or raw JSX text without
# changing meaning (quote break-out, expressions, tags, entities, escapes).
_UNSAFE_CHARS = re.compile(r'["{}<>&\\\r\n]')


class CodegenError(Exception):
    """Raised when a tree cannot be rendered."""


class UnknownComponentError(CodegenError):
    """Raised when a node names a component outside the registry."""

    def __init__(self, component_type: str):
        self.component_type = component_type
        super().__init__(f"Cannot generate unregistered component '{component_type}'")


@dataclass(frozen=True)
class GeneratedSource:
    """Generated component source.

    Attributes:
        source_code: Complete module text.
        root_component_name: Name of the exported component.
        components: Component types used, in import order.
    """

    source_code: str
    root_component_name: str = ROOT_COMPONENT_NAME
    components: tuple[str, ...] = ()


def to_json_literal(value: Any) -> str:
    """Encode a value as compact JSON safe to embed in a JSX expression.

    Keys are sorted so equal values encode identically. ``<`` and ``>`` are
    escaped so the literal can never open or close a tag.

    Raises:
        CodegenError: If the value is not JSON encodable.
    """
    try:
        text = json.dumps(
            value,
            ensure_ascii=False,
            separators=(",", ":"),
            sort_keys=True,
            allow_nan=False,
        )
    except (TypeError, ValueError) as e:
        raise CodegenError(f"Prop value is not JSON encodable: {e}") from e
    return text.replace("<", "\\u003c").replace(">", "\\u003e")


def _is_plain_attribute(value: str) -> bool:
    return _UNSAFE_CHARS.search(value) is None


def _is_plain_text(value: str) -> bool:
    # JSX trims whitespace next to line breaks, so padded text is not plain.
    return _is_plain_attribute(value) and value == value.strip()


def render_prop(name: str, value: Any) -> str:
    """Render a single prop as a JSX attribute.

    Strings become quoted attributes unless they contain characters that
    would change meaning, in which case they become JSON string expressions.
    Numbers, booleans, lists and objects become JSON literal expressions.
    """
    if not PROP_NAME_PATTERN.match(name):
        raise CodegenError(f"Invalid prop name: {name!r}")
    if isinstance(value, str) and _is_plain_attribute(value):
        return f'{name}="{value}"'
    return f"{name}={{{to_json_literal(value)}}}"


def render_text(text: str) -> str:
    """Render text content, falling back to a string expression."""
    if _is_plain_text(text):
        return text
    return f"{{{to_json_literal(text)}}}"


def _render_attributes(node: LayoutNode) -> str:
    attributes = node.attributes
    if not attributes:
        return ""
    return " " + " ".join(render_prop(k, attributes[k]) for k in sorted(attributes))


def render_tree(
    tree: LayoutNode, *, max_depth: int | None = None
) -> tuple[str, list[str]]:
    """Render a tree into indented JSX markup.

    Nodes are rendered in pre-order with an explicit stack. The root sits at
    four spaces of indentation and each level adds two.

    Args:
        tree: Root node.
        max_depth: Maximum depth, root being 1. Defaults to
            ``UIFORGE_MAX_TREE_DEPTH``.

    Returns:
        Tuple of (markup, component types in discovery order).

    Raises:
        UnknownComponentError: A node type is not registered.
        CodegenError: The tree is deeper than ``max_depth`` or a prop cannot
            be rendered.
    """
    limit = get_environment(EnvVar.MAX_TREE_DEPTH, override=max_depth)

    lines: list[str] = []
    discovered: dict[str, None] = {}
    # (closing, node, level)
    stack: list[tuple[bool, LayoutNode, int]] = [(False, tree, 0)]

    while stack:
        closing, node, level = stack.pop()
        indent = " " * (_ROOT_INDENT + _INDENT_STEP * level)
        if closing:
            lines.append(f"{indent}</{node.type}>")
            continue

        if level + 1 > limit:
            raise CodegenError(f"Tree exceeds maximum depth of {limit}")
        if not isinstance(node, LayoutNode):
            raise CodegenError(f"Expected a layout node, got {type(node).__name__}")
        if not is_registered(node.type):
            raise UnknownComponentError(node.type)
        discovered.setdefault(node.type, None)

        tag = node.type
        attrs = _render_attributes(node)
        text = node.text
        children = node.children or []

        if not children and text is None:
            lines.append(f"{indent}<{tag}{attrs} />")
        elif not children:
            lines.append(f"{indent}<{tag}{attrs}>{render_text(text)}</{tag}>")
        else:
            content = render_text(text) if text is not None else ""
            lines.append(f"{indent}<{tag}{attrs}>{content}")
            stack.append((True, node, level))
            for child in reversed(children):
                stack.append((False, child, level + 1))

    return "\n".join(lines), list(discovered)


def generate(plan: Plan, *, max_depth: int | None = None) -> GeneratedSource:
    """Generate component source from a plan.

    Modification is full regeneration: callers pass the updated plan and get
    complete, self-consistent source back.

    Args:
        plan: Plan whose tree already passed the tree validator.
        max_depth: Depth bound, see ``render_tree``.

    Returns:
        GeneratedSource with the module text.

    Raises:
        UnknownComponentError: A node type is not registered.
        CodegenError: The tree cannot be rendered.

    Example:
        >>> source = generate(plan)
        >>> source.root_component_name
        'GeneratedUI'
    """
    markup, components = render_tree(plan.layout_tree, max_depth=max_depth)
    imports = "\n".join(
        f"import {name} from '{component_import_path(name)}';" for name in components
    )
    source_code = (
        f"{imports}\n"
        f"\n"
        f"export default function {ROOT_COMPONENT_NAME}() {{\n"
        f"  return (\n"
        f"{markup}\n"
        f"  );\n"
        f"}}\n"
    )
    logger.debug(f"Generated {len(source_code)} chars using {len(components)} component(s)")
    return GeneratedSource(
        source_code=source_code,
        root_component_name=ROOT_COMPONENT_NAME,
        components=tuple(components),
    )


__all__ = [
    "ROOT_COMPONENT_NAME",
    "CodegenError",
    "UnknownComponentError",
    "GeneratedSource",
    "generate",
    "render_tree",
    "render_prop",
    "render_text",
    "to_json_literal",
]
