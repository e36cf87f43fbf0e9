"""Core IR models for layout representation.

This module defines the Intermediate Representation (IR) that serves as the
contract between planner output and the code generator. The planner produces
JSON conforming to these models; anything that does not match is rejected at
decode time, before it reaches the tree validator.
"""

import math
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Prop names end up in attribute position, so they must be plain identifiers.
PROP_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

TEXT_PROP = "children"


def check_prop_value(value: Any, path: str = "value") -> None:
    """Check that a value belongs to the closed PropValue sum type.

    PropValue is str | int | float | bool | list[PropValue] | dict[str, PropValue].
    ``None``, non-finite floats and every other type are rejected. Nested
    structures are walked with an explicit stack.

    Raises:
        ValueError: Naming the path of the first offending value.
    """
    stack: list[tuple[str, Any]] = [(path, value)]
    while stack:
        where, item = stack.pop()
        if isinstance(item, bool | str | int):
            continue
        if isinstance(item, float):
            if not math.isfinite(item):
                raise ValueError(f"{where}: non-finite number is not a valid prop value")
            continue
        if isinstance(item, list):
            stack.extend((f"{where}[{i}]", child) for i, child in enumerate(item))
            continue
        if isinstance(item, dict):
            for key, child in item.items():
                if not isinstance(key, str):
                    raise ValueError(f"{where}: object keys must be strings")
                stack.append((f"{where}.{key}", child))
            continue
        if item is None:
            raise ValueError(f"{where}: null is not a valid prop value")
        raise ValueError(
            f"{where}: unsupported prop value type {type(item).__name__}"
        )


class LayoutNode(BaseModel):
    """Recursive node definition for the UI layout tree.

    Each node names a whitelisted component, optional static props and an
    ordered list of children.

    Attributes:
        type: Component name (checked against the registry by the validator).
        props: Static props. A string ``children`` prop is text content.
        children: Nested child nodes.

    Example:
        >>> node = LayoutNode(
        ...     type="Card",
        ...     props={"title": "Users"},
        ...     children=[LayoutNode(type="Button", props={"children": "Add"})],
        ... )
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: str = Field(..., min_length=1, description="Component name")
    props: dict[str, Any] | None = Field(
        default=None, description="Static props; values are JSON literals"
    )
    children: list["LayoutNode"] | None = Field(
        default=None, description="Ordered child nodes"
    )

    @field_validator("props")
    @classmethod
    def _check_props(cls, props: dict[str, Any] | None) -> dict[str, Any] | None:
        if props is None:
            return None
        for name, value in props.items():
            if not PROP_NAME_PATTERN.match(name):
                raise ValueError(f"Invalid prop name: {name!r}")
            check_prop_value(value, path=f"props.{name}")
        return props

    @property
    def text(self) -> str | None:
        """Literal text content carried in a string ``children`` prop."""
        if self.props is None:
            return None
        value = self.props.get(TEXT_PROP)
        return value if isinstance(value, str) else None

    @property
    def attributes(self) -> dict[str, Any]:
        """Props that render as attributes (text content excluded)."""
        if not self.props:
            return {}
        if self.text is None:
            return dict(self.props)
        return {k: v for k, v in self.props.items() if k != TEXT_PROP}

    def child_nodes(self) -> list["LayoutNode"]:
        """Children as a list, empty when absent."""
        return list(self.children or [])

    def is_leaf(self) -> bool:
        """A node is a leaf when it has no children and no text content."""
        return not self.children and self.text is None

    def to_json_dict(self) -> dict[str, Any]:
        """Serialize to the wire shape, omitting absent fields."""
        return self.model_dump(exclude_none=True)


class Plan(BaseModel):
    """A planner's answer: the interpreted intent and the layout tree."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    intent: str = Field(..., description="What the planner understood")
    layout_tree: LayoutNode = Field(..., alias="layoutTree")

    def to_json_dict(self) -> dict[str, Any]:
        """Serialize with wire field names (``layoutTree``)."""
        return self.model_dump(by_alias=True, exclude_none=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)


class Decision(BaseModel):
    """One design decision and its reasoning."""

    model_config = ConfigDict(frozen=True)

    decision: str
    reasoning: str


class Explanation(BaseModel):
    """Human-readable account of a generated layout."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    summary: str
    decisions: list[Decision] = Field(default_factory=list)
    components_used: list[str] = Field(default_factory=list, alias="componentsUsed")

    @field_validator("components_used")
    @classmethod
    def _dedupe(cls, names: list[str]) -> list[str]:
        # Set semantics, first occurrence wins
        return list(dict.fromkeys(names))

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


def export_json_schema() -> dict:
    """Export the Plan JSON Schema for LLM prompt injection.

    Returns:
        dict: JSON Schema representation of Plan (including LayoutNode).

    Example:
        >>> schema = export_json_schema()
        >>> schema["title"]
        'Plan'
    """
    return Plan.model_json_schema(by_alias=True)


__all__ = [
    "PROP_NAME_PATTERN",
    "TEXT_PROP",
    "check_prop_value",
    "LayoutNode",
    "Plan",
    "Decision",
    "Explanation",
    "export_json_schema",
]
