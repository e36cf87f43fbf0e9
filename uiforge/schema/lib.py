"""Authoritative Component Schema Registry.

This module is the single source of truth for which components generated UIs
may use. It provides:
- The closed component whitelist with prop contracts and variant enumerations
- Lookup helpers shared by the tree validator and the static code validator
- An LLM-optimized export embedded in planner prompts
- Prop contract checks

The registry is fixed at import time and exposes no mutation API.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any


class ComponentCategory(str, Enum):
    """High-level component groupings."""

    CONTAINER = "container"
    NAVIGATION = "navigation"
    CONTENT = "content"
    CONTROL = "control"


@dataclass(frozen=True)
class ComponentSchema:
    """Prop contract for one whitelisted component.

    Attributes:
        name: Component name as it appears in tags and imports.
        props: Every prop name the component accepts.
        required: Props that must be present (subset of ``props``).
        variants: Enumerated values for constrained props.
        description: Short human/LLM facing description.
        category: Grouping used by the schema export.
    """

    name: str
    props: frozenset[str]
    required: frozenset[str] = frozenset()
    variants: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    description: str = ""
    category: ComponentCategory = ComponentCategory.CONTENT

    def accepts_children(self) -> bool:
        """Whether the component renders nested content."""
        return "children" in self.props

    def to_dict(self) -> dict[str, Any]:
        """Convert the schema to a JSON-friendly dictionary for export."""
        return {
            "name": self.name,
            "description": self.description,
            "category": self.category.value,
            "props": sorted(self.props),
            "required": sorted(self.required),
            "variants": {key: list(values) for key, values in self.variants.items()},
        }


def _schema(
    name: str,
    props: tuple[str, ...],
    required: tuple[str, ...] = (),
    variants: dict[str, tuple[str, ...]] | None = None,
    description: str = "",
    category: ComponentCategory = ComponentCategory.CONTENT,
) -> ComponentSchema:
    return ComponentSchema(
        name=name,
        props=frozenset(props),
        required=frozenset(required),
        variants=MappingProxyType(dict(variants or {})),
        description=description,
        category=category,
    )


_SIZES = ("sm", "md", "lg")
_PADDING = ("none", "sm", "md", "lg")

_SCHEMAS: tuple[ComponentSchema, ...] = (
    # === CONTROLS ===
    _schema(
        "Button",
        ("children", "variant", "size", "disabled", "fullWidth"),
        required=("children",),
        variants={
            "variant": ("primary", "secondary", "outline", "danger"),
            "size": _SIZES,
        },
        description="Clickable action with a text label",
        category=ComponentCategory.CONTROL,
    ),
    _schema(
        "Input",
        ("type", "placeholder", "value", "label", "error", "disabled", "fullWidth", "size"),
        variants={
            "type": ("text", "email", "password", "number", "tel", "url"),
            "size": _SIZES,
        },
        description="Single-line text field with optional label and error text",
        category=ComponentCategory.CONTROL,
    ),
    # === CONTENT ===
    _schema(
        "Card",
        ("children", "title", "subtitle", "variant", "padding"),
        required=("children",),
        variants={
            "variant": ("default", "bordered", "elevated"),
            "padding": _PADDING,
        },
        description="Framed panel grouping related content under an optional title",
        category=ComponentCategory.CONTENT,
    ),
    _schema(
        "Table",
        ("columns", "data", "striped", "hoverable", "bordered"),
        required=("columns", "data"),
        description="Tabular data; columns are {key, header} objects, data is a list of rows",
        category=ComponentCategory.CONTENT,
    ),
    _schema(
        "Modal",
        ("isOpen", "title", "children", "size", "showCloseButton"),
        required=("isOpen", "children"),
        variants={"size": ("sm", "md", "lg", "xl")},
        description="Dialog overlay shown when isOpen is true",
        category=ComponentCategory.CONTENT,
    ),
    _schema(
        "Chart",
        ("data", "type", "title", "color", "height"),
        required=("data",),
        variants={"type": ("bar", "line", "pie")},
        description="Bar, line or pie chart over a list of {label, value} points",
        category=ComponentCategory.CONTENT,
    ),
    # === NAVIGATION ===
    _schema(
        "Sidebar",
        ("items", "header", "footer", "width", "position"),
        required=("items",),
        variants={"width": _SIZES, "position": ("left", "right")},
        description="Vertical navigation list docked to one side",
        category=ComponentCategory.NAVIGATION,
    ),
    _schema(
        "Navbar",
        ("brand", "items", "actions", "variant"),
        variants={"variant": ("light", "dark")},
        description="Top navigation bar with brand, links and actions",
        category=ComponentCategory.NAVIGATION,
    ),
    # === CONTAINERS ===
    _schema(
        "Stack",
        ("children", "gap", "direction", "align"),
        required=("children",),
        variants={
            "gap": ("none", "sm", "md", "lg", "xl"),
            "direction": ("vertical", "horizontal"),
            "align": ("start", "center", "end", "stretch"),
        },
        description="Flex layout placing children in a row or column",
        category=ComponentCategory.CONTAINER,
    ),
    _schema(
        "Center",
        ("children", "maxWidth", "padding"),
        required=("children",),
        variants={
            "maxWidth": ("sm", "md", "lg", "xl", "full"),
            "padding": _PADDING,
        },
        description="Centers its children horizontally within a max width",
        category=ComponentCategory.CONTAINER,
    ),
    _schema(
        "Container",
        ("children", "maxWidth", "padding", "centered"),
        required=("children",),
        variants={
            "maxWidth": ("sm", "md", "lg", "xl", "2xl", "full"),
            "padding": _PADDING,
        },
        description="Page-level wrapper constraining content width",
        category=ComponentCategory.CONTAINER,
    ),
)

# Registration order is the canonical order used by every export.
_ORDER: tuple[str, ...] = (
    "Button",
    "Card",
    "Input",
    "Table",
    "Modal",
    "Sidebar",
    "Navbar",
    "Chart",
    "Stack",
    "Center",
    "Container",
)


def _build_registry(
    schemas: tuple[ComponentSchema, ...],
) -> Mapping[str, ComponentSchema]:
    """Index schemas by name and verify registry invariants.

    Raises:
        ValueError: On duplicate names, required props outside the prop set,
            or variant keys outside the prop set.
    """
    by_name: dict[str, ComponentSchema] = {}
    for schema in schemas:
        if schema.name in by_name:
            raise ValueError(f"Duplicate component schema: {schema.name}")
        if not schema.required <= schema.props:
            extra = sorted(schema.required - schema.props)
            raise ValueError(f"{schema.name}: required props not declared: {extra}")
        if not set(schema.variants) <= schema.props:
            extra = sorted(set(schema.variants) - schema.props)
            raise ValueError(f"{schema.name}: variant keys not declared: {extra}")
        by_name[schema.name] = schema

    if set(by_name) != set(_ORDER):
        raise ValueError("Registry order does not match registered components")
    return MappingProxyType({name: by_name[name] for name in _ORDER})


COMPONENT_REGISTRY: Mapping[str, ComponentSchema] = _build_registry(_SCHEMAS)

# Structural markers that may appear as tags without being components.
STRUCTURAL_TAGS: frozenset[str] = frozenset({"Fragment", "React.Fragment"})

# Module path every component import must point at.
COMPONENT_MODULE_PREFIX = "@/components/ui/"


# === LOOKUP ===


def get_schema(name: str) -> ComponentSchema | None:
    """Look up the schema for a component.

    Args:
        name: Component name (case-sensitive).

    Returns:
        The ComponentSchema, or None if the name is not registered.
    """
    if not isinstance(name, str):
        return None
    return COMPONENT_REGISTRY.get(name)


def is_registered(name: str) -> bool:
    """Check whether a component name is on the whitelist."""
    return get_schema(name) is not None


def allowed_component_names() -> tuple[str, ...]:
    """All registered component names in registration order."""
    return tuple(COMPONENT_REGISTRY)


def component_import_path(name: str) -> str:
    """Module path a component is imported from."""
    return f"{COMPONENT_MODULE_PREFIX}{name}"


def get_components_by_category(category: ComponentCategory) -> list[str]:
    """Get all component names in a category, in registration order."""
    return [
        schema.name
        for schema in COMPONENT_REGISTRY.values()
        if schema.category == category
    ]


# === SCHEMA EXPORT ===


def export_llm_schema() -> dict[str, Any]:
    """Export the registry in a stable, enumerable shape.

    This structure is embedded in planner prompts and is derived from the same
    registry object the validators read, so the planner and both validation
    gates always agree on the whitelist.

    Returns:
        Dict with per-component contracts, the allowed name list, categories
        and a small example tree.
    """
    return {
        "components": [schema.to_dict() for schema in COMPONENT_REGISTRY.values()],
        "allowed": list(allowed_component_names()),
        "categories": {
            cat.value: get_components_by_category(cat) for cat in ComponentCategory
        },
        "examples": {
            "dashboard": {
                "type": "Container",
                "props": {"maxWidth": "xl", "padding": "md"},
                "children": [
                    {"type": "Navbar", "props": {"brand": "Acme", "variant": "dark"}},
                    {
                        "type": "Stack",
                        "props": {"direction": "horizontal", "gap": "md"},
                        "children": [
                            {
                                "type": "Card",
                                "props": {"title": "Revenue"},
                                "children": [
                                    {
                                        "type": "Chart",
                                        "props": {
                                            "type": "bar",
                                            "data": [
                                                {"label": "Q1", "value": 12},
                                                {"label": "Q2", "value": 18},
                                            ],
                                        },
                                    }
                                ],
                            },
                            {"type": "Button", "props": {"children": "Export"}},
                        ],
                    },
                ],
            },
        },
    }


# === PROP VALIDATION ===


@dataclass
class PropCheckResult:
    """Outcome of checking a node's props against its component contract."""

    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def validate_props(
    name: str,
    props: Mapping[str, Any] | None,
    *,
    has_children: bool = False,
) -> PropCheckResult:
    """Check props against a component's contract.

    Missing required props and out-of-enumeration variant values are errors;
    props the component does not declare are warnings.

    Args:
        name: Component name.
        props: The node's props (None is treated as empty).
        has_children: Whether the node carries child nodes. Child nodes
            satisfy a required ``children`` prop.

    Returns:
        PropCheckResult with collected errors and warnings.
    """
    schema = get_schema(name)
    if schema is None:
        return PropCheckResult(
            valid=False, errors=[f"Component '{name}' not found in schema."]
        )

    props = props or {}
    errors: list[str] = []
    warnings: list[str] = []

    for required in sorted(schema.required):
        if required in props:
            continue
        if required == "children" and has_children:
            continue
        errors.append(f"Required prop '{required}' missing for component '{name}'.")

    for prop in sorted(props):
        if prop not in schema.props:
            warnings.append(f"Prop '{prop}' is not a valid prop for component '{name}'.")

    for prop, allowed in schema.variants.items():
        value = props.get(prop)
        if isinstance(value, str) and value not in allowed:
            errors.append(
                f"Invalid value '{value}' for prop '{prop}' in component '{name}'. "
                f"Allowed values: {', '.join(allowed)}"
            )

    return PropCheckResult(valid=not errors, errors=errors, warnings=warnings)


__all__ = [
    # Types
    "ComponentCategory",
    "ComponentSchema",
    "PropCheckResult",
    # Registry
    "COMPONENT_REGISTRY",
    "COMPONENT_MODULE_PREFIX",
    "STRUCTURAL_TAGS",
    # Lookup functions
    "get_schema",
    "is_registered",
    "allowed_component_names",
    "component_import_path",
    "get_components_by_category",
    # Schema export
    "export_llm_schema",
    # Validation
    "validate_props",
]
