"""Intermediate Representation (IR) models for layout trees."""

from uiforge.ir.lib import (
    PROP_NAME_PATTERN,
    TEXT_PROP,
    Decision,
    Explanation,
    LayoutNode,
    Plan,
    check_prop_value,
    export_json_schema,
)

__all__ = [
    # Core models
    "LayoutNode",
    "Plan",
    "Decision",
    "Explanation",
    # Prop rules
    "PROP_NAME_PATTERN",
    "TEXT_PROP",
    "check_prop_value",
    "export_json_schema",
]
