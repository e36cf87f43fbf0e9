"""Schema module - authoritative source for the component whitelist.

This module provides:
- The closed registry of allowed components and their prop contracts
- Lookup helpers shared by both validation gates
- The schema export embedded in planner prompts
- Prop contract checks

Example usage:
    >>> from uiforge.schema import export_llm_schema, get_schema
    >>> schema = export_llm_schema()  # For LLM prompt injection
    >>> get_schema("Button").required
    frozenset({'children'})
"""

from .lib import (
    COMPONENT_MODULE_PREFIX,
    COMPONENT_REGISTRY,
    STRUCTURAL_TAGS,
    ComponentCategory,
    ComponentSchema,
    PropCheckResult,
    allowed_component_names,
    component_import_path,
    export_llm_schema,
    get_components_by_category,
    get_schema,
    is_registered,
    validate_props,
)

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
