"""Deterministic JSX code generation from layout plans."""

from uiforge.codegen.lib import (
    ROOT_COMPONENT_NAME,
    CodegenError,
    GeneratedSource,
    UnknownComponentError,
    generate,
    render_prop,
    render_text,
    render_tree,
    to_json_literal,
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
