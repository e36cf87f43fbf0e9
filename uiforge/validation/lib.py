"""Layout tree validation.

This module checks LayoutNode trees against the component registry before
code generation. Every node is visited once with an explicit stack, so
adversarially deep or cyclic input cannot exhaust the call stack or loop
forever.
"""

import logging
from dataclasses import dataclass, field

from uiforge.config import EnvVar, get_environment
from uiforge.ir import LayoutNode
from uiforge.schema import is_registered, validate_props

logger = logging.getLogger(__name__)

_EXIT = object()


@dataclass
class ValidationError:
    """Represents a validation error in a layout tree.

    Attributes:
        path: Location of the node (e.g. ``root.children[1]``).
        message: Human-readable error description.
        error_type: Category of the error (unknown_component, cycle,
            shared_node, max_depth, invalid_node).
    """

    path: str
    message: str
    error_type: str


@dataclass
class TreeValidationResult:
    """Outcome of validating a layout tree.

    Attributes:
        valid: True when no structural or whitelist errors were found.
        invalid_component_types: Every unregistered type, distinct, in
            discovery order.
        errors: All errors found.
        warnings: Non-fatal prop contract findings.
    """

    valid: bool
    invalid_component_types: list[str] = field(default_factory=list)
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def messages(self) -> list[str]:
        """Error messages as plain strings."""
        return [e.message for e in self.errors]


def validate_tree(
    tree: LayoutNode,
    *,
    max_depth: int | None = None,
    check_props: bool = True,
) -> TreeValidationResult:
    """Validate a layout tree against the component registry.

    Performs the following checks:
        - Every node type is registered (all offenders reported, no short-circuit)
        - Cycle detection (no node is its own ancestor)
        - Shared node detection (no node reachable through two parents)
        - Depth bound (deeper subtrees are reported and not descended)
        - Prop contracts (reported as warnings only)

    Args:
        tree: The root LayoutNode to validate.
        max_depth: Maximum depth, root being 1. Defaults to
            ``UIFORGE_MAX_TREE_DEPTH``.
        check_props: Also check props against each component's contract.

    Returns:
        TreeValidationResult describing every problem found.

    Example:
        >>> result = validate_tree(plan.layout_tree)
        >>> if not result.valid:
        ...     print(result.invalid_component_types)
    """
    limit = get_environment(EnvVar.MAX_TREE_DEPTH, override=max_depth)

    errors: list[ValidationError] = []
    warnings: list[str] = []
    invalid_types: dict[str, None] = {}

    on_path: set[int] = set()
    seen: set[int] = set()
    stack: list[tuple[object, str, int, object]] = [(tree, "root", 1, None)]

    while stack:
        node, path, depth, marker = stack.pop()
        if marker is _EXIT:
            on_path.discard(id(node))
            continue

        if not isinstance(node, LayoutNode):
            errors.append(
                ValidationError(
                    path=path,
                    message=f"Node at {path} is not a layout node",
                    error_type="invalid_node",
                )
            )
            continue

        node_key = id(node)
        if node_key in on_path:
            errors.append(
                ValidationError(
                    path=path,
                    message=f"Cycle detected: '{node.type}' at {path} is its own ancestor",
                    error_type="cycle",
                )
            )
            continue
        if node_key in seen:
            errors.append(
                ValidationError(
                    path=path,
                    message=f"Node '{node.type}' at {path} appears more than once in the tree",
                    error_type="shared_node",
                )
            )
            continue
        seen.add(node_key)

        children = node.children or []

        if not is_registered(node.type):
            if node.type not in invalid_types:
                invalid_types[node.type] = None
            errors.append(
                ValidationError(
                    path=path,
                    message=f"Unknown component type '{node.type}' at {path}",
                    error_type="unknown_component",
                )
            )
        elif check_props:
            props_result = validate_props(
                node.type, node.props, has_children=bool(children)
            )
            warnings.extend(f"{path}: {m}" for m in props_result.errors)
            warnings.extend(f"{path}: {m}" for m in props_result.warnings)

        if not children:
            continue
        if depth >= limit:
            errors.append(
                ValidationError(
                    path=path,
                    message=f"Tree exceeds maximum depth of {limit} below {path}",
                    error_type="max_depth",
                )
            )
            continue

        on_path.add(node_key)
        stack.append((node, path, depth, _EXIT))
        for i in range(len(children) - 1, -1, -1):
            stack.append((children[i], f"{path}.children[{i}]", depth + 1, None))

    if errors:
        logger.debug(f"Tree validation found {len(errors)} error(s)")

    return TreeValidationResult(
        valid=not errors,
        invalid_component_types=list(invalid_types),
        errors=errors,
        warnings=warnings,
    )


def is_valid_tree(tree: LayoutNode, *, max_depth: int | None = None) -> bool:
    """Check if a layout tree is valid.

    Convenience function that returns True if no validation errors exist.

    Example:
        >>> if is_valid_tree(plan.layout_tree):
        ...     source = generate(plan)
    """
    return validate_tree(tree, max_depth=max_depth, check_props=False).valid


__all__ = [
    "ValidationError",
    "TreeValidationResult",
    "validate_tree",
    "is_valid_tree",
]
