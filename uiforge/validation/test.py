"""Unit tests for validation module."""

import pytest

from uiforge.ir import LayoutNode
from uiforge.schema import allowed_component_names
from uiforge.validation import ValidationError, is_valid_tree, validate_tree


def _chain(depth: int) -> LayoutNode:
    """Build a Stack chain ``depth`` nodes deep."""
    node = LayoutNode(type="Button", props={"children": "leaf"})
    for _ in range(depth - 1):
        node = LayoutNode(type="Stack", children=[node])
    return node


class TestValidateTree:
    """Tests for validate_tree function."""

    @pytest.mark.unit
    def test_valid_tree(self, table_plan):
        """Well-formed tree passes validation."""
        result = validate_tree(table_plan.layout_tree)
        assert result.valid
        assert result.errors == []
        assert result.invalid_component_types == []

    @pytest.mark.unit
    def test_every_registered_component_accepted(self):
        for name in allowed_component_names():
            assert is_valid_tree(LayoutNode(type=name)), name

    @pytest.mark.unit
    def test_unknown_component(self):
        tree = LayoutNode(type="Container", children=[LayoutNode(type="Script")])
        result = validate_tree(tree)
        assert not result.valid
        assert result.invalid_component_types == ["Script"]
        assert isinstance(result.errors[0], ValidationError)
        assert result.errors[0].error_type == "unknown_component"
        assert result.errors[0].path == "root.children[0]"

    @pytest.mark.unit
    def test_all_unknown_types_reported(self):
        """Traversal does not stop at the first unknown type."""
        tree = LayoutNode(
            type="Container",
            children=[
                LayoutNode(type="Iframe"),
                LayoutNode(
                    type="Stack",
                    children=[LayoutNode(type="Script"), LayoutNode(type="Iframe")],
                ),
                LayoutNode(type="div"),
            ],
        )
        result = validate_tree(tree)
        assert result.invalid_component_types == ["Iframe", "Script", "div"]
        assert len(result.errors) == 4

    @pytest.mark.unit
    def test_unknown_root(self):
        result = validate_tree(LayoutNode(type="App"))
        assert result.invalid_component_types == ["App"]
        assert result.messages == ["Unknown component type 'App' at root"]

    @pytest.mark.unit
    def test_case_sensitive(self):
        result = validate_tree(LayoutNode(type="button"))
        assert not result.valid


class TestCycles:
    """Tests for cycle and sharing detection."""

    @pytest.mark.unit
    def test_self_cycle_rejected(self):
        """A node that is its own child is rejected without looping."""
        node = LayoutNode(type="Stack", children=[])
        node.children.append(node)
        result = validate_tree(node)
        assert not result.valid
        assert [e.error_type for e in result.errors] == ["cycle"]

    @pytest.mark.unit
    def test_indirect_cycle_rejected(self):
        inner = LayoutNode(type="Card", children=[])
        outer = LayoutNode(type="Container", children=[LayoutNode(type="Stack", children=[inner])])
        inner.children.append(outer)
        result = validate_tree(outer)
        assert not result.valid
        assert any(e.error_type == "cycle" for e in result.errors)
        assert result.errors[0].path == "root.children[0].children[0].children[0]"

    @pytest.mark.unit
    def test_shared_node_rejected(self):
        shared = LayoutNode(type="Button", props={"children": "Twice"})
        tree = LayoutNode(type="Stack", children=[shared, shared])
        result = validate_tree(tree)
        assert not result.valid
        assert [e.error_type for e in result.errors] == ["shared_node"]

    @pytest.mark.unit
    def test_equal_but_distinct_nodes_accepted(self):
        tree = LayoutNode(
            type="Stack",
            children=[
                LayoutNode(type="Button", props={"children": "Same"}),
                LayoutNode(type="Button", props={"children": "Same"}),
            ],
        )
        assert validate_tree(tree).valid


class TestDepthBound:
    """Tests for the depth bound."""

    @pytest.mark.unit
    def test_within_bound(self):
        assert validate_tree(_chain(5), max_depth=5).valid

    @pytest.mark.unit
    def test_beyond_bound(self):
        result = validate_tree(_chain(6), max_depth=5)
        assert not result.valid
        assert [e.error_type for e in result.errors] == ["max_depth"]

    @pytest.mark.unit
    def test_deep_tree_does_not_recurse(self):
        """Thousands of levels are handled without recursion errors."""
        result = validate_tree(_chain(5000), max_depth=10_000)
        assert result.valid

    @pytest.mark.unit
    def test_default_bound_from_environment(self, monkeypatch):
        monkeypatch.setenv("UIFORGE_MAX_TREE_DEPTH", "3")
        assert not validate_tree(_chain(4)).valid


class TestPropWarnings:
    """Prop contract findings never fail validation."""

    @pytest.mark.unit
    def test_missing_required_is_warning(self):
        result = validate_tree(LayoutNode(type="Table", props={"columns": []}))
        assert result.valid
        assert any("'data'" in w for w in result.warnings)

    @pytest.mark.unit
    def test_unknown_prop_is_warning(self):
        result = validate_tree(
            LayoutNode(type="Button", props={"children": "Go", "tone": "loud"})
        )
        assert result.valid
        assert result.warnings == [
            "root: Prop 'tone' is not a valid prop for component 'Button'."
        ]

    @pytest.mark.unit
    def test_child_nodes_satisfy_children(self):
        tree = LayoutNode(type="Stack", children=[LayoutNode(type="Navbar")])
        assert validate_tree(tree).warnings == []

    @pytest.mark.unit
    def test_check_props_disabled(self):
        result = validate_tree(LayoutNode(type="Table"), check_props=False)
        assert result.warnings == []
