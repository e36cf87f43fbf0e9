"""Unit tests for IR models."""

import json

import pytest
from pydantic import ValidationError

from uiforge.ir import Explanation, LayoutNode, Plan, check_prop_value, export_json_schema


class TestLayoutNode:
    """Tests for LayoutNode model."""

    @pytest.mark.unit
    def test_minimal_node(self):
        """Create node with only required fields."""
        node = LayoutNode(type="Navbar")
        assert node.type == "Navbar"
        assert node.props is None
        assert node.children is None
        assert node.is_leaf()

    @pytest.mark.unit
    def test_nested_children(self):
        """Recursive children structure works correctly."""
        child = LayoutNode(type="Button", props={"children": "Click"})
        parent = LayoutNode(type="Stack", children=[child])
        assert len(parent.children) == 1
        assert parent.children[0].text == "Click"
        assert not parent.is_leaf()

    @pytest.mark.unit
    def test_text_is_not_an_attribute(self):
        node = LayoutNode(type="Button", props={"children": "Go", "size": "sm"})
        assert node.text == "Go"
        assert node.attributes == {"size": "sm"}
        assert not node.is_leaf()

    @pytest.mark.unit
    def test_non_string_children_prop_is_attribute(self):
        node = LayoutNode(type="Card", props={"children": ["a", "b"]})
        assert node.text is None
        assert node.attributes == {"children": ["a", "b"]}
        assert node.is_leaf()

    @pytest.mark.unit
    def test_frozen(self):
        node = LayoutNode(type="Card")
        with pytest.raises(ValidationError):
            node.type = "Modal"

    @pytest.mark.unit
    def test_empty_type_rejected(self):
        with pytest.raises(ValidationError):
            LayoutNode(type="")

    @pytest.mark.unit
    def test_unknown_keys_rejected(self):
        with pytest.raises(ValidationError):
            LayoutNode.model_validate({"type": "Card", "onClick": "alert(1)"})

    @pytest.mark.unit
    def test_non_string_type_rejected(self):
        with pytest.raises(ValidationError):
            LayoutNode.model_validate({"type": 7})

    @pytest.mark.unit
    def test_nested_structured_props(self):
        """Lists and objects nest arbitrarily."""
        node = LayoutNode(
            type="Table",
            props={
                "columns": [{"key": "name", "header": "Name"}],
                "data": [{"name": "Ada", "age": 36, "admin": True, "score": 9.5}],
            },
        )
        assert node.props["data"][0]["admin"] is True

    @pytest.mark.unit
    def test_null_prop_rejected(self):
        with pytest.raises(ValidationError):
            LayoutNode.model_validate({"type": "Card", "props": {"title": None}})

    @pytest.mark.unit
    def test_nested_null_rejected(self):
        with pytest.raises(ValidationError, match="null"):
            LayoutNode.model_validate(
                {"type": "Table", "props": {"data": [{"name": None}]}}
            )

    @pytest.mark.unit
    def test_non_finite_number_rejected(self):
        with pytest.raises(ValidationError):
            LayoutNode(type="Chart", props={"height": float("inf")})

    @pytest.mark.unit
    def test_invalid_prop_name_rejected(self):
        """Prop names that could break out of attribute position are rejected."""
        for name in ("on click", 'x="1"', "1abc", "a-b", ""):
            with pytest.raises(ValidationError):
                LayoutNode(type="Card", props={name: "v"})

    @pytest.mark.unit
    def test_input_dict_not_aliased(self):
        props = {"title": "Users"}
        node = LayoutNode(type="Card", props=props)
        props["title"] = "changed"
        assert node.props["title"] == "Users"

    @pytest.mark.unit
    def test_json_round_trip(self):
        """Node serializes without absent fields and decodes back."""
        node = LayoutNode(
            type="Container",
            children=[LayoutNode(type="Button", props={"children": "Save"})],
        )
        data = node.to_json_dict()
        assert data == {
            "type": "Container",
            "children": [{"type": "Button", "props": {"children": "Save"}}],
        }
        assert LayoutNode.model_validate(data) == node


class TestCheckPropValue:
    """Tests for the PropValue type check."""

    @pytest.mark.unit
    def test_accepts_scalars(self):
        for value in ("x", 1, 1.5, True, False, [], {}):
            check_prop_value(value)

    @pytest.mark.unit
    def test_rejects_other_types(self):
        for value in (None, (1, 2), {1, 2}, object(), float("nan")):
            with pytest.raises(ValueError):
                check_prop_value(value)

    @pytest.mark.unit
    def test_error_names_path(self):
        with pytest.raises(ValueError, match=r"columns\[1\]"):
            check_prop_value(["ok", None], path="columns")


class TestPlan:
    """Tests for the Plan model."""

    @pytest.mark.unit
    def test_wire_alias(self):
        plan = Plan.model_validate(
            {"intent": "A button", "layoutTree": {"type": "Button", "props": {"children": "Hi"}}}
        )
        assert plan.layout_tree.type == "Button"
        assert plan.to_json_dict()["layoutTree"]["props"] == {"children": "Hi"}

    @pytest.mark.unit
    def test_populate_by_name(self):
        plan = Plan(intent="x", layout_tree=LayoutNode(type="Navbar"))
        assert json.loads(plan.to_json()) == {
            "intent": "x",
            "layoutTree": {"type": "Navbar"},
        }

    @pytest.mark.unit
    def test_missing_tree_rejected(self):
        with pytest.raises(ValidationError):
            Plan.model_validate({"intent": "x"})


class TestExplanation:
    """Tests for the Explanation model."""

    @pytest.mark.unit
    def test_components_used_deduplicated(self):
        explanation = Explanation.model_validate(
            {
                "summary": "A form",
                "decisions": [{"decision": "Use Card", "reasoning": "Groups fields"}],
                "componentsUsed": ["Card", "Input", "Card", "Button"],
            }
        )
        assert explanation.components_used == ["Card", "Input", "Button"]
        assert explanation.to_json_dict()["componentsUsed"] == ["Card", "Input", "Button"]

    @pytest.mark.unit
    def test_defaults(self):
        explanation = Explanation(summary="Empty")
        assert explanation.decisions == []
        assert explanation.components_used == []


class TestExportJsonSchema:
    """Tests for JSON schema export."""

    @pytest.mark.unit
    def test_schema_export(self):
        """Schema exports with expected structure."""
        schema = export_json_schema()
        assert schema["title"] == "Plan"
        assert "layoutTree" in schema["properties"]
        assert "LayoutNode" in schema["$defs"]
