"""Unit tests for the Schema module."""

import json

import pytest

from uiforge.schema import (
    COMPONENT_REGISTRY,
    ComponentCategory,
    ComponentSchema,
    allowed_component_names,
    component_import_path,
    export_llm_schema,
    get_components_by_category,
    get_schema,
    is_registered,
    validate_props,
)

from .lib import _build_registry, _schema


class TestComponentRegistry:
    """Tests for COMPONENT_REGISTRY completeness and invariants."""

    @pytest.mark.unit
    def test_registry_has_11_entries(self):
        """Registry contains exactly the 11 library components."""
        assert len(COMPONENT_REGISTRY) == 11

    @pytest.mark.unit
    def test_registration_order(self):
        """Names are exported in registration order."""
        assert allowed_component_names() == (
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

    @pytest.mark.unit
    def test_required_subset_of_props(self):
        """Every required prop is also an allowed prop."""
        for name, schema in COMPONENT_REGISTRY.items():
            assert schema.required <= schema.props, name

    @pytest.mark.unit
    def test_variant_keys_subset_of_props(self):
        """Every constrained prop is an allowed prop."""
        for name, schema in COMPONENT_REGISTRY.items():
            assert set(schema.variants) <= schema.props, name

    @pytest.mark.unit
    def test_all_entries_have_descriptions(self):
        """Every component has a non-empty description and category."""
        for name, schema in COMPONENT_REGISTRY.items():
            assert len(schema.description) > 10, f"{name} description too short"
            assert isinstance(schema.category, ComponentCategory)

    @pytest.mark.unit
    def test_registry_is_read_only(self):
        """The registry exposes no mutation."""
        with pytest.raises(TypeError):
            COMPONENT_REGISTRY["Script"] = COMPONENT_REGISTRY["Button"]  # type: ignore[index]

    @pytest.mark.unit
    def test_variants_are_read_only(self):
        """Variant mappings cannot be extended either."""
        with pytest.raises(TypeError):
            get_schema("Button").variants["tone"] = ("loud",)  # type: ignore[index]


class TestRegistryInvariants:
    """Tests for the import-time registry checks."""

    @pytest.mark.unit
    def test_duplicate_name_rejected(self):
        button = _schema("Button", ("children",))
        with pytest.raises(ValueError, match="Duplicate"):
            _build_registry((button, button))

    @pytest.mark.unit
    def test_required_outside_props_rejected(self):
        bad = _schema("Button", ("children",), required=("label",))
        with pytest.raises(ValueError, match="required props"):
            _build_registry((bad,))

    @pytest.mark.unit
    def test_variant_outside_props_rejected(self):
        bad = _schema("Button", ("children",), variants={"tone": ("loud",)})
        with pytest.raises(ValueError, match="variant keys"):
            _build_registry((bad,))


class TestLookup:
    """Tests for registry lookups."""

    @pytest.mark.unit
    def test_get_schema_known(self):
        schema = get_schema("Table")
        assert isinstance(schema, ComponentSchema)
        assert schema.required == frozenset({"columns", "data"})

    @pytest.mark.unit
    def test_get_schema_unknown(self):
        assert get_schema("Script") is None
        assert get_schema("button") is None

    @pytest.mark.unit
    def test_get_schema_non_string(self):
        assert get_schema(None) is None  # type: ignore[arg-type]
        assert get_schema(["Button"]) is None  # type: ignore[arg-type]

    @pytest.mark.unit
    def test_is_registered(self):
        assert is_registered("Container")
        assert not is_registered("div")

    @pytest.mark.unit
    def test_import_path(self):
        assert component_import_path("Card") == "@/components/ui/Card"

    @pytest.mark.unit
    def test_accepts_children(self):
        assert get_schema("Stack").accepts_children()
        assert not get_schema("Table").accepts_children()

    @pytest.mark.unit
    def test_components_by_category(self):
        containers = get_components_by_category(ComponentCategory.CONTAINER)
        assert containers == ["Stack", "Center", "Container"]


class TestSchemaExport:
    """Tests for the LLM schema export."""

    @pytest.mark.unit
    def test_export_structure(self):
        """Export carries components, allowed list and categories."""
        schema = export_llm_schema()
        assert "components" in schema
        assert "allowed" in schema
        assert "categories" in schema
        assert schema["allowed"] == list(allowed_component_names())

    @pytest.mark.unit
    def test_export_component_contract(self):
        """Each component entry enumerates its full contract."""
        entries = {c["name"]: c for c in export_llm_schema()["components"]}
        button = entries["Button"]
        assert button["required"] == ["children"]
        assert "fullWidth" in button["props"]
        assert button["variants"]["variant"] == [
            "primary",
            "secondary",
            "outline",
            "danger",
        ]

    @pytest.mark.unit
    def test_export_is_json_serializable(self):
        """Export can be embedded verbatim in a prompt."""
        text = json.dumps(export_llm_schema())
        assert "Container" in text

    @pytest.mark.unit
    def test_export_is_stable(self):
        assert export_llm_schema() == export_llm_schema()

    @pytest.mark.unit
    def test_example_uses_registered_components(self):
        """The embedded example only uses whitelisted components."""
        stack = [export_llm_schema()["examples"]["dashboard"]]
        while stack:
            node = stack.pop()
            assert is_registered(node["type"])
            stack.extend(node.get("children", []))


class TestValidateProps:
    """Tests for prop contract checks."""

    @pytest.mark.unit
    def test_valid_props(self):
        result = validate_props("Button", {"children": "Save", "variant": "primary"})
        assert result.valid
        assert result.errors == []
        assert result.warnings == []

    @pytest.mark.unit
    def test_missing_required(self):
        result = validate_props("Table", {"columns": []})
        assert not result.valid
        assert any("'data'" in e for e in result.errors)

    @pytest.mark.unit
    def test_children_nodes_satisfy_required_children(self):
        result = validate_props("Stack", {"gap": "md"}, has_children=True)
        assert result.valid

    @pytest.mark.unit
    def test_unknown_prop_is_warning(self):
        result = validate_props("Button", {"children": "Go", "tone": "loud"})
        assert result.valid
        assert result.warnings == [
            "Prop 'tone' is not a valid prop for component 'Button'."
        ]

    @pytest.mark.unit
    def test_invalid_variant(self):
        result = validate_props("Button", {"children": "Go", "size": "xxl"})
        assert not result.valid
        assert "Allowed values: sm, md, lg" in result.errors[0]

    @pytest.mark.unit
    def test_non_string_variant_value_ignored(self):
        """Only string values are checked against enumerations."""
        result = validate_props("Chart", {"data": [], "type": 3})
        assert result.valid

    @pytest.mark.unit
    def test_unknown_component(self):
        result = validate_props("Script", {})
        assert not result.valid
        assert "not found" in result.errors[0]

    @pytest.mark.unit
    def test_none_props(self):
        result = validate_props("Navbar", None)
        assert result.valid
