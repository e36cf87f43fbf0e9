"""Unit tests for the code generator."""

import json
import re

import pytest

from uiforge.ir import LayoutNode, Plan
from uiforge.schema import allowed_component_names

from .lib import (
    CodegenError,
    UnknownComponentError,
    generate,
    render_prop,
    render_text,
    to_json_literal,
)


def _plan(tree: LayoutNode) -> Plan:
    return Plan(intent="test", layout_tree=tree)


def _attribute_json(source: str, name: str):
    """Decode the JSON expression of the first ``name={...}`` attribute."""
    start = source.index(f"{name}={{") + len(name) + 2
    value, _ = json.JSONDecoder().raw_decode(source, start)
    return value


class TestGenerate:
    """Tests for full module generation."""

    @pytest.mark.unit
    def test_exact_output(self):
        plan = _plan(
            LayoutNode(
                type="Card",
                props={"title": "Welcome"},
                children=[
                    LayoutNode(type="Button", props={"children": "Start", "size": "lg"}),
                    LayoutNode(type="Input", props={"placeholder": "Name"}),
                ],
            )
        )
        expected = (
            "import Card from '@/components/ui/Card';\n"
            "import Button from '@/components/ui/Button';\n"
            "import Input from '@/components/ui/Input';\n"
            "\n"
            "export default function GeneratedUI() {\n"
            "  return (\n"
            '    <Card title="Welcome">\n'
            '      <Button size="lg">Start</Button>\n'
            '      <Input placeholder="Name" />\n'
            "    </Card>\n"
            "  );\n"
            "}\n"
        )
        result = generate(plan)
        assert result.source_code == expected
        assert result.root_component_name == "GeneratedUI"
        assert result.components == ("Card", "Button", "Input")

    @pytest.mark.unit
    def test_table_round_trip(self, table_plan):
        """Structured props survive generation losslessly."""
        source = generate(table_plan).source_code
        assert source.count("<Table") == 1
        assert _attribute_json(source, "columns") == [{"key": "name", "header": "Name"}]
        assert _attribute_json(source, "data") == [{"name": "Ada"}]

    @pytest.mark.unit
    def test_deterministic(self, dashboard_plan):
        assert generate(dashboard_plan).source_code == generate(dashboard_plan).source_code

    @pytest.mark.unit
    def test_equal_plans_generate_identical_source(self):
        a = _plan(LayoutNode(type="Sidebar", props={"items": [], "width": "sm"}))
        b = _plan(LayoutNode(type="Sidebar", props={"width": "sm", "items": []}))
        assert generate(a).source_code == generate(b).source_code

    @pytest.mark.unit
    def test_plan_not_mutated(self, form_plan):
        before = form_plan.model_dump()
        generate(form_plan)
        assert form_plan.model_dump() == before

    @pytest.mark.unit
    def test_imports_in_discovery_order_without_duplicates(self, form_plan):
        source = generate(form_plan).source_code
        imports = re.findall(r"^import (\w+) from", source, re.MULTILINE)
        assert imports == ["Center", "Card", "Stack", "Input", "Button"]

    @pytest.mark.unit
    def test_only_registered_tags_emitted(self, dashboard_plan):
        source = generate(dashboard_plan).source_code
        tags = set(re.findall(r"<(?!/)([A-Za-z][\w.]*)", source))
        assert tags <= set(allowed_component_names())

    @pytest.mark.unit
    def test_every_component_generates(self):
        for name in allowed_component_names():
            source = generate(_plan(LayoutNode(type=name))).source_code
            assert f"    <{name} />" in source

    @pytest.mark.unit
    def test_empty_children_self_closing(self):
        source = generate(_plan(LayoutNode(type="Stack", children=[]))).source_code
        assert "    <Stack />\n" in source

    @pytest.mark.unit
    def test_text_with_children(self):
        tree = LayoutNode(
            type="Card",
            props={"children": "Intro"},
            children=[LayoutNode(type="Navbar")],
        )
        source = generate(_plan(tree)).source_code
        assert "    <Card>Intro\n      <Navbar />\n    </Card>\n" in source

    @pytest.mark.unit
    def test_nested_indentation(self):
        tree = LayoutNode(
            type="Container",
            children=[LayoutNode(type="Stack", children=[LayoutNode(type="Navbar")])],
        )
        lines = generate(_plan(tree)).source_code.splitlines()
        body = lines[lines.index("  return (") + 1 : lines.index("  );")]
        assert body == [
            "    <Container>",
            "      <Stack>",
            "        <Navbar />",
            "      </Stack>",
            "    </Container>",
        ]


class TestDefensiveChecks:
    """Tests for generation failures."""

    @pytest.mark.unit
    def test_unknown_component(self):
        tree = LayoutNode(type="Stack", children=[LayoutNode(type="Script")])
        with pytest.raises(UnknownComponentError) as excinfo:
            generate(_plan(tree))
        assert excinfo.value.component_type == "Script"
        assert isinstance(excinfo.value, CodegenError)

    @pytest.mark.unit
    def test_depth_bound(self):
        node = LayoutNode(type="Navbar")
        for _ in range(5):
            node = LayoutNode(type="Stack", children=[node])
        with pytest.raises(CodegenError, match="maximum depth"):
            generate(_plan(node), max_depth=5)
        assert generate(_plan(node), max_depth=6)

    @pytest.mark.unit
    def test_cycle_terminates(self):
        node = LayoutNode(type="Stack", children=[])
        node.children.append(node)
        with pytest.raises(CodegenError):
            generate(_plan(node), max_depth=10)


class TestRenderProp:
    """Tests for attribute rendering."""

    @pytest.mark.unit
    def test_plain_string(self):
        assert render_prop("title", "Users") == 'title="Users"'

    @pytest.mark.unit
    def test_number_and_bool(self):
        assert render_prop("height", 240) == "height={240}"
        assert render_prop("ratio", 1.5) == "ratio={1.5}"
        assert render_prop("disabled", True) == "disabled={true}"
        assert render_prop("striped", False) == "striped={false}"

    @pytest.mark.unit
    def test_structured(self):
        assert render_prop("items", [{"label": "A", "active": True}]) == (
            'items={[{"active":true,"label":"A"}]}'
        )

    @pytest.mark.unit
    def test_quote_breakout_becomes_expression(self):
        rendered = render_prop("title", 'x" onClick="alert(1)')
        assert rendered == 'title={"x\\" onClick=\\"alert(1)"}'
        assert json.loads(rendered[len("title={") : -1]) == 'x" onClick="alert(1)'

    @pytest.mark.unit
    def test_markup_escaped(self):
        rendered = render_prop("title", "<script>")
        assert "<" not in rendered
        assert rendered == 'title={"\\u003cscript\\u003e"}'

    @pytest.mark.unit
    def test_nested_markup_escaped(self):
        rendered = render_prop("data", [{"name": "</Table><Script>"}])
        assert "<" not in rendered and ">" not in rendered
        assert json.loads(rendered[len("data={") : -1]) == [{"name": "</Table><Script>"}]

    @pytest.mark.unit
    def test_invalid_name(self):
        with pytest.raises(CodegenError):
            render_prop("on click", "x")

    @pytest.mark.unit
    def test_unencodable_value(self):
        with pytest.raises(CodegenError):
            render_prop("data", float("nan"))


class TestRenderText:
    """Tests for text content rendering."""

    @pytest.mark.unit
    def test_plain(self):
        assert render_text("Save changes") == "Save changes"

    @pytest.mark.unit
    def test_braces_become_expression(self):
        assert render_text("{danger}") == '{"{danger}"}'

    @pytest.mark.unit
    def test_padded_text_preserved(self):
        assert render_text(" Save ") == '{" Save "}'

    @pytest.mark.unit
    def test_entity_preserved(self):
        assert render_text("Q&A") == '{"Q&A"}'

    @pytest.mark.unit
    def test_json_literal_escapes_angles(self):
        assert to_json_literal("a<b>c") == '"a\\u003cb\\u003ec"'
