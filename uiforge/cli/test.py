"""Tests for the command line interface.

Pipeline commands run with a fake orchestrator; no network access.
"""

import json

import pytest

from uiforge.agents import PlanOk
from uiforge.history import VersionStore
from uiforge.pipeline import Orchestrator, PipelineConfig

from . import lib
from .lib import main


class _StaticPlanner:
    def __init__(self, plan):
        self._plan = plan

    def plan(self, request):
        return PlanOk(self._plan)


@pytest.fixture
def plan_file(tmp_path, table_plan):
    path = tmp_path / "plan.json"
    path.write_text(table_plan.to_json(), encoding="utf-8")
    return path


class TestOfflineCommands:
    """Tests for schema, compile, lint and diff."""

    @pytest.mark.unit
    def test_no_command_shows_help(self, capsys):
        assert main([]) == 1
        assert "Usage: uiforge" in capsys.readouterr().out

    @pytest.mark.unit
    def test_unknown_command(self, capsys):
        assert main(["explode"]) == 1

    @pytest.mark.unit
    def test_schema(self, capsys):
        assert main(["schema"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert "Button" in data["allowed"]

    @pytest.mark.unit
    def test_json_schema(self, capsys):
        assert main(["schema", "--json-schema"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert "layoutTree" in data["properties"]

    @pytest.mark.unit
    def test_compile(self, plan_file, capsys):
        assert main(["compile", str(plan_file)]) == 0
        out = capsys.readouterr().out
        assert "import Table from '@/components/ui/Table';" in out
        assert "export default function GeneratedUI()" in out

    @pytest.mark.unit
    def test_compile_to_file(self, plan_file, tmp_path):
        output = tmp_path / "GeneratedUI.tsx"
        assert main(["compile", str(plan_file), "-o", str(output)]) == 0
        assert "<Table" in output.read_text(encoding="utf-8")

    @pytest.mark.unit
    def test_compile_unknown_component(self, tmp_path, capsys):
        path = tmp_path / "plan.json"
        path.write_text(
            json.dumps({"intent": "x", "layoutTree": {"type": "Carousel"}}),
            encoding="utf-8",
        )
        assert main(["compile", str(path)]) == 1
        assert "Unknown component type 'Carousel'" in capsys.readouterr().err

    @pytest.mark.unit
    def test_compile_invalid_json(self, tmp_path, capsys):
        path = tmp_path / "plan.json"
        path.write_text("not a plan", encoding="utf-8")
        assert main(["compile", str(path)]) == 1
        assert "error:" in capsys.readouterr().err

    @pytest.mark.unit
    def test_lint(self, tmp_path, capsys):
        path = tmp_path / "bad.tsx"
        path.write_text("import _ from 'lodash';\n", encoding="utf-8")
        assert main(["lint", str(path)]) == 1
        assert "error:" in capsys.readouterr().err

    @pytest.mark.unit
    def test_lint_compiled_output(self, plan_file, tmp_path, capsys):
        output = tmp_path / "GeneratedUI.tsx"
        main(["compile", str(plan_file), "-o", str(output)])
        assert main(["lint", str(output)]) == 0
        assert "OK" in capsys.readouterr().out

    @pytest.mark.unit
    def test_diff(self, tmp_path, capsys):
        old = tmp_path / "old.tsx"
        new = tmp_path / "new.tsx"
        old.write_text("a\nb\n", encoding="utf-8")
        new.write_text("a\nc\n", encoding="utf-8")
        assert main(["diff", str(old), str(new)]) == 0
        assert capsys.readouterr().out.strip().startswith("{")


class TestPipelineCommands:
    """Tests for generate, modify, history and rollback."""

    @pytest.fixture
    def db(self, tmp_path, monkeypatch, form_plan):
        path = tmp_path / "versions.db"

        def fake_build(args):
            return Orchestrator(
                _StaticPlanner(form_plan),
                store=VersionStore.from_environment(args.db),
                config=PipelineConfig(),
            )

        monkeypatch.setattr(lib, "build_orchestrator", fake_build)
        return path

    @pytest.mark.unit
    def test_generate_modify_history_rollback(self, db, capsys):
        assert main(["generate", "a login form", "--db", str(db), "--json"]) == 0
        first = json.loads(capsys.readouterr().out)
        assert first["success"] is True

        assert main(["modify", "make it wider", "--db", str(db), "--json"]) == 0
        second = json.loads(capsys.readouterr().out)
        assert second["changeSummary"] == "No changes detected"

        assert main(["history", "--db", str(db)]) == 0
        history = json.loads(capsys.readouterr().out)
        assert [h["isModification"] for h in history] == [False, True]

        assert main(["rollback", first["version"]["id"], "--db", str(db)]) == 0
        assert "GeneratedUI" in capsys.readouterr().out

        main(["history", "--db", str(db)])
        assert len(json.loads(capsys.readouterr().out)) == 1

    @pytest.mark.unit
    def test_rollback_missing(self, db):
        assert main(["rollback", "missing", "--db", str(db)]) == 1

    @pytest.mark.unit
    def test_modify_without_history(self, db, capsys):
        assert main(["modify", "add a footer", "--db", str(db)]) == 1
        assert "No existing version" in capsys.readouterr().err

    @pytest.mark.unit
    def test_backend_error(self, monkeypatch, tmp_path):
        monkeypatch.setenv("UIFORGE_LLM_PROVIDER", "openai")
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        monkeypatch.setattr(lib, "load_dotenv", lambda: None)
        assert main(["generate", "x", "--db", str(tmp_path / "v.db")]) == 1
