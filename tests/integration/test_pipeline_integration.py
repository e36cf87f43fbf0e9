"""Integration tests for the full layout-to-code pipeline.

Runs the LLM-backed planner and explainer against a scripted in-process
backend, a SQLite version store and the real validators.
"""

import json
from typing import Any

import pytest

from uiforge.agents import LLMExplainer, LLMPlanner
from uiforge.history import SQLiteStorage, VersionStore
from uiforge.lint import lint_source
from uiforge.llm.backend import GenerationConfig, GenerationResult, LLMBackend
from uiforge.pipeline import ErrorKind, Orchestrator, PipelineConfig


class ScriptedBackend(LLMBackend):
    """Answers planner and explainer prompts from queued responses."""

    def __init__(self, plans: list[str], explanation: str):
        self._plans = list(plans)
        self._explanation = explanation
        self.prompts: list[str] = []

    def generate(
        self,
        prompt: str,
        *,
        system_prompt: str | None = None,
        config: GenerationConfig | None = None,
    ) -> GenerationResult:
        self.prompts.append(prompt)
        if system_prompt and "explainer" in system_prompt:
            content = self._explanation
        else:
            content = self._plans.pop(0)
        return GenerationResult(
            content=content, finish_reason="stop", usage={}, model="scripted"
        )

    def generate_json(self, prompt: str, **kwargs: Any) -> dict[str, Any]:
        return json.loads(self.generate(prompt, **kwargs).content)

    @property
    def model_name(self) -> str:
        return "scripted"

    @property
    def provider(self) -> str:
        return "test"

    @property
    def supports_json_mode(self) -> bool:
        return True


LOGIN_PLAN = {
    "intent": "Login form",
    "layoutTree": {
        "type": "Center",
        "children": [
            {
                "type": "Card",
                "props": {"title": "Sign in"},
                "children": [
                    {"type": "Input", "props": {"type": "email", "label": "Email"}},
                    {"type": "Button", "props": {"children": "Sign in"}},
                ],
            }
        ],
    },
}

USERS_PLAN = {
    "intent": "User table",
    "layoutTree": {
        "type": "Container",
        "children": [
            {
                "type": "Table",
                "props": {
                    "columns": [{"key": "name", "header": "Name"}],
                    "data": [{"name": "Ada </Table>"}],
                },
            }
        ],
    },
}

EXPLANATION = json.dumps(
    {"summary": "A sign-in card", "componentsUsed": ["Center", "Card", "Input"]}
)


@pytest.fixture
def store(tmp_path):
    store = VersionStore(SQLiteStorage(tmp_path / "versions.db"))
    yield store
    store.close()


def _orchestrator(backend: LLMBackend, store: VersionStore) -> Orchestrator:
    return Orchestrator(
        LLMPlanner(backend),
        explainer=LLMExplainer(backend),
        store=store,
        config=PipelineConfig(planner_timeout=5.0, explainer_timeout=5.0),
    )


@pytest.mark.integration
@pytest.mark.asyncio
async def test_generate_modify_rollback(store):
    backend = ScriptedBackend(
        [f"```json\n{json.dumps(LOGIN_PLAN)}\n```", json.dumps(USERS_PLAN)],
        EXPLANATION,
    )
    orchestrator = _orchestrator(backend, store)

    first = await orchestrator.generate("a login form")
    assert first.success, first.errors
    assert first.version["explanation"]["summary"] == "A sign-in card"

    second = await orchestrator.modify("replace it with a user table")
    assert second.success, second.errors
    assert "\\u003c/Table\\u003e" in second.code
    assert lint_source(second.code).valid
    assert "EXISTING PLAN" in backend.prompts[2]

    rolled = await orchestrator.rollback(first.version["id"])
    assert rolled.success
    assert [h["id"] for h in await orchestrator.history()] == [first.version["id"]]


@pytest.mark.integration
@pytest.mark.asyncio
async def test_unregistered_component_never_stored(store):
    plan = {"intent": "x", "layoutTree": {"type": "Stack", "children": [{"type": "iframe"}]}}
    orchestrator = _orchestrator(ScriptedBackend([json.dumps(plan)], EXPLANATION), store)

    result = await orchestrator.generate("embed my site")

    assert result.error_kind is ErrorKind.SCHEMA_VIOLATION
    assert result.invalid_component_types == ["iframe"]
    assert store.count() == 0
