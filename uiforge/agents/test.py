"""Tests for the planning and explanation collaborators.

The LLM backend is a MagicMock; no network access.
"""

import json
from unittest.mock import MagicMock

import pytest

from uiforge.ir import Explanation
from uiforge.llm.backend import GenerationResult, RateLimitError

from .lib import LLMExplainer, LLMPlanner
from .models import (
    ExplainRequest,
    ExplanationOk,
    PlanOk,
    PlanParseError,
    PlanRequest,
    UpstreamError,
    decode_explanation,
    decode_plan,
)
from .repair import JsonRepair

VALID_PLAN = {
    "intent": "A button",
    "layoutTree": {"type": "Button", "props": {"children": "Go"}},
}


def _result(content: str) -> GenerationResult:
    return GenerationResult(content=content, finish_reason="stop", usage={}, model="m")


def _backend(*contents: str) -> MagicMock:
    backend = MagicMock()
    backend.name = "mock:model"
    backend.generate.side_effect = [_result(c) for c in contents]
    return backend


# =============================================================================
# JSON Repair Tests
# =============================================================================


class TestJsonRepair:
    """Tests for JsonRepair."""

    @pytest.mark.unit
    def test_markdown_fence(self):
        assert JsonRepair().repair('```json\n{"a": 1}\n```') == {"a": 1}

    @pytest.mark.unit
    def test_trailing_comma(self):
        assert JsonRepair().repair('{"a": [1, 2,],}') == {"a": [1, 2]}

    @pytest.mark.unit
    def test_leading_prose(self):
        assert JsonRepair().repair('Sure! Here you go: {"a": 1}') == {"a": 1}

    @pytest.mark.unit
    def test_prose_prefix(self):
        assert JsonRepair().repair('Result: {"a": 1}') == {"a": 1}

    @pytest.mark.unit
    def test_balanced_object_with_trailing_text(self):
        content = 'prefix {"a": "}"} and then {"b": 2} more'
        assert JsonRepair().repair(content) == {"a": "}"}

    @pytest.mark.unit
    def test_unrecoverable(self):
        assert JsonRepair().repair("no json here") is None

    @pytest.mark.unit
    def test_array_is_not_an_object(self):
        assert JsonRepair().repair("[1, 2]") is None


# =============================================================================
# Decoder Tests
# =============================================================================


class TestDecodePlan:
    """Tests for decode_plan."""

    @pytest.mark.unit
    def test_json_text(self):
        outcome = decode_plan(json.dumps(VALID_PLAN))
        assert isinstance(outcome, PlanOk)
        assert outcome.plan.layout_tree.type == "Button"

    @pytest.mark.unit
    def test_dict(self):
        assert isinstance(decode_plan(VALID_PLAN), PlanOk)

    @pytest.mark.unit
    def test_repaired_text(self):
        outcome = decode_plan(f"```json\n{json.dumps(VALID_PLAN)}\n```")
        assert isinstance(outcome, PlanOk)

    @pytest.mark.unit
    def test_success_envelope(self):
        outcome = decode_plan({"success": True, "plan": VALID_PLAN})
        assert isinstance(outcome, PlanOk)

    @pytest.mark.unit
    def test_failure_envelope(self):
        outcome = decode_plan({"success": False, "error": "quota exceeded"})
        assert outcome == UpstreamError("quota exceeded")

    @pytest.mark.unit
    def test_envelope_without_plan(self):
        assert isinstance(decode_plan({"success": True}), PlanParseError)

    @pytest.mark.unit
    def test_not_json(self):
        outcome = decode_plan("I cannot help with that")
        assert isinstance(outcome, PlanParseError)
        assert outcome.raw == "I cannot help with that"

    @pytest.mark.unit
    def test_missing_tree(self):
        outcome = decode_plan({"intent": "x"})
        assert isinstance(outcome, PlanParseError)
        assert "layoutTree" in outcome.message

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "tree",
        [
            {"props": {}},
            {"type": "Button", "onClick": "alert(1)"},
            {"type": "Button", "props": {"children": None}},
            {"type": "Button", "props": {"on-click": "x"}},
            {"type": "Stack", "children": "not a list"},
            {"type": 42},
        ],
    )
    def test_shape_violations(self, tree):
        outcome = decode_plan({"intent": "x", "layoutTree": tree})
        assert isinstance(outcome, PlanParseError)

    @pytest.mark.unit
    def test_unknown_component_still_decodes(self):
        # Registry membership is the tree validator's job
        outcome = decode_plan({"intent": "x", "layoutTree": {"type": "Carousel"}})
        assert isinstance(outcome, PlanOk)


class TestDecodeExplanation:
    """Tests for decode_explanation."""

    @pytest.mark.unit
    def test_valid(self):
        outcome = decode_explanation(
            '{"summary": "s", "decisions": [], "componentsUsed": ["Card", "Card"]}'
        )
        assert isinstance(outcome, ExplanationOk)
        assert outcome.explanation.components_used == ["Card"]

    @pytest.mark.unit
    def test_invalid(self):
        assert isinstance(decode_explanation('{"decisions": 3}'), UpstreamError)

    @pytest.mark.unit
    def test_failure_envelope(self):
        outcome = decode_explanation({"success": False})
        assert outcome == UpstreamError("Explainer reported failure")


# =============================================================================
# LLM Agent Tests
# =============================================================================


class TestLLMPlanner:
    """Tests for LLMPlanner."""

    @pytest.mark.unit
    def test_plan(self):
        backend = _backend(json.dumps(VALID_PLAN))
        outcome = LLMPlanner(backend).plan(PlanRequest("a button"))

        assert isinstance(outcome, PlanOk)
        kwargs = backend.generate.call_args.kwargs
        assert '"allowed"' in kwargs["system_prompt"]
        assert "Sidebar" in kwargs["system_prompt"]
        assert kwargs["config"].json_mode is True

    @pytest.mark.unit
    def test_modification_prompt_includes_existing_plan(self):
        backend = _backend(json.dumps(VALID_PLAN))
        request = PlanRequest(
            "make it red", is_modification=True, existing_plan_json='{"intent": "old"}'
        )
        LLMPlanner(backend).plan(request)

        prompt = backend.generate.call_args.args[0]
        assert "EXISTING PLAN" in prompt
        assert '{"intent": "old"}' in prompt
        assert "make it red" in prompt

    @pytest.mark.unit
    def test_retries_parse_error_with_feedback(self):
        backend = _backend("garbage", json.dumps(VALID_PLAN))
        outcome = LLMPlanner(backend, max_attempts=2).plan(PlanRequest("a button"))

        assert isinstance(outcome, PlanOk)
        assert backend.generate.call_count == 2
        assert "PREVIOUS ATTEMPT WAS INVALID" in backend.generate.call_args.args[0]

    @pytest.mark.unit
    def test_gives_up_after_max_attempts(self):
        backend = _backend("garbage", "still garbage")
        outcome = LLMPlanner(backend, max_attempts=2).plan(PlanRequest("a button"))
        assert isinstance(outcome, PlanParseError)

    @pytest.mark.unit
    def test_llm_error_is_upstream(self):
        backend = MagicMock()
        backend.name = "mock:model"
        backend.generate.side_effect = RateLimitError("slow down")

        outcome = LLMPlanner(backend).plan(PlanRequest("a button"))

        assert outcome == UpstreamError("slow down")
        assert backend.generate.call_count == 1

    @pytest.mark.unit
    def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError):
            LLMPlanner(MagicMock(), max_attempts=0)


class TestLLMExplainer:
    """Tests for LLMExplainer."""

    @pytest.mark.unit
    def test_explain(self, form_plan):
        backend = _backend('{"summary": "A login form", "componentsUsed": ["Card"]}')
        outcome = LLMExplainer(backend).explain(ExplainRequest(form_plan))

        assert outcome == ExplanationOk(
            Explanation(summary="A login form", components_used=["Card"])
        )
        assert '"layoutTree"' in backend.generate.call_args.args[0]

    @pytest.mark.unit
    def test_modification_prompt(self, form_plan):
        backend = _backend('{"summary": "s"}')
        request = ExplainRequest(
            form_plan, is_modification=True, modification_text="add a footer"
        )
        LLMExplainer(backend).explain(request)
        assert "add a footer" in backend.generate.call_args.args[0]

    @pytest.mark.unit
    def test_llm_error_is_upstream(self, form_plan):
        backend = MagicMock()
        backend.name = "mock:model"
        backend.generate.side_effect = RateLimitError("slow down")
        outcome = LLMExplainer(backend).explain(ExplainRequest(form_plan))
        assert isinstance(outcome, UpstreamError)
