"""LLM-backed planning and explanation collaborators.

Both agents embed the component registry export in their instructions so
the model sees exactly the whitelist the validators enforce. Their output
is still untrusted and goes through the decoders in ``models``.
"""

import json
import logging

from uiforge.llm.backend import GenerationConfig, LLMBackend, LLMError
from uiforge.schema import export_llm_schema

from .models import (
    ExplainRequest,
    ExplanationOutcome,
    PlanOutcome,
    PlanParseError,
    PlanRequest,
    UpstreamError,
    decode_explanation,
    decode_plan,
)

logger = logging.getLogger(__name__)


def _planner_system_prompt() -> str:
    schema = json.dumps(export_llm_schema(), indent=2)
    return f"""You are the planner in a UI generation system.

Your only job is to turn the user's request into a layout tree built from a
fixed component library.

RULES:
1. Use ONLY the components listed under "allowed" in the schema below
2. Use ONLY the props declared for each component
3. Variant props must use one of the listed values
4. Do not invent components, inline styles, event handlers or scripts
5. Text content goes in a string "children" prop

OUTPUT FORMAT:
{{
  "intent": "one sentence summary of what the user wants",
  "layoutTree": {{"type": "ComponentName", "props": {{}}, "children": []}}
}}

COMPONENT SCHEMA:
{schema}
"""


def _plan_prompt(request: PlanRequest) -> str:
    if request.is_modification and request.existing_plan_json:
        return (
            "The user wants to modify an existing UI.\n\n"
            f"EXISTING PLAN:\n{request.existing_plan_json}\n\n"
            f"MODIFICATION REQUEST:\n{request.sanitized_text}\n\n"
            "Return the complete updated plan as JSON. Keep every part the "
            "request does not mention unchanged."
        )
    return (
        f"UI REQUEST:\n{request.sanitized_text}\n\n"
        "Return the plan as JSON using only the allowed components."
    )


EXPLAINER_SYSTEM_PROMPT = """You are the explainer in a UI generation system.

Explain the decisions behind a generated layout in plain English: why each
component was chosen, how the layout is structured, and which props matter.
Be concise.

OUTPUT FORMAT:
{
  "summary": "brief overall explanation",
  "decisions": [{"decision": "what was decided", "reasoning": "why"}],
  "componentsUsed": ["Component1", "Component2"]
}
"""


def _explain_prompt(request: ExplainRequest) -> str:
    plan_json = json.dumps(request.plan.to_json_dict(), indent=2)
    if request.is_modification and request.modification_text:
        return (
            "Explain the modifications made to the UI.\n\n"
            f"MODIFICATION REQUEST:\n{request.modification_text}\n\n"
            f"UPDATED PLAN:\n{plan_json}\n\n"
            "Explain what changed, which components were affected and why."
        )
    return (
        "Explain the UI generation decisions.\n\n"
        f"PLAN:\n{plan_json}\n\n"
        "Explain why each component was chosen and how they work together."
    )


class LLMPlanner:
    """Planner backed by an LLMBackend.

    Unparseable answers are retried with the decoding error appended to the
    prompt, up to ``max_attempts`` calls in total.

    Example:
        >>> planner = LLMPlanner(create_llm_backend())
        >>> outcome = planner.plan(PlanRequest("login form"))
    """

    def __init__(
        self,
        backend: LLMBackend,
        *,
        max_attempts: int = 2,
        temperature: float = 0.5,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._backend = backend
        self._max_attempts = max_attempts
        self._config = GenerationConfig(temperature=temperature, json_mode=True)
        self._system_prompt = _planner_system_prompt()

    def plan(self, request: PlanRequest) -> PlanOutcome:
        prompt = _plan_prompt(request)
        outcome: PlanOutcome = PlanParseError("Planner produced no output")

        for attempt in range(self._max_attempts):
            effective_prompt = prompt
            if isinstance(outcome, PlanParseError) and attempt > 0:
                effective_prompt = (
                    f"{prompt}\n\n"
                    f"PREVIOUS ATTEMPT WAS INVALID:\n{outcome.message}\n"
                    "Return a corrected plan as JSON."
                )

            try:
                result = self._backend.generate(
                    effective_prompt,
                    system_prompt=self._system_prompt,
                    config=self._config,
                )
            except LLMError as e:
                logger.error(f"Planner call to {self._backend.name} failed: {e}")
                return UpstreamError(str(e))

            outcome = decode_plan(result.content)
            if not isinstance(outcome, PlanParseError):
                return outcome
            logger.warning(f"Unparseable plan on attempt {attempt + 1}: {outcome.message}")

        return outcome


class LLMExplainer:
    """Explainer backed by an LLMBackend."""

    def __init__(self, backend: LLMBackend, *, temperature: float = 0.6):
        self._backend = backend
        self._config = GenerationConfig(temperature=temperature, json_mode=True)

    def explain(self, request: ExplainRequest) -> ExplanationOutcome:
        try:
            result = self._backend.generate(
                _explain_prompt(request),
                system_prompt=EXPLAINER_SYSTEM_PROMPT,
                config=self._config,
            )
        except LLMError as e:
            logger.warning(f"Explainer call to {self._backend.name} failed: {e}")
            return UpstreamError(str(e))
        return decode_explanation(result.content)


__all__ = ["LLMPlanner", "LLMExplainer", "EXPLAINER_SYSTEM_PROMPT"]
