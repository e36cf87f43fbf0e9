"""Planning and explanation collaborators.

Defines the collaborator protocols and their tagged results, the defensive
decoders for model output, and the LLM-backed implementations.

Example:
    >>> from uiforge.agents import LLMPlanner, PlanRequest, PlanOk
    >>> from uiforge.llm import create_llm_backend
    >>> outcome = LLMPlanner(create_llm_backend()).plan(PlanRequest("login form"))
    >>> isinstance(outcome, PlanOk)
"""

from .lib import LLMExplainer, LLMPlanner
from .models import (
    Explainer,
    ExplainRequest,
    ExplanationOk,
    ExplanationOutcome,
    PlanOk,
    PlanOutcome,
    Planner,
    PlanParseError,
    PlanRequest,
    UpstreamError,
    decode_explanation,
    decode_plan,
)
from .repair import JsonRepair

__all__ = [
    # Protocols
    "Planner",
    "Explainer",
    # Requests
    "PlanRequest",
    "ExplainRequest",
    # Results
    "PlanOk",
    "PlanParseError",
    "UpstreamError",
    "ExplanationOk",
    "PlanOutcome",
    "ExplanationOutcome",
    # Decoding
    "decode_plan",
    "decode_explanation",
    "JsonRepair",
    # LLM implementations
    "LLMPlanner",
    "LLMExplainer",
]
