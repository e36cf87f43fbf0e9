"""Collaborator request and result types.

Planner and explainer outputs are untrusted. They are decoded into tagged
result values here, before anything touches the tree validator.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Protocol

from pydantic import ValidationError

from uiforge.ir import Explanation, Plan

from .repair import JsonRepair

logger = logging.getLogger(__name__)

# Error details quoted from a pydantic failure
_MAX_REPORTED_ERRORS = 5


# =============================================================================
# Requests
# =============================================================================


@dataclass(frozen=True)
class PlanRequest:
    """Input to the planning collaborator.

    Attributes:
        sanitized_text: User text after sanitization.
        is_modification: True when editing an existing version.
        existing_plan_json: Plan of the version being modified, as JSON.
    """

    sanitized_text: str
    is_modification: bool = False
    existing_plan_json: str | None = None


@dataclass(frozen=True)
class ExplainRequest:
    """Input to the explanation collaborator."""

    plan: Plan
    is_modification: bool = False
    modification_text: str | None = None


# =============================================================================
# Tagged Results
# =============================================================================


@dataclass(frozen=True)
class PlanOk:
    plan: Plan


@dataclass(frozen=True)
class PlanParseError:
    """The planner answered, but not with a well-formed plan.

    Attributes:
        message: Why decoding failed.
        raw: The offending output, truncated.
    """

    message: str
    raw: str = ""


@dataclass(frozen=True)
class UpstreamError:
    """The collaborator call itself failed."""

    message: str


@dataclass(frozen=True)
class ExplanationOk:
    explanation: Explanation


PlanOutcome = PlanOk | PlanParseError | UpstreamError
ExplanationOutcome = ExplanationOk | UpstreamError


# =============================================================================
# Collaborator Protocols
# =============================================================================


class Planner(Protocol):
    """Turns a sanitized request into a Plan.

    Implementations are synchronous; the orchestrator runs them in a worker
    thread under a timeout.
    """

    def plan(self, request: PlanRequest) -> PlanOutcome:
        """Produce a plan, or a tagged failure."""
        ...


class Explainer(Protocol):
    """Describes the design decisions behind a Plan."""

    def explain(self, request: ExplainRequest) -> ExplanationOutcome:
        """Produce an explanation, or a tagged failure."""
        ...


# =============================================================================
# Decoding
# =============================================================================


def _truncate(raw: Any, limit: int = 500) -> str:
    text = raw if isinstance(raw, str) else repr(raw)
    return text[:limit]


def _format_validation_error(error: ValidationError) -> str:
    details = []
    for item in error.errors()[:_MAX_REPORTED_ERRORS]:
        location = ".".join(str(part) for part in item["loc"]) or "plan"
        details.append(f"{location}: {item['msg']}")
    return "; ".join(details)


def _load_object(raw: str | dict[str, Any]) -> dict[str, Any] | None:
    """Parse collaborator output into a JSON object, repairing if needed."""
    if isinstance(raw, dict):
        return raw
    if not isinstance(raw, str):
        return None
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        data = JsonRepair().repair(raw)
    return data if isinstance(data, dict) else None


def decode_plan(raw: str | dict[str, Any]) -> PlanOutcome:
    """Decode planner output into a Plan.

    Accepts either a bare ``{intent, layoutTree}`` object or the envelope
    ``{success, plan?, error?}``. An envelope reporting failure becomes an
    UpstreamError; anything not matching the Layout Node shape is a
    PlanParseError.

    Example:
        >>> decode_plan('{"intent": "x", "layoutTree": {"type": "Button"}}')
        PlanOk(plan=Plan(...))
    """
    data = _load_object(raw)
    if data is None:
        return PlanParseError("Planner did not return a JSON object", _truncate(raw))

    if "success" in data:
        if data["success"] is not True:
            return UpstreamError(str(data.get("error") or "Planner reported failure"))
        data = data.get("plan")
        if not isinstance(data, dict):
            return PlanParseError("Planner envelope has no plan", _truncate(raw))

    try:
        plan = Plan.model_validate(data)
    except ValidationError as e:
        message = f"Plan does not match the layout tree shape: {_format_validation_error(e)}"
        logger.warning(message)
        return PlanParseError(message, _truncate(raw))

    return PlanOk(plan)


def decode_explanation(raw: str | dict[str, Any]) -> ExplanationOutcome:
    """Decode explainer output into an Explanation.

    Explanation failures are never fatal, so every decoding problem is
    reported as an UpstreamError.
    """
    data = _load_object(raw)
    if data is None:
        return UpstreamError("Explainer did not return a JSON object")

    if "success" in data:
        if data["success"] is not True:
            return UpstreamError(str(data.get("error") or "Explainer reported failure"))
        data = data.get("explanation")
        if not isinstance(data, dict):
            return UpstreamError("Explainer envelope has no explanation")

    try:
        return ExplanationOk(Explanation.model_validate(data))
    except ValidationError as e:
        return UpstreamError(f"Invalid explanation: {_format_validation_error(e)}")


__all__ = [
    "PlanRequest",
    "ExplainRequest",
    "PlanOk",
    "PlanParseError",
    "UpstreamError",
    "ExplanationOk",
    "PlanOutcome",
    "ExplanationOutcome",
    "Planner",
    "Explainer",
    "decode_plan",
    "decode_explanation",
]
