"""Pipeline settings and result types."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from uiforge.config import EnvVar, get_environment
from uiforge.ir import Plan


class Stage(str, Enum):
    """Pipeline stages, in execution order."""

    INPUT = "input"
    SANITIZE = "sanitize"
    PLAN = "plan"
    VALIDATE = "validate"
    GENERATE = "generate"
    LINT = "lint"
    EXPLAIN = "explain"
    STORE = "store"
    COMPLETE = "complete"


class ErrorKind(str, Enum):
    """Failure taxonomy reported to callers."""

    INPUT = "input"
    UPSTREAM = "upstream"
    SCHEMA_VIOLATION = "schema_violation"
    OUTPUT_VIOLATION = "output_violation"
    VERSION_NOT_FOUND = "version_not_found"
    INTERNAL = "internal"


@dataclass(frozen=True)
class PipelineConfig:
    """Orchestrator settings.

    Attributes:
        planner_timeout: Seconds to wait for the planner before failing.
        explainer_timeout: Seconds to wait for the explainer before
            continuing without an explanation.
        max_tree_depth: Depth bound for tree validation and generation.
        max_input_chars: Longest accepted user text.
    """

    planner_timeout: float = 45.0
    explainer_timeout: float = 30.0
    max_tree_depth: int = 64
    max_input_chars: int = 4000

    @classmethod
    def from_environment(cls, **overrides: Any) -> "PipelineConfig":
        """Build settings from ``UIFORGE_*`` variables, then apply overrides."""
        values = {
            "planner_timeout": get_environment(EnvVar.PLANNER_TIMEOUT),
            "explainer_timeout": get_environment(EnvVar.EXPLAINER_TIMEOUT),
            "max_tree_depth": get_environment(EnvVar.MAX_TREE_DEPTH),
            "max_input_chars": get_environment(EnvVar.MAX_INPUT_CHARS),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


@dataclass
class PipelineResult:
    """Structured outcome of one orchestrator call.

    Failures carry enough detail to decide whether to retry: every error,
    every warning, and the plan and code when the failure happened after
    they were produced.

    Attributes:
        success: True when the request completed.
        stage: Stage reached; on failure, the stage that failed.
        error_kind: Failure category, None on success.
        errors: Must-fix problems.
        warnings: Should-review findings, including explainer failures.
        version: Version payload ``{id, code, plan, explanation?}``.
        plan: Plan produced by the planner, if any.
        code: Generated source, also returned when linting rejected it.
        invalid_component_types: Unregistered component names found.
        change_summary: Line change summary against the base version.
    """

    success: bool
    stage: Stage
    error_kind: ErrorKind | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    version: dict[str, Any] | None = None
    plan: Plan | None = None
    code: str | None = None
    invalid_component_types: list[str] = field(default_factory=list)
    change_summary: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize for callers, using wire field names."""
        return {
            "success": self.success,
            "stage": self.stage.value,
            "errorKind": self.error_kind.value if self.error_kind else None,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "version": self.version,
            "plan": self.plan.to_json_dict() if self.plan else None,
            "code": self.code,
            "invalidComponentTypes": list(self.invalid_component_types),
            "changeSummary": self.change_summary,
        }


__all__ = ["Stage", "ErrorKind", "PipelineConfig", "PipelineResult"]
