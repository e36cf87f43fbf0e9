"""Orchestrator for the layout-to-code pipeline.

Sequences one request start to finish:

    input check -> sanitize -> planner -> tree validator -> code generator
    -> static lint -> explainer -> version store

Only the planner and explainer calls suspend; they run in a worker thread
under a timeout. Every other stage is local and runs to completion. The
orchestrator is the single place where exceptions become PipelineResults.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from uiforge.agents import (
    Explainer,
    ExplainRequest,
    ExplanationOk,
    Planner,
    PlanOk,
    PlanParseError,
    PlanRequest,
    UpstreamError,
    decode_plan,
)
from uiforge.codegen import CodegenError, generate
from uiforge.diff import change_summary
from uiforge.history import ParentVersionMissingError, Version, VersionStore
from uiforge.ir import Explanation, Plan
from uiforge.lint import lint_source
from uiforge.llm.backend import LLMError
from uiforge.sanitize import InputError, check_user_text, sanitize
from uiforge.validation import validate_tree

from .models import ErrorKind, PipelineConfig, PipelineResult, Stage

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal error while processing the request"


class PipelineFailure(Exception):
    """Ends a request early with a structured failure."""

    def __init__(
        self,
        kind: ErrorKind,
        errors: list[str],
        *,
        invalid_component_types: list[str] | None = None,
    ):
        super().__init__("; ".join(errors))
        self.kind = kind
        self.errors = errors
        self.invalid_component_types = invalid_component_types or []


@dataclass
class _RequestState:
    """Progress of one request, read back when it fails."""

    stage: Stage = Stage.INPUT
    warnings: list[str] = field(default_factory=list)
    plan: Plan | None = None
    code: str | None = None

    def enter(self, stage: Stage) -> None:
        self.stage = stage
        logger.debug(f"Entering stage {stage.value}")


class Orchestrator:
    """Runs generate, modify and rollback requests against one store.

    Args:
        planner: Planning collaborator.
        explainer: Optional explanation collaborator.
        store: Version store. Defaults to a fresh in-memory store.
        config: Pipeline settings. Defaults to the environment.

    Example:
        >>> orchestrator = Orchestrator(LLMPlanner(backend), LLMExplainer(backend))
        >>> result = await orchestrator.generate("login form with remember me")
        >>> result.success, result.version["id"]
    """

    def __init__(
        self,
        planner: Planner,
        explainer: Explainer | None = None,
        store: VersionStore | None = None,
        config: PipelineConfig | None = None,
    ):
        self._planner = planner
        self._explainer = explainer
        self._store = store if store is not None else VersionStore()
        self._config = config or PipelineConfig.from_environment()

    @property
    def store(self) -> VersionStore:
        return self._store

    @property
    def config(self) -> PipelineConfig:
        return self._config

    # =========================================================================
    # Public Operations
    # =========================================================================

    async def generate(self, user_text: Any) -> PipelineResult:
        """Create a new version from a natural language request."""
        state = _RequestState()
        return await self._guarded(state, self._run(state, user_text))

    async def modify(
        self, user_text: Any, current_version_id: str | None = None
    ) -> PipelineResult:
        """Create a new version by modifying an existing one.

        Args:
            user_text: The modification request.
            current_version_id: Version to modify. Defaults to the latest.
        """
        state = _RequestState()
        return await self._guarded(
            state, self._run(state, user_text, modify=True, base_id=current_version_id)
        )

    async def rollback(self, version_id: Any) -> PipelineResult:
        """Make ``version_id`` the latest version, discarding later ones."""
        state = _RequestState()
        return await self._guarded(state, self._rollback(state, version_id))

    async def get_version(self, version_id: Any) -> PipelineResult:
        """Look up one version's payload without changing the history."""
        state = _RequestState()
        return await self._guarded(state, self._lookup(state, version_id))

    async def history(self) -> list[dict[str, Any]]:
        """History listing, oldest first, without code or plan payloads."""
        return [summary.to_dict() for summary in self._store.get_history()]

    # =========================================================================
    # Request Handling
    # =========================================================================

    async def _guarded(self, state: _RequestState, work) -> PipelineResult:
        """Convert a request's exceptions into a failed PipelineResult."""
        try:
            return await work
        except PipelineFailure as e:
            logger.warning(f"Request failed at {state.stage.value}: {e}")
            return PipelineResult(
                success=False,
                stage=state.stage,
                error_kind=e.kind,
                errors=list(e.errors),
                warnings=state.warnings,
                plan=state.plan,
                code=state.code,
                invalid_component_types=e.invalid_component_types,
            )
        except Exception:
            logger.exception(f"Unexpected error at stage {state.stage.value}")
            return PipelineResult(
                success=False,
                stage=state.stage,
                error_kind=ErrorKind.INTERNAL,
                errors=[INTERNAL_ERROR_MESSAGE],
                warnings=state.warnings,
            )

    async def _run(
        self,
        state: _RequestState,
        user_text: Any,
        *,
        modify: bool = False,
        base_id: str | None = None,
    ) -> PipelineResult:
        state.enter(Stage.INPUT)
        try:
            check_user_text(user_text, max_length=self._config.max_input_chars)
        except InputError as e:
            raise PipelineFailure(ErrorKind.INPUT, [str(e)]) from e

        base: Version | None = None
        if modify:
            base = self._resolve_base(base_id)

        state.enter(Stage.SANITIZE)
        sanitized = sanitize(user_text)

        state.enter(Stage.PLAN)
        plan = await self._plan(sanitized, base)
        state.plan = plan
        logger.info(f"Planner produced plan: {plan.intent}")

        state.enter(Stage.VALIDATE)
        report = validate_tree(plan.layout_tree, max_depth=self._config.max_tree_depth)
        state.warnings.extend(report.warnings)
        if not report.valid:
            raise PipelineFailure(
                ErrorKind.SCHEMA_VIOLATION,
                report.messages,
                invalid_component_types=report.invalid_component_types,
            )

        state.enter(Stage.GENERATE)
        try:
            source = generate(plan, max_depth=self._config.max_tree_depth)
        except CodegenError as e:
            raise PipelineFailure(ErrorKind.OUTPUT_VIOLATION, [str(e)]) from e
        state.code = source.source_code

        state.enter(Stage.LINT)
        lint = lint_source(source.source_code)
        state.warnings.extend(lint.warnings)
        if not lint.valid:
            raise PipelineFailure(ErrorKind.OUTPUT_VIOLATION, lint.errors)

        state.enter(Stage.EXPLAIN)
        explanation = await self._explain(state, plan, sanitized, base)

        state.enter(Stage.STORE)
        try:
            version = self._store.add_version(
                sanitized,
                plan,
                source.source_code,
                explanation=explanation,
                is_modification=base is not None,
                parent_id=base.id if base else None,
            )
        except ParentVersionMissingError as e:
            raise PipelineFailure(
                ErrorKind.VERSION_NOT_FOUND,
                [f"Version {e.parent_id} was rolled back before the modification was stored"],
            ) from e

        state.enter(Stage.COMPLETE)
        logger.info(f"Request complete, version {version.id}")
        return PipelineResult(
            success=True,
            stage=Stage.COMPLETE,
            warnings=state.warnings,
            version=version.to_payload(),
            plan=plan,
            code=version.code,
            change_summary=change_summary(base.code, version.code) if base else None,
        )

    def _resolve_base(self, base_id: str | None) -> Version:
        if base_id is None:
            base = self._store.get_latest_version()
            if base is None:
                raise PipelineFailure(
                    ErrorKind.VERSION_NOT_FOUND, ["No existing version found to modify"]
                )
            return base

        base = self._store.get_version(base_id)
        if base is None:
            raise PipelineFailure(
                ErrorKind.VERSION_NOT_FOUND, [f"Version {base_id} not found"]
            )
        return base

    async def _call(self, func: Callable[[Any], Any], request: Any, timeout: float) -> Any:
        """Run a blocking collaborator call in a worker thread under a timeout.

        On timeout the worker thread is abandoned and its result discarded.
        """
        return await asyncio.wait_for(asyncio.to_thread(func, request), timeout=timeout)

    async def _plan(self, sanitized: str, base: Version | None) -> Plan:
        request = PlanRequest(
            sanitized_text=sanitized,
            is_modification=base is not None,
            existing_plan_json=base.plan.to_json() if base else None,
        )
        timeout = self._config.planner_timeout
        try:
            outcome = await self._call(self._planner.plan, request, timeout)
        except asyncio.TimeoutError as e:
            raise PipelineFailure(
                ErrorKind.UPSTREAM, [f"Planner timed out after {timeout:g}s"]
            ) from e
        except LLMError as e:
            raise PipelineFailure(ErrorKind.UPSTREAM, [f"Planner failed: {e}"]) from e

        if not isinstance(outcome, (PlanOk, PlanParseError, UpstreamError)):
            outcome = decode_plan(outcome)

        if isinstance(outcome, UpstreamError):
            raise PipelineFailure(ErrorKind.UPSTREAM, [f"Planner failed: {outcome.message}"])
        if isinstance(outcome, PlanParseError):
            raise PipelineFailure(
                ErrorKind.UPSTREAM, [f"Planner returned an invalid plan: {outcome.message}"]
            )
        return outcome.plan

    async def _explain(
        self,
        state: _RequestState,
        plan: Plan,
        sanitized: str,
        base: Version | None,
    ) -> Explanation | None:
        """Best-effort explanation; every failure becomes a warning."""
        if self._explainer is None:
            return None

        request = ExplainRequest(
            plan=plan,
            is_modification=base is not None,
            modification_text=sanitized if base else None,
        )
        timeout = self._config.explainer_timeout
        try:
            outcome = await self._call(self._explainer.explain, request, timeout)
        except asyncio.TimeoutError:
            message = f"timed out after {timeout:g}s"
        except LLMError as e:
            message = str(e)
        else:
            if isinstance(outcome, ExplanationOk):
                return outcome.explanation
            if isinstance(outcome, UpstreamError):
                message = outcome.message
            else:
                message = f"unexpected result type {type(outcome).__name__}"

        logger.warning(f"Explainer failed, continuing without explanation: {message}")
        state.warnings.append(f"Explainer failed: {message}")
        return None

    # =========================================================================
    # History Operations
    # =========================================================================

    def _check_version_id(self, version_id: Any) -> str:
        try:
            return check_user_text(version_id, max_length=256, field="versionId")
        except InputError as e:
            raise PipelineFailure(ErrorKind.INPUT, [str(e)]) from e

    async def _rollback(self, state: _RequestState, version_id: Any) -> PipelineResult:
        version_id = self._check_version_id(version_id)

        state.enter(Stage.STORE)
        target = self._store.rollback_to_version(version_id)
        if target is None:
            raise PipelineFailure(
                ErrorKind.VERSION_NOT_FOUND, [f"Version {version_id} not found"]
            )

        logger.info(f"Rolled back to version {target.id}")
        return PipelineResult(
            success=True,
            stage=Stage.COMPLETE,
            version=target.to_payload(),
            plan=target.plan,
            code=target.code,
        )

    async def _lookup(self, state: _RequestState, version_id: Any) -> PipelineResult:
        version_id = self._check_version_id(version_id)

        state.enter(Stage.STORE)
        version = self._store.get_version(version_id)
        if version is None:
            raise PipelineFailure(
                ErrorKind.VERSION_NOT_FOUND, [f"Version {version_id} not found"]
            )
        return PipelineResult(
            success=True,
            stage=Stage.COMPLETE,
            version=version.to_payload(),
            plan=version.plan,
            code=version.code,
        )


__all__ = ["Orchestrator", "PipelineFailure", "INTERNAL_ERROR_MESSAGE"]
