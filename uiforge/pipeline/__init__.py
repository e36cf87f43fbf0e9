"""Async orchestration of the layout-to-code pipeline.

Example:
    >>> from uiforge.pipeline import Orchestrator
    >>> orchestrator = Orchestrator(planner, explainer)
    >>> result = await orchestrator.generate("a dashboard with a sales chart")
    >>> result.to_dict()["success"]
"""

from .lib import INTERNAL_ERROR_MESSAGE, Orchestrator, PipelineFailure
from .models import ErrorKind, PipelineConfig, PipelineResult, Stage

__all__ = [
    # Main interface
    "Orchestrator",
    # Results
    "PipelineResult",
    "PipelineFailure",
    "Stage",
    "ErrorKind",
    "INTERNAL_ERROR_MESSAGE",
    # Settings
    "PipelineConfig",
]
