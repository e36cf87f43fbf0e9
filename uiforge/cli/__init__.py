"""Command line interface for uiforge."""

from .lib import COMMANDS, build_orchestrator, main

__all__ = ["main", "build_orchestrator", "COMMANDS"]
