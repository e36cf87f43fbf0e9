"""Centralized environment configuration management for uiforge.

Provides a unified interface for all environment variables with:
- Single `get_environment()` function for all configuration
- Type-safe enum with metadata (default, type, description)
- Consistent resolution: override > environment > default

Example:
    >>> from uiforge.config import EnvVar, get_environment
    >>>
    >>> timeout = get_environment(EnvVar.PLANNER_TIMEOUT)  # Returns float
    >>> api_key = get_environment(EnvVar.OPENAI_API_KEY)  # Returns str | None
    >>>
    >>> # Override at runtime
    >>> depth = get_environment(EnvVar.MAX_TREE_DEPTH, override=16)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, overload

# =============================================================================
# Environment Variable Configuration
# =============================================================================


@dataclass(frozen=True)
class EnvConfig:
    """Metadata for an environment variable.

    Attributes:
        name: Environment variable name (e.g., "UIFORGE_MAX_TREE_DEPTH").
        default: Default value if not set in environment.
        var_type: Python type for value conversion (str, int, float, bool, Path).
        description: Human-readable description.
        category: Grouping category for documentation.
    """

    name: str
    default: Any
    var_type: type
    description: str = ""
    category: str = "general"


class EnvVar(Enum):
    """All environment variables used by uiforge.

    Each member contains an EnvConfig with name, default, type, and description.
    Use with `get_environment()` for type-safe access.

    Categories:
        - llm: LLM provider selection and API keys
        - pipeline: Generation pipeline limits and timeouts
        - history: Version store persistence
        - logging: Log output
    """

    # -------------------------------------------------------------------------
    # LLM Configuration
    # -------------------------------------------------------------------------
    OPENAI_API_KEY = EnvConfig(
        name="OPENAI_API_KEY",
        default=None,
        var_type=str,
        description="OpenAI API key for GPT models",
        category="llm",
    )
    ANTHROPIC_API_KEY = EnvConfig(
        name="ANTHROPIC_API_KEY",
        default=None,
        var_type=str,
        description="Anthropic API key for Claude models",
        category="llm",
    )
    LLM_PROVIDER = EnvConfig(
        name="UIFORGE_LLM_PROVIDER",
        default="openai",
        var_type=str,
        description="LLM provider backing the planner and explainer (openai, anthropic)",
        category="llm",
    )
    LLM_MODEL = EnvConfig(
        name="UIFORGE_LLM_MODEL",
        default=None,
        var_type=str,
        description="Model name override (None=provider default)",
        category="llm",
    )

    # -------------------------------------------------------------------------
    # Pipeline Limits
    # -------------------------------------------------------------------------
    PLANNER_TIMEOUT = EnvConfig(
        name="UIFORGE_PLANNER_TIMEOUT",
        default=45.0,
        var_type=float,
        description="Seconds allowed for the planning call before the request fails",
        category="pipeline",
    )
    EXPLAINER_TIMEOUT = EnvConfig(
        name="UIFORGE_EXPLAINER_TIMEOUT",
        default=30.0,
        var_type=float,
        description="Seconds allowed for the explanation call (failure is a warning)",
        category="pipeline",
    )
    MAX_TREE_DEPTH = EnvConfig(
        name="UIFORGE_MAX_TREE_DEPTH",
        default=64,
        var_type=int,
        description="Maximum layout tree depth accepted by validation and codegen",
        category="pipeline",
    )
    MAX_INPUT_CHARS = EnvConfig(
        name="UIFORGE_MAX_INPUT_CHARS",
        default=4000,
        var_type=int,
        description="Maximum length of user text accepted by the pipeline",
        category="pipeline",
    )

    # -------------------------------------------------------------------------
    # History
    # -------------------------------------------------------------------------
    VERSION_DB = EnvConfig(
        name="UIFORGE_VERSION_DB",
        default=None,  # In-memory store when unset
        var_type=Path,
        description="SQLite file for version history (unset=in-memory)",
        category="history",
    )

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------
    LOG_LEVEL = EnvConfig(
        name="UIFORGE_LOG_LEVEL",
        default="INFO",
        var_type=str,
        description="Log level for the CLI (DEBUG, INFO, WARNING, ERROR)",
        category="logging",
    )


# =============================================================================
# Type Conversion Helpers
# =============================================================================


def _parse_bool(value: str) -> bool | None:
    """Parse string to boolean.

    Recognizes: true/false, 1/0, yes/no (case-insensitive).
    Returns None for unrecognized values.
    """
    normalized = value.lower().strip()
    if normalized in ("true", "1", "yes"):
        return True
    if normalized in ("false", "0", "no"):
        return False
    return None


def _convert_value(value: str | None, var_type: type, default: Any) -> Any:
    """Convert string value to target type.

    Args:
        value: Raw string value from environment (or None).
        var_type: Target Python type.
        default: Default value if conversion fails or value is None.

    Returns:
        Converted value or default.
    """
    if value is None:
        return default

    if var_type is str:
        return value

    if var_type is int:
        try:
            return int(value)
        except ValueError:
            return default

    if var_type is float:
        try:
            return float(value)
        except ValueError:
            return default

    if var_type is bool:
        result = _parse_bool(value)
        return result if result is not None else default

    if var_type is Path:
        return Path(value)

    # Unknown type, return as-is
    return value


# =============================================================================
# Main Interface
# =============================================================================


@overload
def get_environment(env_var: EnvVar, override: int) -> int: ...
@overload
def get_environment(env_var: EnvVar, override: float) -> float: ...
@overload
def get_environment(env_var: EnvVar, override: str) -> str: ...
@overload
def get_environment(env_var: EnvVar, override: bool) -> bool: ...
@overload
def get_environment(env_var: EnvVar, override: Path) -> Path: ...
@overload
def get_environment(env_var: EnvVar, override: None = None) -> Any: ...


def get_environment(env_var: EnvVar, override: Any = None) -> Any:
    """Get environment variable value with type conversion.

    Resolution priority:
        1. Explicit override parameter (highest)
        2. Environment variable value
        3. Default from EnvConfig (lowest)

    Args:
        env_var: Environment variable enum member.
        override: Optional override value (bypasses env lookup).

    Returns:
        Value converted to the appropriate type (str, int, float, bool, or Path).

    Example:
        >>> get_environment(EnvVar.MAX_TREE_DEPTH)
        64
        >>> get_environment(EnvVar.MAX_TREE_DEPTH, override=8)
        8
    """
    config: EnvConfig = env_var.value

    if override is not None:
        return override

    raw_value = os.environ.get(config.name)
    return _convert_value(raw_value, config.var_type, config.default)


def get_environment_info(env_var: EnvVar) -> EnvConfig:
    """Get metadata for an environment variable.

    Args:
        env_var: Environment variable enum member.

    Returns:
        EnvConfig with name, default, type, and description.
    """
    return env_var.value


def get_available_llm_providers() -> list[str]:
    """Get list of LLM providers that have an API key configured.

    Returns:
        List of provider names (e.g., ["openai", "anthropic"]).
    """
    providers = []
    if get_environment(EnvVar.OPENAI_API_KEY):
        providers.append("openai")
    if get_environment(EnvVar.ANTHROPIC_API_KEY):
        providers.append("anthropic")
    return providers


def list_environment_variables(category: str | None = None) -> list[EnvVar]:
    """List all environment variables, optionally filtered by category.

    Args:
        category: Filter by category (llm, pipeline, history, logging).
                 None returns all variables.

    Returns:
        List of EnvVar enum members.
    """
    if category is None:
        return list(EnvVar)

    return [var for var in EnvVar if var.value.category == category]


__all__ = [
    # Core types
    "EnvConfig",
    "EnvVar",
    # Main interface
    "get_environment",
    "get_environment_info",
    "get_available_llm_providers",
    # Introspection
    "list_environment_variables",
]
