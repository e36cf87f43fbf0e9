"""Centralized configuration management for uiforge.

Provides unified access to all configuration via the `get_environment()` function.

Example:
    >>> from uiforge.config import EnvVar, get_environment
    >>>
    >>> depth = get_environment(EnvVar.MAX_TREE_DEPTH)  # Returns int: 64
    >>> api_key = get_environment(EnvVar.OPENAI_API_KEY)  # Returns str | None
    >>>
    >>> for var in list_environment_variables("pipeline"):
    ...     info = get_environment_info(var)
    ...     print(f"{info.name}: {info.description}")

Environment Variable Categories:
    llm: Provider selection and API keys (OpenAI, Anthropic)
    pipeline: Timeouts and size limits for the generation pipeline
    history: Version store persistence
    logging: CLI log level
"""

from .lib import (
    EnvConfig,
    EnvVar,
    get_available_llm_providers,
    get_environment,
    get_environment_info,
    list_environment_variables,
)

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
