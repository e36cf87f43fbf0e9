"""LLM integration for uiforge.

Example:
    >>> from uiforge.llm import create_llm_backend
    >>> backend = create_llm_backend("openai")
    >>> data = backend.generate_json("Plan a login form as JSON")
"""

from .backend import (
    AnthropicBackend,
    AuthenticationError,
    ContextLengthError,
    GenerationConfig,
    GenerationResult,
    InvalidResponseError,
    LLMBackend,
    LLMError,
    OpenAIBackend,
    RateLimitError,
    create_llm_backend,
)

__all__ = [
    "LLMBackend",
    "GenerationConfig",
    "GenerationResult",
    "LLMError",
    "RateLimitError",
    "ContextLengthError",
    "InvalidResponseError",
    "AuthenticationError",
    "OpenAIBackend",
    "AnthropicBackend",
    "create_llm_backend",
]
