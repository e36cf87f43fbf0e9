"""LLM backend implementations.

Provides the abstract base class and the OpenAI and Anthropic providers.
"""

from .anthropic import DEFAULT_ANTHROPIC_MODEL, AnthropicBackend, extract_json_block
from .base import (
    AuthenticationError,
    ContextLengthError,
    GenerationConfig,
    GenerationResult,
    InvalidResponseError,
    LLMBackend,
    LLMError,
    RateLimitError,
    raise_for_provider_error,
)
from .factory import DEFAULT_MODELS, create_llm_backend
from .openai import DEFAULT_OPENAI_MODEL, OpenAIBackend

__all__ = [
    # Base classes and types
    "LLMBackend",
    "GenerationConfig",
    "GenerationResult",
    # Exceptions
    "LLMError",
    "RateLimitError",
    "ContextLengthError",
    "InvalidResponseError",
    "AuthenticationError",
    "raise_for_provider_error",
    # Providers
    "OpenAIBackend",
    "AnthropicBackend",
    "extract_json_block",
    # Defaults
    "DEFAULT_MODELS",
    "DEFAULT_OPENAI_MODEL",
    "DEFAULT_ANTHROPIC_MODEL",
    # Factory
    "create_llm_backend",
]
