"""Abstract base class for LLM backends.

Defines the interface that all LLM provider implementations must follow.
The planning and explanation collaborators talk to providers only through
this interface.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass
class GenerationConfig:
    """Configuration for LLM text generation.

    Attributes:
        temperature: Sampling temperature (0.0-2.0). Lower = more deterministic.
        max_tokens: Maximum tokens to generate in response.
        json_mode: Whether to enforce JSON output format.
        stop_sequences: Optional sequences that stop generation.
        top_p: Nucleus sampling parameter (0.0-1.0).
        seed: Optional seed for reproducible generation.
    """

    temperature: float = 0.7
    max_tokens: int = 4096
    json_mode: bool = True
    stop_sequences: list[str] = field(default_factory=list)
    top_p: float = 1.0
    seed: int | None = None

    def as_json(self) -> "GenerationConfig":
        """Copy of this config with JSON mode forced on."""
        return GenerationConfig(
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            json_mode=True,
            stop_sequences=list(self.stop_sequences),
            top_p=self.top_p,
            seed=self.seed,
        )


@dataclass
class GenerationResult:
    """Result from LLM text generation.

    Attributes:
        content: Generated text content.
        finish_reason: Why generation stopped ('stop', 'length', 'content_filter').
        usage: Token usage dict (prompt_tokens, completion_tokens, total_tokens).
        model: Model identifier that was used.
        raw_response: Provider-specific raw response for debugging.
    """

    content: str
    finish_reason: str
    usage: dict[str, int]
    model: str
    raw_response: Any = None


class LLMBackend(ABC):
    """Abstract interface for LLM text generation backends.

    Example:
        >>> backend = OpenAIBackend(model="gpt-4.1-mini")
        >>> result = backend.generate("Plan a login form")
        >>> print(result.content)
    """

    @abstractmethod
    def generate(
        self,
        prompt: str,
        *,
        system_prompt: str | None = None,
        config: GenerationConfig | None = None,
    ) -> GenerationResult:
        """Generate text from a prompt.

        Args:
            prompt: User prompt text.
            system_prompt: Optional system instruction for context.
            config: Generation configuration options.

        Returns:
            GenerationResult with generated content and metadata.

        Raises:
            LLMError: If generation fails.
            RateLimitError: If API rate limit is exceeded.
            ContextLengthError: If prompt exceeds context window.
        """

    @abstractmethod
    def generate_json(
        self,
        prompt: str,
        *,
        system_prompt: str | None = None,
        config: GenerationConfig | None = None,
    ) -> dict[str, Any]:
        """Generate and parse JSON response.

        Args:
            prompt: User prompt requesting JSON output.
            system_prompt: Optional system instruction.
            config: Generation configuration (json_mode forced True).

        Returns:
            Parsed JSON dictionary.

        Raises:
            LLMError: If generation fails.
            InvalidResponseError: If response is not valid JSON.
        """

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Get the model identifier."""

    @property
    @abstractmethod
    def provider(self) -> str:
        """Get the provider identifier (e.g., 'openai', 'anthropic')."""

    @property
    def name(self) -> str:
        """Get backend identifier for logging.

        Returns:
            String in format 'provider:model'.
        """
        return f"{self.provider}:{self.model_name}"

    @property
    @abstractmethod
    def supports_json_mode(self) -> bool:
        """Check if backend natively supports JSON mode."""


class LLMError(Exception):
    """Base exception for LLM backend errors."""


class RateLimitError(LLMError):
    """Raised when API rate limit is exceeded.

    Attributes:
        retry_after: Suggested wait time in seconds before retry.
    """

    def __init__(self, message: str, retry_after: float | None = None):
        super().__init__(message)
        self.retry_after = retry_after


class ContextLengthError(LLMError):
    """Raised when prompt exceeds the model's context window."""


class InvalidResponseError(LLMError):
    """Raised when response cannot be parsed as expected format."""


class AuthenticationError(LLMError):
    """Raised when API authentication fails (invalid or missing key)."""


def raise_for_provider_error(error: Exception) -> None:
    """Convert a provider SDK exception into the LLMError hierarchy.

    Provider SDKs raise their own exception types; matching on the message
    keeps this module free of SDK imports.

    Raises:
        RateLimitError: For rate limit errors.
        ContextLengthError: For context length errors.
        AuthenticationError: For auth errors.
        LLMError: For other errors.
    """
    error_str = str(error).lower()

    if "rate limit" in error_str or "rate_limit" in error_str:
        raise RateLimitError(str(error)) from error
    if (
        "context length" in error_str
        or "maximum context" in error_str
        or "too long" in error_str
    ):
        raise ContextLengthError(str(error)) from error
    if (
        "authentication" in error_str
        or "invalid api key" in error_str
        or "invalid x-api-key" in error_str
    ):
        raise AuthenticationError(str(error)) from error
    raise LLMError(str(error)) from error


__all__ = [
    "LLMBackend",
    "GenerationConfig",
    "GenerationResult",
    "LLMError",
    "RateLimitError",
    "ContextLengthError",
    "InvalidResponseError",
    "AuthenticationError",
    "raise_for_provider_error",
]
