"""OpenAI GPT backend implementation."""

import json
import logging
from typing import Any

from uiforge.config import EnvVar, get_environment

from .base import (
    AuthenticationError,
    GenerationConfig,
    GenerationResult,
    InvalidResponseError,
    LLMBackend,
    raise_for_provider_error,
)

logger = logging.getLogger(__name__)

DEFAULT_OPENAI_MODEL = "gpt-4.1-mini"


class OpenAIBackend(LLMBackend):
    """OpenAI chat completions backend.

    Environment:
        OPENAI_API_KEY: API key (required if not passed to constructor).

    Example:
        >>> backend = OpenAIBackend()
        >>> plan = backend.generate_json("Plan a login form as JSON")
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_OPENAI_MODEL,
        base_url: str | None = None,
        timeout: float = 60.0,
        max_retries: int = 3,
    ):
        """Initialize OpenAI backend.

        Args:
            api_key: OpenAI API key. Falls back to OPENAI_API_KEY env var.
            model: Model name.
            base_url: Optional custom API endpoint.
            timeout: Request timeout in seconds.
            max_retries: Number of retry attempts for transient errors.

        Raises:
            AuthenticationError: If no API key available.
        """
        self._api_key = api_key or get_environment(EnvVar.OPENAI_API_KEY)
        if not self._api_key:
            raise AuthenticationError(
                "OpenAI API key required. Set OPENAI_API_KEY environment "
                "variable or pass api_key parameter."
            )

        self._model = model
        self._base_url = base_url
        self._timeout = timeout
        self._max_retries = max_retries
        self._client: Any = None

    def _get_client(self) -> Any:
        """Lazily initialize OpenAI client."""
        if self._client is None:
            from openai import OpenAI

            self._client = OpenAI(
                api_key=self._api_key,
                base_url=self._base_url,
                timeout=self._timeout,
                max_retries=self._max_retries,
            )
        return self._client

    @property
    def model_name(self) -> str:
        return self._model

    @property
    def provider(self) -> str:
        return "openai"

    @property
    def supports_json_mode(self) -> bool:
        return True

    def generate(
        self,
        prompt: str,
        *,
        system_prompt: str | None = None,
        config: GenerationConfig | None = None,
    ) -> GenerationResult:
        """Generate text using the chat completions API.

        Raises:
            LLMError: If generation fails.
            RateLimitError: If rate limit exceeded.
            ContextLengthError: If prompt too long.
        """
        config = config or GenerationConfig()
        client = self._get_client()

        messages: list[dict[str, str]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        kwargs: dict[str, Any] = {
            "model": self._model,
            "messages": messages,
            "temperature": config.temperature,
            "max_tokens": config.max_tokens,
            "top_p": config.top_p,
        }

        if config.json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        if config.stop_sequences:
            kwargs["stop"] = config.stop_sequences

        if config.seed is not None:
            kwargs["seed"] = config.seed

        logger.debug(f"Requesting completion from {self.name}")
        try:
            response = client.chat.completions.create(**kwargs)
        except Exception as e:
            raise_for_provider_error(e)
            raise

        choice = response.choices[0]
        usage = response.usage
        return GenerationResult(
            content=choice.message.content or "",
            finish_reason=choice.finish_reason or "unknown",
            usage={
                "prompt_tokens": usage.prompt_tokens if usage else 0,
                "completion_tokens": usage.completion_tokens if usage else 0,
                "total_tokens": usage.total_tokens if usage else 0,
            },
            model=response.model,
            raw_response=response,
        )

    def generate_json(
        self,
        prompt: str,
        *,
        system_prompt: str | None = None,
        config: GenerationConfig | None = None,
    ) -> dict[str, Any]:
        """Generate and parse JSON response.

        Raises:
            InvalidResponseError: If response is not valid JSON.
        """
        config = (config or GenerationConfig()).as_json()
        result = self.generate(prompt, system_prompt=system_prompt, config=config)

        try:
            return json.loads(result.content)
        except json.JSONDecodeError as e:
            raise InvalidResponseError(
                f"Failed to parse JSON response: {e}\nContent: {result.content[:500]}"
            ) from e


__all__ = ["OpenAIBackend", "DEFAULT_OPENAI_MODEL"]
