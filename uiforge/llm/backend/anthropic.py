"""Anthropic Claude backend implementation.

Anthropic has no native JSON mode; JSON output is requested through the
prompt and extracted from markdown fences when the model adds them.
"""

import json
import logging
import re
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

DEFAULT_ANTHROPIC_MODEL = "claude-sonnet-4-5"

JSON_INSTRUCTION = (
    "IMPORTANT: Respond with valid JSON only. "
    "Do not include any text, explanation, or markdown formatting "
    "before or after the JSON object."
)


class AnthropicBackend(LLMBackend):
    """Anthropic Claude backend.

    Environment:
        ANTHROPIC_API_KEY: API key (required if not passed to constructor).

    Example:
        >>> backend = AnthropicBackend()
        >>> plan = backend.generate_json("Plan a login form as JSON")
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_ANTHROPIC_MODEL,
        timeout: float = 60.0,
        max_retries: int = 3,
    ):
        """Initialize Anthropic backend.

        Args:
            api_key: Anthropic API key. Falls back to ANTHROPIC_API_KEY env var.
            model: Model name.
            timeout: Request timeout in seconds.
            max_retries: Number of retry attempts for transient errors.

        Raises:
            AuthenticationError: If no API key available.
        """
        self._api_key = api_key or get_environment(EnvVar.ANTHROPIC_API_KEY)
        if not self._api_key:
            raise AuthenticationError(
                "Anthropic API key required. Set ANTHROPIC_API_KEY environment "
                "variable or pass api_key parameter."
            )

        self._model = model
        self._timeout = timeout
        self._max_retries = max_retries
        self._client: Any = None

    def _get_client(self) -> Any:
        """Lazily initialize Anthropic client."""
        if self._client is None:
            import anthropic

            self._client = anthropic.Anthropic(
                api_key=self._api_key,
                timeout=self._timeout,
                max_retries=self._max_retries,
            )
        return self._client

    @property
    def model_name(self) -> str:
        return self._model

    @property
    def provider(self) -> str:
        return "anthropic"

    @property
    def supports_json_mode(self) -> bool:
        return False

    def generate(
        self,
        prompt: str,
        *,
        system_prompt: str | None = None,
        config: GenerationConfig | None = None,
    ) -> GenerationResult:
        """Generate text using the messages API.

        Raises:
            LLMError: If generation fails.
            RateLimitError: If rate limit exceeded.
            ContextLengthError: If prompt too long.
        """
        config = config or GenerationConfig()
        client = self._get_client()

        effective_prompt = prompt
        if config.json_mode:
            effective_prompt = f"{prompt}\n\n{JSON_INSTRUCTION}"

        kwargs: dict[str, Any] = {
            "model": self._model,
            "messages": [{"role": "user", "content": effective_prompt}],
            "max_tokens": config.max_tokens,
            "temperature": config.temperature,
        }

        if system_prompt:
            kwargs["system"] = system_prompt

        if config.stop_sequences:
            kwargs["stop_sequences"] = config.stop_sequences

        logger.debug(f"Requesting completion from {self.name}")
        try:
            response = client.messages.create(**kwargs)
        except Exception as e:
            raise_for_provider_error(e)
            raise

        content = ""
        if response.content:
            content = response.content[0].text

        return GenerationResult(
            content=content,
            finish_reason=response.stop_reason or "unknown",
            usage={
                "prompt_tokens": response.usage.input_tokens,
                "completion_tokens": response.usage.output_tokens,
                "total_tokens": (
                    response.usage.input_tokens + response.usage.output_tokens
                ),
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
        content = extract_json_block(result.content)

        try:
            return json.loads(content)
        except json.JSONDecodeError as e:
            raise InvalidResponseError(
                f"Failed to parse JSON response: {e}\nContent: {result.content[:500]}"
            ) from e


def extract_json_block(content: str) -> str:
    """Extract JSON text from a response, handling markdown code blocks."""
    content = content.strip()

    # ```json ... ``` or ``` ... ```
    for match in re.findall(r"```(?:json)?\s*([\s\S]*?)```", content):
        stripped = match.strip()
        if stripped.startswith("{") or stripped.startswith("["):
            return stripped

    if content.startswith("```json"):
        content = content[7:]
    elif content.startswith("```"):
        content = content[3:]
    if content.endswith("```"):
        content = content[:-3]

    return content.strip()


__all__ = ["AnthropicBackend", "DEFAULT_ANTHROPIC_MODEL", "extract_json_block"]
