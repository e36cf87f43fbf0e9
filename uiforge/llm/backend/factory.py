"""Backend factory for creating LLM backends from configuration.

Provides a unified entry point for creating any supported LLM backend.
"""

import logging

from uiforge.config import EnvVar, get_environment

from .base import LLMBackend

logger = logging.getLogger(__name__)

DEFAULT_MODELS: dict[str, str] = {
    "openai": "gpt-4.1-mini",
    "anthropic": "claude-sonnet-4-5",
}


def create_llm_backend(
    provider: str | None = None,
    model: str | None = None,
    *,
    api_key: str | None = None,
    timeout: float | None = None,
) -> LLMBackend:
    """Create an LLM backend.

    Args:
        provider: "openai" or "anthropic". Falls back to UIFORGE_LLM_PROVIDER.
        model: Model name. Falls back to UIFORGE_LLM_MODEL, then the
            provider's default model.
        api_key: API key. Falls back to the provider's environment variable.
        timeout: Request timeout in seconds.

    Returns:
        Configured LLMBackend instance.

    Raises:
        ValueError: If the provider is not supported.
        AuthenticationError: If no API key is available.

    Example:
        >>> backend = create_llm_backend()
        >>> backend = create_llm_backend("anthropic", api_key="sk-ant-...")
    """
    provider = get_environment(EnvVar.LLM_PROVIDER, override=provider).lower()
    if provider not in DEFAULT_MODELS:
        raise ValueError(
            f"Unsupported LLM provider: {provider}. "
            f"Available: {', '.join(sorted(DEFAULT_MODELS))}"
        )

    model = model or get_environment(EnvVar.LLM_MODEL) or DEFAULT_MODELS[provider]
    kwargs = {} if timeout is None else {"timeout": timeout}
    logger.info(f"Creating LLM backend {provider}:{model}")

    if provider == "openai":
        from .openai import OpenAIBackend

        return OpenAIBackend(api_key=api_key, model=model, **kwargs)

    from .anthropic import AnthropicBackend

    return AnthropicBackend(api_key=api_key, model=model, **kwargs)


__all__ = ["create_llm_backend", "DEFAULT_MODELS"]
