"""Tests for LLM backend implementations.

Provider clients are replaced with mocks; no network access.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from .anthropic import AnthropicBackend, extract_json_block
from .base import (
    AuthenticationError,
    ContextLengthError,
    GenerationConfig,
    GenerationResult,
    InvalidResponseError,
    LLMError,
    RateLimitError,
    raise_for_provider_error,
)
from .factory import create_llm_backend
from .openai import OpenAIBackend


def _openai_response(content: str) -> SimpleNamespace:
    return SimpleNamespace(
        choices=[
            SimpleNamespace(
                message=SimpleNamespace(content=content), finish_reason="stop"
            )
        ],
        usage=SimpleNamespace(prompt_tokens=10, completion_tokens=5, total_tokens=15),
        model="gpt-4.1-mini",
    )


def _anthropic_response(text: str) -> SimpleNamespace:
    return SimpleNamespace(
        content=[SimpleNamespace(text=text)],
        stop_reason="end_turn",
        usage=SimpleNamespace(input_tokens=7, output_tokens=3),
        model="claude-sonnet-4-5",
    )


class TestGenerationConfig:
    """Tests for GenerationConfig."""

    @pytest.mark.unit
    def test_defaults(self):
        config = GenerationConfig()
        assert config.temperature == 0.7
        assert config.json_mode is True
        assert config.max_tokens == 4096
        assert config.top_p == 1.0
        assert config.seed is None
        assert config.stop_sequences == []

    @pytest.mark.unit
    def test_as_json_keeps_settings(self):
        config = GenerationConfig(temperature=0.3, json_mode=False, seed=42)
        json_config = config.as_json()
        assert json_config.json_mode is True
        assert json_config.temperature == 0.3
        assert json_config.seed == 42
        assert config.json_mode is False


class TestGenerationResult:
    """Tests for GenerationResult."""

    @pytest.mark.unit
    def test_result_creation(self):
        result = GenerationResult(
            content='{"intent": "x"}',
            finish_reason="stop",
            usage={"prompt_tokens": 10, "completion_tokens": 20, "total_tokens": 30},
            model="gpt-4.1-mini",
        )
        assert result.usage["total_tokens"] == 30
        assert result.raw_response is None


class TestErrorMapping:
    """Tests for provider error conversion."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "message,expected",
        [
            ("Rate limit reached for requests", RateLimitError),
            ("This model's maximum context length is 8192", ContextLengthError),
            ("prompt is too long", ContextLengthError),
            ("Incorrect API key: invalid api key provided", AuthenticationError),
            ("Service unavailable", LLMError),
        ],
    )
    def test_maps_messages(self, message, expected):
        with pytest.raises(expected):
            raise_for_provider_error(Exception(message))

    @pytest.mark.unit
    def test_chains_original(self):
        original = Exception("boom")
        with pytest.raises(LLMError) as exc_info:
            raise_for_provider_error(original)
        assert exc_info.value.__cause__ is original


class TestOpenAIBackend:
    """Tests for OpenAI backend."""

    @pytest.mark.unit
    def test_requires_api_key(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        with pytest.raises(AuthenticationError, match="API key required"):
            OpenAIBackend()

    @pytest.mark.unit
    def test_creates_with_api_key(self):
        backend = OpenAIBackend(api_key="test-key-12345")
        assert backend.provider == "openai"
        assert backend.model_name == "gpt-4.1-mini"
        assert backend.name == "openai:gpt-4.1-mini"
        assert backend.supports_json_mode is True

    @pytest.mark.unit
    def test_generate_builds_request(self):
        backend = OpenAIBackend(api_key="test-key")
        backend._client = MagicMock()
        backend._client.chat.completions.create.return_value = _openai_response("hi")

        result = backend.generate(
            "plan", system_prompt="sys", config=GenerationConfig(seed=7)
        )

        kwargs = backend._client.chat.completions.create.call_args.kwargs
        assert kwargs["messages"][0] == {"role": "system", "content": "sys"}
        assert kwargs["messages"][1] == {"role": "user", "content": "plan"}
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["seed"] == 7
        assert result.content == "hi"
        assert result.usage["total_tokens"] == 15

    @pytest.mark.unit
    def test_generate_json(self):
        backend = OpenAIBackend(api_key="test-key")
        backend._client = MagicMock()
        backend._client.chat.completions.create.return_value = _openai_response(
            '{"intent": "login"}'
        )
        assert backend.generate_json("plan") == {"intent": "login"}

    @pytest.mark.unit
    def test_generate_json_invalid(self):
        backend = OpenAIBackend(api_key="test-key")
        backend._client = MagicMock()
        backend._client.chat.completions.create.return_value = _openai_response(
            "not json"
        )
        with pytest.raises(InvalidResponseError):
            backend.generate_json("plan")

    @pytest.mark.unit
    def test_provider_error_is_mapped(self):
        backend = OpenAIBackend(api_key="test-key")
        backend._client = MagicMock()
        backend._client.chat.completions.create.side_effect = Exception(
            "rate_limit_exceeded"
        )
        with pytest.raises(RateLimitError):
            backend.generate("plan")


class TestAnthropicBackend:
    """Tests for Anthropic backend."""

    @pytest.mark.unit
    def test_requires_api_key(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        with pytest.raises(AuthenticationError, match="API key required"):
            AnthropicBackend()

    @pytest.mark.unit
    def test_creates_with_api_key(self):
        backend = AnthropicBackend(api_key="test-key-12345")
        assert backend.provider == "anthropic"
        assert backend.model_name == "claude-sonnet-4-5"
        assert backend.supports_json_mode is False

    @pytest.mark.unit
    def test_json_mode_adds_instruction(self):
        backend = AnthropicBackend(api_key="test-key")
        backend._client = MagicMock()
        backend._client.messages.create.return_value = _anthropic_response("{}")

        backend.generate("plan", system_prompt="sys")

        kwargs = backend._client.messages.create.call_args.kwargs
        assert kwargs["system"] == "sys"
        assert "Respond with valid JSON only" in kwargs["messages"][0]["content"]

    @pytest.mark.unit
    def test_generate_json_strips_fence(self):
        backend = AnthropicBackend(api_key="test-key")
        backend._client = MagicMock()
        backend._client.messages.create.return_value = _anthropic_response(
            'Here it is:\n```json\n{"summary": "ok"}\n```'
        )
        assert backend.generate_json("explain") == {"summary": "ok"}


class TestExtractJsonBlock:
    """Tests for markdown fence extraction."""

    @pytest.mark.unit
    def test_plain(self):
        assert extract_json_block('  {"a": 1} ') == '{"a": 1}'

    @pytest.mark.unit
    def test_fenced(self):
        assert extract_json_block('```json\n{"a": 1}\n```') == '{"a": 1}'

    @pytest.mark.unit
    def test_unterminated_fence(self):
        assert extract_json_block('```json\n{"a": 1}') == '{"a": 1}'


class TestCreateLLMBackend:
    """Tests for create_llm_backend factory."""

    @pytest.mark.unit
    def test_creates_openai_backend(self):
        backend = create_llm_backend("openai", api_key="test-key")
        assert isinstance(backend, OpenAIBackend)

    @pytest.mark.unit
    def test_creates_anthropic_backend(self):
        backend = create_llm_backend("Anthropic", api_key="test-key")
        assert isinstance(backend, AnthropicBackend)
        assert backend.model_name == "claude-sonnet-4-5"

    @pytest.mark.unit
    def test_provider_from_environment(self, monkeypatch):
        monkeypatch.setenv("UIFORGE_LLM_PROVIDER", "anthropic")
        monkeypatch.delenv("UIFORGE_LLM_MODEL", raising=False)
        assert create_llm_backend(api_key="test-key").provider == "anthropic"

    @pytest.mark.unit
    def test_model_from_environment(self, monkeypatch):
        monkeypatch.setenv("UIFORGE_LLM_MODEL", "gpt-4.1")
        backend = create_llm_backend("openai", api_key="test-key")
        assert backend.model_name == "gpt-4.1"

    @pytest.mark.unit
    def test_explicit_model_wins(self, monkeypatch):
        monkeypatch.setenv("UIFORGE_LLM_MODEL", "gpt-4.1")
        backend = create_llm_backend("openai", "gpt-4o", api_key="test-key")
        assert backend.model_name == "gpt-4o"

    @pytest.mark.unit
    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unsupported LLM provider"):
            create_llm_backend("ollama")
