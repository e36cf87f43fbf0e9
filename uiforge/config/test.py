"""Tests for configuration management."""

from pathlib import Path

import pytest

from .lib import (
    EnvConfig,
    EnvVar,
    get_available_llm_providers,
    get_environment,
    get_environment_info,
    list_environment_variables,
)

# =============================================================================
# Tests for get_environment (main interface)
# =============================================================================


class TestGetEnvironment:
    """Tests for the unified get_environment interface."""

    @pytest.mark.unit
    def test_returns_default_when_not_set(self, monkeypatch):
        """Returns default value when env var is not set."""
        monkeypatch.delenv("UIFORGE_MAX_TREE_DEPTH", raising=False)
        result = get_environment(EnvVar.MAX_TREE_DEPTH)
        assert result == 64

    @pytest.mark.unit
    def test_override_takes_priority(self, monkeypatch):
        """Override parameter takes highest priority."""
        monkeypatch.setenv("UIFORGE_MAX_TREE_DEPTH", "99")
        result = get_environment(EnvVar.MAX_TREE_DEPTH, override=5)
        assert result == 5

    @pytest.mark.unit
    def test_env_var_overrides_default(self, monkeypatch):
        """Environment variable overrides default value."""
        monkeypatch.setenv("UIFORGE_MAX_INPUT_CHARS", "1200")
        result = get_environment(EnvVar.MAX_INPUT_CHARS)
        assert result == 1200
        assert isinstance(result, int)

    @pytest.mark.unit
    def test_float_type_conversion(self, monkeypatch):
        """Float type conversion from string."""
        monkeypatch.setenv("UIFORGE_PLANNER_TIMEOUT", "2.5")
        result = get_environment(EnvVar.PLANNER_TIMEOUT)
        assert result == 2.5
        assert isinstance(result, float)

    @pytest.mark.unit
    def test_invalid_float_returns_default(self, monkeypatch):
        """Invalid float value returns default."""
        monkeypatch.setenv("UIFORGE_EXPLAINER_TIMEOUT", "soon")
        result = get_environment(EnvVar.EXPLAINER_TIMEOUT)
        assert result == 30.0

    @pytest.mark.unit
    def test_invalid_int_returns_default(self, monkeypatch):
        """Invalid integer value returns default."""
        monkeypatch.setenv("UIFORGE_MAX_TREE_DEPTH", "deep")
        result = get_environment(EnvVar.MAX_TREE_DEPTH)
        assert result == 64

    @pytest.mark.unit
    def test_path_type_conversion(self, monkeypatch, tmp_path):
        """Path variables are returned as Path objects."""
        db = tmp_path / "versions.db"
        monkeypatch.setenv("UIFORGE_VERSION_DB", str(db))
        result = get_environment(EnvVar.VERSION_DB)
        assert result == db
        assert isinstance(result, Path)

    @pytest.mark.unit
    def test_version_db_unset_is_none(self, monkeypatch):
        """Unset version database means in-memory history."""
        monkeypatch.delenv("UIFORGE_VERSION_DB", raising=False)
        assert get_environment(EnvVar.VERSION_DB) is None

    @pytest.mark.unit
    def test_none_default_for_api_keys(self, monkeypatch):
        """API keys default to None when not set."""
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        result = get_environment(EnvVar.OPENAI_API_KEY)
        assert result is None


class TestGetEnvironmentInfo:
    """Tests for environment variable metadata."""

    @pytest.mark.unit
    def test_returns_env_config(self):
        """Returns EnvConfig dataclass."""
        info = get_environment_info(EnvVar.PLANNER_TIMEOUT)
        assert isinstance(info, EnvConfig)
        assert info.name == "UIFORGE_PLANNER_TIMEOUT"
        assert info.default == 45.0
        assert info.var_type is float
        assert info.category == "pipeline"

    @pytest.mark.unit
    def test_description_present(self):
        """Description field is populated."""
        info = get_environment_info(EnvVar.OPENAI_API_KEY)
        assert "OpenAI" in info.description


class TestListEnvironmentVariables:
    """Tests for listing environment variables."""

    @pytest.mark.unit
    def test_returns_all_variables(self):
        """Returns all EnvVar members when no category."""
        result = list_environment_variables()
        assert len(result) == len(EnvVar)
        assert all(isinstance(v, EnvVar) for v in result)

    @pytest.mark.unit
    def test_filter_by_category(self):
        """Filters by category correctly."""
        pipeline_vars = list_environment_variables("pipeline")
        assert EnvVar.PLANNER_TIMEOUT in pipeline_vars
        assert EnvVar.MAX_TREE_DEPTH in pipeline_vars
        assert EnvVar.OPENAI_API_KEY not in pipeline_vars

    @pytest.mark.unit
    def test_llm_category(self):
        """LLM category includes API keys."""
        llm_vars = list_environment_variables("llm")
        assert EnvVar.OPENAI_API_KEY in llm_vars
        assert EnvVar.ANTHROPIC_API_KEY in llm_vars


class TestAvailableProviders:
    """Tests for provider discovery from API keys."""

    @pytest.mark.unit
    def test_none_configured(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        assert get_available_llm_providers() == []

    @pytest.mark.unit
    def test_both_configured(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-test")
        assert get_available_llm_providers() == ["openai", "anthropic"]
