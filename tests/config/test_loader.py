"""
Tests for runner_config.yaml loading.

Tests cover:
- Named backend lookup and validation
- Missing file, missing backend and invalid settings
- API key resolution from the file and the environment
"""

import pytest

from prompt_runner.config import load_backend_config, resolve_api_key
from prompt_runner.core.api_types import ApiType

CONFIG = """
backends:
  support_bot:
    provider: openai
    api: responses
    model: gpt-4o
    tools: [web_search]
    system_prompt: You are a support agent.
  claude_bot:
    provider: Anthropic
    api: messages
    model: claude-sonnet-4-5
  broken_bot:
    provider: openai
    api: chat_completions
    max_tool_iterations: -1
  scalar_bot: just-a-string
providers:
  anthropic:
    api_key: sk-ant-from-file
"""


@pytest.fixture
def config_path(tmp_path, monkeypatch):
    path = tmp_path / "runner_config.yaml"
    monkeypatch.setattr("prompt_runner.config.loader.get_config_path", lambda: path)
    return path


@pytest.fixture
def config_file(config_path):
    config_path.write_text(CONFIG)
    return config_path


class TestLoadBackendConfig:
    """Tests for load_backend_config()."""

    def test_loads_named_backend(self, config_file):
        config = load_backend_config("support_bot")

        assert config.api_type == ApiType.OPENAI_RESPONSES
        assert config.tools == ["web_search"]
        assert config.system_prompt == "You are a support agent."
        assert config.mock is True

    def test_provider_normalized(self, config_file):
        assert load_backend_config("claude_bot").provider == "anthropic"

    def test_missing_file(self, config_path):
        with pytest.raises(FileNotFoundError, match="runner_config.yaml not found"):
            load_backend_config("support_bot")

    def test_missing_backend(self, config_file):
        with pytest.raises(ValueError, match="Backend 'nope' not found"):
            load_backend_config("nope")

    def test_non_mapping_backend(self, config_file):
        with pytest.raises(ValueError, match="must be a mapping"):
            load_backend_config("scalar_bot")

    def test_invalid_settings(self, config_file):
        with pytest.raises(ValueError, match="Invalid settings for backend 'broken_bot'"):
            load_backend_config("broken_bot")

    def test_unparseable_yaml(self, config_path):
        config_path.write_text("backends: [unclosed")
        with pytest.raises(RuntimeError, match="Error loading backend config"):
            load_backend_config("support_bot")


class TestResolveApiKey:
    """Tests for resolve_api_key()."""

    def test_file_wins_over_environment(self, config_file, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-env")
        assert resolve_api_key("anthropic") == "sk-ant-from-file"

    def test_environment_fallback(self, config_file, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        assert resolve_api_key("OpenAI") == "sk-env"

    def test_no_key(self, config_path, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        assert resolve_api_key("openai") is None

    def test_unreadable_file_falls_back(self, config_path, monkeypatch):
        config_path.write_text("providers: [unclosed")
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        assert resolve_api_key("openai") == "sk-env"
