"""
Tests for create_backend().

Tests cover:
- Mock transports need no client or key
- Unsupported backends fail before any client is built
- Live transports use the given client or a resolved API key
"""

import pytest

from prompt_runner.adapters import (
    LiveAnthropicMessagesAdapter,
    LiveChatCompletionsAdapter,
    MockAnthropicMessagesAdapter,
    MockAssistantsAdapter,
    MockChatCompletionsAdapter,
    MockResponsesAdapter,
    create_backend,
)
from prompt_runner.config.types import BackendConfig
from prompt_runner.core.exceptions import ConfigurationError, UnsupportedBackendError
from prompt_runner.functions import CallableFunctionExecutor


@pytest.fixture(autouse=True)
def no_config_file(tmp_path, monkeypatch):
    """Point config lookup at an empty directory and clear key variables."""
    monkeypatch.setattr(
        "prompt_runner.config.loader.get_config_path",
        lambda: tmp_path / "runner_config.yaml",
    )
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)


@pytest.mark.parametrize(
    "provider,api,expected",
    [
        ("openai", "chat_completions", MockChatCompletionsAdapter),
        ("openai", "responses", MockResponsesAdapter),
        ("openai", "assistants", MockAssistantsAdapter),
        ("anthropic", "messages", MockAnthropicMessagesAdapter),
    ],
)
def test_mock_backends(provider, api, expected):
    backend = create_backend(BackendConfig(provider=provider, api=api))

    assert isinstance(backend, expected)
    assert backend.is_mock is True


def test_unsupported_backend():
    with pytest.raises(UnsupportedBackendError):
        create_backend(BackendConfig(provider="cohere", api="chat", mock=False))


def test_live_without_key_raises():
    with pytest.raises(ConfigurationError, match="OPENAI_API_KEY"):
        create_backend(BackendConfig(provider="openai", api="chat_completions", mock=False))


def test_live_with_client(fake_openai):
    backend = create_backend(
        BackendConfig(provider="openai", api="chat_completions", mock=False),
        openai_client=fake_openai,
    )

    assert isinstance(backend, LiveChatCompletionsAdapter)
    assert backend.client is fake_openai
    assert backend.is_mock is False


def test_live_key_from_environment(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-test")

    backend = create_backend(BackendConfig(provider="anthropic", api="messages", mock=False))

    assert isinstance(backend, LiveAnthropicMessagesAdapter)


def test_executor_passed_through():
    executor = CallableFunctionExecutor({})
    backend = create_backend(
        BackendConfig(provider="openai", api="responses"), executor=executor
    )

    assert backend.function_handler.executor is executor
