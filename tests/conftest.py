"""
Pytest fixtures for prompt_runner tests.

Everything runs offline: backends use the mock transports or the fake SDK
clients from ``prompt_runner.testing``, and polling never really sleeps.
"""

from unittest.mock import MagicMock

import pytest

from prompt_runner.config.types import BackendConfig, FunctionDefinition
from prompt_runner.core.conversation import ConversationState, NormalizedMessage
from prompt_runner.core.types import NormalizedResponse, ToolCall, UsageTotals
from prompt_runner.testing import FakeAnthropicClient, FakeOpenAIClient


@pytest.fixture
def weather_function() -> FunctionDefinition:
    return FunctionDefinition(
        name="get_weather",
        description="Get the weather for a city",
        parameters={
            "type": "object",
            "properties": {"city": {"type": "string"}},
            "required": ["city"],
        },
    )


@pytest.fixture
def chat_config() -> BackendConfig:
    return BackendConfig(provider="openai", api="chat_completions", model="gpt-4o")


@pytest.fixture
def responses_config() -> BackendConfig:
    return BackendConfig(
        provider="openai",
        api="responses",
        model="gpt-4o",
        system_prompt="You are a helpful assistant.",
        temperature=0.2,
    )


@pytest.fixture
def assistants_config() -> BackendConfig:
    return BackendConfig(
        provider="openai",
        api="assistants",
        assistant_id="asst_123",
        poll_interval=0.5,
        max_poll_attempts=5,
    )


@pytest.fixture
def anthropic_config() -> BackendConfig:
    return BackendConfig(
        provider="anthropic",
        api="messages",
        model="claude-sonnet-4-5",
        system_prompt="Be concise.",
    )


@pytest.fixture
def no_sleep() -> MagicMock:
    """Stand-in for time.sleep that records intervals."""
    return MagicMock(name="sleep")


@pytest.fixture
def fake_openai() -> FakeOpenAIClient:
    return FakeOpenAIClient()


@pytest.fixture
def fake_anthropic() -> FakeAnthropicClient:
    return FakeAnthropicClient()


@pytest.fixture
def first_turn_state() -> ConversationState:
    """State right after the orchestrator appended the first user message."""
    state = ConversationState(turn=1)
    state.append(NormalizedMessage.user("Hello", turn=1))
    return state


def make_response(
    text: str = "",
    tool_calls: list[ToolCall] | None = None,
    usage: UsageTotals | None = None,
    response_id: str | None = None,
) -> NormalizedResponse:
    return NormalizedResponse(
        text=text,
        tool_calls=tuple(tool_calls or ()),
        usage=usage,
        response_id=response_id,
    )


@pytest.fixture
def response_factory():
    """Build NormalizedResponse objects with only the fields a test cares about."""
    return make_response
