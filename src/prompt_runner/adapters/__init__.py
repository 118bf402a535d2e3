"""
Backend adapters, one per wire protocol.

Usage:
    from prompt_runner.adapters import create_backend
    from prompt_runner.config import BackendConfig

    backend = create_backend(BackendConfig(provider="openai", api="responses"))
    turn = backend.send_turn(state)
"""

from __future__ import annotations

import logging
from typing import Any

from anthropic import Anthropic
from openai import OpenAI

from prompt_runner.config.loader import resolve_api_key
from prompt_runner.config.types import BackendConfig
from prompt_runner.core.api_types import ApiType
from prompt_runner.core.exceptions import ConfigurationError
from prompt_runner.core.protocols import FunctionExecutor

from .anthropic import (
    AnthropicMessagesAdapter,
    LiveAnthropicMessagesAdapter,
    MockAnthropicMessagesAdapter,
)
from .assistants import AssistantsAdapter, LiveAssistantsAdapter, MockAssistantsAdapter
from .base import AdapterTurn, BackendAdapter, mock_id
from .chat_completions import (
    ChatCompletionsAdapter,
    LiveChatCompletionsAdapter,
    MockChatCompletionsAdapter,
)
from .polling import PollResult, RunPoller
from .responses import LiveResponsesAdapter, MockResponsesAdapter, ResponsesAdapter

logger = logging.getLogger(__name__)

_LIVE: dict[ApiType, type[BackendAdapter]] = {
    ApiType.OPENAI_CHAT_COMPLETIONS: LiveChatCompletionsAdapter,
    ApiType.OPENAI_RESPONSES: LiveResponsesAdapter,
    ApiType.OPENAI_ASSISTANTS: LiveAssistantsAdapter,
    ApiType.ANTHROPIC_MESSAGES: LiveAnthropicMessagesAdapter,
}

_MOCK: dict[ApiType, type[BackendAdapter]] = {
    ApiType.OPENAI_CHAT_COMPLETIONS: MockChatCompletionsAdapter,
    ApiType.OPENAI_RESPONSES: MockResponsesAdapter,
    ApiType.OPENAI_ASSISTANTS: MockAssistantsAdapter,
    ApiType.ANTHROPIC_MESSAGES: MockAnthropicMessagesAdapter,
}


def create_backend(
    config: BackendConfig,
    *,
    openai_client: OpenAI | None = None,
    anthropic_client: Anthropic | None = None,
    executor: FunctionExecutor | None = None,
    **kwargs: Any,
) -> BackendAdapter:
    """
    Build the adapter for a backend config.

    The api type is resolved first, so an unsupported provider/api pair
    fails before any client is built. Mock configs never need a client.
    Live configs use the client passed in, or build one from the resolved
    API key.

    Args:
        config: Backend settings
        openai_client: Client for the OpenAI backends
        anthropic_client: Client for the Anthropic backend
        executor: Function executor; defaults to mock outputs
        **kwargs: Extra adapter arguments (e.g. ``sleep`` or ``poller``)

    Raises:
        UnsupportedBackendError: If the provider/api pair is unknown
        ConfigurationError: If a live backend has no client and no API key
    """
    api_type = config.api_type

    if config.mock:
        logger.debug(f"Using mock transport for {api_type.value}")
        return _MOCK[api_type](config, executor=executor, **kwargs)

    if api_type == ApiType.ANTHROPIC_MESSAGES:
        client: Any = anthropic_client or Anthropic(api_key=_require_key(config))
    else:
        client = openai_client or OpenAI(api_key=_require_key(config))

    logger.debug(f"Using live transport for {api_type.value}")
    return _LIVE[api_type](config, client=client, executor=executor, **kwargs)


def _require_key(config: BackendConfig) -> str:
    api_key = resolve_api_key(config.provider)
    if not api_key:
        raise ConfigurationError(
            f"No API key for provider '{config.provider}'. Set "
            f"{config.provider.upper()}_API_KEY or add it under 'providers' "
            f"in runner_config.yaml."
        )
    return api_key


__all__ = [
    "AdapterTurn",
    "AnthropicMessagesAdapter",
    "AssistantsAdapter",
    "BackendAdapter",
    "ChatCompletionsAdapter",
    "LiveAnthropicMessagesAdapter",
    "LiveAssistantsAdapter",
    "LiveChatCompletionsAdapter",
    "LiveResponsesAdapter",
    "MockAnthropicMessagesAdapter",
    "MockAssistantsAdapter",
    "MockChatCompletionsAdapter",
    "MockResponsesAdapter",
    "PollResult",
    "ResponsesAdapter",
    "RunPoller",
    "create_backend",
    "mock_id",
]
