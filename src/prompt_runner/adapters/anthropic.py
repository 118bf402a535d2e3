"""
Anthropic Messages adapter.

Stateless like chat completions: the whole transcript is resent each call,
with the system directive passed separately. Tool use is resolved by
appending the assistant tool_use message and a user message of tool_result
blocks, then calling again.
"""

from __future__ import annotations

import logging
from abc import abstractmethod
from collections import deque
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, cast

from anthropic.types import MessageParam, TextBlockParam

from prompt_runner.config.types import BackendConfig
from prompt_runner.core.api_types import ApiType
from prompt_runner.core.conversation import ConversationState
from prompt_runner.core.payload import to_plain
from prompt_runner.core.types import NormalizedResponse
from prompt_runner.functions.continuations import (
    ToolOutput,
    build_anthropic_tool_messages,
)
from prompt_runner.functions.formatters import format_anthropic_tools

from .base import (
    MOCK_FUNCTION_FOLLOWUP_TEXT,
    MOCK_USAGE,
    AdapterTurn,
    BackendAdapter,
    mock_id,
)

if TYPE_CHECKING:
    from anthropic import Anthropic

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS = 4096


class AnthropicMessagesAdapter(BackendAdapter):
    """Protocol logic shared by the live and mock transports."""

    api_type = ApiType.ANTHROPIC_MESSAGES

    def send_turn(self, state: ConversationState) -> AdapterTurn:
        messages = _history(state)
        logger.debug(f"Turn {state.turn}: sending {len(messages)} Anthropic messages")

        initial = self._complete(messages)

        def submit(
            response: NormalizedResponse, outputs: list[ToolOutput]
        ) -> NormalizedResponse:
            messages.extend(
                cast(list[MessageParam], build_anthropic_tool_messages(response, outputs))
            )
            return self._complete(messages)

        result = self.function_handler.resolve(initial, submit, turn=state.turn)
        return AdapterTurn(
            response=result.to_response(),
            continuation=None,
            all_responses=result.all_responses,
            tool_call_limit_reached=result.limit_reached,
        )

    def build_request(self, messages: list[MessageParam]) -> dict[str, Any]:
        request: dict[str, Any] = {
            "model": self.config.model,
            "max_tokens": self.config.max_tokens or DEFAULT_MAX_TOKENS,
            "messages": messages,
        }
        if self.config.system_prompt:
            request["system"] = self.config.system_prompt
        if self.config.temperature is not None:
            request["temperature"] = self.config.temperature
        tools = format_anthropic_tools(self.config.tools, self.config.functions)
        if tools:
            request["tools"] = tools
        return request

    def _complete(self, messages: list[MessageParam]) -> NormalizedResponse:
        raw = self._create(self.build_request(list(messages)))
        return self.normalizer.normalize_single_response(raw)

    @abstractmethod
    def _create(self, request: dict[str, Any]) -> Any:
        """Send a request with the transport and return the raw message."""
        ...


def _history(state: ConversationState) -> list[MessageParam]:
    messages: list[MessageParam] = [
        {"role": m.role, "content": m.content} for m in state.messages if m.content
    ]
    return _batch_consecutive_messages(messages)


def _batch_consecutive_messages(messages: list[MessageParam]) -> list[MessageParam]:
    """
    Merge consecutive same-role messages into one message.

    Anthropic requires alternating user/assistant roles; an empty assistant
    reply would otherwise leave two user messages back to back.
    """
    batched: list[MessageParam] = []
    for msg in messages:
        if batched and batched[-1]["role"] == msg["role"]:
            current = batched[-1]
            blocks = _as_blocks(current["content"]) + _as_blocks(msg["content"])
            batched[-1] = {"role": current["role"], "content": blocks}
        else:
            batched.append({"role": msg["role"], "content": msg["content"]})
    return batched


def _as_blocks(content: Any) -> list[Any]:
    if isinstance(content, str):
        block: TextBlockParam = {"type": "text", "text": content}
        return [block]
    return list(content)


class LiveAnthropicMessagesAdapter(AnthropicMessagesAdapter):
    """
    Calls ``client.messages.create``.

    Example:
        adapter = LiveAnthropicMessagesAdapter(
            config, client=Anthropic(api_key=...)
        )
    """

    def __init__(self, config: BackendConfig, client: Anthropic, **kwargs: Any):
        super().__init__(config, **kwargs)
        self.client = client

    def _create(self, request: dict[str, Any]) -> Any:
        return self.client.messages.create(**request)


class MockAnthropicMessagesAdapter(AnthropicMessagesAdapter):
    """Returns canned messages without touching the network."""

    is_mock = True

    def __init__(
        self,
        config: BackendConfig,
        script: Sequence[Any] | None = None,
        **kwargs: Any,
    ):
        super().__init__(config, **kwargs)
        self._script = deque(script or ())
        self.requests: list[dict[str, Any]] = []

    def _create(self, request: dict[str, Any]) -> Any:
        self.requests.append(to_plain(request))
        if self._script:
            return self._script.popleft()

        last = request["messages"][-1] if request["messages"] else {}
        content = last.get("content")
        followup = isinstance(content, list) and any(
            isinstance(b, dict) and b.get("type") == "tool_result" for b in content
        )
        text = MOCK_FUNCTION_FOLLOWUP_TEXT if followup else "Mock Anthropic Messages API response"

        return {
            "id": mock_id("msg_mock", len(self.requests), len(request["messages"])),
            "type": "message",
            "role": "assistant",
            "model": self.config.model,
            "content": [{"type": "text", "text": text}],
            "stop_reason": "end_turn",
            "usage": {
                "input_tokens": MOCK_USAGE.prompt_tokens,
                "output_tokens": MOCK_USAGE.completion_tokens,
            },
        }
