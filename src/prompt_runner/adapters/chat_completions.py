"""
Stateless chat-completions adapter.

Every call resends the full transcript. Within a turn, pending tool calls
are resolved by appending the assistant tool_calls message and one tool
message per call, then calling again.
"""

from __future__ import annotations

import logging
from abc import abstractmethod
from collections import deque
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from prompt_runner.config.types import BackendConfig
from prompt_runner.core.api_types import ApiType
from prompt_runner.core.conversation import ConversationState
from prompt_runner.core.payload import to_plain
from prompt_runner.core.types import NormalizedResponse
from prompt_runner.functions.continuations import ToolOutput, build_chat_tool_messages
from prompt_runner.functions.formatters import format_chat_tools

from .base import (
    MOCK_FUNCTION_FOLLOWUP_TEXT,
    MOCK_USAGE,
    AdapterTurn,
    BackendAdapter,
    mock_id,
)

if TYPE_CHECKING:
    from openai import OpenAI

logger = logging.getLogger(__name__)


class ChatCompletionsAdapter(BackendAdapter):
    """Protocol logic shared by the live and mock transports."""

    api_type = ApiType.OPENAI_CHAT_COMPLETIONS

    def send_turn(self, state: ConversationState) -> AdapterTurn:
        messages = self._history(state)
        logger.debug(f"Turn {state.turn}: sending {len(messages)} chat messages")

        initial = self._complete(messages)

        def submit(
            response: NormalizedResponse, outputs: list[ToolOutput]
        ) -> NormalizedResponse:
            messages.extend(build_chat_tool_messages(response, outputs))
            return self._complete(messages)

        result = self.function_handler.resolve(initial, submit, turn=state.turn)
        return AdapterTurn(
            response=result.to_response(),
            continuation=None,
            all_responses=result.all_responses,
            tool_call_limit_reached=result.limit_reached,
        )

    def build_request(self, messages: list[dict[str, Any]]) -> dict[str, Any]:
        request: dict[str, Any] = {"model": self.config.model, "messages": messages}
        if self.config.temperature is not None:
            request["temperature"] = self.config.temperature
        if self.config.max_tokens:
            request["max_tokens"] = self.config.max_tokens
        tools = format_chat_tools(self.config.tools, self.config.functions)
        if tools:
            request["tools"] = tools
        return request

    def _history(self, state: ConversationState) -> list[dict[str, Any]]:
        history: list[dict[str, Any]] = []
        if self.config.system_prompt:
            history.append({"role": "system", "content": self.config.system_prompt})
        history.extend({"role": m.role, "content": m.content} for m in state.messages)
        return history

    def _complete(self, messages: list[dict[str, Any]]) -> NormalizedResponse:
        # Copy so later appends don't alter what was sent
        raw = self._create(self.build_request(list(messages)))
        return self.normalizer.normalize_single_response(raw)

    @abstractmethod
    def _create(self, request: dict[str, Any]) -> Any:
        """Send a request with the transport and return the raw completion."""
        ...


class LiveChatCompletionsAdapter(ChatCompletionsAdapter):
    """
    Calls ``client.chat.completions.create``.

    Example:
        adapter = LiveChatCompletionsAdapter(config, client=OpenAI(api_key=...))
    """

    def __init__(self, config: BackendConfig, client: OpenAI, **kwargs: Any):
        super().__init__(config, **kwargs)
        self.client = client

    def _create(self, request: dict[str, Any]) -> Any:
        return self.client.chat.completions.create(**request)


class MockChatCompletionsAdapter(ChatCompletionsAdapter):
    """
    Returns canned completions without touching the network.

    ``script`` supplies raw payloads to return in order; once exhausted (or
    when omitted) a default completion is generated. Every request is kept
    in ``requests``.
    """

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

        messages = request["messages"]
        turn = sum(1 for m in messages if m.get("role") == "user")
        if messages and messages[-1].get("role") == "tool":
            text = MOCK_FUNCTION_FOLLOWUP_TEXT
        else:
            text = f"Mock LLM response for testing (turn {turn})"

        return {
            "id": mock_id("chatcmpl_mock", turn, len(self.requests)),
            "object": "chat.completion",
            "model": self.config.model,
            "choices": [
                {
                    "index": 0,
                    "message": {"role": "assistant", "content": text},
                    "finish_reason": "stop",
                }
            ],
            "usage": MOCK_USAGE.to_dict(),
        }
