"""
Stateful response-chaining adapter.

The first call of a run carries the system directive, temperature, output
limit and tools. Every later call sends only the new input plus the
previous response id; the backend recalls the history. Temperature and
instructions are not resent on chained calls.

Tool outputs go back as interleaved function_call / function_call_output
items chained onto the response that requested them.
"""

from __future__ import annotations

import logging
from abc import abstractmethod
from collections import deque
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from prompt_runner.config.types import BackendConfig
from prompt_runner.core.api_types import ApiType
from prompt_runner.core.conversation import ConversationState, ResponseChainToken
from prompt_runner.core.payload import to_plain
from prompt_runner.core.types import NormalizedResponse
from prompt_runner.functions.continuations import ToolOutput, build_function_call_input
from prompt_runner.functions.formatters import format_responses_tools, has_web_search

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

WEB_SEARCH_SOURCES_INCLUDE = "web_search_call.action.sources"


class ResponsesAdapter(BackendAdapter):
    """Protocol logic shared by the live and mock transports."""

    api_type = ApiType.OPENAI_RESPONSES

    def send_turn(self, state: ConversationState) -> AdapterTurn:
        previous_id = (
            state.continuation.response_id
            if isinstance(state.continuation, ResponseChainToken)
            else None
        )
        logger.debug(f"Turn {state.turn}: previous_response_id={previous_id}")

        initial = self._respond(
            self.build_request(state.current_user_message, previous_id)
        )

        def submit(
            response: NormalizedResponse, outputs: list[ToolOutput]
        ) -> NormalizedResponse:
            return self._respond(
                self.build_request(build_function_call_input(outputs), response.response_id)
            )

        result = self.function_handler.resolve(initial, submit, turn=state.turn)
        final_id = result.final_response.response_id

        return AdapterTurn(
            response=result.to_response(),
            continuation=ResponseChainToken(response_id=final_id)
            if final_id
            else state.continuation,
            all_responses=result.all_responses,
            tool_call_limit_reached=result.limit_reached,
        )

    def build_request(
        self, input: str | list[dict[str, Any]], previous_response_id: str | None
    ) -> dict[str, Any]:
        """
        Build a ``responses.create`` request.

        Args:
            input: User text, or function call items when resubmitting tool outputs
            previous_response_id: Response to chain onto, None for the first call
        """
        request: dict[str, Any] = {"model": self.config.model, "input": input}
        tools = format_responses_tools(
            self.config.tools, self.config.functions, self.config.vector_store_ids
        )

        if previous_response_id:
            request["previous_response_id"] = previous_response_id
        else:
            if self.config.system_prompt:
                request["instructions"] = self.config.system_prompt
            if self.config.temperature is not None:
                request["temperature"] = self.config.temperature
            if self.config.max_tokens:
                request["max_output_tokens"] = self.config.max_tokens
            # Sources are only returned when asked for explicitly
            if has_web_search(self.config.tools):
                request["include"] = [WEB_SEARCH_SOURCES_INCLUDE]

        if tools:
            request["tools"] = tools
        return request

    def _respond(self, request: dict[str, Any]) -> NormalizedResponse:
        return self.normalizer.normalize_single_response(self._create(request))

    @abstractmethod
    def _create(self, request: dict[str, Any]) -> Any:
        """Send a request with the transport and return the raw response."""
        ...


class LiveResponsesAdapter(ResponsesAdapter):
    """Calls ``client.responses.create``."""

    def __init__(self, config: BackendConfig, client: OpenAI, **kwargs: Any):
        super().__init__(config, **kwargs)
        self.client = client

    def _create(self, request: dict[str, Any]) -> Any:
        return self.client.responses.create(**request)


class MockResponsesAdapter(ResponsesAdapter):
    """
    Returns canned responses without touching the network.

    Ids are derived from the request count and input, so identical runs
    produce identical ids. ``script`` overrides the canned payloads in order.
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

        count = len(self.requests)
        if isinstance(request["input"], list):
            text = MOCK_FUNCTION_FOLLOWUP_TEXT
        else:
            text = f"Mock Response API response for testing ({count})"

        return {
            "id": mock_id("resp_mock", count, request["input"]),
            "object": "response",
            "status": "completed",
            "model": self.config.model,
            "previous_response_id": request.get("previous_response_id"),
            "output": [
                {
                    "id": mock_id("msg_mock", count),
                    "type": "message",
                    "role": "assistant",
                    "status": "completed",
                    "content": [{"type": "output_text", "text": text, "annotations": []}],
                }
            ],
            "usage": {
                "input_tokens": MOCK_USAGE.prompt_tokens,
                "output_tokens": MOCK_USAGE.completion_tokens,
                "total_tokens": MOCK_USAGE.total_tokens,
            },
        }
