"""
Thread/run polling adapter.

Per turn:

    1. create the thread (first turn only) and append the user message
    2. create a run for the pre-registered assistant
    3. poll until terminal; on requires_action, execute the pending
       function calls, submit their outputs and keep polling
    4. on completed, fetch run steps (soft failure: empty list) and the
       latest thread message, then normalize them together

A run that ends failed, cancelled, expired or incomplete raises
RunFailedError. Exceeding the poll bound raises RunTimeoutError.
"""

from __future__ import annotations

import logging
import time
from abc import abstractmethod
from collections import deque
from collections.abc import Callable, Sequence
from dataclasses import replace
from typing import TYPE_CHECKING, Any

from prompt_runner.config.types import BackendConfig
from prompt_runner.core.api_types import ApiType
from prompt_runner.core.conversation import ConversationState, ThreadRunToken
from prompt_runner.core.exceptions import ConfigurationError, RunFailedError
from prompt_runner.core.payload import as_dict, as_list, to_plain
from prompt_runner.core.types import NormalizedResponse, ToolCall
from prompt_runner.functions.continuations import (
    ToolOutput,
    build_assistants_tool_outputs,
)
from prompt_runner.functions.formatters import format_assistants_tools
from prompt_runner.normalizers.base import tool_call_from, unique_tool_calls

from .base import MOCK_USAGE, AdapterTurn, BackendAdapter, mock_id
from .polling import RunPoller

if TYPE_CHECKING:
    from openai import OpenAI

logger = logging.getLogger(__name__)


class AssistantsAdapter(BackendAdapter):
    """Protocol logic shared by the live and mock transports."""

    api_type = ApiType.OPENAI_ASSISTANTS

    def __init__(
        self,
        config: BackendConfig,
        *,
        poller: RunPoller | None = None,
        sleep: Callable[[float], None] = time.sleep,
        **kwargs: Any,
    ):
        super().__init__(config, **kwargs)
        self.poller = poller or RunPoller(
            interval=config.poll_interval,
            max_attempts=config.max_poll_attempts,
            sleep=sleep,
        )

    @property
    def assistant_id(self) -> str | None:
        return self.config.assistant_id

    def send_turn(self, state: ConversationState) -> AdapterTurn:
        if isinstance(state.continuation, ThreadRunToken):
            thread_id = state.continuation.thread_id
        else:
            thread_id = self._create_thread(state)
            logger.info(f"Created thread {thread_id} for assistant {self.assistant_id}")

        self._add_message(thread_id, state.current_user_message)
        run_id = str(self._create_run(thread_id, self.build_run_request())["id"])
        logger.debug(f"Turn {state.turn}: created run {run_id} on thread {thread_id}")

        run, resolved_calls, limit_reached = self._run_to_completion(
            thread_id, run_id, state.turn
        )
        continuation = ThreadRunToken(thread_id=thread_id, run_id=run_id)

        if limit_reached:
            response = NormalizedResponse(
                text="",
                tool_calls=unique_tool_calls(list(resolved_calls)),
                model=self.assistant_id,
                metadata={
                    "thread_id": thread_id,
                    "run_id": run_id,
                    "tool_call_limit_reached": True,
                },
                raw=run,
            )
            return AdapterTurn(response, continuation, [response], True)

        run_steps = self.fetch_run_steps(thread_id, run_id)
        message = self._latest_message(thread_id, run_id)
        payload = {
            **message,
            "thread_id": thread_id,
            "run_id": run_id,
            "assistant_id": message.get("assistant_id") or self.assistant_id,
            "usage": run.get("usage"),
            "run_steps": run_steps,
        }
        response = self.normalizer.normalize_single_response(payload)

        # Run steps may be missing; keep the calls resolved during polling
        known = {tc.id for tc in response.tool_calls}
        missing = [tc for tc in resolved_calls if tc.id not in known]
        if missing:
            response = replace(response, tool_calls=response.tool_calls + tuple(missing))
        return AdapterTurn(response, continuation, [response], False)

    def build_run_request(self) -> dict[str, Any]:
        """Arguments for creating a run; tools override the assistant's own."""
        request: dict[str, Any] = {"assistant_id": self.assistant_id}
        tools = format_assistants_tools(self.config.tools, self.config.functions)
        if tools:
            request["tools"] = tools
        return request

    def wait_for_run(self, thread_id: str, run_id: str) -> dict[str, Any]:
        """Poll until the run is terminal or requires action; return the run."""
        return self.poller.wait(
            lambda: self._retrieve_run(thread_id, run_id), run_id=run_id
        ).run

    def fetch_run_steps(self, thread_id: str, run_id: str) -> list[dict[str, Any]]:
        """Fetch run steps in order. Failure is logged and yields an empty list."""
        try:
            return self._list_run_steps(thread_id, run_id)
        except Exception as e:
            logger.warning(f"Failed to fetch run steps for run {run_id}: {e}")
            return []

    def _run_to_completion(
        self, thread_id: str, run_id: str, turn: int
    ) -> tuple[dict[str, Any], list[ToolCall], bool]:
        resolved: list[ToolCall] = []
        iterations = 0
        max_iterations = self.function_handler.max_iterations

        while True:
            run = self.wait_for_run(thread_id, run_id)
            status = run.get("status")

            if status == "completed":
                return run, resolved, False

            if status != "requires_action":
                last_error = as_dict(run.get("last_error")).get("message")
                raise RunFailedError(run_id, str(status), last_error)

            calls = _required_tool_calls(run)
            if iterations >= max_iterations:
                logger.warning(
                    f"Function call iteration limit ({max_iterations}) reached for "
                    f"turn {turn}. Cancelling run {run_id}."
                )
                self._cancel_run(thread_id, run_id)
                return run, resolved + calls, True

            iterations += 1
            outputs = [
                ToolOutput(tool_call=call, output=self.function_handler.execute(call))
                for call in calls
            ]
            resolved.extend(calls)
            self._submit_tool_outputs(
                thread_id, run_id, build_assistants_tool_outputs(outputs)
            )

    # --- Transport ---

    @abstractmethod
    def _create_thread(self, state: ConversationState) -> str: ...

    @abstractmethod
    def _add_message(self, thread_id: str, content: str) -> None: ...

    @abstractmethod
    def _create_run(
        self, thread_id: str, request: dict[str, Any]
    ) -> dict[str, Any]: ...

    @abstractmethod
    def _retrieve_run(self, thread_id: str, run_id: str) -> dict[str, Any]: ...

    @abstractmethod
    def _submit_tool_outputs(
        self, thread_id: str, run_id: str, tool_outputs: list[dict[str, str]]
    ) -> None: ...

    @abstractmethod
    def _cancel_run(self, thread_id: str, run_id: str) -> None: ...

    @abstractmethod
    def _list_run_steps(self, thread_id: str, run_id: str) -> list[dict[str, Any]]: ...

    @abstractmethod
    def _latest_message(self, thread_id: str, run_id: str) -> dict[str, Any]: ...


def _required_tool_calls(run: dict[str, Any]) -> list[ToolCall]:
    required = as_dict(as_dict(run.get("required_action")).get("submit_tool_outputs"))
    return list(
        unique_tool_calls(
            [
                tool_call_from(as_dict(tc), i)
                for i, tc in enumerate(as_list(required.get("tool_calls")))
            ]
        )
    )


class LiveAssistantsAdapter(AssistantsAdapter):
    """
    Calls the ``client.beta.threads`` resources.

    Raises:
        ConfigurationError: If the config has no assistant_id
    """

    def __init__(self, config: BackendConfig, client: OpenAI, **kwargs: Any):
        if not config.assistant_id:
            raise ConfigurationError("assistant_id is required for the assistants API")
        super().__init__(config, **kwargs)
        self.client = client

    def _create_thread(self, state: ConversationState) -> str:
        return self.client.beta.threads.create().id

    def _add_message(self, thread_id: str, content: str) -> None:
        self.client.beta.threads.messages.create(thread_id, role="user", content=content)

    def _create_run(self, thread_id: str, request: dict[str, Any]) -> dict[str, Any]:
        return to_plain(self.client.beta.threads.runs.create(thread_id, **request))

    def _retrieve_run(self, thread_id: str, run_id: str) -> dict[str, Any]:
        return to_plain(self.client.beta.threads.runs.retrieve(run_id, thread_id=thread_id))

    def _submit_tool_outputs(
        self, thread_id: str, run_id: str, tool_outputs: list[dict[str, str]]
    ) -> None:
        self.client.beta.threads.runs.submit_tool_outputs(
            run_id, thread_id=thread_id, tool_outputs=tool_outputs
        )

    def _cancel_run(self, thread_id: str, run_id: str) -> None:
        self.client.beta.threads.runs.cancel(run_id, thread_id=thread_id)

    def _list_run_steps(self, thread_id: str, run_id: str) -> list[dict[str, Any]]:
        page = self.client.beta.threads.runs.steps.list(
            run_id, thread_id=thread_id, order="asc"
        )
        return [to_plain(step) for step in page.data]

    def _latest_message(self, thread_id: str, run_id: str) -> dict[str, Any]:
        page = self.client.beta.threads.messages.list(thread_id, order="desc", limit=1)
        return as_dict(to_plain(page.data[0])) if page.data else {}


class MockAssistantsAdapter(AssistantsAdapter):
    """
    Simulates threads and runs in memory.

    Args:
        run_statuses: Status sequence every run goes through when polled.
            The last status repeats once the sequence is exhausted.
        run_steps: Run steps returned for every completed run
        messages: Scripted assistant replies (raw message payloads), in order

    A ``requires_action`` status carries one pending call to the first
    configured function (or ``mock_function``).
    """

    is_mock = True

    def __init__(
        self,
        config: BackendConfig,
        *,
        run_statuses: Sequence[str] = ("completed",),
        run_steps: Sequence[dict[str, Any]] = (),
        messages: Sequence[Any] | None = None,
        **kwargs: Any,
    ):
        super().__init__(config, **kwargs)
        self.run_statuses = list(run_statuses) or ["completed"]
        self.run_steps = [to_plain(step) for step in run_steps]
        self._messages = deque(messages or ())
        self._statuses: dict[str, deque[str]] = {}
        self.threads: dict[str, list[str]] = {}
        self.runs: list[str] = []
        self.run_requests: list[dict[str, Any]] = []
        self.submitted_outputs: list[list[dict[str, str]]] = []
        self.cancelled: list[str] = []
        self.poll_count = 0

    def _create_thread(self, state: ConversationState) -> str:
        thread_id = mock_id(
            "thread_mock", self.assistant_id, len(self.threads) + 1, state.current_user_message
        )
        self.threads.setdefault(thread_id, [])
        return thread_id

    def _add_message(self, thread_id: str, content: str) -> None:
        self.threads.setdefault(thread_id, []).append(content)

    def _create_run(self, thread_id: str, request: dict[str, Any]) -> dict[str, Any]:
        self.run_requests.append(to_plain(request))
        run_id = mock_id("run_mock", thread_id, len(self.runs) + 1)
        self.runs.append(run_id)
        self._statuses[run_id] = deque(self.run_statuses)
        return {"id": run_id, "thread_id": thread_id, "status": "queued"}

    def _retrieve_run(self, thread_id: str, run_id: str) -> dict[str, Any]:
        self.poll_count += 1
        statuses = self._statuses[run_id]
        status = statuses.popleft() if len(statuses) > 1 else statuses[0]

        run: dict[str, Any] = {
            "id": run_id,
            "thread_id": thread_id,
            "assistant_id": self.assistant_id,
            "status": status,
        }
        if status == "completed":
            run["usage"] = MOCK_USAGE.to_dict()
        elif status == "requires_action":
            name = self.config.functions[0].name if self.config.functions else "mock_function"
            run["required_action"] = {
                "type": "submit_tool_outputs",
                "submit_tool_outputs": {
                    "tool_calls": [
                        {
                            "id": mock_id("call_mock", run_id, self.poll_count),
                            "type": "function",
                            "function": {"name": name, "arguments": "{}"},
                        }
                    ]
                },
            }
        elif status == "failed":
            run["last_error"] = {"code": "server_error", "message": "Mock run failure"}
        return run

    def _submit_tool_outputs(
        self, thread_id: str, run_id: str, tool_outputs: list[dict[str, str]]
    ) -> None:
        self.submitted_outputs.append(tool_outputs)

    def _cancel_run(self, thread_id: str, run_id: str) -> None:
        self.cancelled.append(run_id)

    def _list_run_steps(self, thread_id: str, run_id: str) -> list[dict[str, Any]]:
        return list(self.run_steps)

    def _latest_message(self, thread_id: str, run_id: str) -> dict[str, Any]:
        if self._messages:
            return as_dict(to_plain(self._messages.popleft()))

        count = len(self.runs)
        return {
            "id": mock_id("msg_mock", run_id),
            "object": "thread.message",
            "role": "assistant",
            "thread_id": thread_id,
            "run_id": run_id,
            "assistant_id": self.assistant_id,
            "content": [
                {
                    "type": "text",
                    "text": {
                        "value": f"Mock Assistants API response for testing ({count})",
                        "annotations": [],
                    },
                }
            ],
        }
