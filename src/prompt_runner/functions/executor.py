"""Function executors: real callables and deterministic fixtures."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from typing import Any

from prompt_runner.core.types import ToolCall

logger = logging.getLogger(__name__)


class MockFunctionExecutor:
    """
    Returns canned outputs instead of running anything.

    Per-function fixtures override the default payload: dict fixtures are
    JSON encoded, strings are returned as-is.

    Example:
        executor = MockFunctionExecutor({"get_weather": {"temp": 21}})
        executor.execute(ToolCall(id="call_1", function_name="get_weather"))
        # '{"temp": 21}'
    """

    def __init__(self, mock_outputs: Mapping[str, Any] | None = None):
        self.mock_outputs = dict(mock_outputs or {})
        self.calls: list[ToolCall] = []

    def execute(self, tool_call: ToolCall) -> str:
        self.calls.append(tool_call)
        name = tool_call.function_name

        if name in self.mock_outputs:
            fixture = self.mock_outputs[name]
            if isinstance(fixture, str):
                return fixture
            return json.dumps(fixture, default=str)

        return json.dumps(
            {
                "success": True,
                "message": f"Mock result for {name}",
                "data": tool_call.arguments,
            },
            default=str,
        )


class CallableFunctionExecutor:
    """
    Dispatches tool calls to registered Python callables.

    Errors are returned as strings so the model can see them and retry.
    """

    def __init__(self, functions: Mapping[str, Callable[..., Any]]):
        self._functions = dict(functions)

    @property
    def function_names(self) -> list[str]:
        return list(self._functions)

    def execute(self, tool_call: ToolCall) -> str:
        name = tool_call.function_name
        func = self._functions.get(name)
        if func is None:
            logger.warning(f"No function registered for tool call: {name}")
            return f"Error: Unknown function '{name}'"

        logger.debug(f"Executing function: {name} with arguments: {tool_call.arguments}")
        try:
            result = func(**tool_call.arguments)
        except Exception as e:
            logger.error(f"Function {name} failed: {e}")
            return f"Error: {e}"

        return result if isinstance(result, str) else json.dumps(result, default=str)
