"""
Bounded tool-call resolution loop.

The handler is protocol-agnostic. Each adapter passes a ``submit`` callable
that sends the executed outputs back in its own wire shape (see
``continuations``) and returns the next normalized response.

Loop:

    responses = [initial]
    while latest has tool calls and iterations < K:
        execute calls → submit outputs → append next response

If K is exhausted while calls are still pending, the pending calls stay in
``all_tool_calls`` and ``final_response`` still reports them. That outcome
is degraded, not fatal: a warning is logged and ``limit_reached`` is set.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace

from prompt_runner.core.protocols import FunctionExecutor
from prompt_runner.core.tokens import TokenAggregator
from prompt_runner.core.tool_results import ToolResultExtractor
from prompt_runner.core.types import NormalizedResponse, ToolCall, UsageTotals
from prompt_runner.normalizers.base import unique_tool_calls

from .continuations import ToolOutput

logger = logging.getLogger(__name__)

SubmitOutputs = Callable[[NormalizedResponse, list[ToolOutput]], NormalizedResponse]


@dataclass
class FunctionCallResult:
    """Everything the loop saw for one turn."""

    final_response: NormalizedResponse
    all_tool_calls: list[ToolCall] = field(default_factory=list)
    all_responses: list[NormalizedResponse] = field(default_factory=list)
    aggregated_usage: UsageTotals = field(default_factory=UsageTotals)
    limit_reached: bool = False

    @property
    def pending_tool_calls(self) -> tuple[ToolCall, ...]:
        """Calls left unresolved when the iteration bound was hit."""
        return self.final_response.tool_calls if self.limit_reached else ()

    def to_response(self) -> NormalizedResponse:
        """
        Collapse the loop into one response for the transcript.

        Text, ids and metadata come from the final response; tool calls,
        usage and tool results cover every response in the loop.
        """
        extractor = ToolResultExtractor(self.all_responses)
        has_usage = any(r.usage is not None for r in self.all_responses)
        metadata = dict(self.final_response.metadata)
        if self.limit_reached:
            metadata["tool_call_limit_reached"] = True
            metadata["pending_tool_calls"] = [
                tc.to_dict() for tc in self.pending_tool_calls
            ]
        return replace(
            self.final_response,
            tool_calls=unique_tool_calls(list(self.all_tool_calls)),
            usage=self.aggregated_usage if has_usage else None,
            metadata=metadata,
            web_search_results=tuple(extractor.web_search_results),
            code_interpreter_results=tuple(extractor.code_interpreter_results),
            file_search_results=tuple(extractor.file_search_results),
        )


class FunctionCallHandler:
    """
    Resolves tool calls until none remain or ``max_iterations`` is reached.

    Example:
        handler = FunctionCallHandler(MockFunctionExecutor(), max_iterations=10)
        result = handler.resolve(first_response, submit=backend_submit, turn=1)
        result.final_response.text
    """

    DEFAULT_MAX_ITERATIONS = 10

    def __init__(
        self,
        executor: FunctionExecutor,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        token_aggregator: TokenAggregator | None = None,
    ):
        self.executor = executor
        self.max_iterations = max_iterations
        self._token_aggregator = token_aggregator or TokenAggregator()

    def resolve(
        self,
        initial: NormalizedResponse,
        submit: SubmitOutputs,
        *,
        turn: int | None = None,
    ) -> FunctionCallResult:
        """
        Run the loop.

        Args:
            initial: First response of the turn
            submit: Sends tool outputs to the backend and returns the next response
            turn: Turn number, for log messages

        Returns:
            FunctionCallResult with the final response, every tool call seen,
            every response, and summed usage
        """
        all_responses = [initial]
        all_tool_calls: list[ToolCall] = []
        response = initial
        iterations = 0

        while response.tool_calls and iterations < self.max_iterations:
            iterations += 1
            all_tool_calls.extend(response.tool_calls)
            logger.debug(
                f"Turn {turn}: resolving {len(response.tool_calls)} tool call(s) "
                f"(iteration {iterations}/{self.max_iterations})"
            )

            outputs = [
                ToolOutput(tool_call=call, output=self.execute(call))
                for call in response.tool_calls
            ]
            response = submit(response, outputs)
            all_responses.append(response)

        limit_reached = bool(response.tool_calls)
        if limit_reached:
            all_tool_calls.extend(response.tool_calls)
            logger.warning(
                f"Function call iteration limit ({self.max_iterations}) reached for "
                f"turn {turn}. Model may be stuck in a function calling loop."
            )

        return FunctionCallResult(
            final_response=response,
            all_tool_calls=all_tool_calls,
            all_responses=all_responses,
            aggregated_usage=self._token_aggregator.aggregate_from_responses(
                all_responses
            ),
            limit_reached=limit_reached,
        )

    def execute(self, tool_call: ToolCall) -> str:
        """Run one call through the executor; failures become error strings."""
        try:
            return self.executor.execute(tool_call)
        except Exception as e:
            logger.error(f"Tool {tool_call.function_name} failed: {e}")
            return f"Error: {e}"
