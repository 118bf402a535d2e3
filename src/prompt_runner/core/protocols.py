"""Core protocols for pluggable execution pieces."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .types import NormalizedResponse, ToolCall


@runtime_checkable
class FunctionExecutor(Protocol):
    """
    Executes a model-requested function call and returns its output.

    Implementations: CallableFunctionExecutor (real), MockFunctionExecutor
    (deterministic fixtures).
    """

    def execute(self, tool_call: ToolCall) -> str:
        """
        Run the function named by ``tool_call``.

        Args:
            tool_call: The call as normalized from the backend response

        Returns:
            The output string to resubmit to the backend
        """
        ...


@runtime_checkable
class ResponseNormalizer(Protocol):
    """
    Translates one backend's raw payloads into canonical types.

    One implementation per backend shape. Both methods accept dicts with
    string or non-string keys as well as SDK model objects.
    """

    def normalize_single_response(self, raw: Any) -> NormalizedResponse:
        """Normalize the payload of a single backend turn."""
        ...

    def normalize_conversation(self, raw: Any) -> Any:
        """Normalize a stored conversation into a NormalizedConversation."""
        ...
