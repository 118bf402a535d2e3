"""
Continuation payloads that hand tool outputs back to each backend.

Every protocol wants the model's call echoed next to its output, but in a
different shape:

    responses   → function_call item immediately followed by its function_call_output
    chat        → one assistant message with tool_calls, then one role="tool" message per call
    anthropic   → assistant message with tool_use blocks, then a user message of tool_result blocks
    assistants  → tool_outputs list for submit_tool_outputs
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from prompt_runner.core.types import NormalizedResponse, ToolCall


@dataclass(frozen=True)
class ToolOutput:
    """An executed tool call and the output string to resubmit."""

    tool_call: ToolCall
    output: str


def build_function_call_input(outputs: list[ToolOutput]) -> list[dict[str, Any]]:
    """Interleave function_call / function_call_output items, in call order."""
    items: list[dict[str, Any]] = []
    for result in outputs:
        call = result.tool_call
        items.append(
            {
                "type": "function_call",
                "call_id": call.id,
                "name": call.function_name,
                "arguments": json.dumps(call.arguments),
            }
        )
        items.append(
            {
                "type": "function_call_output",
                "call_id": call.id,
                "output": result.output,
            }
        )
    return items


def build_chat_tool_messages(
    response: NormalizedResponse, outputs: list[ToolOutput]
) -> list[dict[str, Any]]:
    """Assistant tool_calls message followed by one tool message per call."""
    messages: list[dict[str, Any]] = [
        {
            "role": "assistant",
            "content": response.text or None,
            "tool_calls": [
                {
                    "id": result.tool_call.id,
                    "type": "function",
                    "function": {
                        "name": result.tool_call.function_name,
                        "arguments": json.dumps(result.tool_call.arguments),
                    },
                }
                for result in outputs
            ],
        }
    ]
    for result in outputs:
        messages.append(
            {
                "role": "tool",
                "tool_call_id": result.tool_call.id,
                "content": result.output,
            }
        )
    return messages


def build_anthropic_tool_messages(
    response: NormalizedResponse, outputs: list[ToolOutput]
) -> list[dict[str, Any]]:
    """Assistant tool_use message followed by a user message of tool_result blocks."""
    content: list[dict[str, Any]] = []
    if response.text:
        content.append({"type": "text", "text": response.text})
    for result in outputs:
        content.append(
            {
                "type": "tool_use",
                "id": result.tool_call.id,
                "name": result.tool_call.function_name,
                "input": result.tool_call.arguments,
            }
        )
    return [
        {"role": "assistant", "content": content},
        {
            "role": "user",
            "content": [
                {
                    "type": "tool_result",
                    "tool_use_id": result.tool_call.id,
                    "content": result.output,
                }
                for result in outputs
            ],
        },
    ]


def build_assistants_tool_outputs(outputs: list[ToolOutput]) -> list[dict[str, str]]:
    return [
        {"tool_call_id": result.tool_call.id, "output": result.output}
        for result in outputs
    ]
