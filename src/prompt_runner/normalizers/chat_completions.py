"""Normalizer for the stateless chat-completions wire shape."""

from __future__ import annotations

from typing import Any

from prompt_runner.core.payload import as_dict, as_list, first_present
from prompt_runner.core.types import NormalizedResponse, ToolUsage

from .base import (
    BaseNormalizer,
    NormalizedConversation,
    build_messages,
    compact,
    text_from_content,
    tool_call_from,
    unique_tool_calls,
    usage_from,
)


class ChatCompletionsNormalizer(BaseNormalizer):
    """
    Reads ``choices[0].message`` payloads.

    Tool-call arguments arrive as JSON strings and are decoded leniently;
    invalid JSON yields an empty argument map.

    Example:
        normalizer = ChatCompletionsNormalizer()
        response = normalizer.normalize_single_response(completion)
        response.text, response.tool_calls
    """

    def _normalize_payload(self, data: dict[str, Any], raw: Any) -> NormalizedResponse:
        choice = as_dict(next(iter(as_list(data.get("choices"))), None))
        message = as_dict(choice.get("message"))

        if message:
            text = text_from_content(message.get("content"))
        else:
            text = text_from_content(first_present(data, "text", "content"))

        tool_calls = unique_tool_calls(
            [
                tool_call_from(as_dict(tc), index)
                for index, tc in enumerate(as_list(message.get("tool_calls")))
            ]
        )

        return NormalizedResponse(
            text=text,
            tool_calls=tool_calls,
            usage=usage_from(data.get("usage")),
            model=data.get("model"),
            response_id=data.get("id"),
            metadata=compact(
                {
                    "model": data.get("model"),
                    "finish_reason": choice.get("finish_reason"),
                    "usage": data.get("usage"),
                }
            ),
            raw=raw,
        )

    def _normalize_conversation_payload(
        self, data: dict[str, Any]
    ) -> NormalizedConversation:
        messages = [as_dict(m) for m in as_list(data.get("messages"))]

        # Tool outputs arrive as separate role="tool" messages
        outputs = {
            m.get("tool_call_id"): text_from_content(m.get("content"))
            for m in messages
            if m.get("role") == "tool" and m.get("tool_call_id")
        }

        entries = []
        tool_usage: list[ToolUsage] = []
        for message in messages:
            calls = unique_tool_calls(
                [
                    tool_call_from(as_dict(tc), index)
                    for index, tc in enumerate(as_list(message.get("tool_calls")))
                ]
            )
            entries.append((message, text_from_content(message.get("content")), calls))
            for call in calls:
                tool_usage.append(
                    ToolUsage(
                        function_name=call.function_name,
                        call_id=call.id,
                        arguments=call.arguments,
                        result=outputs.get(call.id),
                    )
                )

        return NormalizedConversation(
            messages=build_messages(entries),
            tool_usage=tool_usage,
        )
