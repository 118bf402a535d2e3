"""
Normalizer for the thread/run wire shape.

Message text is nested two levels deep: ``content[].text.value``. Tool
execution detail (file search hits, code interpreter I/O, function outputs)
is not on the message at all; it lives in the run steps, which the adapter
attaches to the payload under ``run_steps``.
"""

from __future__ import annotations

from typing import Any

from prompt_runner.core.payload import as_dict, as_float, as_list, first_present
from prompt_runner.core.types import (
    CodeInterpreterResult,
    FileSearchResult,
    NormalizedResponse,
    ToolCall,
    ToolUsage,
)

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
from .language import detect_code_language


class AssistantsNormalizer(BaseNormalizer):
    """
    Reads thread messages plus optional run steps.

    Payload shape:
        {
            "id": "msg_...", "role": "assistant", "thread_id": ..., "run_id": ...,
            "content": [{"type": "text", "text": {"value": "...", "annotations": []}}],
            "usage": {...},          # from the run, optional
            "run_steps": [...],      # optional
        }
    """

    def _normalize_payload(self, data: dict[str, Any], raw: Any) -> NormalizedResponse:
        content = data.get("content")
        if content is None:
            text = text_from_content(data.get("text"))
        else:
            text = text_from_content(content)

        run_steps = [as_dict(s) for s in as_list(data.get("run_steps"))]
        calls: list[ToolCall | None] = [
            tool_call_from(as_dict(tc), i)
            for i, tc in enumerate(as_list(data.get("tool_calls")))
        ]
        calls.extend(_step_function_calls(run_steps))

        return NormalizedResponse(
            text=text,
            tool_calls=unique_tool_calls(calls),
            usage=usage_from(data.get("usage")),
            model=first_present(data, "model", "assistant_id"),
            response_id=data.get("id"),
            metadata=compact(
                {
                    "id": data.get("id"),
                    "role": data.get("role"),
                    "assistant_id": data.get("assistant_id"),
                    "thread_id": data.get("thread_id"),
                    "run_id": data.get("run_id"),
                    "annotations": _annotations(content) or None,
                }
            ),
            code_interpreter_results=tuple(extract_code_interpreter_results(run_steps)),
            file_search_results=tuple(extract_file_search_results(run_steps)),
            raw=raw,
        )

    def _normalize_conversation_payload(
        self, data: dict[str, Any]
    ) -> NormalizedConversation:
        messages = [as_dict(m) for m in as_list(data.get("messages"))]
        run_steps = [as_dict(s) for s in as_list(data.get("run_steps"))]

        entries = []
        tool_usage: list[ToolUsage] = []
        seen: set[str] = set()
        for message in messages:
            calls = unique_tool_calls(
                [
                    tool_call_from(as_dict(tc), i)
                    for i, tc in enumerate(as_list(message.get("tool_calls")))
                ]
            )
            entries.append((message, text_from_content(message.get("content")), calls))
            for call in calls:
                seen.add(call.id)
                tool_usage.append(_usage_for(call, run_steps))

        for call in _step_function_calls(run_steps):
            if call.id not in seen:
                tool_usage.append(_usage_for(call, run_steps))

        return NormalizedConversation(
            messages=build_messages(entries),
            tool_usage=tool_usage,
            file_search_results=extract_file_search_results(run_steps),
            code_interpreter_results=extract_code_interpreter_results(run_steps),
            run_steps=run_steps,
        )


def _annotations(content: Any) -> list[dict[str, Any]]:
    annotations = []
    for block in (as_dict(b) for b in as_list(content)):
        text = as_dict(block.get("text"))
        annotations.extend(as_dict(a) for a in as_list(text.get("annotations")))
    return annotations


def _step_tool_calls(run_steps: list[dict[str, Any]]):
    for step in run_steps:
        details = as_dict(step.get("step_details"))
        for tool_call in as_list(details.get("tool_calls")):
            yield as_dict(tool_call)


def _step_function_calls(run_steps: list[dict[str, Any]]) -> list[ToolCall]:
    calls = []
    for index, tool_call in enumerate(_step_tool_calls(run_steps)):
        if tool_call.get("type") != "function":
            continue
        call = tool_call_from(tool_call, index)
        if call is not None:
            calls.append(call)
    return calls


def _usage_for(call: ToolCall, run_steps: list[dict[str, Any]]) -> ToolUsage:
    return ToolUsage(
        function_name=call.function_name,
        call_id=call.id,
        arguments=call.arguments,
        result=find_tool_output(run_steps, call.id),
    )


def find_tool_output(run_steps: list[dict[str, Any]], call_id: str) -> str | None:
    """Return the recorded output for ``call_id``, if any step has it."""
    for tool_call in _step_tool_calls(run_steps):
        if tool_call.get("id") != call_id:
            continue
        output = first_present(as_dict(tool_call.get("function")), "output")
        if output is None:
            output = tool_call.get("output")
        return output
    return None


def extract_file_search_results(run_steps: list[dict[str, Any]]) -> list[FileSearchResult]:
    """File search hits from run-step tool calls. The query is not exposed."""
    results = []
    for tool_call in _step_tool_calls(run_steps):
        if tool_call.get("type") != "file_search":
            continue
        matches = [
            as_dict(r) for r in as_list(as_dict(tool_call.get("file_search")).get("results"))
        ]
        results.append(
            FileSearchResult(
                query=None,
                files=tuple(
                    str(first_present(m, "file_name", "filename", "file_id") or "")
                    for m in matches
                ),
                scores=tuple(as_float(m.get("score")) for m in matches),
            )
        )
    return results


def extract_code_interpreter_results(
    run_steps: list[dict[str, Any]],
) -> list[CodeInterpreterResult]:
    """Code interpreter input and outputs from run-step tool calls."""
    results = []
    for tool_call in _step_tool_calls(run_steps):
        if tool_call.get("type") != "code_interpreter":
            continue
        interpreter = as_dict(tool_call.get("code_interpreter"))
        code = interpreter.get("input") or ""
        outputs = [as_dict(o) for o in as_list(interpreter.get("outputs"))]
        results.append(
            CodeInterpreterResult(
                id=tool_call.get("id"),
                # Per-call status is not exposed; steps are only read after completion
                status="completed",
                code=code,
                language=detect_code_language(code),
                output=_code_outputs(outputs),
                files_created=tuple(
                    str(as_dict(o.get("image")).get("file_id"))
                    for o in outputs
                    if o.get("type") == "image" and as_dict(o.get("image")).get("file_id")
                ),
            )
        )
    return results


def _code_outputs(outputs: list[dict[str, Any]]) -> str:
    parts = []
    for output in outputs:
        kind = output.get("type")
        if kind == "logs":
            parts.append(str(output.get("logs") or ""))
        elif kind == "image":
            parts.append("[Image output]")
        elif isinstance(output.get("text"), str):
            parts.append(output["text"])
    return "\n".join(parts)
