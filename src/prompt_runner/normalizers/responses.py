"""
Normalizer for the response-chaining wire shape.

A response is an ``output`` array of typed items:

    message                → text blocks (output_text) + url_citation annotations
    function_call          → pending tool call (arguments as JSON string)
    function_call_output   → tool output (only in resubmitted input)
    file_search_call       → queries + matched files
    web_search_call        → query + sources (only when explicitly requested)
    code_interpreter_call  → executed code + outputs

Web-search results combine two sources: the query and sources come from the
search call's ``action``, while citations come from ``url_citation``
annotations on message text. Both lists are kept on the result.
"""

from __future__ import annotations

from typing import Any

from prompt_runner.core.payload import as_dict, as_float, as_list, first_present
from prompt_runner.core.types import (
    CodeInterpreterResult,
    FileSearchResult,
    NormalizedResponse,
    ToolUsage,
    UrlCitation,
    WebSearchResult,
    WebSearchSource,
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


class ResponsesNormalizer(BaseNormalizer):
    """Reads ``output`` item arrays."""

    def _normalize_payload(self, data: dict[str, Any], raw: Any) -> NormalizedResponse:
        output = [as_dict(item) for item in as_list(data.get("output"))]

        text = _output_text(output)
        if not text:
            fallback = first_present(data, "output_text", "text")
            text = fallback if isinstance(fallback, str) else ""

        return NormalizedResponse(
            text=text,
            tool_calls=_function_calls(output),
            usage=usage_from(data.get("usage"), "input_tokens", "output_tokens"),
            model=data.get("model"),
            response_id=data.get("id"),
            metadata=compact(
                {
                    "id": data.get("id"),
                    "model": data.get("model"),
                    "status": data.get("status"),
                    "usage": data.get("usage"),
                }
            ),
            web_search_results=tuple(extract_web_search_results(output)),
            code_interpreter_results=tuple(extract_code_interpreter_results(output)),
            file_search_results=tuple(extract_file_search_results(output)),
            raw=raw,
        )

    def _normalize_conversation_payload(
        self, data: dict[str, Any]
    ) -> NormalizedConversation:
        output = [as_dict(item) for item in as_list(data.get("output"))]
        stored = [as_dict(m) for m in as_list(data.get("messages"))]

        if stored:
            entries = [
                (
                    m,
                    _message_text(m.get("content")),
                    unique_tool_calls(
                        [
                            tool_call_from(as_dict(tc), i)
                            for i, tc in enumerate(as_list(m.get("tool_calls")))
                        ]
                    ),
                )
                for m in stored
            ]
        else:
            entries = [
                ({"role": item.get("role") or "assistant"}, _message_text(item.get("content")), ())
                for item in output
                if item.get("type") == "message"
            ]

        return NormalizedConversation(
            messages=build_messages(entries),
            tool_usage=_tool_usage(output),
            file_search_results=extract_file_search_results(output),
            web_search_results=extract_web_search_results(output),
            code_interpreter_results=extract_code_interpreter_results(output),
        )


def _message_text(content: Any) -> str:
    if isinstance(content, list):
        return text_from_content(content, text_type="output_text") or text_from_content(
            content
        )
    return text_from_content(content)


def _output_text(output: list[dict[str, Any]]) -> str:
    parts = []
    for item in output:
        if item.get("type") != "message":
            continue
        text = text_from_content(item.get("content"), text_type="output_text")
        if text:
            parts.append(text)
    return "\n".join(parts)


def _function_calls(output: list[dict[str, Any]]):
    return unique_tool_calls(
        [
            tool_call_from(item, index)
            for index, item in enumerate(output)
            if item.get("type") == "function_call"
        ]
    )


def _tool_usage(output: list[dict[str, Any]]) -> list[ToolUsage]:
    results = {
        item.get("call_id"): item.get("output")
        for item in output
        if item.get("type") == "function_call_output"
    }
    return [
        ToolUsage(
            function_name=call.function_name,
            call_id=call.id,
            arguments=call.arguments,
            result=results.get(call.id),
        )
        for call in _function_calls(output)
    ]


def extract_url_citations(output: list[dict[str, Any]]) -> list[UrlCitation]:
    """Collect url_citation annotations from every message item."""
    citations = []
    for item in output:
        if item.get("type") != "message":
            continue
        for block in as_list(item.get("content")):
            for annotation in as_list(as_dict(block).get("annotations")):
                annotation = as_dict(annotation)
                if annotation.get("type") != "url_citation":
                    continue
                citations.append(
                    UrlCitation(
                        title=annotation.get("title"),
                        url=annotation.get("url"),
                        start_index=annotation.get("start_index"),
                        end_index=annotation.get("end_index"),
                    )
                )
    return citations


def extract_web_search_results(output: list[dict[str, Any]]) -> list[WebSearchResult]:
    """Build one result per web_search_call item."""
    citations = tuple(extract_url_citations(output))
    results = []
    for item in output:
        if item.get("type") != "web_search_call":
            continue
        action = as_dict(item.get("action"))
        queries = as_list(action.get("queries"))
        query = first_present(action, "query") or (queries[0] if queries else None)
        sources = tuple(
            WebSearchSource(
                title=source.get("title"),
                url=source.get("url"),
                snippet=source.get("snippet"),
            )
            for source in (as_dict(s) for s in as_list(action.get("sources")))
        )
        results.append(
            WebSearchResult(
                id=item.get("id"),
                status=item.get("status"),
                query=query or item.get("query"),
                sources=sources,
                citations=citations,
            )
        )
    return results


def extract_file_search_results(output: list[dict[str, Any]]) -> list[FileSearchResult]:
    """Build one result per file_search_call item."""
    results = []
    for item in output:
        if item.get("type") != "file_search_call":
            continue
        queries = as_list(item.get("queries"))
        matches = [as_dict(r) for r in as_list(item.get("results"))]
        results.append(
            FileSearchResult(
                query=item.get("query") or (queries[0] if queries else None),
                files=tuple(
                    str(first_present(m, "filename", "file_name", "file_id") or "")
                    for m in matches
                ),
                scores=tuple(as_float(m.get("score")) for m in matches),
            )
        )
    return results


def extract_code_interpreter_results(
    output: list[dict[str, Any]],
) -> list[CodeInterpreterResult]:
    """Build one result per code_interpreter_call item."""
    results = []
    for item in output:
        if item.get("type") != "code_interpreter_call":
            continue
        nested = as_dict(item.get("code_interpreter"))
        code = first_present(nested, "code") or item.get("code")
        outputs = first_present(nested, "output", "outputs")
        if outputs is None:
            outputs = item.get("outputs")
        results.append(
            CodeInterpreterResult(
                id=item.get("id"),
                status=item.get("status"),
                code=code,
                language=nested.get("language") or detect_code_language(code),
                output=_code_output(outputs),
                files_created=_files_created(nested, outputs),
                error=nested.get("error") or item.get("error"),
            )
        )
    return results


def _code_output(outputs: Any) -> str:
    if isinstance(outputs, str):
        return outputs
    parts = []
    for entry in (as_dict(o) for o in as_list(outputs)):
        text = first_present(entry, "text", "logs")
        if isinstance(text, str):
            parts.append(text)
        elif entry.get("type") == "image":
            parts.append("[Image output]")
    return "\n".join(parts)


def _files_created(nested: dict[str, Any], outputs: Any) -> tuple[str, ...]:
    explicit = as_list(nested.get("files_created"))
    if explicit:
        return tuple(
            str(first_present(as_dict(f), "file_id", "url") if isinstance(f, dict) else f)
            for f in explicit
        )
    return tuple(
        str(first_present(entry, "file_id", "url"))
        for entry in (as_dict(o) for o in as_list(outputs))
        if entry.get("type") == "image" and first_present(entry, "file_id", "url")
    )
