"""
Tool definitions in each backend's request format.

Backends are configured with built-in tool names (``web_search``,
``file_search``, ``code_interpreter``) plus ``functions``, which expands to
the configured FunctionDefinitions. Pre-built dicts pass through unchanged.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from prompt_runner.config.types import FunctionDefinition

logger = logging.getLogger(__name__)

# The file_search tool accepts at most two vector stores
MAX_VECTOR_STORES = 2

ToolSpec = str | dict[str, Any]


def format_responses_tools(
    tools: Sequence[ToolSpec],
    functions: Sequence[FunctionDefinition] = (),
    vector_store_ids: Sequence[str] = (),
) -> list[dict[str, Any]]:
    """Flat tool list for the response-chaining protocol."""
    formatted: list[dict[str, Any]] = []
    for tool in tools:
        if isinstance(tool, dict):
            formatted.append(tool)
        elif tool == "web_search":
            formatted.append({"type": "web_search_preview"})
        elif tool == "file_search":
            if len(vector_store_ids) > MAX_VECTOR_STORES:
                logger.warning(
                    f"file_search supports {MAX_VECTOR_STORES} vector stores; "
                    f"ignoring {len(vector_store_ids) - MAX_VECTOR_STORES}"
                )
            formatted.append(
                {
                    "type": "file_search",
                    "vector_store_ids": list(vector_store_ids[:MAX_VECTOR_STORES]),
                }
            )
        elif tool == "code_interpreter":
            formatted.append({"type": "code_interpreter", "container": {"type": "auto"}})
        elif tool == "functions":
            formatted.extend(
                {
                    "type": "function",
                    "name": f.name,
                    "description": f.description,
                    "parameters": f.parameters,
                    "strict": f.strict,
                }
                for f in functions
            )
        else:
            formatted.append({"type": tool})
    return formatted


def format_chat_tools(
    tools: Sequence[ToolSpec],
    functions: Sequence[FunctionDefinition] = (),
) -> list[dict[str, Any]]:
    """Nested function tools for chat completions. Built-ins are not available."""
    formatted: list[dict[str, Any]] = []
    for tool in tools:
        if isinstance(tool, dict):
            formatted.append(tool)
        elif tool == "functions":
            formatted.extend(
                {
                    "type": "function",
                    "function": {
                        "name": f.name,
                        "description": f.description,
                        "parameters": f.parameters,
                    },
                }
                for f in functions
            )
        else:
            logger.warning(f"Tool '{tool}' is not supported by chat completions; skipping")
    return formatted


def format_anthropic_tools(
    tools: Sequence[ToolSpec],
    functions: Sequence[FunctionDefinition] = (),
) -> list[dict[str, Any]]:
    """Tool params for the Anthropic Messages API."""
    formatted: list[dict[str, Any]] = []
    for tool in tools:
        if isinstance(tool, dict):
            formatted.append(tool)
        elif tool == "web_search":
            formatted.append({"type": "web_search_20250305", "name": "web_search"})
        elif tool == "functions":
            formatted.extend(
                {
                    "name": f.name,
                    "description": f.description,
                    "input_schema": f.parameters or {"type": "object", "properties": {}},
                }
                for f in functions
            )
        else:
            logger.warning(f"Tool '{tool}' is not supported by Anthropic messages; skipping")
    return formatted


def format_assistants_tools(
    tools: Sequence[ToolSpec],
    functions: Sequence[FunctionDefinition] = (),
) -> list[dict[str, Any]]:
    """Run-level tool overrides for the thread/run protocol."""
    formatted: list[dict[str, Any]] = []
    for tool in tools:
        if isinstance(tool, dict):
            formatted.append(tool)
        elif tool in ("file_search", "code_interpreter"):
            formatted.append({"type": tool})
        elif tool == "functions":
            formatted.extend(
                {
                    "type": "function",
                    "function": {
                        "name": f.name,
                        "description": f.description,
                        "parameters": f.parameters,
                        "strict": f.strict,
                    },
                }
                for f in functions
            )
        else:
            logger.warning(f"Tool '{tool}' is not supported by assistants; skipping")
    return formatted


def has_web_search(tools: Sequence[ToolSpec]) -> bool:
    for tool in tools:
        kind = tool.get("type") if isinstance(tool, dict) else tool
        if kind in ("web_search", "web_search_preview"):
            return True
    return False
