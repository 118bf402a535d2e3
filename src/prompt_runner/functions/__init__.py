"""
Tool/function calling support.

Usage:
    from prompt_runner.functions import FunctionCallHandler, MockFunctionExecutor

    handler = FunctionCallHandler(MockFunctionExecutor(), max_iterations=10)
    result = handler.resolve(response, submit=submit_outputs)
"""

from .continuations import (
    ToolOutput,
    build_anthropic_tool_messages,
    build_assistants_tool_outputs,
    build_chat_tool_messages,
    build_function_call_input,
)
from .executor import CallableFunctionExecutor, MockFunctionExecutor
from .formatters import (
    format_anthropic_tools,
    format_assistants_tools,
    format_chat_tools,
    format_responses_tools,
    has_web_search,
)
from .handler import FunctionCallHandler, FunctionCallResult, SubmitOutputs

__all__ = [
    "CallableFunctionExecutor",
    "FunctionCallHandler",
    "FunctionCallResult",
    "MockFunctionExecutor",
    "SubmitOutputs",
    "ToolOutput",
    "build_anthropic_tool_messages",
    "build_assistants_tool_outputs",
    "build_chat_tool_messages",
    "build_function_call_input",
    "format_anthropic_tools",
    "format_assistants_tools",
    "format_chat_tools",
    "format_responses_tools",
    "has_web_search",
]
