"""
Canonical data model shared by every backend.

Usage:
    from prompt_runner.core import NormalizedResponse, TokenAggregator

    totals = TokenAggregator().aggregate_from_messages(result.messages)
"""

from .api_types import (
    BUILTIN_TOOLS,
    ApiType,
    BackendVariant,
    coerce_api_type,
    display_name,
    resolve_api_type,
    supports_tool,
    variant_for,
)
from .conversation import (
    ContinuationToken,
    ConversationResult,
    ConversationState,
    NormalizedMessage,
    ResponseChainToken,
    ThreadRunToken,
)
from .exceptions import (
    ConfigurationError,
    PromptRunnerError,
    RunFailedError,
    RunTimeoutError,
    UnsupportedBackendError,
)
from .payload import parse_arguments, to_plain
from .protocols import FunctionExecutor, ResponseNormalizer
from .tokens import TokenAggregator
from .tool_results import ToolResultExtractor
from .types import (
    CodeInterpreterResult,
    FileSearchResult,
    NormalizedResponse,
    ToolCall,
    ToolResult,
    ToolUsage,
    UrlCitation,
    UsageTotals,
    WebSearchResult,
    WebSearchSource,
)

__all__ = [
    # API types
    "BUILTIN_TOOLS",
    "ApiType",
    "BackendVariant",
    "coerce_api_type",
    "display_name",
    "resolve_api_type",
    "supports_tool",
    "variant_for",
    # Conversation
    "ContinuationToken",
    "ConversationResult",
    "ConversationState",
    "NormalizedMessage",
    "ResponseChainToken",
    "ThreadRunToken",
    # Errors
    "ConfigurationError",
    "PromptRunnerError",
    "RunFailedError",
    "RunTimeoutError",
    "UnsupportedBackendError",
    # Payload
    "parse_arguments",
    "to_plain",
    # Protocols
    "FunctionExecutor",
    "ResponseNormalizer",
    # Reductions
    "TokenAggregator",
    "ToolResultExtractor",
    # Types
    "CodeInterpreterResult",
    "FileSearchResult",
    "NormalizedResponse",
    "ToolCall",
    "ToolResult",
    "ToolUsage",
    "UrlCitation",
    "UsageTotals",
    "WebSearchResult",
    "WebSearchSource",
]
