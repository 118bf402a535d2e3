"""
API-type tags for the supported backends.

A (provider, api) pair resolves to exactly one ApiType. Every ApiType
belongs to one BackendVariant, which is what the evaluator compatibility
table and the adapter factory key on.

Example:
    >>> resolve_api_type("openai", "responses")
    <ApiType.OPENAI_RESPONSES: 'openai_responses'>
    >>> variant_for(ApiType.ANTHROPIC_MESSAGES)
    <BackendVariant.CHAT: 'chat'>
"""

from __future__ import annotations

from enum import Enum

from .exceptions import UnsupportedBackendError


class ApiType(str, Enum):
    OPENAI_CHAT_COMPLETIONS = "openai_chat_completions"
    OPENAI_RESPONSES = "openai_responses"
    OPENAI_ASSISTANTS = "openai_assistants"
    ANTHROPIC_MESSAGES = "anthropic_messages"


class BackendVariant(str, Enum):
    """Wire-protocol family of a backend."""

    CHAT = "chat"
    RESPONSE_CHAIN = "response_chain"
    THREAD_RUN = "thread_run"


_API_TYPES: dict[tuple[str, str], ApiType] = {
    ("openai", "chat_completions"): ApiType.OPENAI_CHAT_COMPLETIONS,
    ("openai", "responses"): ApiType.OPENAI_RESPONSES,
    ("openai", "assistants"): ApiType.OPENAI_ASSISTANTS,
    ("anthropic", "messages"): ApiType.ANTHROPIC_MESSAGES,
}

_DISPLAY_NAMES: dict[ApiType, str] = {
    ApiType.OPENAI_CHAT_COMPLETIONS: "OpenAI Chat Completions",
    ApiType.OPENAI_RESPONSES: "OpenAI Responses",
    ApiType.OPENAI_ASSISTANTS: "OpenAI Assistants",
    ApiType.ANTHROPIC_MESSAGES: "Anthropic Messages",
}

_VARIANTS: dict[ApiType, BackendVariant] = {
    ApiType.OPENAI_CHAT_COMPLETIONS: BackendVariant.CHAT,
    ApiType.OPENAI_RESPONSES: BackendVariant.RESPONSE_CHAIN,
    ApiType.OPENAI_ASSISTANTS: BackendVariant.THREAD_RUN,
    ApiType.ANTHROPIC_MESSAGES: BackendVariant.CHAT,
}

# Tools each backend can be asked to enable
BUILTIN_TOOLS: dict[ApiType, frozenset[str]] = {
    ApiType.OPENAI_CHAT_COMPLETIONS: frozenset({"functions"}),
    ApiType.OPENAI_RESPONSES: frozenset(
        {"web_search", "file_search", "code_interpreter", "functions"}
    ),
    ApiType.OPENAI_ASSISTANTS: frozenset(
        {"code_interpreter", "file_search", "functions"}
    ),
    ApiType.ANTHROPIC_MESSAGES: frozenset({"web_search", "functions"}),
}


def resolve_api_type(provider: str | None, api: str | None) -> ApiType:
    """
    Resolve a provider/api pair to its ApiType.

    Raises:
        UnsupportedBackendError: If either value is missing or the pair is unknown
    """
    if not provider or not api:
        raise UnsupportedBackendError(
            f"Both provider and api are required (got provider={provider!r}, api={api!r})"
        )
    key = (str(provider).strip().lower(), str(api).strip().lower())
    try:
        return _API_TYPES[key]
    except KeyError:
        supported = ", ".join(f"{p}/{a}" for p, a in _API_TYPES)
        raise UnsupportedBackendError(
            f"Unsupported backend {provider}/{api}. Supported: {supported}"
        ) from None


def coerce_api_type(value: ApiType | str) -> ApiType:
    """Accept an ApiType or its string tag."""
    if isinstance(value, ApiType):
        return value
    try:
        return ApiType(value)
    except ValueError:
        raise UnsupportedBackendError(f"Unknown API type: {value!r}") from None


def display_name(api_type: ApiType | str) -> str:
    return _DISPLAY_NAMES[coerce_api_type(api_type)]


def variant_for(api_type: ApiType | str) -> BackendVariant:
    return _VARIANTS[coerce_api_type(api_type)]


def supports_tool(api_type: ApiType | str, tool: str) -> bool:
    return tool in BUILTIN_TOOLS[coerce_api_type(api_type)]
