"""
Response normalizers, one per backend wire shape.

Usage:
    from prompt_runner.normalizers import normalizer_for

    normalizer = normalizer_for("openai_responses")
    response = normalizer.normalize_single_response(raw)
"""

from __future__ import annotations

from prompt_runner.core.api_types import ApiType, coerce_api_type

from .anthropic import AnthropicNormalizer
from .assistants import AssistantsNormalizer
from .base import BaseNormalizer, NormalizedConversation
from .chat_completions import ChatCompletionsNormalizer
from .language import detect_code_language
from .responses import ResponsesNormalizer

_NORMALIZERS: dict[ApiType, type[BaseNormalizer]] = {
    ApiType.OPENAI_CHAT_COMPLETIONS: ChatCompletionsNormalizer,
    ApiType.OPENAI_RESPONSES: ResponsesNormalizer,
    ApiType.OPENAI_ASSISTANTS: AssistantsNormalizer,
    ApiType.ANTHROPIC_MESSAGES: AnthropicNormalizer,
}


def normalizer_for(api_type: ApiType | str) -> BaseNormalizer:
    """
    Return a normalizer for an API-type tag.

    Raises:
        UnsupportedBackendError: If the tag is unknown
    """
    return _NORMALIZERS[coerce_api_type(api_type)]()


__all__ = [
    "AnthropicNormalizer",
    "AssistantsNormalizer",
    "BaseNormalizer",
    "ChatCompletionsNormalizer",
    "NormalizedConversation",
    "ResponsesNormalizer",
    "detect_code_language",
    "normalizer_for",
]
