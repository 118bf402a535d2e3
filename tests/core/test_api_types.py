"""
Tests for API-type resolution.

Tests cover:
- resolve_api_type() for every supported pair and for unknown pairs
- display names, variants and built-in tool capabilities
"""

import pytest

from prompt_runner.core.api_types import (
    ApiType,
    BackendVariant,
    coerce_api_type,
    display_name,
    resolve_api_type,
    supports_tool,
    variant_for,
)
from prompt_runner.core.exceptions import UnsupportedBackendError


class TestResolveApiType:
    """Tests for resolve_api_type()."""

    @pytest.mark.parametrize(
        "provider,api,expected",
        [
            ("openai", "chat_completions", ApiType.OPENAI_CHAT_COMPLETIONS),
            ("openai", "responses", ApiType.OPENAI_RESPONSES),
            ("openai", "assistants", ApiType.OPENAI_ASSISTANTS),
            ("anthropic", "messages", ApiType.ANTHROPIC_MESSAGES),
        ],
    )
    def test_supported_pairs(self, provider, api, expected):
        """Every supported provider/api pair resolves to its tag."""
        assert resolve_api_type(provider, api) is expected

    def test_case_and_whitespace_insensitive(self):
        """Keys should be normalized before lookup."""
        assert resolve_api_type(" OpenAI ", "Responses") is ApiType.OPENAI_RESPONSES

    def test_unknown_pair_raises(self):
        """Unknown pairs should fail immediately with the supported list."""
        with pytest.raises(UnsupportedBackendError) as exc_info:
            resolve_api_type("anthropic", "assistants")

        assert "anthropic/assistants" in str(exc_info.value)
        assert "openai/responses" in str(exc_info.value)

    def test_missing_values_raise(self):
        """Missing provider or api should raise."""
        with pytest.raises(UnsupportedBackendError):
            resolve_api_type(None, "responses")

    def test_error_is_a_value_error(self):
        """Callers catching ValueError should still see unsupported backends."""
        with pytest.raises(ValueError):
            resolve_api_type("cohere", "chat")


class TestApiTypeHelpers:
    """Tests for display names, variants and tool support."""

    def test_display_names(self):
        """Display names should be human readable."""
        assert display_name(ApiType.OPENAI_RESPONSES) == "OpenAI Responses"
        assert display_name("anthropic_messages") == "Anthropic Messages"

    def test_variants(self):
        """Each tag belongs to one wire-protocol family."""
        assert variant_for(ApiType.OPENAI_CHAT_COMPLETIONS) is BackendVariant.CHAT
        assert variant_for(ApiType.OPENAI_RESPONSES) is BackendVariant.RESPONSE_CHAIN
        assert variant_for(ApiType.OPENAI_ASSISTANTS) is BackendVariant.THREAD_RUN
        assert variant_for(ApiType.ANTHROPIC_MESSAGES) is BackendVariant.CHAT

    def test_builtin_tools(self):
        """Built-in tools should match each backend's capabilities."""
        assert supports_tool(ApiType.OPENAI_RESPONSES, "web_search")
        assert supports_tool(ApiType.OPENAI_ASSISTANTS, "file_search")
        assert supports_tool(ApiType.ANTHROPIC_MESSAGES, "web_search")
        assert not supports_tool(ApiType.OPENAI_CHAT_COMPLETIONS, "web_search")
        assert not supports_tool(ApiType.ANTHROPIC_MESSAGES, "file_search")

    def test_coerce_unknown_tag_raises(self):
        """Unknown string tags should raise UnsupportedBackendError."""
        with pytest.raises(UnsupportedBackendError):
            coerce_api_type("openai_completions")
