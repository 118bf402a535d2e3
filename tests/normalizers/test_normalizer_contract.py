"""
Properties every backend normalizer shares.

Tests cover:
- text split across N blocks joins with newlines, in order
- missing text normalizes to the empty string
- string and attribute-keyed inputs are accepted
- normalizer_for() factory
"""

from types import SimpleNamespace

import pytest

from prompt_runner.core.api_types import ApiType
from prompt_runner.core.exceptions import UnsupportedBackendError
from prompt_runner.core.protocols import ResponseNormalizer
from prompt_runner.normalizers import (
    AnthropicNormalizer,
    AssistantsNormalizer,
    ChatCompletionsNormalizer,
    ResponsesNormalizer,
    normalizer_for,
)

BLOCKS = ["First paragraph.", "Second paragraph.", "Third paragraph."]


def chat_payload(blocks):
    return {
        "choices": [
            {
                "message": {
                    "role": "assistant",
                    "content": [{"type": "text", "text": b} for b in blocks],
                }
            }
        ]
    }


def responses_payload(blocks):
    return {
        "id": "resp_1",
        "output": [
            {
                "type": "message",
                "role": "assistant",
                "content": [{"type": "output_text", "text": b} for b in blocks],
            }
        ],
    }


def assistants_payload(blocks):
    return {
        "id": "msg_1",
        "role": "assistant",
        "content": [{"type": "text", "text": {"value": b, "annotations": []}} for b in blocks],
    }


def anthropic_payload(blocks):
    return {
        "id": "msg_1",
        "role": "assistant",
        "content": [{"type": "text", "text": b} for b in blocks],
    }


CASES = [
    (ChatCompletionsNormalizer, chat_payload),
    (ResponsesNormalizer, responses_payload),
    (AssistantsNormalizer, assistants_payload),
    (AnthropicNormalizer, anthropic_payload),
]


class TestTextJoining:
    """Text split across blocks should join with newlines in order."""

    @pytest.mark.parametrize("normalizer_cls,build", CASES)
    @pytest.mark.parametrize("count", [1, 2, 3])
    def test_blocks_join_with_newline(self, normalizer_cls, build, count):
        """N text blocks become one newline-joined string."""
        blocks = BLOCKS[:count]
        response = normalizer_cls().normalize_single_response(build(blocks))
        assert response.text == "\n".join(blocks)

    @pytest.mark.parametrize("normalizer_cls,build", CASES)
    def test_no_text_is_empty_string(self, normalizer_cls, build):
        """Absent text normalizes to "" rather than None."""
        response = normalizer_cls().normalize_single_response(build([]))
        assert response.text == ""

    @pytest.mark.parametrize("normalizer_cls", [c for c, _ in CASES])
    def test_garbage_payloads_never_raise(self, normalizer_cls):
        """Malformed payloads degrade instead of raising."""
        normalizer = normalizer_cls()
        for raw in [None, {}, [], 42, {"choices": "x", "output": 3, "content": {"a": 1}}]:
            response = normalizer.normalize_single_response(raw)
            assert isinstance(response.text, str)

    @pytest.mark.parametrize("normalizer_cls,build", CASES)
    def test_attribute_objects_accepted(self, normalizer_cls, build):
        """Payloads given as attribute objects normalize like dicts."""

        def to_namespace(value):
            if isinstance(value, dict):
                return SimpleNamespace(**{k: to_namespace(v) for k, v in value.items()})
            if isinstance(value, list):
                return [to_namespace(v) for v in value]
            return value

        response = normalizer_cls().normalize_single_response(to_namespace(build(BLOCKS[:2])))
        assert response.text == "\n".join(BLOCKS[:2])

    @pytest.mark.parametrize("normalizer_cls", [c for c, _ in CASES])
    def test_plain_string_passes_through(self, normalizer_cls):
        """A bare string is treated as the reply text."""
        assert normalizer_cls().normalize_single_response("hello").text == "hello"

    @pytest.mark.parametrize("normalizer_cls", [c for c, _ in CASES])
    def test_satisfies_protocol(self, normalizer_cls):
        """Every normalizer satisfies the ResponseNormalizer protocol."""
        assert isinstance(normalizer_cls(), ResponseNormalizer)


class TestNormalizerFor:
    """Tests for the normalizer_for() factory."""

    @pytest.mark.parametrize(
        "api_type,expected",
        [
            (ApiType.OPENAI_CHAT_COMPLETIONS, ChatCompletionsNormalizer),
            (ApiType.OPENAI_RESPONSES, ResponsesNormalizer),
            ("openai_assistants", AssistantsNormalizer),
            ("anthropic_messages", AnthropicNormalizer),
        ],
    )
    def test_returns_matching_normalizer(self, api_type, expected):
        """Each tag maps to its normalizer."""
        assert isinstance(normalizer_for(api_type), expected)

    def test_unknown_tag_raises(self):
        """Unknown tags raise UnsupportedBackendError."""
        with pytest.raises(UnsupportedBackendError):
            normalizer_for("gemini_generate")
