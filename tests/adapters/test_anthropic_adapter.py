"""Tests for the Anthropic Messages adapters."""

from prompt_runner.adapters import LiveAnthropicMessagesAdapter, MockAnthropicMessagesAdapter
from prompt_runner.adapters.anthropic import _batch_consecutive_messages
from prompt_runner.config.types import BackendConfig
from prompt_runner.core.conversation import NormalizedMessage


class TestBuildRequest:
    """Tests for build_request()."""

    def test_system_prompt_passed_separately(self, anthropic_config):
        request = MockAnthropicMessagesAdapter(anthropic_config).build_request(
            [{"role": "user", "content": "Hi"}]
        )

        assert request["system"] == "Be concise."
        assert request["max_tokens"] == 4096
        assert request["messages"] == [{"role": "user", "content": "Hi"}]
        assert "tools" not in request

    def test_configured_max_tokens_and_tools(self, weather_function):
        config = BackendConfig(
            provider="anthropic",
            api="messages",
            max_tokens=512,
            tools=["functions"],
            functions=[weather_function],
        )
        request = MockAnthropicMessagesAdapter(config).build_request([])

        assert request["max_tokens"] == 512
        assert request["tools"][0]["name"] == "get_weather"
        assert "system" not in request


class TestBatchConsecutiveMessages:
    """Tests for _batch_consecutive_messages()."""

    def test_merges_same_role(self):
        """Back-to-back user messages become one message of text blocks."""
        batched = _batch_consecutive_messages(
            [
                {"role": "user", "content": "one"},
                {"role": "user", "content": "two"},
                {"role": "assistant", "content": "three"},
            ]
        )

        assert batched == [
            {
                "role": "user",
                "content": [{"type": "text", "text": "one"}, {"type": "text", "text": "two"}],
            },
            {"role": "assistant", "content": "three"},
        ]

    def test_alternating_untouched(self):
        messages = [{"role": "user", "content": "a"}, {"role": "assistant", "content": "b"}]
        assert _batch_consecutive_messages(messages) == messages


class TestSendTurn:
    """Tests for send_turn()."""

    def test_mock_reply(self, anthropic_config, first_turn_state):
        adapter = MockAnthropicMessagesAdapter(anthropic_config)

        turn = adapter.send_turn(first_turn_state)

        assert turn.response.text == "Mock Anthropic Messages API response"
        assert turn.response.usage.total_tokens == 30
        assert turn.continuation is None

    def test_empty_assistant_reply_skipped(self, anthropic_config, first_turn_state):
        """An empty reply in history does not break role alternation."""
        adapter = MockAnthropicMessagesAdapter(anthropic_config)
        first_turn_state.append(NormalizedMessage(role="assistant", content="", turn=1))
        first_turn_state.append(NormalizedMessage.user("Still there?", turn=2))

        adapter.send_turn(first_turn_state)

        messages = adapter.requests[0]["messages"]
        assert len(messages) == 1
        assert messages[0]["role"] == "user"

    def test_tool_use_resolution(self, anthropic_config, first_turn_state):
        """tool_use is answered with a user message of tool_result blocks."""
        tool_use = {
            "id": "msg_tool",
            "content": [
                {"type": "tool_use", "id": "toolu_1", "name": "get_weather", "input": {"city": "Lima"}}
            ],
            "stop_reason": "tool_use",
            "usage": {"input_tokens": 1, "output_tokens": 1},
        }
        adapter = MockAnthropicMessagesAdapter(anthropic_config, script=[tool_use])

        turn = adapter.send_turn(first_turn_state)

        followup = adapter.requests[1]["messages"]
        assert [m["role"] for m in followup] == ["user", "assistant", "user"]
        assert followup[2]["content"][0]["tool_use_id"] == "toolu_1"
        assert turn.response.text == "Mock response after function call"


def test_live_transport(anthropic_config, first_turn_state, fake_anthropic):
    adapter = LiveAnthropicMessagesAdapter(anthropic_config, client=fake_anthropic)

    turn = adapter.send_turn(first_turn_state)

    assert turn.response.text == "Fake Anthropic reply 1"
    assert fake_anthropic.messages.create.last_kwargs["system"] == "Be concise."
