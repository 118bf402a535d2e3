"""
Tests for the thread/run adapters.

Tests cover:
- Thread created once and reused through the continuation token
- Polling through queued/in_progress until completed
- requires_action resolved by submitting tool outputs
- Tool iteration bound cancels the run
- Failed runs raise; missing run steps do not
- Live transport through a fake OpenAI client
"""

from unittest.mock import MagicMock

import pytest

from prompt_runner.adapters import LiveAssistantsAdapter, MockAssistantsAdapter
from prompt_runner.config.types import BackendConfig
from prompt_runner.core.conversation import NormalizedMessage, ThreadRunToken
from prompt_runner.core.exceptions import ConfigurationError, RunFailedError, RunTimeoutError


class TestMockAssistantsAdapter:
    """Tests for the mock transport."""

    def test_completed_run(self, assistants_config, first_turn_state, no_sleep):
        adapter = MockAssistantsAdapter(assistants_config, sleep=no_sleep)

        turn = adapter.send_turn(first_turn_state)

        assert turn.response.text == "Mock Assistants API response for testing (1)"
        assert turn.response.usage.total_tokens == 30
        assert isinstance(turn.continuation, ThreadRunToken)
        assert turn.continuation.run_id == adapter.runs[0]
        assert adapter.threads[turn.continuation.thread_id] == ["Hello"]
        assert adapter.run_requests == [{"assistant_id": "asst_123"}]

    def test_polls_until_completed(self, assistants_config, first_turn_state, no_sleep):
        """Four polls with the configured interval between them."""
        adapter = MockAssistantsAdapter(
            assistants_config,
            run_statuses=["queued", "in_progress", "in_progress", "completed"],
            sleep=no_sleep,
        )

        turn = adapter.send_turn(first_turn_state)

        assert adapter.poll_count == 4
        assert no_sleep.call_count == 3
        no_sleep.assert_called_with(0.5)
        assert turn.response.text.startswith("Mock Assistants API response")

    def test_thread_reused(self, assistants_config, first_turn_state, no_sleep):
        """The second turn posts to the thread from the continuation token."""
        adapter = MockAssistantsAdapter(assistants_config, sleep=no_sleep)
        first = adapter.send_turn(first_turn_state)

        first_turn_state.continuation = first.continuation
        first_turn_state.append(NormalizedMessage.from_response(first.response, 1))
        first_turn_state.append(NormalizedMessage.user("More please", turn=2))
        first_turn_state.turn = 2
        second = adapter.send_turn(first_turn_state)

        assert second.continuation.thread_id == first.continuation.thread_id
        assert second.continuation.run_id != first.continuation.run_id
        assert len(adapter.threads) == 1
        assert adapter.threads[first.continuation.thread_id] == ["Hello", "More please"]

    def test_requires_action(self, weather_function, first_turn_state, no_sleep):
        """Pending calls are executed and their outputs submitted."""
        config = BackendConfig(
            provider="openai",
            api="assistants",
            assistant_id="asst_123",
            functions=[weather_function],
            tools=["functions"],
            mock_function_outputs={"get_weather": {"temp": 19}},
        )
        adapter = MockAssistantsAdapter(
            config, run_statuses=["requires_action", "completed"], sleep=no_sleep
        )

        turn = adapter.send_turn(first_turn_state)

        assert len(adapter.submitted_outputs) == 1
        assert adapter.submitted_outputs[0][0]["output"] == '{"temp": 19}'
        assert [tc.function_name for tc in turn.response.tool_calls] == ["get_weather"]
        assert turn.tool_call_limit_reached is False
        assert adapter.run_requests[0]["tools"][0]["function"]["name"] == "get_weather"

    def test_iteration_limit_cancels_run(self, first_turn_state, no_sleep):
        """A run that keeps asking for tools is cancelled at the bound."""
        config = BackendConfig(
            provider="openai", api="assistants", assistant_id="asst_123", max_tool_iterations=2
        )
        adapter = MockAssistantsAdapter(config, run_statuses=["requires_action"], sleep=no_sleep)

        turn = adapter.send_turn(first_turn_state)

        assert len(adapter.submitted_outputs) == 2
        assert adapter.cancelled == adapter.runs
        assert turn.tool_call_limit_reached is True
        assert turn.response.text == ""
        assert len(turn.response.tool_calls) == 3
        assert turn.response.metadata["tool_call_limit_reached"] is True

    @pytest.mark.parametrize("status", ["failed", "cancelled", "expired", "incomplete"])
    def test_unsuccessful_run_raises(self, assistants_config, first_turn_state, no_sleep, status):
        adapter = MockAssistantsAdapter(
            assistants_config, run_statuses=["in_progress", status], sleep=no_sleep
        )

        with pytest.raises(RunFailedError) as exc_info:
            adapter.send_turn(first_turn_state)

        assert exc_info.value.status == status

    def test_failed_run_carries_last_error(self, assistants_config, first_turn_state, no_sleep):
        adapter = MockAssistantsAdapter(assistants_config, run_statuses=["failed"], sleep=no_sleep)

        with pytest.raises(RunFailedError, match="Mock run failure"):
            adapter.send_turn(first_turn_state)

    def test_poll_timeout(self, assistants_config, first_turn_state, no_sleep):
        """A run that never finishes exhausts max_poll_attempts."""
        adapter = MockAssistantsAdapter(
            assistants_config, run_statuses=["in_progress"], sleep=no_sleep
        )

        with pytest.raises(RunTimeoutError):
            adapter.send_turn(first_turn_state)

        assert adapter.poll_count == 5

    def test_run_steps_failure_is_soft(self, assistants_config, first_turn_state, no_sleep):
        """A failure fetching run steps yields a reply without tool detail."""
        adapter = MockAssistantsAdapter(assistants_config, sleep=no_sleep)
        adapter._list_run_steps = MagicMock(side_effect=RuntimeError("steps unavailable"))

        turn = adapter.send_turn(first_turn_state)

        assert turn.response.text.startswith("Mock Assistants API response")
        assert turn.response.code_interpreter_results == ()

    def test_run_steps_feed_tool_results(self, assistants_config, first_turn_state, no_sleep):
        step = {
            "step_details": {
                "tool_calls": [
                    {
                        "id": "ci_1",
                        "type": "code_interpreter",
                        "code_interpreter": {"input": "print(1)", "outputs": []},
                    }
                ]
            }
        }
        adapter = MockAssistantsAdapter(assistants_config, run_steps=[step], sleep=no_sleep)

        turn = adapter.send_turn(first_turn_state)

        assert turn.response.code_interpreter_results[0].code == "print(1)"


class TestLiveAssistantsAdapter:
    """Tests for the live transport."""

    def test_requires_assistant_id(self, fake_openai):
        config = BackendConfig(provider="openai", api="assistants")
        with pytest.raises(ConfigurationError):
            LiveAssistantsAdapter(config, client=fake_openai)

    def test_full_turn(self, assistants_config, first_turn_state, fake_openai, no_sleep):
        adapter = LiveAssistantsAdapter(assistants_config, client=fake_openai, sleep=no_sleep)

        turn = adapter.send_turn(first_turn_state)

        assert turn.response.text == "Fake assistant reply 1"
        assert turn.continuation == ThreadRunToken(thread_id="thread_fake", run_id="run_fake_1")
        assert turn.response.usage.total_tokens == 12
        assert fake_openai.beta.threads.messages.create.last_kwargs == {
            "role": "user",
            "content": "Hello",
        }
        assert fake_openai.beta.threads.runs.create.last_kwargs == {"assistant_id": "asst_123"}

    def test_requires_action_submits(self, assistants_config, first_turn_state, fake_openai, no_sleep):
        fake_openai.beta.threads.runs.retrieve.queue(
            {
                "id": "run_fake_1",
                "status": "requires_action",
                "required_action": {
                    "submit_tool_outputs": {
                        "tool_calls": [
                            {
                                "id": "call_1",
                                "type": "function",
                                "function": {"name": "lookup", "arguments": "{}"},
                            }
                        ]
                    }
                },
            }
        )
        adapter = LiveAssistantsAdapter(assistants_config, client=fake_openai, sleep=no_sleep)

        adapter.send_turn(first_turn_state)

        submitted = fake_openai.beta.threads.runs.submit_tool_outputs.last_kwargs
        assert submitted["thread_id"] == "thread_fake"
        assert submitted["tool_outputs"][0]["tool_call_id"] == "call_1"
