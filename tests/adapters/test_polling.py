"""Tests for RunPoller."""

import pytest

from prompt_runner.adapters import RunPoller
from prompt_runner.core.exceptions import RunTimeoutError


def statuses(*values):
    runs = iter({"id": "run_1", "status": v} for v in values)
    return lambda: next(runs)


class TestRunPoller:
    """Tests for wait()."""

    def test_stops_at_terminal_status(self, no_sleep):
        poller = RunPoller(interval=2.0, max_attempts=10, sleep=no_sleep)

        result = poller.wait(statuses("queued", "in_progress", "completed"), run_id="run_1")

        assert result.status == "completed"
        assert result.attempts == 3
        assert no_sleep.call_count == 2
        no_sleep.assert_called_with(2.0)

    def test_stops_at_requires_action(self, no_sleep):
        poller = RunPoller(max_attempts=10, sleep=no_sleep)
        result = poller.wait(statuses("queued", "requires_action"), run_id="run_1")
        assert result.status == "requires_action"

    def test_timeout(self, no_sleep):
        """Exceeding max_attempts raises without a trailing sleep."""
        poller = RunPoller(interval=1.0, max_attempts=3, sleep=no_sleep)

        with pytest.raises(RunTimeoutError) as exc_info:
            poller.wait(statuses("queued", "queued", "queued", "completed"), run_id="run_1")

        assert exc_info.value.attempts == 3
        assert exc_info.value.run_id == "run_1"
        assert no_sleep.call_count == 2
