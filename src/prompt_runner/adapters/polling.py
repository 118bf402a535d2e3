"""Run status polling for the thread/run protocol. Sync, unit-testable."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from prompt_runner.core.exceptions import RunTimeoutError

logger = logging.getLogger(__name__)

# queued → in_progress → {completed | failed | cancelled | expired}
TERMINAL_STATUSES = frozenset({"completed", "failed", "cancelled", "expired", "incomplete"})
# Pending tool calls must be resolved before the run re-enters in_progress
ACTION_STATUSES = frozenset({"requires_action"})


@dataclass
class PollResult:
    run: dict[str, Any]
    attempts: int

    @property
    def status(self) -> str | None:
        return self.run.get("status")


class RunPoller:
    """
    Polls a run until it stops or needs action.

    Sleeps ``interval`` seconds between polls and gives up after
    ``max_attempts`` polls with RunTimeoutError.

    Example:
        poller = RunPoller(interval=1.0, max_attempts=30)
        result = poller.wait(lambda: retrieve_run(thread_id, run_id), run_id=run_id)
        result.status  # "completed"
    """

    def __init__(
        self,
        interval: float = 1.0,
        max_attempts: int = 30,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.interval = interval
        self.max_attempts = max_attempts
        self._sleep = sleep

    def wait(self, retrieve: Callable[[], dict[str, Any]], run_id: str) -> PollResult:
        """
        Poll ``retrieve`` until the run is terminal or requires action.

        Raises:
            RunTimeoutError: If ``max_attempts`` polls pass without either
        """
        for attempt in range(1, self.max_attempts + 1):
            run = retrieve()
            status = run.get("status")
            logger.debug(f"Run {run_id} poll {attempt}/{self.max_attempts}: {status}")

            if status in TERMINAL_STATUSES or status in ACTION_STATUSES:
                return PollResult(run=run, attempts=attempt)

            if attempt < self.max_attempts:
                self._sleep(self.interval)

        raise RunTimeoutError(run_id, self.max_attempts)
