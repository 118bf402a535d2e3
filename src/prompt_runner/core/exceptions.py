"""Exception hierarchy for conversation execution."""

from __future__ import annotations


class PromptRunnerError(Exception):
    """Base class for all prompt_runner errors."""


class UnsupportedBackendError(PromptRunnerError, ValueError):
    """Raised when a provider/api combination has no backend."""


class ConfigurationError(PromptRunnerError, ValueError):
    """Raised when a backend is missing settings it needs to go live."""


class RunTimeoutError(PromptRunnerError, TimeoutError):
    """Raised when a thread run does not reach a terminal status in time."""

    def __init__(self, run_id: str, attempts: int):
        super().__init__(f"Run {run_id} timed out after {attempts} attempts")
        self.run_id = run_id
        self.attempts = attempts


class RunFailedError(PromptRunnerError):
    """Raised when a thread run ends as failed, cancelled or expired."""

    def __init__(self, run_id: str, status: str, last_error: str | None = None):
        message = f"Run {run_id} ended with status '{status}'"
        if last_error:
            message = f"{message}: {last_error}"
        super().__init__(message)
        self.run_id = run_id
        self.status = status
        self.last_error = last_error
