"""
Backend adapter base class.

One adapter owns one wire protocol. Each protocol has two transports that
share all request/response logic and differ only in how a request reaches
the backend:

    Live*  → the provider SDK client passed in by the caller
    Mock*  → deterministic, schema-compatible fake payloads

The transport is chosen once, when the adapter is constructed (see
``create_backend``); nothing downstream branches on mock vs live.
"""

from __future__ import annotations

import hashlib
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import ClassVar

from prompt_runner.config.types import BackendConfig
from prompt_runner.core.api_types import ApiType, BackendVariant, variant_for
from prompt_runner.core.conversation import ContinuationToken, ConversationState
from prompt_runner.core.protocols import FunctionExecutor
from prompt_runner.core.types import NormalizedResponse, UsageTotals
from prompt_runner.functions.executor import MockFunctionExecutor
from prompt_runner.functions.handler import FunctionCallHandler
from prompt_runner.normalizers import BaseNormalizer, normalizer_for

logger = logging.getLogger(__name__)

MOCK_USAGE = UsageTotals(prompt_tokens=10, completion_tokens=20, total_tokens=30)
MOCK_FUNCTION_FOLLOWUP_TEXT = "Mock response after function call"


@dataclass
class AdapterTurn:
    """Result of one backend turn."""

    response: NormalizedResponse
    continuation: ContinuationToken | None = None
    all_responses: list[NormalizedResponse] = field(default_factory=list)
    tool_call_limit_reached: bool = False


class BackendAdapter(ABC):
    """
    Base class for backend adapters.

    Subclasses set ``api_type`` and implement ``send_turn()``. The function
    call handler defaults to a MockFunctionExecutor seeded with the config's
    ``mock_function_outputs``; pass ``executor`` to run real functions.
    """

    api_type: ClassVar[ApiType]
    is_mock: ClassVar[bool] = False

    def __init__(
        self,
        config: BackendConfig,
        *,
        executor: FunctionExecutor | None = None,
        normalizer: BaseNormalizer | None = None,
    ):
        self.config = config
        self.normalizer = normalizer or normalizer_for(self.api_type)
        self.function_handler = FunctionCallHandler(
            executor or MockFunctionExecutor(config.mock_function_outputs),
            max_iterations=config.max_tool_iterations,
        )

    @property
    def variant(self) -> BackendVariant:
        return variant_for(self.api_type)

    @abstractmethod
    def send_turn(self, state: ConversationState) -> AdapterTurn:
        """
        Get the assistant reply to the latest user message.

        Args:
            state: Run state; its last message is the current user message

        Returns:
            AdapterTurn with the normalized reply and the continuation token
            to carry into the next turn
        """
        ...


def mock_id(prefix: str, *parts: object) -> str:
    """Deterministic ``<prefix>_<hex16>`` identifier derived from ``parts``."""
    digest = hashlib.sha256("|".join(str(p) for p in parts).encode()).hexdigest()
    return f"{prefix}_{digest[:16]}"
