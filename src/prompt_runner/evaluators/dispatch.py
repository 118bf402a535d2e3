"""
Evaluator eligibility.

Each evaluator declares one capability tag. Which tags may score a run is
decided by a table keyed on (run mode, backend variant), not by what kind
of object produced the transcript:

    single-turn mode                  → single-turn
    conversational on thread/run      → conversational, assistants-only
    conversational on chat / chain    → conversational

``assistants-only`` evaluators need run-step data that only the thread/run
backend produces.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from prompt_runner.core.api_types import ApiType, BackendVariant, variant_for

logger = logging.getLogger(__name__)


class EvaluatorTag(str, Enum):
    SINGLE_TURN = "single-turn"
    CONVERSATIONAL = "conversational"
    ASSISTANTS_ONLY = "assistants-only"


class RunMode(str, Enum):
    SINGLE_TURN = "single_turn"
    CONVERSATIONAL = "conversational"


_SINGLE = frozenset({EvaluatorTag.SINGLE_TURN})
_CONVERSATIONAL = frozenset({EvaluatorTag.CONVERSATIONAL})
_CONVERSATIONAL_WITH_RUN_STEPS = frozenset(
    {EvaluatorTag.CONVERSATIONAL, EvaluatorTag.ASSISTANTS_ONLY}
)

COMPATIBILITY: dict[tuple[RunMode, BackendVariant], frozenset[EvaluatorTag]] = {
    (RunMode.SINGLE_TURN, BackendVariant.CHAT): _SINGLE,
    (RunMode.SINGLE_TURN, BackendVariant.RESPONSE_CHAIN): _SINGLE,
    (RunMode.SINGLE_TURN, BackendVariant.THREAD_RUN): _SINGLE,
    (RunMode.CONVERSATIONAL, BackendVariant.CHAT): _CONVERSATIONAL,
    (RunMode.CONVERSATIONAL, BackendVariant.RESPONSE_CHAIN): _CONVERSATIONAL,
    (RunMode.CONVERSATIONAL, BackendVariant.THREAD_RUN): _CONVERSATIONAL_WITH_RUN_STEPS,
}


def eligible_tags(mode: RunMode | str, api_type: ApiType | str) -> frozenset[EvaluatorTag]:
    """
    Tags allowed to score a run.

    Raises:
        ValueError: If the mode is unknown
        UnsupportedBackendError: If the api type is unknown
    """
    return COMPATIBILITY[(RunMode(mode), variant_for(api_type))]


@dataclass(frozen=True)
class EvaluatorSpec:
    """A registered evaluator."""

    key: str
    tag: EvaluatorTag
    name: str
    description: str = ""
    factory: Callable[..., Any] | None = None


class EvaluatorRegistry:
    """
    Evaluators known to one caller, filterable by run compatibility.

    Example:
        registry = EvaluatorRegistry()
        registry.register("conversation_judge", "conversational")
        registry.register("file_search", "assistants-only")

        registry.for_mode("conversational", "openai_responses")
        # {"conversation_judge": EvaluatorSpec(...)}
    """

    def __init__(self) -> None:
        self._evaluators: dict[str, EvaluatorSpec] = {}

    def register(
        self,
        key: str,
        tag: EvaluatorTag | str,
        *,
        name: str | None = None,
        description: str = "",
        factory: Callable[..., Any] | None = None,
    ) -> EvaluatorSpec:
        """Register (or replace) an evaluator under ``key``."""
        if key in self._evaluators:
            logger.debug(f"Replacing evaluator registration '{key}'")
        spec = EvaluatorSpec(
            key=key,
            tag=EvaluatorTag(tag),
            name=name or key.replace("_", " ").title(),
            description=description,
            factory=factory,
        )
        self._evaluators[key] = spec
        return spec

    def unregister(self, key: str) -> None:
        self._evaluators.pop(key, None)

    def get(self, key: str) -> EvaluatorSpec | None:
        return self._evaluators.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._evaluators

    def __len__(self) -> int:
        return len(self._evaluators)

    def all(self) -> dict[str, EvaluatorSpec]:
        return dict(self._evaluators)

    def by_tag(self, tag: EvaluatorTag | str) -> dict[str, EvaluatorSpec]:
        tag = EvaluatorTag(tag)
        return {k: s for k, s in self._evaluators.items() if s.tag == tag}

    def for_mode(
        self, mode: RunMode | str, api_type: ApiType | str
    ) -> dict[str, EvaluatorSpec]:
        """Evaluators eligible for a run, in registration order."""
        allowed = eligible_tags(mode, api_type)
        return {k: s for k, s in self._evaluators.items() if s.tag in allowed}

    def is_eligible(
        self, key: str, mode: RunMode | str, api_type: ApiType | str
    ) -> bool:
        spec = self._evaluators.get(key)
        return spec is not None and spec.tag in eligible_tags(mode, api_type)
