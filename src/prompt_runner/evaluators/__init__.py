"""
Evaluator dispatch: which scorers may run against which transcripts.

Usage:
    from prompt_runner.evaluators import EvaluatorRegistry

    registry = EvaluatorRegistry()
    registry.register("conversation_judge", "conversational")
    eligible = registry.for_mode("conversational", "openai_assistants")
"""

from .dispatch import (
    COMPATIBILITY,
    EvaluatorRegistry,
    EvaluatorSpec,
    EvaluatorTag,
    RunMode,
    eligible_tags,
)

__all__ = [
    "COMPATIBILITY",
    "EvaluatorRegistry",
    "EvaluatorSpec",
    "EvaluatorTag",
    "RunMode",
    "eligible_tags",
]
