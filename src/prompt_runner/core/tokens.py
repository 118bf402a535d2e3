"""Token usage aggregation. Sync, unit-testable."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from .payload import as_dict, as_int, to_plain
from .types import UsageTotals


class TokenAggregator:
    """
    Sums usage counters across a transcript or a list of responses.

    The two entry points differ when there is no data:
    ``aggregate_from_messages`` returns None, while
    ``aggregate_from_responses`` returns zero-filled totals.
    """

    def aggregate_from_messages(self, messages: Iterable[Any]) -> UsageTotals | None:
        """
        Sum usage over assistant messages.

        Args:
            messages: NormalizedMessage objects or message dicts

        Returns:
            Summed totals, or None if no assistant message carries usage
        """
        usages = []
        for message in messages:
            data = as_dict(to_plain(message))
            if data.get("role") != "assistant":
                continue
            usage = data.get("usage")
            if isinstance(usage, dict):
                usages.append(_usage_from_mapping(usage))

        if not usages:
            return None
        return _sum(usages)

    def aggregate_from_responses(self, responses: Iterable[Any]) -> UsageTotals:
        """
        Sum usage over responses.

        Raw backend usage reporting ``input_tokens``/``output_tokens`` is
        read the same as ``prompt_tokens``/``completion_tokens``.

        Args:
            responses: NormalizedResponse objects or response dicts

        Returns:
            Summed totals, zero-filled when nothing carries usage
        """
        usages = [
            _usage_from_mapping(as_dict(as_dict(to_plain(r)).get("usage")))
            for r in responses
        ]
        return _sum(usages)


def _usage_from_mapping(usage: dict[str, Any]) -> UsageTotals:
    return UsageTotals(
        prompt_tokens=as_int(usage.get("prompt_tokens", usage.get("input_tokens"))),
        completion_tokens=as_int(usage.get("completion_tokens", usage.get("output_tokens"))),
        total_tokens=as_int(usage.get("total_tokens")),
    )


def _sum(usages: list[UsageTotals]) -> UsageTotals:
    total = UsageTotals()
    for usage in usages:
        total = total + usage
    return total
