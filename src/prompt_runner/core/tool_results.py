"""Collects side-channel tool results across a sequence of responses."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from .types import CodeInterpreterResult, FileSearchResult, WebSearchResult


class ToolResultExtractor:
    """
    Concatenates typed tool results in source order.

    Works on anything exposing ``web_search_results``,
    ``code_interpreter_results`` and ``file_search_results``
    (NormalizedResponse or NormalizedMessage), or mappings with those keys.

    Example:
        extractor = ToolResultExtractor(handler_result.all_responses)
        extractor.all_results()["web_search_results"]
    """

    def __init__(self, responses: Iterable[Any]):
        self._responses = list(responses)

    @property
    def web_search_results(self) -> list[WebSearchResult]:
        return self._collect("web_search_results")

    @property
    def code_interpreter_results(self) -> list[CodeInterpreterResult]:
        return self._collect("code_interpreter_results")

    @property
    def file_search_results(self) -> list[FileSearchResult]:
        return self._collect("file_search_results")

    def all_results(self) -> dict[str, list[Any]]:
        return {
            "web_search_results": self.web_search_results,
            "code_interpreter_results": self.code_interpreter_results,
            "file_search_results": self.file_search_results,
        }

    def _collect(self, attribute: str) -> list[Any]:
        results: list[Any] = []
        for response in self._responses:
            if isinstance(response, Mapping):
                results.extend(response.get(attribute) or ())
            else:
                results.extend(getattr(response, attribute, None) or ())
        return results
