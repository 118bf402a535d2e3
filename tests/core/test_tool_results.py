"""Tests for ToolResultExtractor."""

from prompt_runner.core.tool_results import ToolResultExtractor
from prompt_runner.core.types import (
    CodeInterpreterResult,
    FileSearchResult,
    NormalizedResponse,
    WebSearchResult,
)


class TestToolResultExtractor:
    """Tests for concatenating typed results across responses."""

    def test_concatenates_in_source_order(self):
        """Results from later responses follow earlier ones."""
        responses = [
            NormalizedResponse(web_search_results=(WebSearchResult(query="first"),)),
            NormalizedResponse(),
            NormalizedResponse(
                web_search_results=(WebSearchResult(query="second"), WebSearchResult(query="third")),
                file_search_results=(FileSearchResult(query="docs"),),
            ),
        ]
        extractor = ToolResultExtractor(responses)

        assert [r.query for r in extractor.web_search_results] == ["first", "second", "third"]
        assert [r.query for r in extractor.file_search_results] == ["docs"]
        assert extractor.code_interpreter_results == []

    def test_all_results_keyed_by_kind(self):
        """all_results() exposes the three lists under their names."""
        code = CodeInterpreterResult(code="print(1)")
        extractor = ToolResultExtractor([NormalizedResponse(code_interpreter_results=(code,))])

        assert extractor.all_results() == {
            "web_search_results": [],
            "code_interpreter_results": [code],
            "file_search_results": [],
        }

    def test_accepts_mappings(self):
        """Dict responses with result lists are supported."""
        extractor = ToolResultExtractor([{"web_search_results": ["a"]}, {"web_search_results": None}])
        assert extractor.web_search_results == ["a"]

    def test_empty_input(self):
        """No responses yields empty lists."""
        assert ToolResultExtractor([]).all_results() == {
            "web_search_results": [],
            "code_interpreter_results": [],
            "file_search_results": [],
        }
