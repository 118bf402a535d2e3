"""Tests for the per-backend tool formatters."""

import pytest

from prompt_runner.functions import (
    format_anthropic_tools,
    format_assistants_tools,
    format_chat_tools,
    format_responses_tools,
    has_web_search,
)


class TestFormatResponsesTools:
    """Tests for format_responses_tools()."""

    def test_builtins_and_functions(self, weather_function):
        tools = format_responses_tools(
            ["web_search", "code_interpreter", "functions"], [weather_function]
        )

        assert tools[0] == {"type": "web_search_preview"}
        assert tools[1]["type"] == "code_interpreter"
        assert tools[2]["type"] == "function"
        assert tools[2]["name"] == "get_weather"
        assert tools[2]["parameters"]["required"] == ["city"]

    def test_file_search_caps_vector_stores(self):
        """At most two vector stores are attached."""
        tools = format_responses_tools(["file_search"], vector_store_ids=["vs_1", "vs_2", "vs_3"])
        assert tools == [{"type": "file_search", "vector_store_ids": ["vs_1", "vs_2"]}]

    def test_dict_passthrough(self):
        tool = {"type": "mcp", "server_label": "docs"}
        assert format_responses_tools([tool]) == [tool]


def test_chat_tools_skip_builtins(weather_function):
    """Chat completions only supports function tools."""
    tools = format_chat_tools(["web_search", "functions"], [weather_function])

    assert len(tools) == 1
    assert tools[0]["function"]["name"] == "get_weather"


def test_anthropic_tools(weather_function):
    tools = format_anthropic_tools(["web_search", "functions", "file_search"], [weather_function])

    assert tools[0] == {"type": "web_search_20250305", "name": "web_search"}
    assert tools[1]["name"] == "get_weather"
    assert tools[1]["input_schema"]["properties"] == {"city": {"type": "string"}}
    assert len(tools) == 2


def test_assistants_tools(weather_function):
    tools = format_assistants_tools(
        ["file_search", "code_interpreter", "web_search", "functions"], [weather_function]
    )

    assert [t["type"] for t in tools] == ["file_search", "code_interpreter", "function"]
    assert tools[2]["function"]["strict"] is False


@pytest.mark.parametrize(
    "tools,expected",
    [
        (["web_search"], True),
        ([{"type": "web_search_preview"}], True),
        (["file_search", "functions"], False),
        ([], False),
    ],
)
def test_has_web_search(tools, expected):
    assert has_web_search(tools) is expected
