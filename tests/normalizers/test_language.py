"""Tests for detect_code_language()."""

import pytest

from prompt_runner.normalizers import detect_code_language


@pytest.mark.parametrize(
    "code,expected",
    [
        ("import pandas as pd", "python"),
        ("def f():\n    return 1", "python"),
        ("print('hi')", "python"),
        ("const x = 1;", "javascript"),
        ("let y = 2", "javascript"),
        ("function f() { return 1 }", "javascript"),
        ("require 'json'", "ruby"),
        ("3.times do\n  puts 1\nend", "ruby"),
        ("SELECT 1", "unknown"),
        ("", "unknown"),
        (None, "unknown"),
    ],
)
def test_detect_code_language(code, expected):
    """Substring cues map to a coarse language label."""
    assert detect_code_language(code) == expected
