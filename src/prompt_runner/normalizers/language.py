"""Coarse programming-language detection for executed code snippets."""

from __future__ import annotations

import re

_PYTHON_CUES = ("import ", "def ", "print(")
_JAVASCRIPT_CUES = ("const ", "let ", "function ")
_RUBY_BLOCK_END = re.compile(r"^\s*end\s*$", re.MULTILINE)


def detect_code_language(code: str | None) -> str:
    """
    Guess the language of a code snippet from substring cues.

    Returns one of ``"python"``, ``"javascript"``, ``"ruby"`` or ``"unknown"``.
    Misclassification is expected for short or mixed snippets.

    Example:
        >>> detect_code_language("import math\\nprint(math.pi)")
        'python'
        >>> detect_code_language("const x = 1;")
        'javascript'
    """
    if not code:
        return "unknown"
    if any(cue in code for cue in _PYTHON_CUES):
        return "python"
    if any(cue in code for cue in _JAVASCRIPT_CUES):
        return "javascript"
    if "require " in code or _RUBY_BLOCK_END.search(code):
        return "ruby"
    return "unknown"
