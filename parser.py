"""Module: turn program text into a list of words.

This module contains:
- tokenize(s) -> list of tokens
- parse(s) -> list of words
"""

from __future__ import annotations

# ruff: noqa: A005
import re

from isa import WORD_MAX, WORD_MIN

_INT_RE = re.compile(r"^-?[0-9]+$")


class ParseError(ValueError):
    """Raised when program text contains a token that is not a word."""

    token: str
    text: str

    def __init__(self, token: str, text: str) -> None:
        self.token = token
        self.text = text
        super().__init__(f"invalid word {token!r} in program {text!r}")


def tokenize(s: str) -> list[str]:
    """Trim the text, split on commas and trim every token."""
    return [tok.strip() for tok in s.strip().split(",")]


def parse(s: str) -> list[int]:
    """Parse comma-separated program text into words.

    Raises ParseError naming the first bad token and the full text.
    """
    words: list[int] = []
    for tok in tokenize(s):
        if not _INT_RE.match(tok):
            raise ParseError(tok, s)
        try:
            w = int(tok)
        except ValueError as e:
            raise ParseError(tok, s) from e
        if not WORD_MIN <= w <= WORD_MAX:
            raise ParseError(tok, s)
        words.append(w)
    return words
