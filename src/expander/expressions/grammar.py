"""Shared Lark parser for value expressions.

The grammar lives in ``grammar.lark`` next to this module. One parser
instance serves both the tokenizer (lexing only) and the chain parser.
"""

from __future__ import annotations

from pathlib import Path

from lark import Lark

__all__ = [
    "CHAIN_PARSER",
    "unquote_string",
]

_GRAMMAR_PATH = Path(__file__).parent / "grammar.lark"

# Basic lexer so tokens can be produced without parsing
CHAIN_PARSER = Lark(
    _GRAMMAR_PATH.read_text(encoding="utf-8"),
    parser="lalr",
    lexer="basic",
    start="start",
)

_ESCAPES: dict[str, str] = {"n": "\n", "t": "\t"}


def unquote_string(raw: str) -> str:
    """Strip the quotes from a string literal and resolve its escapes.

    ``\\n`` and ``\\t`` become newline and tab; any other escaped character
    stands for itself. An unterminated literal keeps everything after the
    opening quote.

    Examples:
        >>> unquote_string("'it\\\\'s'")
        "it's"
        >>> unquote_string('"abc')
        'abc'
    """
    quote = raw[0]
    chars: list[str] = []
    i = 1
    while i < len(raw) and raw[i] != quote:
        if raw[i] == "\\" and i + 1 < len(raw):
            i += 1
            chars.append(_ESCAPES.get(raw[i], raw[i]))
        else:
            chars.append(raw[i])
        i += 1
    return "".join(chars)
