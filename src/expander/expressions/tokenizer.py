"""Tokenizer for value expressions.

Turns an expression such as ``date(file.name).format("YYYY")`` into a flat
list of tokens terminated by an ``EOF`` token. Lexing is done by the same
Lark grammar the chain parser uses. The tokenizer never raises: characters
it does not recognise become ``UNKNOWN`` tokens.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from expander.expressions.grammar import CHAIN_PARSER, unquote_string

__all__ = [
    "TokenKind",
    "Token",
    "tokenize",
]


class TokenKind(str, Enum):
    """Kind of a lexical token."""

    IDENTIFIER = "identifier"
    DOT = "dot"
    LPAREN = "lparen"
    RPAREN = "rparen"
    STRING = "string"
    NUMBER = "number"
    COMMA = "comma"
    EOF = "eof"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class Token:
    """A single token.

    Attributes:
        kind: Token kind.
        text: Token text. For string literals this is the unquoted,
            unescaped content.
    """

    kind: TokenKind
    text: str


# Grammar terminal name -> token kind
_TERMINAL_KINDS: dict[str, TokenKind] = {
    "FILE": TokenKind.IDENTIFIER,
    "CALLEE": TokenKind.IDENTIFIER,
    "NAME": TokenKind.IDENTIFIER,
    "DOT": TokenKind.DOT,
    "LPAR": TokenKind.LPAREN,
    "RPAR": TokenKind.RPAREN,
    "COMMA": TokenKind.COMMA,
    "STRING": TokenKind.STRING,
    "NUMBER": TokenKind.NUMBER,
    "UNKNOWN": TokenKind.UNKNOWN,
}


def tokenize(expression: str) -> list[Token]:
    """Tokenize an expression string.

    Args:
        expression: Raw expression text.

    Returns:
        List of tokens, always ending with an ``EOF`` token.

    Examples:
        >>> [t.text for t in tokenize("upper('hi')")]
        ['upper', '(', 'hi', ')', '']
        >>> tokenize("-")[0].kind
        <TokenKind.UNKNOWN: 'unknown'>
    """
    tokens: list[Token] = []
    for lexed in CHAIN_PARSER.lex(expression):
        kind = _TERMINAL_KINDS[lexed.type]
        text = unquote_string(lexed) if kind == TokenKind.STRING else str(lexed)
        tokens.append(Token(kind, text))
    tokens.append(Token(TokenKind.EOF, ""))
    return tokens
