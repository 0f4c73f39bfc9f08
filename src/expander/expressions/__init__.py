"""Expression evaluation for Expander values.

Configured replacement values are either static text or expressions built
from a small chainable language:

- Dates: ``now()``, ``today()``, ``date(text)`` with ``.format(pattern)``,
  ``.date()``, ``.time()``, ``.relative()``, ``.isEmpty()``
- Strings: ``upper lower trim replace title slice repeat startsWith endsWith
  contains containsAll containsAny isEmpty reverse split``
- Numbers: ``number(text)``, ``min(...)``, ``max(...)`` with ``abs ceil floor
  round toFixed isEmpty``
- Conditionals and utilities: ``if(cond, a, b)``, ``escapeHTML(text)``
- File metadata: ``file.name``, ``file.path``, ``file.folder``, ``file.ext``,
  ``file.ctime``, ``file.mtime``

Examples
--------
    date(file.name).format("YYYY")
    file.name.replace(" ", "-").lower()
    if(file.ext, "has extension", "none")

Module Structure
----------------
- grammar.lark, grammar.py: Lark grammar shared by tokenizer and parser
- tokenizer.py: Expression text to tokens
- parser.py: Expression text to an element chain
- values.py: Typed values and their method tables
- dates.py: Date parsing, formatting, and relative phrasing
- context.py: File metadata snapshot (EvaluationContext)
- interpreter.py: Chain execution
- evaluator.py: ``evaluate`` (never raises) and helpers

Evaluation is pure and holds no shared state, so documents can be processed
concurrently.
"""

from __future__ import annotations

from expander.expressions.context import FILE_FIELDS, EvaluationContext
from expander.expressions.evaluator import (
    PreviewResult,
    evaluate,
    is_dynamic_expression,
    preview_value,
)
from expander.expressions.interpreter import ExpressionInterpreter
from expander.expressions.parser import (
    ExpressionElement,
    FileFieldAccess,
    FunctionCall,
    PropertyAccess,
    parse_chain,
)
from expander.expressions.tokenizer import Token, TokenKind, tokenize
from expander.expressions.values import (
    BoolValue,
    DateValue,
    ListValue,
    NumValue,
    StrValue,
    TypedValue,
)

__all__: list[str] = [
    # Context
    "EvaluationContext",
    "FILE_FIELDS",
    # Tokenizer
    "Token",
    "TokenKind",
    "tokenize",
    # Parser
    "ExpressionElement",
    "FunctionCall",
    "PropertyAccess",
    "FileFieldAccess",
    "parse_chain",
    # Values
    "TypedValue",
    "DateValue",
    "StrValue",
    "NumValue",
    "BoolValue",
    "ListValue",
    # Evaluation
    "ExpressionInterpreter",
    "PreviewResult",
    "evaluate",
    "is_dynamic_expression",
    "preview_value",
]
