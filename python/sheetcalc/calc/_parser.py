"""Formula tokenizer and construction-time grammar validation."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from sheetcalc._utils import NAME_PATTERN, NUMBER_PATTERN
from sheetcalc.exceptions import FormulaFormatError

# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------


class TokenKind(Enum):
    NUMBER = "number"
    VARIABLE = "variable"
    OPERATOR = "operator"
    LPAREN = "lparen"
    RPAREN = "rparen"
    ERROR = "error"


@dataclass(frozen=True)
class Token:
    """A single lexical unit of a formula."""

    kind: TokenKind
    text: str

    @property
    def is_operand(self) -> bool:
        return self.kind in (TokenKind.NUMBER, TokenKind.VARIABLE)

    def __str__(self) -> str:
        return self.text


OPERATORS = frozenset("+-*/")

# ---------------------------------------------------------------------------
# Regex patterns
# ---------------------------------------------------------------------------

# Alternation order matters: a variable must win over the number pattern so
# "e5" is a name, and the single-character error group comes last.
_TOKEN_RE = re.compile(
    rf"""
    (?P<space>\s+)
  | (?P<lparen>\()
  | (?P<rparen>\))
  | (?P<operator>[+\-*/])
  | (?P<variable>{NAME_PATTERN})
  | (?P<number>{NUMBER_PATTERN})
  | (?P<error>.)
    """,
    re.VERBOSE | re.DOTALL,
)

_KINDS = {
    "lparen": TokenKind.LPAREN,
    "rparen": TokenKind.RPAREN,
    "operator": TokenKind.OPERATOR,
    "variable": TokenKind.VARIABLE,
    "number": TokenKind.NUMBER,
    "error": TokenKind.ERROR,
}


def tokenize(formula: str) -> list[Token]:
    """Split formula text into tokens, left to right.

    Whitespace only separates tokens. Characters that match no pattern come
    back as ``ERROR`` tokens so validation can name them.
    """
    tokens: list[Token] = []
    for m in _TOKEN_RE.finditer(formula):
        group = m.lastgroup
        if group == "space":
            continue
        tokens.append(Token(_KINDS[group], m.group()))
    return tokens


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

_STARTS = (TokenKind.NUMBER, TokenKind.VARIABLE, TokenKind.LPAREN)
_ENDS = (TokenKind.NUMBER, TokenKind.VARIABLE, TokenKind.RPAREN)


def validate(
    tokens: list[Token],
    normalize: Callable[[str], str],
    is_valid: Callable[[str], bool],
) -> tuple[Token, ...]:
    """Check formula grammar and return the tokens with normalized variables.

    Raises FormulaFormatError naming the first offending token.
    """
    if not tokens:
        raise FormulaFormatError("The formula is empty")

    first, last = tokens[0], tokens[-1]
    if first.kind not in _STARTS:
        raise FormulaFormatError(
            f"The formula must start with a number, variable or '(': {first.text!r}",
            first.text,
        )
    if last.kind not in _ENDS:
        raise FormulaFormatError(
            f"The formula must end with a number, variable or ')': {last.text!r}",
            last.text,
        )

    result: list[Token] = []
    depth = 0
    prev: Token | None = None

    for tok in tokens:
        if tok.kind is TokenKind.ERROR:
            raise FormulaFormatError(f"Invalid character: {tok.text!r}", tok.text)

        if tok.kind is TokenKind.NUMBER and not math.isfinite(float(tok.text)):
            raise FormulaFormatError(f"Number out of range: {tok.text!r}", tok.text)

        if tok.kind is TokenKind.VARIABLE:
            name = normalize(tok.text)
            if not is_valid(name):
                raise FormulaFormatError(f"Invalid variable: {name!r}", tok.text)
            tok = Token(TokenKind.VARIABLE, name)

        if tok.kind is TokenKind.LPAREN:
            depth += 1
        elif tok.kind is TokenKind.RPAREN:
            depth -= 1
            if depth < 0:
                raise FormulaFormatError("Unbalanced ')' without matching '('", tok.text)

        if prev is not None:
            if prev.kind in (TokenKind.OPERATOR, TokenKind.LPAREN):
                if tok.kind not in _STARTS:
                    raise FormulaFormatError(
                        f"{prev.text!r} must be followed by a number, variable or '(', "
                        f"not {tok.text!r}",
                        tok.text,
                    )
            elif tok.kind not in (TokenKind.OPERATOR, TokenKind.RPAREN):
                raise FormulaFormatError(
                    f"{prev.text!r} must be followed by an operator or ')', "
                    f"not {tok.text!r}",
                    tok.text,
                )

        result.append(tok)
        prev = tok

    if depth != 0:
        raise FormulaFormatError("Unbalanced parentheses: missing ')'", last.text)

    return tuple(result)


def parse(
    formula: str,
    normalize: Callable[[str], str],
    is_valid: Callable[[str], bool],
) -> tuple[Token, ...]:
    """Tokenize and validate in one step."""
    return validate(tokenize(formula), normalize, is_valid)
