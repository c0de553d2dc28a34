"""Two-stack infix evaluator for validated formula tokens.

Operators and values live on separate stacks and are combined left to right
as soon as precedence allows: ``*`` and ``/`` are applied the moment their
right operand arrives, ``+`` and ``-`` wait until the next additive operator,
a closing parenthesis, or the end of input. Parentheses override both.

Nothing in here raises. Division by zero, undefined variables and malformed
stack states all come back as a :class:`FormulaError` value.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from sheetcalc.calc._parser import Token, TokenKind
from sheetcalc.calc._protocol import Lookup

# ---------------------------------------------------------------------------
# FormulaError: evaluation failures carried as values
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FormulaError:
    """Why a formula could not produce a number.

    Stored as a cell's value instead of being raised, so one failing cell
    never interrupts recalculation of the others.
    """

    reason: str

    def __str__(self) -> str:
        return f"#ERROR: {self.reason}"


def is_error(val: object) -> bool:
    """Return True if *val* is a FormulaError."""
    return isinstance(val, FormulaError)


# ---------------------------------------------------------------------------
# Arithmetic
# ---------------------------------------------------------------------------

_ADDITIVE = ("+", "-")
_MULTIPLICATIVE = ("*", "/")


def _binary_op(left: float, op: str, right: float) -> float | FormulaError:
    if op == "+":
        return left + right
    if op == "-":
        return left - right
    if op == "*":
        return left * right
    if op == "/":
        if right == 0:
            return FormulaError("Division by zero")
        return left / right
    return FormulaError(f"Unknown operator: {op!r}")


def _reduce_top(
    ops: list[str], values: list[float], wanted: tuple[str, ...],
) -> FormulaError | None:
    """Apply the operator on top of *ops* to the top two values if it is in *wanted*."""
    if not ops or ops[-1] not in wanted:
        return None
    if len(values) < 2:
        return FormulaError(f"Not enough values for {ops[-1]!r}")
    right = values.pop()
    left = values.pop()
    result = _binary_op(left, ops.pop(), right)
    if isinstance(result, FormulaError):
        return result
    values.append(result)
    return None


def _resolve(token: Token, lookup: Lookup) -> float | FormulaError:
    if token.kind is TokenKind.NUMBER:
        return float(token.text)
    try:
        return float(lookup(token.text))
    except (LookupError, TypeError, ValueError):
        return FormulaError(f"Undefined variable: {token.text}")


# ---------------------------------------------------------------------------
# Evaluator
# ---------------------------------------------------------------------------


def evaluate_tokens(tokens: Sequence[Token], lookup: Lookup) -> float | FormulaError:
    """Evaluate validated tokens, resolving variables through *lookup*.

    *lookup* receives normalized variable names and either returns a number
    or raises ``LookupError`` (``KeyError`` included) for undefined ones.
    """
    ops: list[str] = []
    values: list[float] = []

    for tok in tokens:
        kind = tok.kind

        if kind is TokenKind.OPERATOR and tok.text in _ADDITIVE:
            err = _reduce_top(ops, values, _ADDITIVE)
            if err is not None:
                return err
            ops.append(tok.text)

        elif kind is TokenKind.OPERATOR or kind is TokenKind.LPAREN:
            ops.append(tok.text)

        elif kind is TokenKind.RPAREN:
            err = _reduce_top(ops, values, _ADDITIVE)
            if err is not None:
                return err
            if not ops or ops[-1] != "(":
                return FormulaError("Unexpected ')' without matching '('")
            ops.pop()
            err = _reduce_top(ops, values, _MULTIPLICATIVE)
            if err is not None:
                return err

        elif tok.is_operand:
            value = _resolve(tok, lookup)
            if isinstance(value, FormulaError):
                return value
            if ops and ops[-1] in _MULTIPLICATIVE:
                if not values:
                    return FormulaError(f"Not enough values for {ops[-1]!r}")
                result = _binary_op(values.pop(), ops.pop(), value)
                if isinstance(result, FormulaError):
                    return result
                values.append(result)
            else:
                values.append(value)

        else:
            return FormulaError(f"Unexpected token: {tok.text!r}")

    if not ops:
        if len(values) != 1:
            return FormulaError("Extra value left after evaluation")
        return values[0]

    if len(ops) == 1 and ops[0] in _ADDITIVE and len(values) == 2:
        right = values.pop()
        left = values.pop()
        return _binary_op(left, ops.pop(), right)

    return FormulaError("Extra operator left after evaluation")
