"""Formula: an immutable, validated infix arithmetic expression."""

from __future__ import annotations

from typing import Callable

from sheetcalc._utils import format_number
from sheetcalc.calc._evaluator import FormulaError, evaluate_tokens
from sheetcalc.calc._parser import Token, TokenKind, parse
from sheetcalc.calc._protocol import Lookup


def _identity(name: str) -> str:
    return name


def _always_valid(name: str) -> bool:
    return True


class Formula:
    """An arithmetic expression over numbers and variables.

    Supports ``+ - * /``, parentheses, decimal and scientific literals, and
    variables (a letter or underscore followed by letters, digits or
    underscores). The text is tokenized and validated once, at construction;
    a malformed formula raises :class:`FormulaFormatError` there and never
    reaches evaluation.

    *normalize* maps every variable to its canonical form and *is_valid*
    accepts or rejects the normalized form. Both are kept for rendering and
    later evaluation.

    Usage::

        f = Formula("a1 + 2 * B2", normalize=str.upper)
        f.get_variables()                    # ["A1", "B2"]
        f.evaluate({"A1": 1.0, "B2": 3.0}.__getitem__)   # 7.0
        str(f)                               # "A1+2*B2"
    """

    __slots__ = ("_tokens", "_normalize", "_is_valid", "_text")

    def __init__(
        self,
        formula: str,
        normalize: Callable[[str], str] | None = None,
        is_valid: Callable[[str], bool] | None = None,
    ) -> None:
        self._normalize = normalize or _identity
        self._is_valid = is_valid or _always_valid
        self._tokens: tuple[Token, ...] = parse(formula, self._normalize, self._is_valid)
        self._text = "".join(
            format_number(float(t.text)) if t.kind is TokenKind.NUMBER else t.text
            for t in self._tokens
        )

    @property
    def tokens(self) -> tuple[Token, ...]:
        return self._tokens

    @property
    def normalize(self) -> Callable[[str], str]:
        return self._normalize

    @property
    def is_valid(self) -> Callable[[str], bool]:
        return self._is_valid

    def evaluate(self, lookup: Lookup) -> float | FormulaError:
        """Evaluate against *lookup*; never raises.

        Variables are passed to *lookup* already normalized. Returns the
        numeric result or a FormulaError describing why there is none.
        """
        return evaluate_tokens(self._tokens, lookup)

    def get_variables(self) -> list[str]:
        """Distinct normalized variable names, in order of first appearance."""
        seen: dict[str, None] = {}
        for t in self._tokens:
            if t.kind is TokenKind.VARIABLE:
                seen.setdefault(t.text, None)
        return list(seen)

    # ------------------------------------------------------------------
    # Canonical form, equality, hashing
    # ------------------------------------------------------------------

    def __str__(self) -> str:
        return self._text

    def __repr__(self) -> str:
        return f"Formula({self._text!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Formula):
            return NotImplemented
        return self._text == other._text

    def __hash__(self) -> int:
        return hash(self._text)


def evaluate(
    expression: str,
    lookup: Lookup,
    normalize: Callable[[str], str] | None = None,
    is_valid: Callable[[str], bool] | None = None,
) -> float | FormulaError:
    """Parse *expression* and evaluate it in one call.

    Syntax errors still raise FormulaFormatError; evaluation errors are
    returned as FormulaError values.
    """
    return Formula(expression, normalize, is_valid).evaluate(lookup)
