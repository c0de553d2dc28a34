"""sheetcalc.calc - Formula parsing, evaluation and dependency ordering."""

from sheetcalc.calc._evaluator import FormulaError, evaluate_tokens, is_error
from sheetcalc.calc._formula import Formula, evaluate
from sheetcalc.calc._graph import DependencyGraph
from sheetcalc.calc._parser import Token, TokenKind, tokenize, validate
from sheetcalc.calc._protocol import Lookup, SpreadsheetEngine, TraversalResult

__all__ = [
    "DependencyGraph",
    "Formula",
    "FormulaError",
    "Lookup",
    "SpreadsheetEngine",
    "Token",
    "TokenKind",
    "TraversalResult",
    "evaluate",
    "evaluate_tokens",
    "is_error",
    "tokenize",
    "validate",
]
