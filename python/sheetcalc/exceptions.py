"""
Exception classes for sheetcalc.

These exceptions signal the failures a spreadsheet update or a snapshot load
can report. Evaluation problems (division by zero, undefined variables) are
not exceptions: they are stored as :class:`sheetcalc.calc.FormulaError`
values in the affected cell.
"""

from __future__ import annotations


class SheetcalcError(Exception):
    """Base class for every error raised by sheetcalc."""


class InvalidNameError(SheetcalcError, ValueError):
    """Raised when a cell name is malformed or rejected by the sheet.

    A name is accepted when, after normalization, it is a letter or
    underscore followed by letters, digits or underscores and the sheet's
    validity predicate returns True for it.
    """

    def __init__(self, name: str, message: str | None = None) -> None:
        self.name = name
        super().__init__(message or f"Invalid cell name: {name!r}")


class FormulaFormatError(SheetcalcError, ValueError):
    """Raised when formula text cannot be turned into a Formula.

    Covers unknown characters, grammar violations (e.g. two operators in a
    row, unbalanced parentheses) and variables whose normalized form fails
    the validity predicate. Always detected before any evaluation.
    """

    def __init__(self, message: str, token: str | None = None) -> None:
        self.token = token
        super().__init__(message)


class CircularDependencyError(SheetcalcError):
    """Raised when an update would make a cell depend on itself.

    The spreadsheet is left exactly as it was before the update. ``cycle``
    holds the chain of names that closes the loop, starting and ending with
    the same cell.
    """

    def __init__(self, name: str, cycle: tuple[str, ...] = ()) -> None:
        self.name = name
        self.cycle = cycle
        path = " -> ".join(cycle) if cycle else name
        super().__init__(f"Circular dependency detected: {path}")


class SpreadsheetReadWriteError(SheetcalcError):
    """Raised when a snapshot cannot be saved or loaded.

    Wraps I/O failures, malformed snapshot documents, version mismatches and
    any invalid name, formula or circular dependency met while replaying a
    snapshot into a new sheet.
    """


class SettingsError(SheetcalcError, ValueError):
    """Raised when a ``SHEETCALC_*`` environment variable holds a bad value.

    ``variable`` names the offending environment variable.
    """

    def __init__(self, variable: str, message: str) -> None:
        self.variable = variable
        super().__init__(f"Invalid {variable}: {message}")
