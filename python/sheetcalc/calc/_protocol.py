"""Lookup capability, traversal result and the spreadsheet protocol."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, Union, runtime_checkable

if TYPE_CHECKING:
    from sheetcalc.calc._evaluator import FormulaError
    from sheetcalc.calc._formula import Formula

# Resolves a normalized variable name to its number. Raising LookupError
# (KeyError included) means the variable is undefined.
Lookup = Callable[[str], float]

CellContents = Union[str, float, "Formula"]
CellValue = Union[str, float, "FormulaError"]


@dataclass(frozen=True)
class TraversalResult:
    """Outcome of ordering the cells affected by a change."""

    order: tuple[str, ...] = ()  # changed cell first, then dependents
    cycle: tuple[str, ...] | None = None  # closed chain when a cycle was found

    @property
    def ok(self) -> bool:
        return self.cycle is None


@runtime_checkable
class SpreadsheetEngine(Protocol):
    """Protocol for spreadsheets of named cells with recalculation."""

    def set_contents_of_cell(self, name: str, content: str) -> list[str]:
        """Set a cell from its text form and recalculate its dependents.

        Returns the changed cell followed by every cell whose value depends
        on it, in an order that is safe to evaluate left to right.
        """
        ...

    def get_cell_contents(self, name: str) -> CellContents:
        ...

    def get_cell_value(self, name: str) -> CellValue:
        ...

    def get_names_of_all_nonempty_cells(self) -> list[str]:
        ...

    def get_direct_dependents(self, name: str) -> set[str]:
        ...
