"""Spreadsheet: named cells with formulas and dependency-ordered recalculation.

Every update goes through :meth:`Spreadsheet.set_contents_of_cell`:

1. the name is normalized and validated,
2. the contents are classified as a formula (leading ``=``), a number, or text,
3. the dependency graph is re-linked and the affected cells are ordered,
4. on success the cell is committed and every affected cell is re-evaluated.

A failing update (bad name, malformed formula, circular reference) leaves the
sheet exactly as it was.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from typing import Any, Callable

from sheetcalc._cell import Cell, CellContents, CellValue
from sheetcalc._config import settings
from sheetcalc._snapshot import CellRecord, SpreadsheetSnapshot, read_snapshot, write_snapshot
from sheetcalc._utils import is_cell_name, parse_number
from sheetcalc.calc import DependencyGraph, Formula
from sheetcalc.exceptions import (
    CircularDependencyError,
    FormulaFormatError,
    InvalidNameError,
    SpreadsheetReadWriteError,
)

logger = logging.getLogger(__name__)


def _identity(name: str) -> str:
    return name


def _always_valid(name: str) -> bool:
    return True


class Spreadsheet:
    """A sheet of named cells.

    Cell names are a letter or underscore followed by letters, digits or
    underscores. *normalize* maps names (and formula variables) to their
    canonical form, and *is_valid* may reject canonical names beyond that
    pattern. Every possible name exists; unwritten cells are empty.

    Usage::

        sheet = Spreadsheet(normalize=str.upper)
        sheet.set_contents_of_cell("a1", "5")
        sheet.set_contents_of_cell("b1", "=a1+2")
        sheet.get_cell_value("B1")                   # 7.0
        sheet.set_contents_of_cell("A1", "10")       # ["A1", "B1"]
    """

    def __init__(
        self,
        is_valid: Callable[[str], bool] | None = None,
        normalize: Callable[[str], str] | None = None,
        version: str | None = None,
    ) -> None:
        self.is_valid: Callable[[str], bool] = is_valid or _always_valid
        self.normalize: Callable[[str], str] = normalize or _identity
        self.version: str = version if version is not None else settings.default_version
        self._cells: dict[str, Cell] = {}
        self._graph = DependencyGraph()
        self._changed = False

    @classmethod
    def load(
        cls,
        filename: str | os.PathLike[str],
        is_valid: Callable[[str], bool] | None = None,
        normalize: Callable[[str], str] | None = None,
        version: str | None = None,
    ) -> Spreadsheet:
        """Open a saved sheet; any failure raises SpreadsheetReadWriteError."""
        snapshot = read_snapshot(filename)
        sheet = cls.from_snapshot(snapshot, is_valid, normalize, version)
        logger.info("Loaded %d cells from %s", len(snapshot.cells), filename)
        return sheet

    @classmethod
    def from_snapshot(
        cls,
        snapshot: SpreadsheetSnapshot,
        is_valid: Callable[[str], bool] | None = None,
        normalize: Callable[[str], str] | None = None,
        version: str | None = None,
    ) -> Spreadsheet:
        """Build a sheet by replaying every stored cell in stored order."""
        sheet = cls(is_valid, normalize, version)
        if snapshot.version != sheet.version:
            logger.warning(
                "Rejected snapshot with version %r (expected %r)", snapshot.version, sheet.version,
            )
            raise SpreadsheetReadWriteError(
                f"Version mismatch: file has {snapshot.version!r}, expected {sheet.version!r}"
            )
        for name, record in snapshot.cells.items():
            try:
                sheet.set_contents_of_cell(name, record.string_form)
            except InvalidNameError as e:
                raise SpreadsheetReadWriteError(f"Invalid cell name in file: {name!r}") from e
            except FormulaFormatError as e:
                raise SpreadsheetReadWriteError(f"Invalid formula in cell {name!r}: {e}") from e
            except CircularDependencyError as e:
                raise SpreadsheetReadWriteError(f"Circular dependency in file: {e}") from e
        sheet._changed = False
        return sheet

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def changed(self) -> bool:
        """True if the sheet was modified since it was created, loaded or saved."""
        return self._changed

    def get_names_of_all_nonempty_cells(self) -> list[str]:
        """Names of all non-empty cells, in order of first write."""
        return [name for name, cell in self._cells.items() if not cell.is_empty]

    def get_cell_contents(self, name: str) -> CellContents:
        """Contents of a cell: text, a float, or a Formula ("" when empty)."""
        cell = self._cells.get(self._check_name(name))
        return cell.contents if cell is not None else ""

    def get_cell_value(self, name: str) -> CellValue:
        """Value of a cell: text, a float, or a FormulaError ("" when empty)."""
        cell = self._cells.get(self._check_name(name))
        return cell.value if cell is not None else ""

    def get_direct_dependents(self, name: str) -> set[str]:
        """Names of the cells whose formulas reference *name* directly."""
        return self._graph.get_dependents(self._check_name(name))

    # ------------------------------------------------------------------
    # Updates
    # ------------------------------------------------------------------

    def set_contents_of_cell(self, name: str, content: str) -> list[str]:
        """Set a cell from its text form and recalculate what depends on it.

        *content* starting with ``=`` is parsed as a formula, a decimal or
        scientific number becomes a float, anything else is text (``""``
        empties the cell).

        Returns *name* followed by every cell that depends on it directly or
        indirectly, ordered so each cell comes after the cells it reads.

        Raises InvalidNameError, FormulaFormatError or
        CircularDependencyError; the sheet is unchanged when any is raised.
        """
        name = self._check_name(name)
        contents = self._classify(content)

        variables = contents.get_variables() if isinstance(contents, Formula) else []
        previous = self._graph.get_dependees(name)
        self._graph.replace_dependees(name, variables)

        traversal = self._graph.affected_cells(name)
        if not traversal.ok:
            self._graph.replace_dependees(name, previous)
            raise CircularDependencyError(name, traversal.cycle or ())

        cell = self._cells.get(name)
        if cell is None:
            cell = self._cells[name] = Cell()
        cell.contents = contents
        self._recalculate(traversal.order)
        self._changed = True
        return list(traversal.order)

    def save(self, filename: str | os.PathLike[str]) -> None:
        """Write the sheet to *filename* as a JSON snapshot."""
        write_snapshot(self.to_snapshot(), filename)
        self._changed = False

    def to_snapshot(self) -> SpreadsheetSnapshot:
        cells = {
            name: CellRecord(string_form=cell.string_form)
            for name, cell in self._cells.items()
            if not cell.is_empty
        }
        return SpreadsheetSnapshot(cells=cells, version=self.version)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _is_valid_name(self, name: str) -> bool:
        return is_cell_name(name) and bool(self.is_valid(name))

    def _check_name(self, name: str) -> str:
        """Normalize *name*, raising InvalidNameError if the result is not allowed."""
        if not isinstance(name, str):
            raise InvalidNameError(repr(name))
        normalized = self.normalize(name)
        if not isinstance(normalized, str) or not self._is_valid_name(normalized):
            raise InvalidNameError(name)
        return normalized

    def _classify(self, content: str) -> CellContents:
        if content.startswith("="):
            return Formula(content[1:], self.normalize, self._is_valid_name)
        number = parse_number(content)
        if number is not None:
            return number
        return content

    def _lookup(self, name: str) -> float:
        """Cached numeric value of *name*; KeyError when there is none."""
        cell = self._cells.get(name)
        if cell is None or not isinstance(cell.value, float):
            raise KeyError(name)
        return cell.value

    def _recalculate(self, order: tuple[str, ...]) -> None:
        """Recompute cached values along *order*, which is dependency-safe."""
        logger.debug("Recalculating %d cells: %s", len(order), ", ".join(order))
        for name in order:
            cell = self._cells.get(name)
            if cell is None:
                continue
            contents = cell.contents
            if isinstance(contents, Formula):
                cell.value = contents.evaluate(self._lookup)
                if not isinstance(cell.value, float):
                    logger.debug("Cannot evaluate %s=%s: %s", name, contents, cell.value)
            else:
                cell.value = contents

    # ------------------------------------------------------------------
    # Mapping conveniences
    # ------------------------------------------------------------------

    def __getitem__(self, name: str) -> CellValue:
        """``sheet['A1']`` -> value of the cell."""
        return self.get_cell_value(name)

    def __setitem__(self, name: str, content: Any) -> None:
        """``sheet['A1'] = '=B1*2'``, shorthand for set_contents_of_cell."""
        self.set_contents_of_cell(name, content if isinstance(content, str) else str(content))

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        try:
            return self.get_cell_contents(name) != ""
        except InvalidNameError:
            return False

    def __iter__(self) -> Iterator[str]:
        return iter(self.get_names_of_all_nonempty_cells())

    def __repr__(self) -> str:
        count = len(self.get_names_of_all_nonempty_cells())
        return f"<Spreadsheet version={self.version!r} cells={count} changed={self._changed}>"


def load_spreadsheet(
    filename: str | os.PathLike[str],
    is_valid: Callable[[str], bool] | None = None,
    normalize: Callable[[str], str] | None = None,
    version: str | None = None,
) -> Spreadsheet:
    """Open a saved spreadsheet file."""
    return Spreadsheet.load(filename, is_valid, normalize, version)
