"""sheetcalc: spreadsheet cells with arithmetic formulas and ordered recalculation.

Usage::

    from sheetcalc import Spreadsheet, load_spreadsheet

    sheet = Spreadsheet()
    sheet.set_contents_of_cell("A1", "5")
    sheet.set_contents_of_cell("B1", "=A1*2 + 1")
    print(sheet.get_cell_value("B1"))          # 11.0

    changed = sheet.set_contents_of_cell("A1", "10")
    print(changed, sheet["B1"])                # ['A1', 'B1'] 21.0

    sheet.save("book.json")
    same = load_spreadsheet("book.json")
"""

from sheetcalc._cell import Cell
from sheetcalc._config import Settings, settings
from sheetcalc._snapshot import CellRecord, SpreadsheetSnapshot
from sheetcalc._spreadsheet import Spreadsheet, load_spreadsheet
from sheetcalc.calc import DependencyGraph, Formula, FormulaError
from sheetcalc.exceptions import (
    CircularDependencyError,
    FormulaFormatError,
    InvalidNameError,
    SettingsError,
    SheetcalcError,
    SpreadsheetReadWriteError,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "Cell",
    "CellRecord",
    "CircularDependencyError",
    "DependencyGraph",
    "Formula",
    "FormulaError",
    "FormulaFormatError",
    "InvalidNameError",
    "Settings",
    "SettingsError",
    "SheetcalcError",
    "Spreadsheet",
    "SpreadsheetReadWriteError",
    "SpreadsheetSnapshot",
    "load_spreadsheet",
    "settings",
]
