"""Cell: contents plus the value cached by the last recalculation."""

from __future__ import annotations

from dataclasses import dataclass, field

from sheetcalc._utils import format_number
from sheetcalc.calc import Formula
from sheetcalc.calc._protocol import CellContents, CellValue


@dataclass
class Cell:
    """A single named cell.

    A formula cell's value is filled in by the sheet's recalculation; text
    and number cells hold their contents as their value.
    """

    contents: CellContents = ""
    value: CellValue = field(default="")

    @property
    def is_empty(self) -> bool:
        return isinstance(self.contents, str) and self.contents == ""

    @property
    def string_form(self) -> str:
        """Text form of the contents, as typed into the sheet."""
        contents = self.contents
        if isinstance(contents, Formula):
            return f"={contents}"
        if isinstance(contents, float):
            return format_number(contents)
        return contents
