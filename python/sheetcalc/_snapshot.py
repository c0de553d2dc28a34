"""Snapshot models and JSON file I/O for saved spreadsheets.

A snapshot records the sheet's version tag and, for every non-empty cell,
the text form of its contents::

    {
      "cells": {
        "A1": {"stringForm": "5"},
        "B3": {"stringForm": "=A1+2"}
      },
      "Version": "default"
    }
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from sheetcalc._config import settings
from sheetcalc.exceptions import SpreadsheetReadWriteError

logger = logging.getLogger(__name__)


class CellRecord(BaseModel):
    """Saved form of one cell."""

    model_config = ConfigDict(populate_by_name=True)

    string_form: str = Field(alias="stringForm")


class SpreadsheetSnapshot(BaseModel):
    """Saved form of a whole sheet; ``cells`` keeps the stored order."""

    model_config = ConfigDict(populate_by_name=True)

    cells: dict[str, CellRecord] = Field(default_factory=dict)
    version: str = Field(alias="Version")

    def to_json(self, indent: int | None = None) -> str:
        return self.model_dump_json(by_alias=True, indent=indent)


def write_snapshot(snapshot: SpreadsheetSnapshot, filename: str | os.PathLike[str]) -> None:
    """Write *snapshot* to *filename* as JSON.

    The document is fully encoded first, written to a sibling temp file and
    then moved over *filename*, so a failed save leaves the old file intact.
    """
    try:
        data = snapshot.to_json(indent=settings.snapshot_indent).encode(settings.snapshot_encoding)
    except (ValueError, LookupError) as e:
        raise SpreadsheetReadWriteError(f"Cannot encode spreadsheet for {filename!s}: {e}") from e

    path = Path(filename)
    tmp_path = path.with_name(f".{path.name}.tmp")
    try:
        with open(tmp_path, "wb") as f:
            f.write(data)
        os.replace(tmp_path, path)
    except OSError as e:
        raise SpreadsheetReadWriteError(f"Cannot write spreadsheet to {filename!s}: {e}") from e
    finally:
        if tmp_path.exists():
            tmp_path.unlink()
    logger.info("Saved %d cells to %s", len(snapshot.cells), filename)


def read_snapshot(filename: str | os.PathLike[str]) -> SpreadsheetSnapshot:
    """Read and validate a snapshot file."""
    try:
        with open(filename, encoding=settings.snapshot_encoding) as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise SpreadsheetReadWriteError(f"Cannot read spreadsheet from {filename!s}: {e}") from e
    try:
        return SpreadsheetSnapshot.model_validate_json(text)
    except ValidationError as e:
        raise SpreadsheetReadWriteError(f"Malformed spreadsheet file {filename!s}") from e
