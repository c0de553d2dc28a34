"""Cell-name and number helpers shared by the sheet and the formula engine."""

from __future__ import annotations

import math
import re

# ---------------------------------------------------------------------------
# Regex patterns
# ---------------------------------------------------------------------------

NAME_PATTERN = r"[A-Za-z_][A-Za-z0-9_]*"
NUMBER_PATTERN = r"(?:[0-9]+\.[0-9]*|[0-9]*\.[0-9]+|[0-9]+)(?:[eE][+-]?[0-9]+)?"

_NAME_RE = re.compile(NAME_PATTERN)
# Cell contents may carry a sign and padding; formula literals never do.
_CONTENT_NUMBER_RE = re.compile(rf"\s*[+-]?{NUMBER_PATTERN}\s*")

# Integral floats at or beyond this magnitude render in exponent form.
_INT_RENDER_LIMIT = 1e16


def is_cell_name(name: str) -> bool:
    """True for a letter or underscore followed by letters, digits, underscores."""
    return _NAME_RE.fullmatch(name) is not None


def parse_number(text: str) -> float | None:
    """Parse cell contents as a finite number, or return None.

    Only decimal and scientific notation are accepted, so strings such as
    ``"nan"``, ``"inf"`` or ``"1_000"`` stay text.
    """
    if _CONTENT_NUMBER_RE.fullmatch(text) is None:
        return None
    value = float(text)
    if not math.isfinite(value):
        return None
    return value


def format_number(value: float) -> str:
    """Canonical text for a number.

    >>> format_number(1e6)
    '1000000'
    >>> format_number(2.5)
    '2.5'
    """
    if math.isfinite(value) and value.is_integer() and abs(value) < _INT_RENDER_LIMIT:
        return str(int(value))
    return repr(float(value))
