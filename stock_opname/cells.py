"""Cell value helpers shared by the importer and exporter.

Spreadsheet cells arrive as whatever pandas/openpyxl produced: numbers,
numpy scalars, strings, timestamps or NaN. These helpers turn them into
plain Python values and never raise on bad input; callers pass the
fallback they want instead.
"""

import numbers
import re
from datetime import date, datetime
from typing import Optional

import pandas as pd

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")
_ISO_DATE = re.compile(r"^\d{4}-\d{1,2}-\d{1,2}")


def is_blank(value) -> bool:
    """Whether a cell is empty (None, NaN/NaT or whitespace-only text)."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _is_number(value) -> bool:
    return isinstance(value, numbers.Number) and not isinstance(value, bool)


def cell_text(value) -> str:
    """Format a cell as trimmed text.

    Converts floats that are whole numbers to integers (e.g., 2221.0 -> "2221").

    Args:
        value: Raw cell value

    Returns:
        Text representation, "" for blank cells
    """
    if is_blank(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def parse_number(value, default: float = 0.0) -> float:
    """Parse a numeric cell, reading the leading number of text cells.

    "1500 rupiah" -> 1500.0, "abc" -> default, NaN -> default.
    """
    if is_blank(value):
        return default
    if _is_number(value):
        return float(value)
    match = _LEADING_FLOAT.match(str(value))
    if not match:
        return default
    return float(match.group(1))


def parse_int(value) -> Optional[int]:
    """Parse the leading integer of a cell, truncating decimals.

    "12 Pcs / Dus" -> 12, 12.7 -> 12, "-" -> None.
    """
    if is_blank(value):
        return None
    if _is_number(value):
        return int(value)
    match = _LEADING_INT.match(str(value))
    if not match:
        return None
    return int(match.group(1))


def parse_date(value) -> Optional[str]:
    """Parse a date cell into an ISO "YYYY-MM-DD" string.

    Accepts date/datetime cells (including pandas Timestamps) and text that
    pandas can parse. Text is read as ISO "YYYY-MM-DD" when it starts with a
    four-digit year, otherwise day first ("05/01/2023" is 5 January).
    Returns None when nothing usable is found.
    """
    if is_blank(value):
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if _is_number(value):
        return None
    text = str(value).strip()
    if _ISO_DATE.match(text):
        parsed = pd.to_datetime(text, errors="coerce", yearfirst=True)
    else:
        parsed = pd.to_datetime(text, errors="coerce", dayfirst=True)
    if pd.isna(parsed):
        return None
    return parsed.date().isoformat()
