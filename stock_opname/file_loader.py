"""Excel workbook loading utilities.

This module reads every sheet of an uploaded workbook into DataFrames and
resolves legacy header spellings into logical field names.
It is UI-agnostic and only depends on pandas/openpyxl.
"""

import io
import logging
from typing import BinaryIO, Optional, Union

import pandas as pd

from .config import SHEET_KEYWORDS
from .errors import WorkbookParseError

logger = logging.getLogger(__name__)


def load_workbook_sheets(file: Union[bytes, BinaryIO]) -> dict[str, pd.DataFrame]:
    """Load all sheets of a workbook, using row 1 as the header.

    Args:
        file: Workbook bytes or a file-like object (uploaded file or opened file)

    Returns:
        Dict mapping sheet name to DataFrame, in workbook order

    Raises:
        WorkbookParseError: If the binary is not a readable workbook
    """
    if isinstance(file, (bytes, bytearray)):
        file = io.BytesIO(file)

    try:
        sheets = pd.read_excel(file, sheet_name=None, header=0, engine="openpyxl")
    except Exception as e:
        # Any failure inside pandas/openpyxl (bad zip, broken sheet XML, ...) is unreadable input
        raise WorkbookParseError(f"Failed to read workbook: {e}") from e
    finally:
        if hasattr(file, "seek"):
            file.seek(0)

    logger.debug("Loaded workbook with sheets: %s", list(sheets))
    return sheets


def normalize_header(value) -> str:
    """Header comparison key: trimmed and case-insensitive."""
    if value is None:
        return ""
    return " ".join(str(value).split()).casefold()


def resolve_columns(
    columns,
    aliases: dict[str, tuple[str, ...]]
) -> dict[str, list]:
    """Map logical field names to the actual column labels of a sheet.

    Resolved once per sheet before rows are read. A field can be present
    under more than one legacy header; all present columns are kept in
    alias priority order so a row can fall through to the next one when
    the preferred cell is blank. Fields with no matching column are left
    out of the result.

    Args:
        columns: Column labels of the sheet (e.g. df.columns)
        aliases: Accepted header names per field, in priority order

    Returns:
        Dict mapping field name to the list of its column labels
    """
    by_key: dict[str, object] = {}
    for column in columns:
        key = normalize_header(column)
        if key and key not in by_key:
            by_key[key] = column

    mapping = {}
    for field_name, names in aliases.items():
        present = [by_key[normalize_header(n)] for n in names if normalize_header(n) in by_key]
        if present:
            mapping[field_name] = present
    return mapping


def missing_fields(mapping: dict[str, list], required: list[str]) -> list[str]:
    """Return the required fields that no column resolved to."""
    return [name for name in required if name not in mapping]


def sheet_tab(sheet_name: str) -> Optional[str]:
    """Return which tab ("items", "assets", "costs") a sheet belongs to."""
    lowered = str(sheet_name).lower()
    for tab, keyword in SHEET_KEYWORDS.items():
        if keyword in lowered:
            return tab
    return None


def find_sheet(sheet_names, tab: str) -> Optional[str]:
    """Find the first sheet whose name matches the tab's keyword."""
    for name in sheet_names:
        if sheet_tab(name) == tab:
            return name
    return None
