"""Tests for spreadsheet cell helpers."""

from datetime import date, datetime

import numpy as np
import pandas as pd
import pytest

from stock_opname.cells import cell_text, is_blank, parse_date, parse_int, parse_number


@pytest.mark.parametrize("value", [None, float("nan"), np.nan, pd.NaT, "", "   "])
def test_blank_values(value):
    assert is_blank(value)


@pytest.mark.parametrize("value", [0, 0.0, "0", "-", False])
def test_non_blank_values(value):
    assert not is_blank(value)


def test_cell_text_whole_float():
    assert cell_text(2221.0) == "2221"
    assert cell_text(np.float64(7.0)) == "7"
    assert cell_text(2.5) == "2.5"
    assert cell_text("  Teh  ") == "Teh"
    assert cell_text(np.nan) == ""


@pytest.mark.parametrize("value, expected", [
    (1500, 1500.0),
    ("1500 rupiah", 1500.0),
    ("12.5", 12.5),
    (np.int64(3), 3.0),
])
def test_parse_number(value, expected):
    assert parse_number(value) == expected


def test_parse_number_default():
    assert parse_number("abc", -1.0) == -1.0
    assert parse_number(None) == 0.0


@pytest.mark.parametrize("value, expected", [
    ("12 Pcs / Dus", 12),
    (12.7, 12),
    ("-3", -3),
    ("-", None),
    (None, None),
])
def test_parse_int(value, expected):
    assert parse_int(value) == expected


@pytest.mark.parametrize("value, expected", [
    (datetime(2023, 1, 15, 10, 0), "2023-01-15"),
    (date(2023, 1, 15), "2023-01-15"),
    (pd.Timestamp("2023-01-15"), "2023-01-15"),
    ("2023-01-15", "2023-01-15"),
    ("2023-01-05", "2023-01-05"),
    ("05/01/2023", "2023-01-05"),
    ("15/01/2023", "2023-01-15"),
    ("5-1-2023", "2023-01-05"),
    ("bukan tanggal", None),
    (45000, None),
    (None, None),
])
def test_parse_date(value, expected):
    assert parse_date(value) == expected
