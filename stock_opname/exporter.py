"""Spreadsheet export - projects a store into flat, human-readable sheets.

The items sheet re-derives the human-facing columns from the normalized
model (price per purchase unit, stock split into purchase units and a
selling-unit remainder) and also emits the raw values, so an exported
workbook imports back to exactly the same stored numbers.
"""

import io
import logging

import pandas as pd

from .config import (
    ASSET_EXPORT_COLUMNS,
    COST_EXPORT_COLUMNS,
    ITEM_EXPORT_COLUMNS,
    SHEET_NAMES,
    TAB_ORDER,
)
from .errors import SheetNotFoundError
from .models import ExportResult, Item, SheetExport, Store

logger = logging.getLogger(__name__)

EXPORT_ALL = "all"


def conversion_label(item: Item, selling_unit: str, purchase_unit: str) -> str:
    """Human-readable conversion, e.g. "12 Pcs / Dus", or "-" for 1:1 items."""
    if item.conversion_rate > 1:
        return f"{item.conversion_rate} {selling_unit} / {purchase_unit}"
    return "-"


def build_items_sheet(store: Store) -> pd.DataFrame:
    """Items with both unit representations of price and stock."""
    rows = []
    for item in store.items:
        inventory = store.inventory_for(item.id)
        recorded_stock = inventory.recorded_stock if inventory else 0
        rate = item.conversion_rate if item.conversion_rate > 0 else 1

        purchase_unit = store.unit_name(item.purchase_unit_id)
        selling_unit = store.unit_name(item.selling_unit_id)

        rows.append({
            "SKU": item.sku,
            "Nama Barang": item.name,
            "Keterangan": item.description,
            "Kategori": store.item_category_name(item.category_id),
            "Satuan Pembelian": purchase_unit,
            "Harga Beli per Satuan Pembelian": item.purchase_price * rate,
            "Konversi": conversion_label(item, selling_unit, purchase_unit),
            "Satuan Penjualan": selling_unit,
            "Harga Beli per Satuan Penjualan": item.purchase_price,
            "Harga Jual per Satuan Penjualan": item.selling_price,
            "Stok (Satuan Pembelian)": recorded_stock // rate,
            "Stok Sisa (Satuan Penjualan)": recorded_stock % rate,
            "Total Stok (dlm Satuan Penjualan)": recorded_stock,
        })
    return pd.DataFrame(rows, columns=ITEM_EXPORT_COLUMNS)


def build_assets_sheet(store: Store) -> pd.DataFrame:
    rows = [
        {
            "Kode": asset.code,
            "Nama Aset": asset.name,
            "Keterangan": asset.description,
            "Kategori": store.asset_category_name(asset.category_id),
            "Kondisi": asset.condition.value,
            "Tgl Perolehan": asset.purchase_date,
            "Nilai": asset.value,
        }
        for asset in store.assets
    ]
    return pd.DataFrame(rows, columns=ASSET_EXPORT_COLUMNS)


def build_costs_sheet(store: Store) -> pd.DataFrame:
    rows = [
        {
            "Nama Biaya": cost.name,
            "Keterangan": cost.description,
            "Jumlah": cost.amount,
            "Frekuensi": cost.frequency.value,
        }
        for cost in store.costs
    ]
    return pd.DataFrame(rows, columns=COST_EXPORT_COLUMNS)


_BUILDERS = {
    "items": build_items_sheet,
    "assets": build_assets_sheet,
    "costs": build_costs_sheet,
}


def build_sheets(store: Store, selection: str = EXPORT_ALL) -> list[SheetExport]:
    """
    Build the sheets for an export.

    Args:
        store: Store to export (not modified)
        selection: "all" for every sheet, or one tab ("items", "assets", "costs")

    Returns:
        List of SheetExport in workbook order

    Raises:
        SheetNotFoundError: If the selected tab has no sheet (e.g. "summary")
    """
    if selection == EXPORT_ALL:
        tabs = TAB_ORDER
    elif selection in _BUILDERS:
        tabs = [selection]
    else:
        raise SheetNotFoundError(f"Tab '{selection}' has no exportable sheet")

    return [SheetExport(sheet_name=SHEET_NAMES[tab], data=_BUILDERS[tab](store)) for tab in tabs]


def write_workbook(sheets: list[SheetExport]) -> bytes:
    """Write sheets to an .xlsx workbook and return its bytes."""
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        for sheet in sheets:
            sheet.data.to_excel(writer, sheet_name=sheet.sheet_name, index=False)
    return output.getvalue()


def export_filename(store: Store, selection: str) -> str:
    if selection == EXPORT_ALL:
        return f"{store.name}-Semua Data.xlsx"
    return f"{store.name}-{SHEET_NAMES[selection]}.xlsx"


def generate_export_result(store: Store, selection: str = EXPORT_ALL) -> ExportResult:
    """
    Generate ExportResult with the workbook bytes for download.

    Args:
        store: Store to export
        selection: "all" or a single tab

    Returns:
        ExportResult with filename, Excel bytes and sheet names
    """
    sheets = build_sheets(store, selection)
    data = write_workbook(sheets)
    logger.info(
        "Exported store %s (%s): %s",
        store.id,
        selection,
        ", ".join(f"{s.sheet_name}={s.row_count}" for s in sheets),
    )
    return ExportResult(
        filename=export_filename(store, selection),
        data=data,
        sheet_names=[s.sheet_name for s in sheets],
    )
