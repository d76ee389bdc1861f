"""Shared fixtures for stock opname tests."""

import io
from datetime import date

import pytest
import pandas as pd

from stock_opname.models import (
    Asset,
    AssetCategory,
    AssetCondition,
    CostFrequency,
    Item,
    ItemCategory,
    OperationalCost,
    Store,
    StoreInventory,
    Unit,
)

STORE_ID = "STORE-1"
STORE_NAME = "Toko Maju"
TODAY = date(2024, 3, 1)


def make_store(store_id: str = STORE_ID, name: str = STORE_NAME) -> Store:
    """Store with one boxed item (12 Pcs / Dus), one 1:1 item, one asset and one cost.

    Recorded stock: Teh Botol = 30 Pcs (2 Dus + 6 Pcs), Gula Pasir = 5 Pcs.
    """
    return Store(
        id=store_id,
        name=name,
        address="Jl. Merdeka 1",
        item_categories=[ItemCategory(id="IC-MIN", name="Minuman", prefix="MIN")],
        units=[Unit(id="U-PCS", name="Pcs"), Unit(id="U-DUS", name="Dus")],
        asset_categories=[AssetCategory(id="AC-ELE", name="Elektronik", prefix="ELE")],
        items=[
            Item(
                id="ITM-1",
                sku="MIN-001",
                name="Teh Botol",
                category_id="IC-MIN",
                purchase_unit_id="U-DUS",
                selling_unit_id="U-PCS",
                conversion_rate=12,
                purchase_price=1000.0,
                selling_price=1500.0,
            ),
            Item(
                id="ITM-2",
                sku="MIN-002",
                name="Gula Pasir",
                category_id="IC-MIN",
                purchase_unit_id="U-PCS",
                selling_unit_id="U-PCS",
                conversion_rate=1,
                purchase_price=12000.0,
                selling_price=14000.0,
            ),
        ],
        inventory=[
            StoreInventory(item_id="ITM-1", recorded_stock=30),
            StoreInventory(item_id="ITM-2", recorded_stock=5),
        ],
        assets=[
            Asset(
                id="AST-1",
                code="ELE-001",
                name="Kulkas",
                category_id="AC-ELE",
                purchase_date="2023-01-15",
                value=3000000.0,
                condition=AssetCondition.GOOD,
            ),
        ],
        costs=[
            OperationalCost(
                id="CST-1",
                name="Listrik",
                amount=500000.0,
                frequency=CostFrequency.MONTHLY,
            ),
        ],
    )


@pytest.fixture
def store():
    """Standard store for tests."""
    return make_store()


@pytest.fixture
def empty_store():
    return Store(id="STORE-2", name="Toko Baru")


def create_item_row(
    name: str,
    category: str = "Minuman",
    purchase_unit: str = "Dus",
    selling_unit: str = "Pcs",
    conversion=12,
    extra: dict = None,
) -> dict:
    """Helper to create an item sheet row keyed by header label."""
    row = {
        "Nama Barang": name,
        "Kategori": category,
        "Satuan Pembelian": purchase_unit,
        "Satuan Penjualan": selling_unit,
        "Konversi": conversion,
    }
    if extra:
        row.update(extra)
    return row


def create_test_df(rows: list[dict]) -> pd.DataFrame:
    """Create a sheet DataFrame from a list of row dicts.

    Missing cells become NaN, as they do when pandas reads a workbook.
    """
    return pd.DataFrame(rows)


def workbook_bytes(sheets: dict[str, pd.DataFrame]) -> bytes:
    """Write sheets to an in-memory .xlsx workbook."""
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        for sheet_name, df in sheets.items():
            df.to_excel(writer, sheet_name=sheet_name, index=False)
    return output.getvalue()
