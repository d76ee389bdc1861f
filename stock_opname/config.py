"""Default configuration values."""

# Sheet routing: a workbook sheet is handled by the tab whose keyword
# appears (case-insensitive) in its name
SHEET_KEYWORDS = {
    "items": "barang",
    "assets": "aset",
    "costs": "biaya",
}

# Sheet names used on export
SHEET_NAMES = {
    "items": "Barang",
    "assets": "Aset",
    "costs": "Biaya",
}

# Processing order when importing/exporting everything
TAB_ORDER = ["items", "assets", "costs"]

# Accepted header names per logical field, in priority order.
# Several spellings exist because older exports used different labels.
ITEM_COLUMNS: dict[str, tuple[str, ...]] = {
    "name": ("Nama Barang",),
    "sku": ("SKU",),
    "description": ("Keterangan",),
    "category": ("Kategori",),
    "purchase_unit": ("Satuan Beli", "Satuan Pembelian"),
    "selling_unit": ("Satuan Jual", "Satuan Penjualan"),
    "conversion": ("Isi Konversi", "Konversi"),
    "price_per_purchase_unit": (
        "Harga Beli (Satuan Beli)",
        "Harga Beli per Satuan Beli",
        "Harga Beli per Satuan Pembelian",
    ),
    "price_per_selling_unit": (
        "Harga Beli (Satuan Jual)",
        "Harga Beli per Satuan Jual",
        "Harga Beli per Satuan Penjualan",
    ),
    "selling_price": ("Harga Jual", "Harga Jual per Satuan Penjualan"),
    "stock_purchase_units": ("Stok (Satuan Beli)", "Stok (Satuan Pembelian)"),
    "stock_selling_remainder": ("Sisa Stok (Satuan Jual)", "Stok Sisa (Satuan Penjualan)"),
    "stock_total": ("Total Stok (dalam Satuan Jual)", "Total Stok (dlm Satuan Penjualan)"),
    "stock_legacy": ("Stok Tercatat (Satuan Jual)", "Stok Tercatat"),
}

ASSET_COLUMNS: dict[str, tuple[str, ...]] = {
    "code": ("Kode",),
    "name": ("Nama Aset",),
    "description": ("Keterangan",),
    "category": ("Kategori",),
    "condition": ("Kondisi",),
    "purchase_date": ("Tgl Perolehan",),
    "value": ("Nilai",),
}

COST_COLUMNS: dict[str, tuple[str, ...]] = {
    "name": ("Nama Biaya",),
    "description": ("Keterangan",),
    "amount": ("Jumlah",),
    "frequency": ("Frekuensi",),
}

# Output columns for export (reverse of the aliases above)
ITEM_EXPORT_COLUMNS = [
    "SKU",
    "Nama Barang",
    "Keterangan",
    "Kategori",
    "Satuan Pembelian",
    "Harga Beli per Satuan Pembelian",
    "Konversi",
    "Satuan Penjualan",
    "Harga Beli per Satuan Penjualan",
    "Harga Jual per Satuan Penjualan",
    "Stok (Satuan Pembelian)",
    "Stok Sisa (Satuan Penjualan)",
    "Total Stok (dlm Satuan Penjualan)",
]

ASSET_EXPORT_COLUMNS = [
    "Kode",
    "Nama Aset",
    "Keterangan",
    "Kategori",
    "Kondisi",
    "Tgl Perolehan",
    "Nilai",
]

COST_EXPORT_COLUMNS = [
    "Nama Biaya",
    "Keterangan",
    "Jumlah",
    "Frekuensi",
]

# Fallback prefixes for generated SKUs / asset codes
DEFAULT_ITEM_PREFIX = "BRG"
DEFAULT_ASSET_PREFIX = "AST"
CATEGORY_PREFIX_LENGTH = 3

# Prefixes for generated ids
ITEM_CATEGORY_ID_PREFIX = "IC"
ASSET_CATEGORY_ID_PREFIX = "AC"
UNIT_ID_PREFIX = "U"
ITEM_ID_PREFIX = "ITM"
ASSET_ID_PREFIX = "AST"
COST_ID_PREFIX = "CST"
SESSION_ID_PREFIX = "OPN"

# Persisted document layout: one JSON document holding both collections,
# so a session and its store update are replaced together
DATA_FILENAME = "inventory.json"
STORES_KEY = "stores"
HISTORY_KEY = "opnameHistory"
