#!/usr/bin/env python3
"""
Export a store to a spreadsheet

- Items sheet with both unit representations of price and stock
- Assets and operational costs sheets
- Writes "<store>-Semua Data.xlsx" or "<store>-<Sheet>.xlsx"

Storage comes from OPNAME_STORAGE_BACKEND / OPNAME_DATA_DIR unless a data
directory is given on the command line.
"""

import asyncio
import sys
from pathlib import Path

from stock_opname import InventoryError, StoreService, create_repository
from stock_opname.exporter import EXPORT_ALL
from stock_opname.logging_config import setup_logging

SELECTIONS = [EXPORT_ALL, "items", "assets", "costs"]
OUTPUT_DIR = "output"


async def run_export(store_id: str, selection: str = EXPORT_ALL, output_dir: str = OUTPUT_DIR, data_dir: str = None):
    async with create_repository(strict=True, data_dir=data_dir) as repo:
        service = StoreService(repo)
        result = await service.export_workbook(store_id, selection)

    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)
    filepath = output_path / result.filename
    filepath.write_bytes(result.data)

    print(f"Created: {filepath} (sheets: {', '.join(result.sheet_names)})")
    return filepath


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python export_workbook.py <store_id> [all|items|assets|costs] [output_dir] [data_dir]")
        print("  all = every sheet in one workbook (default)")
        print("  data_dir = JSON data directory (default: from OPNAME_* settings)")
        sys.exit(1)

    store_id = sys.argv[1]
    selection = sys.argv[2] if len(sys.argv) > 2 else EXPORT_ALL
    output_dir = sys.argv[3] if len(sys.argv) > 3 else OUTPUT_DIR
    data_dir = sys.argv[4] if len(sys.argv) > 4 else None

    if selection not in SELECTIONS:
        print(f"Error: selection must be one of {', '.join(SELECTIONS)}")
        sys.exit(1)

    setup_logging()
    try:
        asyncio.run(run_export(store_id, selection, output_dir, data_dir))
    except InventoryError as e:
        print(f"Error: {e}")
        sys.exit(1)
