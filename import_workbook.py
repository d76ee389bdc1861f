#!/usr/bin/env python3
"""
Import a spreadsheet into a stored store

- Reads every sheet (or one tab) of the workbook
- Merges items, assets and costs into the store by natural key
- Saves the merged store in one write

Storage comes from OPNAME_STORAGE_BACKEND / OPNAME_DATA_DIR unless a data
directory is given on the command line.
"""

import asyncio
import sys
from pathlib import Path

from stock_opname import InventoryError, StoreService, create_repository
from stock_opname.importer import IMPORT_ALL
from stock_opname.logging_config import setup_logging

SELECTIONS = [IMPORT_ALL, "items", "assets", "costs"]


async def run_import(store_id: str, input_file: str, selection: str = IMPORT_ALL, data_dir: str = None):
    """
    Import a workbook file into one store

    Args:
        store_id: Target store id
        input_file: Path to the .xlsx file
        selection: "all" or a single tab
        data_dir: Directory holding inventory.json (None = use settings)
    """
    print(f"Loading {input_file}...")
    data = Path(input_file).read_bytes()

    async with create_repository(strict=True, data_dir=data_dir) as repo:
        service = StoreService(repo)
        result = await service.import_workbook(store_id, data, selection)

    print(f"\n=== Summary ===")
    print(f"Sheets processed: {', '.join(map(str, result.processed_sheets)) or 'none'}")
    if result.skipped_sheets:
        print(f"Sheets skipped: {', '.join(map(str, result.skipped_sheets))}")
    print(f"Rows added: {result.added}")
    print(f"Rows updated: {result.updated}")
    return result


if __name__ == "__main__":
    if len(sys.argv) < 3:
        print("Usage: python import_workbook.py <store_id> <input_file.xlsx> [all|items|assets|costs] [data_dir]")
        print("  all = import every recognized sheet (default)")
        print("  data_dir = JSON data directory (default: from OPNAME_* settings)")
        sys.exit(1)

    store_id, input_file = sys.argv[1:3]
    selection = sys.argv[3] if len(sys.argv) > 3 else IMPORT_ALL
    data_dir = sys.argv[4] if len(sys.argv) > 4 else None

    if selection not in SELECTIONS:
        print(f"Error: selection must be one of {', '.join(SELECTIONS)}")
        sys.exit(1)

    setup_logging()
    try:
        asyncio.run(run_import(store_id, input_file, selection, data_dir))
    except InventoryError as e:
        print(f"Error: {e}")
        sys.exit(1)
