"""Spreadsheet import - merges item/asset/cost sheets into a store.

Rows are matched against existing master data by natural key (item name,
asset code, cost name). Missing categories and units are created on the
fly, and derived numbers (conversion rate, price per selling unit, total
stock) are normalized so that every legacy export format lands on the same
stored values.
"""

import logging
from datetime import date
from typing import BinaryIO, Optional, Union

import pandas as pd

from .cells import cell_text, is_blank, parse_date, parse_int, parse_number
from .config import (
    ASSET_CATEGORY_ID_PREFIX,
    ASSET_COLUMNS,
    ASSET_ID_PREFIX,
    CATEGORY_PREFIX_LENGTH,
    COST_COLUMNS,
    COST_ID_PREFIX,
    DEFAULT_ASSET_PREFIX,
    DEFAULT_ITEM_PREFIX,
    ITEM_CATEGORY_ID_PREFIX,
    ITEM_COLUMNS,
    ITEM_ID_PREFIX,
    SHEET_KEYWORDS,
    UNIT_ID_PREFIX,
)
from .errors import SheetNotFoundError
from .file_loader import find_sheet, load_workbook_sheets, missing_fields, resolve_columns, sheet_tab
from .models import (
    Asset,
    AssetCategory,
    AssetCondition,
    CostFrequency,
    ImportResult,
    Item,
    ItemCategory,
    OperationalCost,
    Store,
    StoreInventory,
    Unit,
    generate_id,
)

logger = logging.getLogger(__name__)

IMPORT_ALL = "all"


def first_value(row: pd.Series, columns: Optional[list]):
    """First non-blank cell among a field's columns, None if all blank."""
    if not columns:
        return None
    for column in columns:
        value = row.get(column)
        if not is_blank(value):
            return value
    return None


def resolve_conversion_rate(value) -> int:
    """Selling units per purchase unit; invalid or non-positive values become 1."""
    rate = parse_int(value)
    if rate is None or rate <= 0:
        return 1
    return rate


def resolve_purchase_price(per_selling_unit, per_purchase_unit, conversion_rate: int) -> float:
    """Purchase price per selling unit.

    Priority:
    1. Price per selling unit, if > 0
    2. Price per purchase unit divided by the conversion rate, if > 0
    3. 0
    """
    price = parse_number(per_selling_unit, 0.0)
    if price > 0:
        return price
    price = parse_number(per_purchase_unit, 0.0)
    if price > 0 and conversion_rate > 0:
        return price / conversion_rate
    return 0.0


def resolve_stock(
    total,
    purchase_qty,
    selling_remainder,
    legacy,
    conversion_rate: int
) -> Optional[int]:
    """Stock in selling units, or None when the row carries no stock at all.

    Priority:
    1. Combined total column
    2. Purchase-unit quantity * conversion rate + selling-unit remainder
    3. Legacy recorded-stock column
    """
    if not is_blank(total):
        return parse_int(total)
    if not is_blank(purchase_qty) or not is_blank(selling_remainder):
        purchase = parse_int(purchase_qty) or 0
        remainder = parse_int(selling_remainder) or 0
        return purchase * conversion_rate + remainder
    if not is_blank(legacy):
        return parse_int(legacy)
    return None


def category_prefix(name: str) -> str:
    return name[:CATEGORY_PREFIX_LENGTH].upper()


class WorkbookImporter:
    """
    Merges workbook sheets into a working copy of a store.

    The original store is never touched: all rows are applied to one deep
    copy, which the caller persists in a single save. Within a batch, a
    later row with the same natural key overwrites an earlier one.
    """

    def __init__(self, store: Store, today: Optional[date] = None):
        self.store = store.copy()
        self.today = today or date.today()
        self.added = 0
        self.updated = 0

    def run(self, sheets: dict[str, pd.DataFrame], selection: str = IMPORT_ALL) -> ImportResult:
        """
        Import sheets into the working copy.

        Args:
            sheets: Sheet name -> DataFrame (header in row 1)
            selection: "all" for every recognized sheet, or a single tab
                ("items", "assets", "costs")

        Returns:
            ImportResult with the merged store and added/updated counts

        Raises:
            SheetNotFoundError: If a single tab was requested and no sheet matches it
            ValueError: If selection is not a known tab
        """
        result = ImportResult(store=self.store)

        if selection == IMPORT_ALL:
            targets = [(name, sheet_tab(name)) for name in sheets]
        elif selection in SHEET_KEYWORDS:
            sheet_name = find_sheet(sheets, selection)
            if sheet_name is None:
                raise SheetNotFoundError(
                    f"No sheet matching '{SHEET_KEYWORDS[selection]}' in workbook "
                    f"(sheets: {', '.join(map(str, sheets)) or 'none'})"
                )
            targets = [(sheet_name, selection)]
        else:
            raise ValueError(f"Unknown import selection: {selection}")

        for sheet_name, tab in targets:
            df = sheets[sheet_name]
            if tab == "items":
                self._import_items(sheet_name, df)
            elif tab == "assets":
                self._import_assets(sheet_name, df)
            elif tab == "costs":
                self._import_costs(sheet_name, df)
            else:
                logger.info("Skipping unrecognized sheet '%s'", sheet_name, extra={"sheet": sheet_name})
                result.skipped_sheets.append(sheet_name)
                continue
            result.processed_sheets.append(sheet_name)

        result.added = self.added
        result.updated = self.updated
        logger.info(
            "Import into store %s: %d added, %d updated (sheets: %s)",
            self.store.id,
            self.added,
            self.updated,
            ", ".join(map(str, result.processed_sheets)) or "none",
            extra={"store_id": self.store.id},
        )
        return result

    # ------------------------------------------------------------------
    # Reference data
    # ------------------------------------------------------------------

    def _resolve_category(self, categories: list, name: str, factory, id_prefix: str):
        """Find a category by case-insensitive name, creating it if missing."""
        if not name:
            return None
        wanted = name.lower()
        for category in categories:
            if category.name.lower() == wanted:
                return category
        category = factory(id=generate_id(id_prefix), name=name, prefix=category_prefix(name))
        categories.append(category)
        logger.debug("Created category '%s' (%s)", name, category.prefix)
        return category

    def _resolve_unit(self, name: str) -> Optional[Unit]:
        """Find a unit by case-insensitive name, creating it if missing."""
        if not name:
            return None
        wanted = name.lower()
        for unit in self.store.units:
            if unit.name.lower() == wanted:
                return unit
        unit = Unit(id=generate_id(UNIT_ID_PREFIX), name=name)
        self.store.units.append(unit)
        logger.debug("Created unit '%s'", name)
        return unit

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def _import_items(self, sheet_name: str, df: pd.DataFrame) -> None:
        columns = resolve_columns(df.columns, ITEM_COLUMNS)
        if missing_fields(columns, ["name"]):
            logger.warning("Sheet '%s' has no item name column; no rows imported", sheet_name)
            return

        store = self.store
        for row_number, (_, row) in enumerate(df.iterrows(), start=2):
            def value(field_name):
                return first_value(row, columns.get(field_name))

            name = cell_text(value("name"))
            if not name:
                continue

            category = self._resolve_category(
                store.item_categories,
                cell_text(value("category")),
                ItemCategory,
                ITEM_CATEGORY_ID_PREFIX,
            )

            purchase_unit = self._resolve_unit(cell_text(value("purchase_unit")))
            selling_unit = self._resolve_unit(cell_text(value("selling_unit")))
            # A single known unit serves both roles (1:1 item)
            purchase_unit = purchase_unit or selling_unit
            selling_unit = selling_unit or purchase_unit

            raw_rate = value("conversion")
            conversion_rate = resolve_conversion_rate(raw_rate)
            if raw_rate is not None and parse_int(raw_rate) != conversion_rate:
                logger.debug(
                    "Sheet '%s' row %d: conversion '%s' -> %d",
                    sheet_name, row_number, raw_rate, conversion_rate,
                )

            purchase_price = resolve_purchase_price(
                value("price_per_selling_unit"),
                value("price_per_purchase_unit"),
                conversion_rate,
            )
            selling_price = parse_number(value("selling_price"), 0.0)

            stock = resolve_stock(
                value("stock_total"),
                value("stock_purchase_units"),
                value("stock_selling_remainder"),
                value("stock_legacy"),
                conversion_rate,
            )

            fields = {
                "name": name,
                "description": cell_text(value("description")),
                "category_id": category.id if category else "",
                "purchase_unit_id": purchase_unit.id if purchase_unit else "",
                "selling_unit_id": selling_unit.id if selling_unit else "",
                "conversion_rate": conversion_rate,
                "purchase_price": purchase_price,
                "selling_price": selling_price,
            }

            existing = next(
                (i for i in store.items if i.name.strip().lower() == name.lower()),
                None,
            )
            if existing is not None:
                for attr, new_value in fields.items():
                    setattr(existing, attr, new_value)
                inventory = store.inventory_for(existing.id)
                if inventory is not None:
                    if stock is not None:
                        inventory.recorded_stock = stock
                elif stock is not None:
                    store.inventory.append(StoreInventory(item_id=existing.id, recorded_stock=stock))
                self.updated += 1
            else:
                prefix = (category.prefix if category else "") or DEFAULT_ITEM_PREFIX
                sku = cell_text(value("sku")) or f"{prefix}-{len(store.items) + 1:03d}"
                item = Item(id=generate_id(f"{store.id}-{ITEM_ID_PREFIX}"), sku=sku, **fields)
                store.items.append(item)
                store.inventory.append(
                    StoreInventory(item_id=item.id, recorded_stock=stock if stock is not None else 0)
                )
                self.added += 1

    # ------------------------------------------------------------------
    # Assets
    # ------------------------------------------------------------------

    def _import_assets(self, sheet_name: str, df: pd.DataFrame) -> None:
        columns = resolve_columns(df.columns, ASSET_COLUMNS)
        if missing_fields(columns, ["code"]) and missing_fields(columns, ["name"]):
            logger.warning("Sheet '%s' has no asset code or name column; no rows imported", sheet_name)
            return

        store = self.store
        for row_number, (_, row) in enumerate(df.iterrows(), start=2):
            def value(field_name):
                return first_value(row, columns.get(field_name))

            code = cell_text(value("code"))
            name = cell_text(value("name"))
            if not code and not name:
                continue

            category = self._resolve_category(
                store.asset_categories,
                cell_text(value("category")),
                AssetCategory,
                ASSET_CATEGORY_ID_PREFIX,
            )

            raw_condition = value("condition")
            condition = AssetCondition.parse(raw_condition)
            if condition is None:
                if raw_condition is not None:
                    logger.debug(
                        "Sheet '%s' row %d: unknown condition '%s', using Normal",
                        sheet_name, row_number, raw_condition,
                    )
                condition = AssetCondition.NORMAL

            fields = {
                "name": name,
                "description": cell_text(value("description")),
                "category_id": category.id if category else "",
                "purchase_date": parse_date(value("purchase_date")) or self.today.isoformat(),
                "value": parse_number(value("value"), 0.0),
                "condition": condition,
            }

            existing = next((a for a in store.assets if code and a.code == code), None)
            if existing is not None:
                for attr, new_value in fields.items():
                    setattr(existing, attr, new_value)
                self.updated += 1
            else:
                prefix = (category.prefix if category else "") or DEFAULT_ASSET_PREFIX
                store.assets.append(Asset(
                    id=generate_id(f"{store.id}-{ASSET_ID_PREFIX}"),
                    code=code or f"{prefix}-{len(store.assets) + 1:03d}",
                    **fields,
                ))
                self.added += 1

    # ------------------------------------------------------------------
    # Costs
    # ------------------------------------------------------------------

    def _import_costs(self, sheet_name: str, df: pd.DataFrame) -> None:
        columns = resolve_columns(df.columns, COST_COLUMNS)
        if missing_fields(columns, ["name"]):
            logger.warning("Sheet '%s' has no cost name column; no rows imported", sheet_name)
            return

        store = self.store
        for row_number, (_, row) in enumerate(df.iterrows(), start=2):
            def value(field_name):
                return first_value(row, columns.get(field_name))

            name = cell_text(value("name"))
            if not name:
                continue

            frequency_text = cell_text(value("frequency")).lower()
            frequency = CostFrequency.parse(frequency_text)
            if frequency is None:
                if frequency_text:
                    logger.debug(
                        "Sheet '%s' row %d: unknown frequency '%s', using monthly",
                        sheet_name, row_number, frequency_text,
                    )
                frequency = CostFrequency.MONTHLY

            fields = {
                "name": name,
                "description": cell_text(value("description")),
                "amount": parse_number(value("amount"), 0.0),
                "frequency": frequency,
            }

            existing = next((c for c in store.costs if c.name.lower() == name.lower()), None)
            if existing is not None:
                for attr, new_value in fields.items():
                    setattr(existing, attr, new_value)
                self.updated += 1
            else:
                store.costs.append(OperationalCost(
                    id=generate_id(f"{store.id}-{COST_ID_PREFIX}"),
                    **fields,
                ))
                self.added += 1


def import_sheets(
    store: Store,
    sheets: dict[str, pd.DataFrame],
    selection: str = IMPORT_ALL,
    today: Optional[date] = None
) -> ImportResult:
    """Merge already-loaded sheets into a copy of the store."""
    return WorkbookImporter(store, today=today).run(sheets, selection)


def import_workbook(
    store: Store,
    file: Union[bytes, BinaryIO],
    selection: str = IMPORT_ALL,
    today: Optional[date] = None
) -> ImportResult:
    """Load a workbook and merge it into a copy of the store.

    Raises:
        WorkbookParseError: If the file is not a readable workbook
        SheetNotFoundError: If a single tab was requested and is missing
    """
    sheets = load_workbook_sheets(file)
    return import_sheets(store, sheets, selection, today=today)
