"""Data models for stores, master data and opname sessions."""

import copy
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import pandas as pd


def generate_id(prefix: str) -> str:
    """Generate a unique id with a readable prefix (e.g. "ITM-3f9c0a1b2d4e")."""
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


class AssetCondition(str, Enum):
    GOOD = "Bagus"
    NORMAL = "Normal"
    DAMAGED = "Rusak"

    @classmethod
    def parse(cls, text) -> Optional["AssetCondition"]:
        """Match a condition name case-insensitively, None if unknown."""
        if isinstance(text, cls):
            return text
        wanted = str(text or "").strip().lower()
        for condition in cls:
            if condition.value.lower() == wanted or condition.name.lower() == wanted:
                return condition
        return None


class CostFrequency(str, Enum):
    DAILY = "harian"
    WEEKLY = "mingguan"
    MONTHLY = "bulanan"
    YEARLY = "tahunan"
    ONE_TIME = "sekali"

    @classmethod
    def parse(cls, text) -> Optional["CostFrequency"]:
        """Match a frequency by stored value or English name, None if unknown."""
        if isinstance(text, cls):
            return text
        wanted = str(text or "").strip().lower()
        for frequency in cls:
            if frequency.value == wanted:
                return frequency
        return _FREQUENCY_SYNONYMS.get(wanted)


_FREQUENCY_SYNONYMS = {
    "daily": CostFrequency.DAILY,
    "weekly": CostFrequency.WEEKLY,
    "monthly": CostFrequency.MONTHLY,
    "yearly": CostFrequency.YEARLY,
    "annual": CostFrequency.YEARLY,
    "one-time": CostFrequency.ONE_TIME,
    "one time": CostFrequency.ONE_TIME,
    "once": CostFrequency.ONE_TIME,
}


@dataclass
class ItemCategory:
    id: str
    name: str
    prefix: str = ""

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "prefix": self.prefix}

    @classmethod
    def from_dict(cls, data: dict) -> "ItemCategory":
        return cls(id=data["id"], name=data.get("name", ""), prefix=data.get("prefix", ""))


@dataclass
class AssetCategory(ItemCategory):
    pass


@dataclass
class Unit:
    id: str
    name: str

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_dict(cls, data: dict) -> "Unit":
        return cls(id=data["id"], name=data.get("name", ""))


@dataclass
class Item:
    """A stock-keeping item.

    purchase_price is always per *selling* unit; conversion_rate is the
    number of selling units in one purchase unit.
    """
    id: str
    sku: str
    name: str
    description: str = ""
    category_id: str = ""
    purchase_unit_id: str = ""
    selling_unit_id: str = ""
    conversion_rate: int = 1
    purchase_price: float = 0.0
    selling_price: float = 0.0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sku": self.sku,
            "name": self.name,
            "description": self.description,
            "categoryId": self.category_id,
            "purchaseUnitId": self.purchase_unit_id,
            "sellingUnitId": self.selling_unit_id,
            "conversionRate": self.conversion_rate,
            "purchasePrice": self.purchase_price,
            "sellingPrice": self.selling_price,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Item":
        return cls(
            id=data["id"],
            sku=data.get("sku", ""),
            name=data.get("name", ""),
            description=data.get("description", ""),
            category_id=data.get("categoryId") or "",
            purchase_unit_id=data.get("purchaseUnitId") or "",
            selling_unit_id=data.get("sellingUnitId") or "",
            conversion_rate=int(data.get("conversionRate", 1)),
            purchase_price=float(data.get("purchasePrice", 0)),
            selling_price=float(data.get("sellingPrice", 0)),
        )


@dataclass
class StoreInventory:
    item_id: str
    recorded_stock: int  # in selling units

    def to_dict(self) -> dict:
        return {"itemId": self.item_id, "recordedStock": self.recorded_stock}

    @classmethod
    def from_dict(cls, data: dict) -> "StoreInventory":
        return cls(item_id=data["itemId"], recorded_stock=int(data.get("recordedStock", 0)))


@dataclass
class Asset:
    id: str
    code: str
    name: str
    description: str = ""
    category_id: str = ""
    purchase_date: str = ""  # ISO "YYYY-MM-DD"
    value: float = 0.0
    condition: AssetCondition = AssetCondition.NORMAL

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "description": self.description,
            "categoryId": self.category_id,
            "purchaseDate": self.purchase_date,
            "value": self.value,
            "condition": self.condition.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Asset":
        return cls(
            id=data["id"],
            code=data.get("code", ""),
            name=data.get("name", ""),
            description=data.get("description", ""),
            category_id=data.get("categoryId") or "",
            purchase_date=data.get("purchaseDate", ""),
            value=float(data.get("value", 0)),
            condition=AssetCondition.parse(data.get("condition")) or AssetCondition.NORMAL,
        )


@dataclass
class OperationalCost:
    id: str
    name: str
    description: str = ""
    amount: float = 0.0
    frequency: CostFrequency = CostFrequency.MONTHLY

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "amount": self.amount,
            "frequency": self.frequency.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "OperationalCost":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            description=data.get("description", ""),
            amount=float(data.get("amount", 0)),
            frequency=CostFrequency.parse(data.get("frequency")) or CostFrequency.MONTHLY,
        )


@dataclass
class Investor:
    id: str
    name: str
    share_percentage: float = 0.0

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "sharePercentage": self.share_percentage}

    @classmethod
    def from_dict(cls, data: dict) -> "Investor":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            share_percentage=float(data.get("sharePercentage", 0)),
        )


@dataclass
class CashFlowEntry:
    id: str
    date: str
    amount: float = 0.0
    description: str = ""

    def to_dict(self) -> dict:
        return {"id": self.id, "date": self.date, "amount": self.amount, "description": self.description}

    @classmethod
    def from_dict(cls, data: dict) -> "CashFlowEntry":
        return cls(
            id=data["id"],
            date=data.get("date", ""),
            amount=float(data.get("amount", 0)),
            description=data.get("description", ""),
        )


@dataclass
class Store:
    """Root aggregate: a store and every child collection it owns.

    The aggregate is always saved as a whole; there is no field-level
    merge, so concurrent writers overwrite each other (last write wins).
    """
    id: str
    name: str
    address: str = ""
    item_categories: list[ItemCategory] = field(default_factory=list)
    units: list[Unit] = field(default_factory=list)
    asset_categories: list[AssetCategory] = field(default_factory=list)
    items: list[Item] = field(default_factory=list)
    inventory: list[StoreInventory] = field(default_factory=list)
    assets: list[Asset] = field(default_factory=list)
    costs: list[OperationalCost] = field(default_factory=list)
    investors: list[Investor] = field(default_factory=list)
    cash_flow: list[CashFlowEntry] = field(default_factory=list)
    capital_recouped: float = 0.0
    net_profit: float = 0.0

    def copy(self) -> "Store":
        """Deep copy, so edits never leak into the original aggregate."""
        return copy.deepcopy(self)

    def find_item(self, item_id: str) -> Optional[Item]:
        return next((i for i in self.items if i.id == item_id), None)

    def inventory_for(self, item_id: str) -> Optional[StoreInventory]:
        return next((inv for inv in self.inventory if inv.item_id == item_id), None)

    def unit_name(self, unit_id: str) -> str:
        return next((u.name for u in self.units if u.id == unit_id), "")

    def item_category_name(self, category_id: str) -> str:
        return next((c.name for c in self.item_categories if c.id == category_id), "")

    def asset_category_name(self, category_id: str) -> str:
        return next((c.name for c in self.asset_categories if c.id == category_id), "")

    def to_dict(self) -> dict:
        """Convert to the persisted document layout."""
        return {
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "itemCategories": [c.to_dict() for c in self.item_categories],
            "units": [u.to_dict() for u in self.units],
            "assetCategories": [c.to_dict() for c in self.asset_categories],
            "items": [i.to_dict() for i in self.items],
            "inventory": [inv.to_dict() for inv in self.inventory],
            "assets": [a.to_dict() for a in self.assets],
            "costs": [c.to_dict() for c in self.costs],
            "investors": [i.to_dict() for i in self.investors],
            "cashFlow": [e.to_dict() for e in self.cash_flow],
            "capitalRecouped": self.capital_recouped,
            "netProfit": self.net_profit,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Store":
        """Create a store from a (migrated) document."""
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            address=data.get("address") or "",
            item_categories=[ItemCategory.from_dict(c) for c in data.get("itemCategories", [])],
            units=[Unit.from_dict(u) for u in data.get("units", [])],
            asset_categories=[AssetCategory.from_dict(c) for c in data.get("assetCategories", [])],
            items=[Item.from_dict(i) for i in data.get("items", [])],
            inventory=[StoreInventory.from_dict(inv) for inv in data.get("inventory", [])],
            assets=[Asset.from_dict(a) for a in data.get("assets", [])],
            costs=[OperationalCost.from_dict(c) for c in data.get("costs", [])],
            investors=[Investor.from_dict(i) for i in data.get("investors", [])],
            cash_flow=[CashFlowEntry.from_dict(e) for e in data.get("cashFlow", [])],
            capital_recouped=float(data.get("capitalRecouped", 0)),
            net_profit=float(data.get("netProfit", 0)),
        )


@dataclass(frozen=True)
class OpnameItem:
    """One counted item in a completed opname session."""
    item_id: str
    item_name: str
    unit: str
    initial_stock: int
    physical_count: int
    discrepancy: int  # physical_count - initial_stock, may be negative

    def to_dict(self) -> dict:
        return {
            "itemId": self.item_id,
            "itemName": self.item_name,
            "unit": self.unit,
            "initialStock": self.initial_stock,
            "physicalCount": self.physical_count,
            "discrepancy": self.discrepancy,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "OpnameItem":
        return cls(
            item_id=data["itemId"],
            item_name=data.get("itemName", ""),
            unit=data.get("unit", ""),
            initial_stock=int(data.get("initialStock", 0)),
            physical_count=int(data.get("physicalCount", 0)),
            discrepancy=int(data.get("discrepancy", 0)),
        )


@dataclass(frozen=True)
class AssetChange:
    asset_id: str
    asset_name: str
    old_condition: AssetCondition
    new_condition: AssetCondition

    @property
    def changed(self) -> bool:
        return self.old_condition != self.new_condition

    def to_dict(self) -> dict:
        return {
            "assetId": self.asset_id,
            "assetName": self.asset_name,
            "oldCondition": self.old_condition.value,
            "newCondition": self.new_condition.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AssetChange":
        return cls(
            asset_id=data["assetId"],
            asset_name=data.get("assetName", ""),
            old_condition=AssetCondition.parse(data.get("oldCondition")) or AssetCondition.NORMAL,
            new_condition=AssetCondition.parse(data.get("newCondition")) or AssetCondition.NORMAL,
        )


@dataclass(frozen=True)
class OpnameSession:
    """Immutable audit record of one completed stock count."""
    id: str
    store_id: str
    date: str  # ISO-8601 timestamp
    items: tuple[OpnameItem, ...] = ()
    asset_changes: tuple[AssetChange, ...] = ()
    status: str = "completed"

    def find_item(self, item_id: str) -> Optional[OpnameItem]:
        return next((i for i in self.items if i.item_id == item_id), None)

    def find_asset_change(self, asset_id: str) -> Optional[AssetChange]:
        return next((c for c in self.asset_changes if c.asset_id == asset_id), None)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "storeId": self.store_id,
            "date": self.date,
            "status": self.status,
            "items": [i.to_dict() for i in self.items],
            "assetChanges": [c.to_dict() for c in self.asset_changes],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "OpnameSession":
        return cls(
            id=data["id"],
            store_id=data["storeId"],
            date=data.get("date", ""),
            status=data.get("status", "completed"),
            items=tuple(OpnameItem.from_dict(i) for i in data.get("items", [])),
            asset_changes=tuple(AssetChange.from_dict(c) for c in data.get("assetChanges", [])),
        )


@dataclass
class ImportResult:
    """Result of merging a workbook into a store."""
    store: Store
    added: int = 0
    updated: int = 0
    processed_sheets: list[str] = field(default_factory=list)
    skipped_sheets: list[str] = field(default_factory=list)

    @property
    def total_rows(self) -> int:
        """Rows that were merged (added or updated)."""
        return self.added + self.updated


@dataclass
class SheetExport:
    """One flat sheet ready to be written to a workbook."""
    sheet_name: str
    data: pd.DataFrame

    @property
    def row_count(self) -> int:
        return len(self.data)


@dataclass
class ExportResult:
    """Result containing workbook bytes for download."""
    filename: str
    data: bytes  # Excel file bytes
    sheet_names: list[str] = field(default_factory=list)
