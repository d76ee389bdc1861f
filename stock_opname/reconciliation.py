"""Stock opname: physical count reconciliation against recorded stock.

LIFECYCLE:
1. start_session: draft seeded from the store (counts = recorded stock,
   new conditions = current conditions)
2. Operator edits counts and asset conditions on the draft
3. finalize: immutable OpnameSession with discrepancies (store untouched)
4. apply_session: counts and conditions written back onto a store copy
"""

import logging
import numbers
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Union

from .config import SESSION_ID_PREFIX
from .errors import InvalidCountError, StoreMismatchError
from .models import (
    AssetChange,
    AssetCondition,
    OpnameItem,
    OpnameSession,
    Store,
    generate_id,
)

logger = logging.getLogger(__name__)


@dataclass
class DraftItem:
    item_id: str
    item_name: str
    unit: str
    initial_stock: int
    physical_count: int

    @property
    def discrepancy(self) -> int:
        return self.physical_count - self.initial_stock


@dataclass
class DraftAssetChange:
    asset_id: str
    asset_name: str
    old_condition: AssetCondition
    new_condition: AssetCondition


@dataclass
class OpnameDraft:
    """Working copy of an opname being counted. Editable until finalized."""
    store_id: str
    items: list[DraftItem] = field(default_factory=list)
    asset_changes: list[DraftAssetChange] = field(default_factory=list)

    def _item(self, item_id: str) -> DraftItem:
        for row in self.items:
            if row.item_id == item_id:
                return row
        raise KeyError(f"Item {item_id} is not part of this opname")

    def _asset(self, asset_id: str) -> DraftAssetChange:
        for row in self.asset_changes:
            if row.asset_id == asset_id:
                return row
        raise KeyError(f"Asset {asset_id} is not part of this opname")

    def set_physical_count(self, item_id: str, count) -> None:
        """
        Record the counted quantity (in selling units) for an item.

        Raises:
            InvalidCountError: If count is negative or not a whole number
            KeyError: If the item is not in the draft
        """
        row = self._item(item_id)
        row.physical_count = validate_count(count)

    def set_condition(self, asset_id: str, condition: Union[AssetCondition, str]) -> None:
        """
        Record the observed condition of an asset.

        Raises:
            ValueError: If the condition is not Bagus/Normal/Rusak
            KeyError: If the asset is not in the draft
        """
        parsed = AssetCondition.parse(condition)
        if parsed is None:
            raise ValueError(f"Invalid asset condition: {condition!r}")
        self._asset(asset_id).new_condition = parsed

    @property
    def has_changes(self) -> bool:
        """Whether any count or condition differs from the recorded state."""
        return (
            any(row.discrepancy != 0 for row in self.items)
            or any(row.old_condition != row.new_condition for row in self.asset_changes)
        )


def validate_count(count) -> int:
    """Accept non-negative whole numbers only (5 and 5.0 are fine, -1 and 2.5 are not)."""
    if isinstance(count, bool) or not isinstance(count, numbers.Number):
        raise InvalidCountError(f"Physical count must be a number, got {count!r}")
    if isinstance(count, numbers.Integral):
        value = int(count)
    elif float(count).is_integer():
        value = int(count)
    else:
        raise InvalidCountError(f"Physical count must be a whole number, got {count!r}")
    if value < 0:
        raise InvalidCountError(f"Physical count cannot be negative, got {value}")
    return value


def start_session(store: Store) -> OpnameDraft:
    """
    Seed an opname draft from the store's current state.

    One row per inventory line (physical count starts at the recorded stock)
    and one row per asset (new condition starts at the current condition).
    """
    draft = OpnameDraft(store_id=store.id)

    for inventory in store.inventory:
        item = store.find_item(inventory.item_id)
        draft.items.append(DraftItem(
            item_id=inventory.item_id,
            item_name=item.name if item else "",
            unit=store.unit_name(item.selling_unit_id) if item else "",
            initial_stock=inventory.recorded_stock,
            physical_count=inventory.recorded_stock,
        ))

    for asset in store.assets:
        draft.asset_changes.append(DraftAssetChange(
            asset_id=asset.id,
            asset_name=asset.name,
            old_condition=asset.condition,
            new_condition=asset.condition,
        ))

    return draft


def finalize(draft: OpnameDraft, now: Optional[datetime] = None) -> OpnameSession:
    """
    Freeze a draft into a completed, immutable session.

    Does not touch the store; use apply_session (or the repository's
    create_session) to write the counts back.
    """
    now = now or datetime.now(timezone.utc)
    return OpnameSession(
        id=generate_id(SESSION_ID_PREFIX),
        store_id=draft.store_id,
        date=now.isoformat(),
        status="completed",
        items=tuple(
            OpnameItem(
                item_id=row.item_id,
                item_name=row.item_name,
                unit=row.unit,
                initial_stock=row.initial_stock,
                physical_count=row.physical_count,
                discrepancy=row.physical_count - row.initial_stock,
            )
            for row in draft.items
        ),
        asset_changes=tuple(
            AssetChange(
                asset_id=row.asset_id,
                asset_name=row.asset_name,
                old_condition=row.old_condition,
                new_condition=row.new_condition,
            )
            for row in draft.asset_changes
        ),
    )


def apply_session(store: Store, session: OpnameSession) -> Store:
    """
    Write a session's counts and conditions onto a copy of the store.

    Inventory rows and assets not covered by the session are left as they
    are. Applying the same session twice gives the same store.

    Raises:
        StoreMismatchError: If the session belongs to another store
    """
    if session.store_id != store.id:
        raise StoreMismatchError(
            f"Session {session.id} belongs to store {session.store_id}, not {store.id}"
        )

    counts = {row.item_id: row.physical_count for row in session.items}
    conditions = {change.asset_id: change.new_condition for change in session.asset_changes}

    result = store.copy()
    for inventory in result.inventory:
        if inventory.item_id in counts:
            inventory.recorded_stock = counts[inventory.item_id]
    for asset in result.assets:
        if asset.id in conditions:
            asset.condition = conditions[asset.id]

    logger.debug(
        "Applied session %s to store %s (%d items, %d assets)",
        session.id, store.id, len(counts), len(conditions),
    )
    return result
