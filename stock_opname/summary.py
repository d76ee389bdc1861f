"""Read-only aggregations over stores and opname history."""

from dataclasses import dataclass
from typing import Iterable, Optional

from .models import OpnameSession, Store


@dataclass
class SessionSummary:
    """Totals for one completed opname session."""
    session_id: str
    date: str
    items_counted: int
    items_with_discrepancy: int
    total_surplus: int   # sum of positive discrepancies
    total_shortage: int  # sum of negative discrepancies, as a positive number
    assets_changed: int

    @property
    def net_discrepancy(self) -> int:
        return self.total_surplus - self.total_shortage

    @property
    def is_clean(self) -> bool:
        """No stock discrepancy and no asset condition change."""
        return self.items_with_discrepancy == 0 and self.assets_changed == 0


def store_history(history: Iterable[OpnameSession], store_id: str) -> list[OpnameSession]:
    """Sessions of one store, newest first."""
    sessions = [s for s in history if s.store_id == store_id]
    return sorted(sessions, key=lambda s: s.date, reverse=True)


def latest_session(history: Iterable[OpnameSession], store_id: str) -> Optional[OpnameSession]:
    """Most recent session of a store, None if it was never counted."""
    sessions = store_history(history, store_id)
    return sessions[0] if sessions else None


def summarize_session(session: OpnameSession) -> SessionSummary:
    discrepancies = [item.discrepancy for item in session.items]
    return SessionSummary(
        session_id=session.id,
        date=session.date,
        items_counted=len(session.items),
        items_with_discrepancy=sum(1 for d in discrepancies if d != 0),
        total_surplus=sum(d for d in discrepancies if d > 0),
        total_shortage=-sum(d for d in discrepancies if d < 0),
        assets_changed=sum(1 for change in session.asset_changes if change.changed),
    )


def inventory_value(store: Store) -> float:
    """Recorded stock valued at purchase price (per selling unit)."""
    prices = {item.id: item.purchase_price for item in store.items}
    return sum(inv.recorded_stock * prices.get(inv.item_id, 0.0) for inv in store.inventory)
