"""Tests for stock opname reconciliation.

Opname Rules:
1. A draft starts with physical count = recorded stock for every inventory line
2. discrepancy = physical count - initial stock (negative means shortage)
3. Applying a session overwrites recorded stock and asset conditions; items
   and assets not in the session are unchanged
4. Applying the same session twice gives the same store
"""

from datetime import datetime, timezone

import pytest

from stock_opname.errors import InvalidCountError, StoreMismatchError
from stock_opname.models import AssetCondition, OpnameItem, OpnameSession
from stock_opname.reconciliation import apply_session, finalize, start_session, validate_count
from tests.conftest import make_store


NOW = datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)


class TestStartSession:
    """Draft seeding."""

    def test_counts_start_at_recorded_stock(self, store):
        draft = start_session(store)

        assert draft.store_id == store.id
        assert [(row.item_id, row.physical_count) for row in draft.items] == [
            ("ITM-1", 30),
            ("ITM-2", 5),
        ]
        assert all(row.discrepancy == 0 for row in draft.items)
        assert not draft.has_changes

    def test_unit_is_selling_unit_name(self, store):
        draft = start_session(store)

        assert draft.items[0].unit == "Pcs"
        assert draft.items[0].item_name == "Teh Botol"

    def test_assets_start_unchanged(self, store):
        draft = start_session(store)

        assert len(draft.asset_changes) == 1
        change = draft.asset_changes[0]
        assert change.old_condition == AssetCondition.GOOD
        assert change.new_condition == AssetCondition.GOOD


class TestDraftEditing:
    """Count and condition edits on a draft."""

    def test_set_count_updates_discrepancy(self, store):
        draft = start_session(store)

        draft.set_physical_count("ITM-1", 25)

        assert draft.items[0].discrepancy == -5
        assert draft.has_changes

    def test_set_condition(self, store):
        draft = start_session(store)

        draft.set_condition("AST-1", "rusak")

        assert draft.asset_changes[0].new_condition == AssetCondition.DAMAGED
        assert draft.has_changes

    @pytest.mark.parametrize("count", [-1, 2.5, "5", True, None])
    def test_invalid_counts_rejected(self, store, count):
        draft = start_session(store)

        with pytest.raises(InvalidCountError):
            draft.set_physical_count("ITM-1", count)
        assert draft.items[0].physical_count == 30

    def test_whole_float_accepted(self):
        assert validate_count(5.0) == 5
        assert validate_count(0) == 0

    def test_invalid_condition_rejected(self, store):
        draft = start_session(store)

        with pytest.raises(ValueError):
            draft.set_condition("AST-1", "Hilang")

    def test_unknown_item_raises_key_error(self, store):
        draft = start_session(store)

        with pytest.raises(KeyError):
            draft.set_physical_count("ITM-404", 1)


class TestFinalize:
    """Freezing a draft into a session."""

    def test_session_records_discrepancies(self, store):
        draft = start_session(store)
        draft.set_physical_count("ITM-1", 25)
        draft.set_physical_count("ITM-2", 8)

        session = finalize(draft, NOW)

        assert session.store_id == store.id
        assert session.status == "completed"
        assert session.date == NOW.isoformat()
        assert session.id.startswith("OPN-")
        assert session.find_item("ITM-1").discrepancy == -5
        assert session.find_item("ITM-2").discrepancy == 3

    def test_finalize_does_not_touch_store(self, store):
        draft = start_session(store)
        draft.set_physical_count("ITM-1", 0)

        finalize(draft, NOW)

        assert store.inventory_for("ITM-1").recorded_stock == 30

    def test_later_draft_edits_do_not_change_session(self, store):
        draft = start_session(store)
        session = finalize(draft, NOW)

        draft.set_physical_count("ITM-1", 1)

        assert session.find_item("ITM-1").physical_count == 30


class TestApplySession:
    """Writing a session back onto a store."""

    def test_counts_and_conditions_applied(self, store):
        draft = start_session(store)
        draft.set_physical_count("ITM-1", 25)
        draft.set_condition("AST-1", AssetCondition.DAMAGED)
        session = finalize(draft, NOW)

        updated = apply_session(store, session)

        assert updated.inventory_for("ITM-1").recorded_stock == 25
        assert updated.inventory_for("ITM-2").recorded_stock == 5
        assert updated.assets[0].condition == AssetCondition.DAMAGED
        # input store is not modified
        assert store.inventory_for("ITM-1").recorded_stock == 30

    def test_items_outside_session_unchanged(self, store):
        session = OpnameSession(
            id="OPN-1",
            store_id=store.id,
            date=NOW.isoformat(),
            items=(OpnameItem("ITM-2", "Gula Pasir", "Pcs", 5, 2, -3),),
        )

        updated = apply_session(store, session)

        assert updated.inventory_for("ITM-1").recorded_stock == 30
        assert updated.inventory_for("ITM-2").recorded_stock == 2
        assert updated.assets[0].condition == AssetCondition.GOOD

    def test_apply_is_idempotent(self, store):
        draft = start_session(store)
        draft.set_physical_count("ITM-1", 12)
        draft.set_condition("AST-1", "Normal")
        session = finalize(draft, NOW)

        once = apply_session(store, session)
        twice = apply_session(once, session)

        assert once.to_dict() == twice.to_dict()

    def test_other_store_session_rejected(self, store):
        other = make_store(store_id="STORE-9")
        session = finalize(start_session(other), NOW)

        with pytest.raises(StoreMismatchError):
            apply_session(store, session)

    def test_session_dict_round_trip(self, store):
        draft = start_session(store)
        draft.set_physical_count("ITM-1", 20)
        draft.set_condition("AST-1", "Rusak")
        session = finalize(draft, NOW)

        assert OpnameSession.from_dict(session.to_dict()) == session
