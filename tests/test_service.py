"""Tests for StoreService (repository + import/export + opname)."""

import asyncio
from datetime import datetime, timezone

import pytest

from stock_opname.errors import (
    SheetNotFoundError,
    StoreNotFoundError,
    TrialExpiredError,
    WorkbookParseError,
)
from stock_opname.identity import UserIdentity, UserRole, require_active
from stock_opname.repository import InMemoryStoreRepository
from stock_opname.service import StoreService
from tests.conftest import create_item_row, create_test_df, workbook_bytes


NOW = datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)


def demo_user(trial_ends_at):
    return UserIdentity(uid="u1", email="demo@example.com", role=UserRole.DEMO, trial_ends_at=trial_ends_at)


class TestImportExport:

    def test_import_saves_merged_store(self, store):
        data = workbook_bytes({"Barang": create_test_df([create_item_row("Kopi Sachet")])})

        async def scenario():
            async with InMemoryStoreRepository([store]) as repo:
                service = StoreService(repo, clock=lambda: NOW)
                result = await service.import_workbook(store.id, data)
                return result, await repo.get(store.id)

        result, saved = asyncio.run(scenario())

        assert result.added == 1
        assert len(saved.items) == 3

    def test_failed_import_leaves_store_untouched(self, store):
        data = workbook_bytes({"Barang": create_test_df([create_item_row("Kopi Sachet")])})

        async def scenario():
            async with InMemoryStoreRepository([store]) as repo:
                service = StoreService(repo)
                with pytest.raises(WorkbookParseError):
                    await service.import_workbook(store.id, b"corrupt")
                with pytest.raises(SheetNotFoundError):
                    await service.import_workbook(store.id, data, "assets")
                return await repo.get(store.id)

        saved = asyncio.run(scenario())

        assert len(saved.items) == 2

    def test_import_into_missing_store(self):
        async def scenario():
            async with InMemoryStoreRepository() as repo:
                await StoreService(repo).import_workbook("STORE-404", b"")

        with pytest.raises(StoreNotFoundError):
            asyncio.run(scenario())

    def test_export(self, store):
        async def scenario():
            async with InMemoryStoreRepository([store]) as repo:
                return await StoreService(repo).export_workbook(store.id, "items")

        result = asyncio.run(scenario())

        assert result.filename == "Toko Maju-Barang.xlsx"
        assert result.data[:2] == b"PK"


class TestOpname:

    def test_full_opname_flow(self, store):
        async def scenario():
            async with InMemoryStoreRepository([store]) as repo:
                service = StoreService(repo, clock=lambda: NOW)
                draft = await service.start_opname(store.id)
                draft.set_physical_count("ITM-1", 28)
                draft.set_condition("AST-1", "Rusak")
                session = await service.complete_opname(draft)
                return session, await repo.get(store.id), await service.latest_summary(store.id)

        session, saved, summary = asyncio.run(scenario())

        assert session.date == NOW.isoformat()
        assert saved.inventory_for("ITM-1").recorded_stock == 28
        assert saved.assets[0].condition.value == "Rusak"
        assert summary.session_id == session.id
        assert summary.total_shortage == 2
        assert summary.assets_changed == 1

    def test_store_deleted_during_count(self, store):
        async def scenario():
            async with InMemoryStoreRepository([store]) as repo:
                service = StoreService(repo)
                draft = await service.start_opname(store.id)
                await service.delete_store(store.id)
                with pytest.raises(StoreNotFoundError):
                    await service.complete_opname(draft)
                return await repo.list_history()

        assert asyncio.run(scenario()) == []

    def test_no_history_summary(self, store):
        async def scenario():
            async with InMemoryStoreRepository([store]) as repo:
                return await StoreService(repo).latest_summary(store.id)

        assert asyncio.run(scenario()) is None


class TestStoreManagement:

    def test_create_and_rename(self):
        async def scenario():
            async with InMemoryStoreRepository() as repo:
                service = StoreService(repo)
                created = await service.create_store("Toko Baru", "Jl. Sudirman 2")
                await service.update_store_info(created.id, "Toko Baru Jaya")
                return created, await repo.list_stores()

        created, stores = asyncio.run(scenario())

        assert created.id.startswith("STORE-")
        assert [s.name for s in stores] == ["Toko Baru Jaya"]
        assert stores[0].address == ""


class TestTrialGate:
    """Expired demo identities cannot mutate stores."""

    def test_expired_demo_blocked(self, store):
        user = demo_user(datetime(2024, 2, 1, tzinfo=timezone.utc))

        async def scenario():
            async with InMemoryStoreRepository([store]) as repo:
                service = StoreService(repo, identity=user, clock=lambda: NOW)
                with pytest.raises(TrialExpiredError):
                    await service.start_opname(store.id)
                with pytest.raises(TrialExpiredError):
                    await service.import_workbook(store.id, b"")
                # reads still work
                return await service.export_workbook(store.id)

        assert asyncio.run(scenario()).sheet_names == ["Barang", "Aset", "Biaya"]

    def test_active_demo_allowed(self, store):
        user = demo_user(datetime(2024, 4, 1, tzinfo=timezone.utc))

        async def scenario():
            async with InMemoryStoreRepository([store]) as repo:
                service = StoreService(repo, identity=user, clock=lambda: NOW)
                return await service.start_opname(store.id)

        assert asyncio.run(scenario()).store_id == store.id

    def test_admin_never_expires(self):
        user = UserIdentity(uid="a1", email="admin@example.com", trial_ends_at=datetime(2000, 1, 1))

        require_active(user, NOW)

    def test_naive_trial_end_treated_as_utc(self):
        user = demo_user(datetime(2024, 3, 1, 9, 0))

        with pytest.raises(TrialExpiredError):
            require_active(user, NOW)

    def test_identity_from_dict(self):
        user = UserIdentity.from_dict({
            "uid": "u1",
            "email": "demo@example.com",
            "role": "demo",
            "trialEndsAt": "2024-02-01T00:00:00+00:00",
        })

        assert user.role == UserRole.DEMO
        assert user.is_expired(NOW)
