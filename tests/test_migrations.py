"""Tests for store document migrations."""

import pytest

from stock_opname.errors import MigrationError
from stock_opname.migrations import (
    SCHEMA_VERSION_KEY,
    STORE_SCHEMA_VERSION,
    migrate_store_document,
    stamp_store_document,
)
from stock_opname.models import Store
from tests.conftest import make_store


def test_bare_document_gets_all_collections():
    doc = migrate_store_document({"id": "S1", "name": "Toko"})

    assert doc[SCHEMA_VERSION_KEY] == STORE_SCHEMA_VERSION
    for key in ("itemCategories", "units", "items", "inventory", "assets", "costs", "investors", "cashFlow"):
        assert doc[key] == []
    assert doc["address"] == ""
    assert doc["capitalRecouped"] == 0


def test_input_document_not_modified():
    original = {"id": "S1", "name": "Toko", "items": [{"id": "I1", "conversionRate": -2}]}

    migrate_store_document(original)

    assert SCHEMA_VERSION_KEY not in original
    assert original["items"][0]["conversionRate"] == -2


def test_invalid_conversion_rates_floor_to_one():
    doc = migrate_store_document({
        "id": "S1",
        "items": [
            {"id": "I1", "conversionRate": 0},
            {"id": "I2", "conversionRate": "abc"},
            {"id": "I3", "conversionRate": 24},
        ],
    })

    assert [i["conversionRate"] for i in doc["items"]] == [1, 1, 24]


def test_existing_prefix_kept():
    doc = migrate_store_document({
        "id": "S1",
        "itemCategories": [{"id": "C1", "name": "Minuman", "prefix": "DRK"}],
        "assetCategories": [{"id": "C2", "name": "kendaraan"}],
    })

    assert doc["itemCategories"][0]["prefix"] == "DRK"
    assert doc["assetCategories"][0]["prefix"] == "KEN"


def test_current_version_passes_through():
    doc = stamp_store_document(make_store().to_dict())

    migrated = migrate_store_document(doc)

    assert Store.from_dict(migrated) == make_store()


def test_newer_version_rejected():
    with pytest.raises(MigrationError):
        migrate_store_document({"id": "S1", SCHEMA_VERSION_KEY: STORE_SCHEMA_VERSION + 1})
