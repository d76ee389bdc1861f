"""Versioned upgrades for persisted store documents.

Store documents are saved with a ``schemaVersion`` key. Older documents
are upgraded once, when the repository loads them, instead of patching
defaults in at every call site.
"""

import copy
import logging
from typing import Callable

from .config import CATEGORY_PREFIX_LENGTH
from .errors import MigrationError

logger = logging.getLogger(__name__)

SCHEMA_VERSION_KEY = "schemaVersion"
STORE_SCHEMA_VERSION = 2

_COLLECTION_DEFAULTS = (
    "itemCategories",
    "units",
    "assetCategories",
    "items",
    "inventory",
    "assets",
    "costs",
    "investors",
    "cashFlow",
)

_SCALAR_DEFAULTS = {
    "address": "",
    "capitalRecouped": 0,
    "netProfit": 0,
}


def _backfill_fields(doc: dict) -> dict:
    """v1: every store has all collections and bookkeeping fields."""
    for key in _COLLECTION_DEFAULTS:
        if not isinstance(doc.get(key), list):
            doc[key] = []
    for key, default in _SCALAR_DEFAULTS.items():
        if doc.get(key) is None:
            doc[key] = default
    return doc


def _normalize_children(doc: dict) -> dict:
    """v2: category prefixes, conversion rates >= 1, one inventory row per item."""
    for key in ("itemCategories", "assetCategories"):
        for category in doc[key]:
            if not category.get("prefix"):
                category["prefix"] = str(category.get("name", ""))[:CATEGORY_PREFIX_LENGTH].upper()

    for item in doc["items"]:
        try:
            rate = int(item.get("conversionRate") or 1)
        except (ValueError, TypeError):
            rate = 1
        item["conversionRate"] = rate if rate > 0 else 1

    # Duplicate inventory rows: keep the last one, in first-seen order
    rows: dict[str, dict] = {}
    for row in doc["inventory"]:
        rows[row.get("itemId")] = row
    if len(rows) != len(doc["inventory"]):
        logger.info(
            "Store %s: collapsed %d duplicate inventory rows",
            doc.get("id"),
            len(doc["inventory"]) - len(rows),
        )
    doc["inventory"] = list(rows.values())
    return doc


# (target version, step) in ascending order
MIGRATIONS: list[tuple[int, Callable[[dict], dict]]] = [
    (1, _backfill_fields),
    (2, _normalize_children),
]


def migrate_store_document(doc: dict) -> dict:
    """Upgrade a store document to STORE_SCHEMA_VERSION.

    Args:
        doc: Document as read from storage (not modified)

    Returns:
        Upgraded copy with ``schemaVersion`` set

    Raises:
        MigrationError: If the document was written by a newer schema
    """
    version = int(doc.get(SCHEMA_VERSION_KEY) or 0)
    if version > STORE_SCHEMA_VERSION:
        raise MigrationError(
            f"Store {doc.get('id')} has schema version {version}, "
            f"newest supported is {STORE_SCHEMA_VERSION}"
        )

    result = copy.deepcopy(doc)
    for target, step in MIGRATIONS:
        if version < target:
            result = step(result)
            logger.debug("Store %s migrated to schema v%d", result.get("id"), target)
    result[SCHEMA_VERSION_KEY] = STORE_SCHEMA_VERSION
    return result


def stamp_store_document(doc: dict) -> dict:
    """Mark a freshly serialized document with the current schema version."""
    doc[SCHEMA_VERSION_KEY] = STORE_SCHEMA_VERSION
    return doc
