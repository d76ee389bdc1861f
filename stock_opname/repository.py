"""Persistence boundary for stores and opname history.

A repository is an explicitly constructed handle:

    repo = JsonFileStoreRepository(Path("data"))
    async with repo:            # open(): load + migrate documents
        await repo.update(store)
                                # close(): drop listeners and cached state

Stores are always written as whole aggregates. Writes through one handle
are serialized with an asyncio.Lock and committed to memory only after the
backend persisted them, so readers never see a half-applied change.
Separate handles (or processes) on the same data still race: the last
write wins.
"""

import asyncio
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterable, Optional

from .config import DATA_FILENAME, HISTORY_KEY, STORES_KEY
from .errors import (
    ConfigurationError,
    SessionExistsError,
    StoreExistsError,
    StoreNotFoundError,
)
from .migrations import migrate_store_document, stamp_store_document
from .models import OpnameSession, Store
from .reconciliation import apply_session
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

StoresCallback = Callable[[list[Store]], None]
HistoryCallback = Callable[[list[OpnameSession]], None]
Unsubscribe = Callable[[], None]


class StoreRepository(ABC):
    """Async store/opname repository with snapshot subscriptions."""

    def __init__(self):
        self._stores: dict[str, Store] = {}
        self._sessions: dict[str, OpnameSession] = {}
        self._store_listeners: list[StoresCallback] = []
        self._history_listeners: list[HistoryCallback] = []
        self._lock = asyncio.Lock()
        self._opened = False

    # ------------------------------------------------------------------
    # Backend hooks
    # ------------------------------------------------------------------

    @abstractmethod
    async def _load(self) -> tuple[list[Store], list[OpnameSession]]:
        """Read every store and session from the backend."""

    @abstractmethod
    async def _persist(self, stores: list[Store], sessions: list[OpnameSession]) -> None:
        """Replace the backend contents with the given state in one step."""

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def open(self) -> None:
        if self._opened:
            return
        stores, sessions = await self._load()
        self._stores = {s.id: s for s in stores}
        self._sessions = {s.id: s for s in sessions}
        self._opened = True
        logger.debug("%s opened: %d stores, %d sessions",
                     type(self).__name__, len(self._stores), len(self._sessions))

    async def close(self) -> None:
        self._store_listeners.clear()
        self._history_listeners.clear()
        self._stores = {}
        self._sessions = {}
        self._opened = False

    async def __aenter__(self) -> "StoreRepository":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _require_open(self) -> None:
        if not self._opened:
            raise RuntimeError(f"{type(self).__name__} is not open")

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def _store_snapshot(self) -> list[Store]:
        return sorted((s.copy() for s in self._stores.values()), key=lambda s: s.name)

    def _history_snapshot(self) -> list[OpnameSession]:
        return sorted(self._sessions.values(), key=lambda s: s.date, reverse=True)

    def subscribe(self, callback: StoresCallback) -> Unsubscribe:
        """Push the full store list (by name) now and after every write."""
        self._require_open()
        self._store_listeners.append(callback)
        callback(self._store_snapshot())

        def unsubscribe() -> None:
            if callback in self._store_listeners:
                self._store_listeners.remove(callback)

        return unsubscribe

    def subscribe_history(self, callback: HistoryCallback) -> Unsubscribe:
        """Push all opname sessions (newest first) now and after every write."""
        self._require_open()
        self._history_listeners.append(callback)
        callback(self._history_snapshot())

        def unsubscribe() -> None:
            if callback in self._history_listeners:
                self._history_listeners.remove(callback)

        return unsubscribe

    def _notify(self, stores: bool = True, history: bool = False) -> None:
        targets = []
        if stores:
            targets += [(cb, self._store_snapshot) for cb in list(self._store_listeners)]
        if history:
            targets += [(cb, self._history_snapshot) for cb in list(self._history_listeners)]
        for callback, snapshot in targets:
            try:
                callback(snapshot())
            except Exception:
                # The write is already persisted; listener errors are only logged
                logger.exception("Snapshot listener %r failed", callback)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get(self, store_id: str) -> Optional[Store]:
        self._require_open()
        store = self._stores.get(store_id)
        return store.copy() if store else None

    async def require(self, store_id: str) -> Store:
        """Like get, but raises StoreNotFoundError for unknown ids."""
        store = await self.get(store_id)
        if store is None:
            raise StoreNotFoundError(store_id)
        return store

    async def list_stores(self) -> list[Store]:
        self._require_open()
        return self._store_snapshot()

    async def list_history(self, store_id: Optional[str] = None) -> list[OpnameSession]:
        self._require_open()
        sessions = self._history_snapshot()
        if store_id is not None:
            sessions = [s for s in sessions if s.store_id == store_id]
        return sessions

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def _commit(self, stores: dict[str, Store], sessions: dict[str, OpnameSession]) -> None:
        await self._persist(list(stores.values()), list(sessions.values()))
        self._stores = stores
        self._sessions = sessions

    async def create(self, store: Store) -> None:
        self._require_open()
        async with self._lock:
            if store.id in self._stores:
                raise StoreExistsError(store.id)
            stores = {**self._stores, store.id: store.copy()}
            await self._commit(stores, self._sessions)
        logger.info("Created store %s (%s)", store.id, store.name, extra={"store_id": store.id})
        self._notify()

    async def update(self, store: Store) -> None:
        """Replace the whole store aggregate (created if missing)."""
        self._require_open()
        async with self._lock:
            stores = {**self._stores, store.id: store.copy()}
            await self._commit(stores, self._sessions)
        logger.debug("Saved store %s", store.id)
        self._notify()

    async def delete(self, store_id: str) -> int:
        """
        Delete a store and every opname session recorded for it.

        Returns:
            Number of sessions removed with the store

        Raises:
            StoreNotFoundError: If the store does not exist
        """
        self._require_open()
        async with self._lock:
            if store_id not in self._stores:
                raise StoreNotFoundError(store_id)
            stores = {k: v for k, v in self._stores.items() if k != store_id}
            sessions = {k: v for k, v in self._sessions.items() if v.store_id != store_id}
            removed = len(self._sessions) - len(sessions)
            await self._commit(stores, sessions)
        logger.info("Deleted store %s with %d opname sessions", store_id, removed, extra={"store_id": store_id})
        self._notify(stores=True, history=True)
        return removed

    async def create_session(self, session: OpnameSession) -> Store:
        """
        Record a completed session and apply it to its store in one write.

        Returns:
            The updated store

        Raises:
            StoreNotFoundError: If the owning store no longer exists (nothing is written)
            SessionExistsError: If the session was already recorded
        """
        self._require_open()
        async with self._lock:
            store = self._stores.get(session.store_id)
            if store is None:
                raise StoreNotFoundError(session.store_id)
            if session.id in self._sessions:
                raise SessionExistsError(f"Opname session {session.id} already recorded")
            updated = apply_session(store, session)
            stores = {**self._stores, updated.id: updated}
            sessions = {**self._sessions, session.id: session}
            await self._commit(stores, sessions)
        logger.info(
            "Recorded opname %s for store %s (%d items, %d assets)",
            session.id, session.store_id, len(session.items), len(session.asset_changes),
            extra={"store_id": session.store_id, "session_id": session.id},
        )
        self._notify(stores=True, history=True)
        return updated.copy()


class InMemoryStoreRepository(StoreRepository):
    """Process-local repository; also the offline fallback."""

    def __init__(
        self,
        stores: Iterable[Store] = (),
        sessions: Iterable[OpnameSession] = ()
    ):
        super().__init__()
        self._seed_stores = [s.copy() for s in stores]
        self._seed_sessions = list(sessions)

    async def _load(self) -> tuple[list[Store], list[OpnameSession]]:
        return self._seed_stores, self._seed_sessions

    async def _persist(self, stores: list[Store], sessions: list[OpnameSession]) -> None:
        return None


class JsonFileStoreRepository(StoreRepository):
    """
    Repository backed by a single JSON document on disk.

    The document holds both collections and is replaced atomically
    (temp file + os.replace), so a session and its store update are never
    persisted separately. Store documents are migrated on load.
    """

    def __init__(self, data_dir: Path, filename: str = DATA_FILENAME):
        super().__init__()
        self.data_dir = Path(data_dir)
        self.path = self.data_dir / filename

    def _read_document(self) -> dict:
        if not self.path.exists():
            return {}
        with open(self.path, encoding="utf-8") as f:
            return json.load(f)

    def _write_document(self, document: dict) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.data_dir, prefix=".inventory-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    async def _load(self) -> tuple[list[Store], list[OpnameSession]]:
        document = await asyncio.to_thread(self._read_document)
        stores = [
            Store.from_dict(migrate_store_document(doc))
            for doc in document.get(STORES_KEY, [])
        ]
        sessions = [OpnameSession.from_dict(doc) for doc in document.get(HISTORY_KEY, [])]
        logger.info("Loaded %d stores and %d sessions from %s", len(stores), len(sessions), self.path)
        return stores, sessions

    async def _persist(self, stores: list[Store], sessions: list[OpnameSession]) -> None:
        document = {
            STORES_KEY: [stamp_store_document(s.to_dict()) for s in stores],
            HISTORY_KEY: [s.to_dict() for s in sessions],
            "updatedAt": datetime.now(timezone.utc).isoformat(),
        }
        await asyncio.to_thread(self._write_document, document)


def create_repository(
    settings: Optional[Settings] = None,
    strict: bool = False,
    data_dir: Optional[str] = None
) -> StoreRepository:
    """
    Build the repository selected by settings.

    Falls back to an in-memory (offline) repository when the settings are
    incomplete, unless strict is set.

    Args:
        settings: Settings to use (defaults to the cached environment settings)
        strict: Raise instead of falling back to offline mode
        data_dir: If given, selects the JSON backend in that directory

    Raises:
        ConfigurationError: In strict mode, if required settings are missing
    """
    settings = settings or get_settings()
    if data_dir is not None:
        settings = settings.model_copy(update={"STORAGE_BACKEND": "json", "DATA_DIR": data_dir})
    backend = settings.STORAGE_BACKEND.lower()

    if not settings.is_configured:
        message = f"Storage settings incomplete (missing: {', '.join(settings.missing_fields)})"
        if strict:
            raise ConfigurationError(message)
        logger.warning("%s; running in offline mode with in-memory storage", message)
        return InMemoryStoreRepository()

    if backend == "json":
        return JsonFileStoreRepository(Path(settings.DATA_DIR))
    return InMemoryStoreRepository()
