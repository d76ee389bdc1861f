"""Store operations: import, export and opname on top of a repository.

Every mutating call reads the current store, computes the new aggregate
in memory and saves it with a single repository write. Failures before
that write (unreadable workbook, missing sheet, missing store) leave the
persisted state untouched.
"""

import logging
from datetime import datetime
from typing import BinaryIO, Callable, Optional, Union

from .exporter import EXPORT_ALL, generate_export_result
from .identity import UserIdentity, require_active
from .importer import IMPORT_ALL, import_workbook
from .models import ExportResult, ImportResult, OpnameSession, Store, generate_id
from .reconciliation import OpnameDraft, finalize, start_session
from .repository import StoreRepository
from .summary import SessionSummary, latest_session, summarize_session

logger = logging.getLogger(__name__)

STORE_ID_PREFIX = "STORE"


class StoreService:
    """
    Facade used by the CLI scripts (and any UI) to work on stores.

    Args:
        repository: Opened repository handle
        identity: Signed-in user; when given, mutating calls are refused
            once a demo trial has expired
        clock: Returns "now" (injectable for tests)
    """

    def __init__(
        self,
        repository: StoreRepository,
        identity: Optional[UserIdentity] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.repository = repository
        self.identity = identity
        self.clock = clock

    def _now(self) -> Optional[datetime]:
        return self.clock() if self.clock else None

    def _check_access(self) -> None:
        if self.identity is not None:
            require_active(self.identity, self._now())

    async def create_store(self, name: str, address: str = "") -> Store:
        self._check_access()
        store = Store(id=generate_id(STORE_ID_PREFIX), name=name, address=address)
        await self.repository.create(store)
        return store

    async def update_store_info(self, store_id: str, name: str, address: str = "") -> Store:
        self._check_access()
        store = await self.repository.require(store_id)
        store.name = name
        store.address = address
        await self.repository.update(store)
        return store

    async def delete_store(self, store_id: str) -> int:
        """Delete a store with its opname history; returns sessions removed."""
        self._check_access()
        return await self.repository.delete(store_id)

    async def import_workbook(
        self,
        store_id: str,
        file: Union[bytes, BinaryIO],
        selection: str = IMPORT_ALL
    ) -> ImportResult:
        """
        Import a workbook into a store and save the merged store.

        Raises:
            StoreNotFoundError: If the store does not exist
            WorkbookParseError: If the file is not a readable workbook
            SheetNotFoundError: If a single tab was requested and is missing
        """
        self._check_access()
        store = await self.repository.require(store_id)
        now = self._now()
        result = import_workbook(store, file, selection, today=now.date() if now else None)
        await self.repository.update(result.store)
        if result.skipped_sheets:
            logger.info("Store %s: skipped sheets %s", store_id, ", ".join(map(str, result.skipped_sheets)))
        return result

    async def export_workbook(self, store_id: str, selection: str = EXPORT_ALL) -> ExportResult:
        store = await self.repository.require(store_id)
        return generate_export_result(store, selection)

    async def start_opname(self, store_id: str) -> OpnameDraft:
        self._check_access()
        store = await self.repository.require(store_id)
        return start_session(store)

    async def complete_opname(self, draft: OpnameDraft) -> OpnameSession:
        """
        Finalize a draft, record the session and apply it to the store.

        Raises:
            StoreNotFoundError: If the store was deleted meanwhile (nothing is saved)
        """
        self._check_access()
        session = finalize(draft, self._now())
        await self.repository.create_session(session)
        return session

    async def latest_summary(self, store_id: str) -> Optional[SessionSummary]:
        """Summary of the store's most recent opname, None if never counted."""
        history = await self.repository.list_history(store_id)
        session = latest_session(history, store_id)
        return summarize_session(session) if session else None
