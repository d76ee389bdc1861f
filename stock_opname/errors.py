"""Exception types raised by the opname and spreadsheet pipeline."""


class InventoryError(Exception):
    """Base class for all stock_opname errors."""


class WorkbookParseError(InventoryError):
    """Raised when an uploaded workbook cannot be read at all."""


class SheetNotFoundError(InventoryError):
    """Raised when the requested tab has no matching sheet."""


class StoreNotFoundError(InventoryError):
    """Raised when an operation targets a store that does not exist."""

    def __init__(self, store_id: str):
        super().__init__(f"Store not found: {store_id}")
        self.store_id = store_id


class StoreExistsError(InventoryError):
    """Raised when creating a store whose id is already taken."""

    def __init__(self, store_id: str):
        super().__init__(f"Store already exists: {store_id}")
        self.store_id = store_id


class SessionExistsError(InventoryError):
    """Raised when an opname session id was already recorded."""


class StoreMismatchError(InventoryError):
    """Raised when an opname session is applied to a different store."""


class InvalidCountError(InventoryError, ValueError):
    """Raised when a physical count is negative or not a whole number."""


class TrialExpiredError(InventoryError):
    """Raised when a demo identity is used after its trial ended."""


class MigrationError(InventoryError):
    """Raised when a persisted document cannot be upgraded."""


class ConfigurationError(InventoryError):
    """Raised when settings are incomplete for the requested backend."""
