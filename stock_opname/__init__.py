"""Stock opname reconciliation and spreadsheet import/export for store inventory."""

from .errors import (
    InventoryError,
    WorkbookParseError,
    SheetNotFoundError,
    StoreNotFoundError,
    StoreExistsError,
    SessionExistsError,
    StoreMismatchError,
    InvalidCountError,
    TrialExpiredError,
    MigrationError,
    ConfigurationError,
)
from .models import (
    AssetCondition,
    CostFrequency,
    ItemCategory,
    AssetCategory,
    Unit,
    Item,
    StoreInventory,
    Asset,
    OperationalCost,
    Investor,
    CashFlowEntry,
    Store,
    OpnameItem,
    AssetChange,
    OpnameSession,
    ImportResult,
    SheetExport,
    ExportResult,
    generate_id,
)
from .file_loader import (
    load_workbook_sheets,
    resolve_columns,
    sheet_tab,
    find_sheet,
)
from .importer import (
    WorkbookImporter,
    import_sheets,
    import_workbook,
    resolve_conversion_rate,
    resolve_purchase_price,
    resolve_stock,
)
from .exporter import (
    build_sheets,
    write_workbook,
    generate_export_result,
)
from .reconciliation import (
    OpnameDraft,
    start_session,
    finalize,
    apply_session,
    validate_count,
)
from .summary import (
    SessionSummary,
    latest_session,
    summarize_session,
    inventory_value,
)
from .identity import UserRole, UserIdentity, require_active
from .repository import (
    StoreRepository,
    InMemoryStoreRepository,
    JsonFileStoreRepository,
    create_repository,
)
from .service import StoreService

__all__ = [
    # Errors
    "InventoryError",
    "WorkbookParseError",
    "SheetNotFoundError",
    "StoreNotFoundError",
    "StoreExistsError",
    "SessionExistsError",
    "StoreMismatchError",
    "InvalidCountError",
    "TrialExpiredError",
    "MigrationError",
    "ConfigurationError",
    # Models
    "AssetCondition",
    "CostFrequency",
    "ItemCategory",
    "AssetCategory",
    "Unit",
    "Item",
    "StoreInventory",
    "Asset",
    "OperationalCost",
    "Investor",
    "CashFlowEntry",
    "Store",
    "OpnameItem",
    "AssetChange",
    "OpnameSession",
    "ImportResult",
    "SheetExport",
    "ExportResult",
    "generate_id",
    # File loader
    "load_workbook_sheets",
    "resolve_columns",
    "sheet_tab",
    "find_sheet",
    # Import / export
    "WorkbookImporter",
    "import_sheets",
    "import_workbook",
    "resolve_conversion_rate",
    "resolve_purchase_price",
    "resolve_stock",
    "build_sheets",
    "write_workbook",
    "generate_export_result",
    # Opname
    "OpnameDraft",
    "start_session",
    "finalize",
    "apply_session",
    "validate_count",
    "SessionSummary",
    "latest_session",
    "summarize_session",
    "inventory_value",
    # Identity
    "UserRole",
    "UserIdentity",
    "require_active",
    # Persistence
    "StoreRepository",
    "InMemoryStoreRepository",
    "JsonFileStoreRepository",
    "create_repository",
    "StoreService",
]
