"""Core domain entities."""

from stockroom.core.entities.activity import ActivityAction, ActivityLogEntry
from stockroom.core.entities.inventory import (
    Category,
    CategoryBreakdown,
    CategoryUpdate,
    DashboardStats,
    StockItem,
    StockItemDetails,
    StockItemUpdate,
    StockMovement,
    StockMovementDetails,
)
from stockroom.core.entities.ledger import (
    DEFAULT_MIN_QUANTITY,
    LedgerMovement,
    MovementType,
    QuantityChange,
    StockStatus,
    classify_stock,
)
from stockroom.core.entities.uniform import (
    IssuedRecord,
    IssuedRecordDetails,
    IssuedRecordUpdate,
    UniformCategory,
    UniformItem,
    UniformItemDetails,
    UniformItemUpdate,
    UniformMovement,
)

__all__ = [
    # Ledger primitives
    "DEFAULT_MIN_QUANTITY",
    "StockStatus",
    "classify_stock",
    "MovementType",
    "LedgerMovement",
    "QuantityChange",
    # Stock
    "Category",
    "CategoryUpdate",
    "CategoryBreakdown",
    "StockItem",
    "StockItemUpdate",
    "StockItemDetails",
    "StockMovement",
    "StockMovementDetails",
    "DashboardStats",
    # Uniforms
    "UniformCategory",
    "UniformItem",
    "UniformItemUpdate",
    "UniformItemDetails",
    "UniformMovement",
    "IssuedRecord",
    "IssuedRecordUpdate",
    "IssuedRecordDetails",
    # Activity
    "ActivityAction",
    "ActivityLogEntry",
]
