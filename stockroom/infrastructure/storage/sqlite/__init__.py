"""SQLite storage implementations."""

from stockroom.infrastructure.storage.sqlite.activity_store import SQLiteActivityLogStore
from stockroom.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)
from stockroom.infrastructure.storage.sqlite.stock_store import SQLiteStockStore
from stockroom.infrastructure.storage.sqlite.uniform_store import SQLiteUniformStore

# Singleton instances
_stock_store: SQLiteStockStore | None = None
_uniform_store: SQLiteUniformStore | None = None
_activity_store: SQLiteActivityLogStore | None = None


async def get_stock_store() -> SQLiteStockStore:
    """Get singleton stock store instance."""
    global _stock_store
    if _stock_store is None:
        _stock_store = SQLiteStockStore()
    return _stock_store


async def get_uniform_store() -> SQLiteUniformStore:
    """Get singleton uniform store instance."""
    global _uniform_store
    if _uniform_store is None:
        _uniform_store = SQLiteUniformStore()
    return _uniform_store


async def get_activity_store() -> SQLiteActivityLogStore:
    """Get singleton activity log store instance."""
    global _activity_store
    if _activity_store is None:
        _activity_store = SQLiteActivityLogStore()
    return _activity_store


def reset_stores() -> None:
    """Drop store singletons (for testing)."""
    global _stock_store, _uniform_store, _activity_store
    _stock_store = None
    _uniform_store = None
    _activity_store = None


__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
    # Store classes
    "SQLiteStockStore",
    "SQLiteUniformStore",
    "SQLiteActivityLogStore",
    # Factory functions
    "get_stock_store",
    "get_uniform_store",
    "get_activity_store",
    "reset_stores",
]
