"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator
from contextlib import ExitStack
from datetime import datetime
from pathlib import Path
from unittest.mock import MagicMock, patch

import aiosqlite
import pytest
from httpx import ASGITransport, AsyncClient

from stockroom.api.dependencies import (
    get_dashboard,
    get_stock_service,
    get_uniform_service,
)
from stockroom.api.main import app
from stockroom.application.services import reset_services
from stockroom.core.services import (
    DashboardService,
    StockLedgerService,
    UniformLedgerService,
)
from stockroom.infrastructure.notifications import InProcessChangeNotifier
from stockroom.infrastructure.storage.sqlite import (
    SQLiteActivityLogStore,
    SQLiteStockStore,
    SQLiteUniformStore,
    reset_stores,
)
from stockroom.infrastructure.storage.sqlite import connection as conn_module
from stockroom.infrastructure.storage.sqlite.migrations import initialize_database
from stockroom.infrastructure.storage.sqlite.rows import to_db_timestamp


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "test.db"


@pytest.fixture
def mock_settings(temp_db_path: Path):
    """Mock settings with temp database path."""
    mock = MagicMock()
    mock.storage.db_path = temp_db_path
    mock.storage.pool_size = 2
    mock.storage.busy_timeout = 5000
    return mock


@pytest.fixture
async def migrated_db(temp_db_path: Path, mock_settings) -> AsyncGenerator[Path, None]:
    """
    Temporary database brought to the latest schema, with the global pool
    pointed at it.
    """
    await initialize_database(temp_db_path, create_backup_before=False)

    with patch.object(conn_module, "get_settings", return_value=mock_settings):
        conn_module._pool = None
        reset_stores()
        reset_services()
        try:
            yield temp_db_path
        finally:
            await conn_module.close_pool()
            reset_stores()
            reset_services()


@pytest.fixture
def notifier() -> InProcessChangeNotifier:
    return InProcessChangeNotifier()


# Storage helpers


@pytest.fixture
def fail_movement_insert():
    """Make a store module's movement insert raise a driver error."""
    with ExitStack() as stack:
        def install(store_module: str) -> None:
            stack.enter_context(
                patch(
                    f"stockroom.infrastructure.storage.sqlite.{store_module}.insert_movement",
                    side_effect=aiosqlite.OperationalError("disk I/O error"),
                )
            )

        yield install


@pytest.fixture
def backdate(migrated_db):
    """Rewrite created_at on the rows of table where column = value."""

    async def rewrite(table: str, column: str, value: int, when: datetime) -> None:
        async with aiosqlite.connect(migrated_db) as conn:
            await conn.execute(
                f"UPDATE {table} SET created_at = ? WHERE {column} = ?",
                (to_db_timestamp(when), value),
            )
            await conn.commit()

    return rewrite


# API clients: the app wired to real services over the temp database


@pytest.fixture
def stock_service(migrated_db, notifier) -> StockLedgerService:
    return StockLedgerService(SQLiteStockStore(), SQLiteActivityLogStore(), notifier)


@pytest.fixture
def uniform_service(migrated_db, notifier) -> UniformLedgerService:
    return UniformLedgerService(SQLiteUniformStore(), notifier)


@pytest.fixture
async def api_client(
    stock_service, uniform_service
) -> AsyncGenerator[AsyncClient, None]:
    dashboard = DashboardService(SQLiteStockStore())
    app.dependency_overrides[get_stock_service] = lambda: stock_service
    app.dependency_overrides[get_uniform_service] = lambda: uniform_service
    app.dependency_overrides[get_dashboard] = lambda: dashboard
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.pop(get_stock_service, None)
    app.dependency_overrides.pop(get_uniform_service, None)
    app.dependency_overrides.pop(get_dashboard, None)
