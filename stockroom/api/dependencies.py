"""
FastAPI dependency injection.

Provides services and request context to route handlers. Tests swap
these out through app.dependency_overrides.
"""

from fastapi import Header

from stockroom.application.services import (
    get_dashboard_service,
    get_stock_ledger,
    get_uniform_ledger,
)
from stockroom.core.services import (
    DashboardService,
    StockLedgerService,
    UniformLedgerService,
)


async def get_stock_service() -> StockLedgerService:
    return await get_stock_ledger()


async def get_uniform_service() -> UniformLedgerService:
    return await get_uniform_ledger()


async def get_dashboard() -> DashboardService:
    return await get_dashboard_service()


def get_actor_id(
    x_actor_id: str | None = Header(default=None, alias="X-Actor-Id"),
) -> str | None:
    """Acting user reference recorded on movements and activity entries."""
    if x_actor_id is None or not x_actor_id.strip():
        return None
    return x_actor_id.strip()
