"""
Service factory functions for dependency injection.

Wires the SQLite stores, the change notifier and settings into the core
ledger services. The API layer depends on these factories only.
"""

from typing import TYPE_CHECKING

from stockroom.config import get_settings
from stockroom.core.services import (
    DashboardService,
    StockLedgerService,
    UniformLedgerService,
)

if TYPE_CHECKING:
    from stockroom.core.interfaces import (
        IActivityLogStore,
        IChangeNotifier,
        IStockStore,
        IUniformStore,
    )


# Singleton service instances
_stock_ledger: StockLedgerService | None = None
_uniform_ledger: UniformLedgerService | None = None
_dashboard_service: DashboardService | None = None


async def get_stock_ledger(
    store: "IStockStore | None" = None,
    activity_store: "IActivityLogStore | None" = None,
    notifier: "IChangeNotifier | None" = None,
) -> StockLedgerService:
    """
    Get or create the StockLedgerService.

    Passing any dependency builds a fresh, uncached instance around it.
    """
    global _stock_ledger

    overridden = any(dep is not None for dep in (store, activity_store, notifier))
    if _stock_ledger is not None and not overridden:
        return _stock_ledger

    # Lazy import infrastructure to avoid circular imports
    from stockroom.infrastructure.notifications import get_notifier
    from stockroom.infrastructure.storage.sqlite import (
        get_activity_store,
        get_stock_store,
    )

    ledger_settings = get_settings().ledger
    service = StockLedgerService(
        store=store or await get_stock_store(),
        activity_store=activity_store or await get_activity_store(),
        notifier=notifier or get_notifier(),
        max_conflict_retries=ledger_settings.max_conflict_retries,
        default_min_quantity=ledger_settings.default_min_quantity,
        movement_limit=ledger_settings.movement_limit,
        activity_limit=ledger_settings.activity_limit,
    )
    if not overridden:
        _stock_ledger = service
    return service


async def get_uniform_ledger(
    store: "IUniformStore | None" = None,
    notifier: "IChangeNotifier | None" = None,
) -> UniformLedgerService:
    """Get or create the UniformLedgerService."""
    global _uniform_ledger

    overridden = store is not None or notifier is not None
    if _uniform_ledger is not None and not overridden:
        return _uniform_ledger

    from stockroom.infrastructure.notifications import get_notifier
    from stockroom.infrastructure.storage.sqlite import get_uniform_store

    ledger_settings = get_settings().ledger
    service = UniformLedgerService(
        store=store or await get_uniform_store(),
        notifier=notifier or get_notifier(),
        max_conflict_retries=ledger_settings.max_conflict_retries,
        default_min_quantity=ledger_settings.default_min_quantity,
        movement_limit=ledger_settings.movement_limit,
    )
    if not overridden:
        _uniform_ledger = service
    return service


async def get_dashboard_service(
    store: "IStockStore | None" = None,
) -> DashboardService:
    """Get or create the DashboardService."""
    global _dashboard_service

    if _dashboard_service is not None and store is None:
        return _dashboard_service

    from stockroom.infrastructure.storage.sqlite import get_stock_store

    ledger_settings = get_settings().ledger
    service = DashboardService(
        store=store or await get_stock_store(),
        recent_items_count=ledger_settings.recent_items_count,
        recent_movements_window=ledger_settings.recent_movements_window,
    )
    if store is None:
        _dashboard_service = service
    return service


def reset_services() -> None:
    """
    Reset all singleton service instances.

    Useful for testing or when configuration changes.
    """
    global _stock_ledger
    global _uniform_ledger
    global _dashboard_service

    _stock_ledger = None
    _uniform_ledger = None
    _dashboard_service = None


__all__ = [
    "get_stock_ledger",
    "get_uniform_ledger",
    "get_dashboard_service",
    "reset_services",
]
