"""Dashboard aggregation over the stock ledger."""

from stockroom.config import get_logger
from stockroom.core.entities.inventory import (
    CategoryBreakdown,
    DashboardStats,
    StockItemDetails,
)
from stockroom.core.entities.ledger import MovementType, StockStatus
from stockroom.core.interfaces.stock_store import IStockStore

logger = get_logger(__name__)


class DashboardService:
    """
    Computes stock health figures for the dashboard.

    Counts come from the derived status of every item, so they always agree
    with what the item listing shows.
    """

    def __init__(
        self,
        store: IStockStore,
        recent_items_count: int = 5,
        recent_movements_window: int = 10,
    ) -> None:
        self._store = store
        self._recent_items_count = recent_items_count
        self._recent_movements_window = recent_movements_window

    async def get_stats(self) -> DashboardStats:
        items = await self._store.list_items()  # newest first
        movements = await self._store.list_movements(limit=self._recent_movements_window)
        categories = await self._store.list_categories()

        by_status = {status: 0 for status in StockStatus}
        for details in items:
            by_status[details.status] += 1

        recently_issued = [
            m for m in movements if m.movement.movement_type == MovementType.ISSUED
        ][: self._recent_items_count]

        breakdown = [
            CategoryBreakdown(
                name=category.name,
                count=sum(1 for d in items if d.item.category_id == category.id),
                color=category.color,
            )
            for category in categories
        ]

        stats = DashboardStats(
            total_items=len(items),
            in_stock=by_status[StockStatus.IN_STOCK],
            low_stock=by_status[StockStatus.LOW_STOCK],
            out_of_stock=by_status[StockStatus.OUT_OF_STOCK],
            recently_added=[d.item for d in items[: self._recent_items_count]],
            recently_issued=recently_issued,
            category_breakdown=breakdown,
        )
        logger.debug(
            "dashboard_stats_computed",
            total_items=stats.total_items,
            low_stock=stats.low_stock,
            out_of_stock=stats.out_of_stock,
        )
        return stats

    async def low_stock_items(self) -> list[StockItemDetails]:
        """Items at or below their threshold, including those out of stock."""
        items = await self._store.list_items()
        return [
            d
            for d in items
            if d.status in (StockStatus.LOW_STOCK, StockStatus.OUT_OF_STOCK)
        ]
