"""Tests for DashboardService."""

from unittest.mock import AsyncMock

import pytest

from stockroom.core.entities import (
    Category,
    MovementType,
    StockItem,
    StockItemDetails,
    StockMovement,
    StockMovementDetails,
)
from stockroom.core.services import DashboardService


def _details(item_id: int, quantity: int, category_id: int | None = None):
    return StockItemDetails(
        item=StockItem(
            id=item_id,
            name=f"Item {item_id}",
            quantity=quantity,
            min_quantity=5,
            category_id=category_id,
        )
    )


def _movement(movement_id: int, movement_type: MovementType):
    delta = -1 if movement_type == MovementType.ISSUED else 1
    previous = 10
    return StockMovementDetails(
        movement=StockMovement(
            id=movement_id,
            item_id=1,
            movement_type=movement_type,
            quantity_delta=delta,
            previous_quantity=previous,
            new_quantity=previous + delta,
        ),
        item_name="Item 1",
    )


@pytest.fixture
def mock_store():
    store = AsyncMock()
    store.list_items.return_value = [
        _details(6, 0, category_id=1),
        _details(5, 3, category_id=1),
        _details(4, 5),
        _details(3, 6, category_id=2),
        _details(2, 50),
        _details(1, 100),
    ]
    store.list_movements.return_value = [
        _movement(i, MovementType.ISSUED if i % 2 else MovementType.ADDED)
        for i in range(10, 0, -1)
    ]
    store.list_categories.return_value = [
        Category(id=1, name="Clothing", color="#ff0000"),
        Category(id=2, name="Tools"),
        Category(id=3, name="Empty"),
    ]
    return store


class TestDashboardService:
    async def test_status_counts(self, mock_store):
        stats = await DashboardService(mock_store).get_stats()

        assert stats.total_items == 6
        assert stats.out_of_stock == 1
        assert stats.low_stock == 2
        assert stats.in_stock == 3

    async def test_recent_lists(self, mock_store):
        stats = await DashboardService(mock_store).get_stats()

        assert [i.id for i in stats.recently_added] == [6, 5, 4, 3, 2]
        assert len(stats.recently_issued) == 5
        assert all(
            m.movement.movement_type == MovementType.ISSUED for m in stats.recently_issued
        )
        mock_store.list_movements.assert_called_once_with(limit=10)

    async def test_category_breakdown(self, mock_store):
        stats = await DashboardService(mock_store).get_stats()

        breakdown = {b.name: (b.count, b.color) for b in stats.category_breakdown}
        assert breakdown == {
            "Clothing": (2, "#ff0000"),
            "Tools": (1, "#3B82F6"),
            "Empty": (0, "#3B82F6"),
        }

    async def test_low_stock_items(self, mock_store):
        items = await DashboardService(mock_store).low_stock_items()
        assert [d.item.id for d in items] == [6, 5, 4]

    async def test_empty_store(self):
        store = AsyncMock()
        store.list_items.return_value = []
        store.list_movements.return_value = []
        store.list_categories.return_value = []

        stats = await DashboardService(store).get_stats()

        assert stats.total_items == 0
        assert stats.recently_added == []
