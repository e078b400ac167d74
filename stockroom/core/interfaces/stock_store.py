"""Abstract interface for generic stock storage."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from stockroom.core.entities.inventory import (
    Category,
    StockItem,
    StockItemDetails,
    StockMovement,
    StockMovementDetails,
)
from stockroom.core.entities.ledger import MovementType, QuantityChange


class IStockStore(ABC):
    """Interface for categories, stock items and their movement log."""

    # Categories

    @abstractmethod
    async def create_category(self, category: Category) -> Category:
        """Create a category. Raises DuplicateCategoryError on a name clash."""
        pass

    @abstractmethod
    async def get_category(self, category_id: int) -> Category | None:
        """Get category by ID."""
        pass

    @abstractmethod
    async def list_categories(self) -> list[Category]:
        """List categories ordered by name."""
        pass

    @abstractmethod
    async def update_category(
        self, category_id: int, changes: dict[str, Any]
    ) -> Category:
        """Apply a partial update to a category."""
        pass

    @abstractmethod
    async def delete_category(self, category_id: int) -> bool:
        """Delete a category. Items keep existing with no category."""
        pass

    # Items

    @abstractmethod
    async def create_item(
        self, item: StockItem, initial: QuantityChange
    ) -> tuple[StockItem, StockMovement]:
        """Insert an item and its initial movement in one transaction."""
        pass

    @abstractmethod
    async def get_item(self, item_id: int) -> StockItem | None:
        """Get stock item by ID."""
        pass

    @abstractmethod
    async def get_item_details(self, item_id: int) -> StockItemDetails | None:
        """Get stock item joined with its category."""
        pass

    @abstractmethod
    async def list_items(
        self,
        category_id: int | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[StockItemDetails]:
        """List items with categories newest first, within an inclusive created_at range."""
        pass

    @abstractmethod
    async def update_item(self, item_id: int, changes: dict[str, Any]) -> StockItem:
        """Apply a partial field update. Never writes a movement."""
        pass

    @abstractmethod
    async def apply_quantity_change(
        self, item_id: int, change: QuantityChange
    ) -> tuple[StockItem, StockMovement]:
        """
        Apply a planned quantity change and record its movement atomically.

        The update only lands while the item still holds
        change.previous_quantity; otherwise StaleQuantityError is raised
        and nothing is written.
        """
        pass

    @abstractmethod
    async def delete_item(
        self, item_id: int, removal: QuantityChange
    ) -> StockMovement | None:
        """
        Delete an item, recording the removal movement when it held stock.

        Same compare-and-set contract as apply_quantity_change.
        """
        pass

    # Movements

    @abstractmethod
    async def list_movements(
        self,
        item_id: int | None = None,
        limit: int | None = None,
        movement_type: MovementType | None = None,
        search: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[StockMovementDetails]:
        """
        List movements newest first.

        Filters combine: one item, one movement type, a case-insensitive
        search over item name and notes, and an inclusive created_at range.
        """
        pass
