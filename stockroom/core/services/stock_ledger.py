"""
Stock ledger service.

Owns every transition of a stock item's quantity, issued and total_added
counters. Each quantity change is written together with exactly one
movement; the activity log and change notifications follow the commit.
"""

from datetime import datetime
from typing import Any

from stockroom.config import get_logger
from stockroom.core.entities.activity import ActivityAction, ActivityLogEntry
from stockroom.core.entities.inventory import (
    Category,
    CategoryUpdate,
    StockItem,
    StockItemDetails,
    StockItemUpdate,
    StockMovement,
    StockMovementDetails,
)
from stockroom.core.entities.ledger import (
    DEFAULT_MIN_QUANTITY,
    MovementType,
    QuantityChange,
    StockStatus,
)
from stockroom.core.exceptions import (
    CategoryNotFoundError,
    StockItemNotFoundError,
    ValidationError,
)
from stockroom.core.interfaces.activity_store import IActivityLogStore
from stockroom.core.interfaces.change_notifier import Collection, IChangeNotifier
from stockroom.core.interfaces.stock_store import IStockStore
from stockroom.core.services.ledger_base import DEFAULT_LIMIT, LedgerService
from stockroom.core.services.ledger_rules import (
    plan_initial,
    plan_issue,
    plan_removal,
    plan_return,
    require_non_negative,
    require_positive,
    time_range,
)

logger = get_logger(__name__)


def _require_name(field: str, value: str | None) -> str:
    if value is None or not value.strip():
        raise ValidationError(field, "must not be empty", value)
    return value.strip()


class StockLedgerService(LedgerService[tuple[StockItem, StockMovement]]):
    """Generic stock ledger: categories, items, movements and activity."""

    ledger_name = "stock"

    def __init__(
        self,
        store: IStockStore,
        activity_store: IActivityLogStore | None = None,
        notifier: IChangeNotifier | None = None,
        max_conflict_retries: int = 3,
        default_min_quantity: int = DEFAULT_MIN_QUANTITY,
        movement_limit: int | None = 50,
        activity_limit: int | None = 20,
    ):
        super().__init__(
            notifier=notifier,
            activity_store=activity_store,
            max_conflict_retries=max_conflict_retries,
        )
        self._store = store
        self._default_min_quantity = default_min_quantity
        self._movement_limit = movement_limit
        self._activity_limit = activity_limit

    # Ledger hooks

    async def _current_quantity(self, item_id: int) -> int:
        item = await self._store.get_item(item_id)
        if item is None:
            raise StockItemNotFoundError(item_id)
        return item.quantity

    async def _write_change(
        self, item_id: int, change: QuantityChange
    ) -> tuple[StockItem, StockMovement]:
        return await self._store.apply_quantity_change(item_id, change)

    # Categories

    async def list_categories(self) -> list[Category]:
        return await self._store.list_categories()

    async def create_category(
        self,
        name: str,
        description: str | None = None,
        color: str | None = None,
        actor_id: str | None = None,
    ) -> Category:
        category = Category(name=_require_name("name", name), description=description)
        if color:
            category.color = color.strip()
        category = await self._store.create_category(category)
        logger.info("category_created", category_id=category.id, name=category.name)

        await self._record_activity(
            ActivityAction.CREATED.value,
            "category",
            category.id,
            {"name": category.name},
            actor_id,
        )
        await self._notify(Collection.CATEGORIES)
        return category

    async def update_category(
        self,
        category_id: int,
        update: CategoryUpdate,
        actor_id: str | None = None,
    ) -> Category:
        changes = update.changes()
        if "name" in changes:
            changes["name"] = _require_name("name", changes["name"])
        if "color" in changes and not changes["color"]:
            raise ValidationError("color", "must not be empty", changes["color"])

        category = await self._store.update_category(category_id, changes)
        logger.info("category_updated", category_id=category_id, fields=sorted(changes))

        await self._record_activity(
            ActivityAction.UPDATED.value, "category", category_id, changes, actor_id
        )
        await self._notify(Collection.CATEGORIES, Collection.STOCK_ITEMS)
        return category

    async def delete_category(
        self, category_id: int, actor_id: str | None = None
    ) -> None:
        """Delete a category. Its items stay, shown as uncategorized."""
        if not await self._store.delete_category(category_id):
            raise CategoryNotFoundError(category_id)
        logger.info("category_deleted", category_id=category_id)

        await self._record_activity(
            ActivityAction.DELETED.value, "category", category_id, None, actor_id
        )
        await self._notify(Collection.CATEGORIES, Collection.STOCK_ITEMS)

    # Items

    async def add_item(
        self,
        name: str,
        quantity: int,
        category_id: int | None = None,
        min_quantity: int | None = None,
        person_responsible: str | None = None,
        notes: str | None = None,
        actor_id: str | None = None,
    ) -> tuple[StockItem, StockMovement]:
        """Create an item together with its opening "added" movement."""
        name = _require_name("name", name)
        require_non_negative("quantity", quantity)
        if min_quantity is None:
            min_quantity = self._default_min_quantity
        require_non_negative("min_quantity", min_quantity)

        if category_id is not None:
            if await self._store.get_category(category_id) is None:
                raise CategoryNotFoundError(category_id)

        item = StockItem(
            name=name,
            category_id=category_id,
            min_quantity=min_quantity,
            person_responsible=person_responsible,
            notes=notes,
            created_by=actor_id,
        )
        initial = plan_initial(quantity, performed_by=actor_id)
        item, movement = await self._store.create_item(item, initial)

        logger.info(
            "stock_item_added",
            item_id=item.id,
            name=item.name,
            quantity=item.quantity,
            status=item.status.value,
        )
        await self._record_activity(
            ActivityAction.CREATED.value,
            "stock_item",
            item.id,
            {"name": item.name, "quantity": item.quantity},
            actor_id,
        )
        await self._notify(Collection.STOCK_ITEMS, Collection.STOCK_MOVEMENTS)
        return item, movement

    async def get_item(self, item_id: int) -> StockItemDetails:
        details = await self._store.get_item_details(item_id)
        if details is None:
            raise StockItemNotFoundError(item_id)
        return details

    async def list_items(
        self,
        status: StockStatus | None = None,
        category_id: int | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[StockItemDetails]:
        """List items newest first, optionally filtered by derived status and created_at."""
        start, end = time_range(start, end)
        items = await self._store.list_items(category_id=category_id, start=start, end=end)
        if status is not None:
            items = [d for d in items if d.status == status]
        return items

    async def issue(
        self,
        item_id: int,
        quantity: int,
        notes: str | None = None,
        actor_id: str | None = None,
    ) -> tuple[StockItem, StockMovement]:
        """Issue stock. Raises InsufficientStockError when quantity exceeds on-hand."""
        require_positive("quantity", quantity)

        item, movement = await self._apply_change(
            item_id,
            lambda current: plan_issue(item_id, current, quantity, notes, actor_id),
        )

        logger.info(
            "stock_issued",
            item_id=item_id,
            quantity=quantity,
            previous_quantity=movement.previous_quantity,
            new_quantity=movement.new_quantity,
            status=item.status.value,
        )
        await self._record_activity(
            ActivityAction.ISSUED.value,
            "stock_item",
            item_id,
            {"quantity": quantity, "notes": notes},
            actor_id,
        )
        await self._notify(Collection.STOCK_ITEMS, Collection.STOCK_MOVEMENTS)
        return item, movement

    async def return_stock(
        self,
        item_id: int,
        quantity: int,
        notes: str | None = None,
        actor_id: str | None = None,
    ) -> tuple[StockItem, StockMovement]:
        """Return stock. The issued counter is left as is."""
        require_positive("quantity", quantity)

        item, movement = await self._apply_change(
            item_id,
            lambda current: plan_return(current, quantity, notes, actor_id),
        )

        logger.info(
            "stock_returned",
            item_id=item_id,
            quantity=quantity,
            previous_quantity=movement.previous_quantity,
            new_quantity=movement.new_quantity,
            status=item.status.value,
        )
        await self._record_activity(
            ActivityAction.RETURNED.value,
            "stock_item",
            item_id,
            {"quantity": quantity, "notes": notes},
            actor_id,
        )
        await self._notify(Collection.STOCK_ITEMS, Collection.STOCK_MOVEMENTS)
        return item, movement

    async def update_item(
        self,
        item_id: int,
        update: StockItemUpdate,
        actor_id: str | None = None,
    ) -> StockItem:
        """
        Apply a partial update.

        A quantity in the update overwrites the on-hand count directly and
        is not recorded as a movement.
        """
        changes = update.changes()
        if "name" in changes:
            changes["name"] = _require_name("name", changes["name"])
        for field in ("quantity", "min_quantity"):
            if field in changes:
                if changes[field] is None:
                    raise ValidationError(field, "must not be null", None)
                require_non_negative(field, changes[field])
        if changes.get("category_id") is not None:
            if await self._store.get_category(changes["category_id"]) is None:
                raise CategoryNotFoundError(changes["category_id"])

        if "quantity" in changes:
            logger.warning(
                "quantity_override_without_movement",
                item_id=item_id,
                quantity=changes["quantity"],
                actor_id=actor_id,
            )

        item = await self._store.update_item(item_id, changes)
        logger.info("stock_item_updated", item_id=item_id, fields=sorted(changes))

        await self._record_activity(
            ActivityAction.UPDATED.value, "stock_item", item_id, changes, actor_id
        )
        await self._notify(Collection.STOCK_ITEMS)
        return item

    async def delete_item(self, item_id: int, actor_id: str | None = None) -> None:
        """Delete an item. Its movements are kept; remaining stock is logged as removed."""
        existing = await self._store.get_item(item_id)
        if existing is None:
            raise StockItemNotFoundError(item_id)

        movement = await self._apply_change(
            item_id,
            lambda current: plan_removal(current, performed_by=actor_id),
            write=self._store.delete_item,
        )

        logger.info(
            "stock_item_deleted",
            item_id=item_id,
            removed_quantity=-movement.quantity_delta if movement else 0,
        )
        await self._record_activity(
            ActivityAction.DELETED.value,
            "stock_item",
            item_id,
            {"name": existing.name},
            actor_id,
        )
        await self._notify(Collection.STOCK_ITEMS, Collection.STOCK_MOVEMENTS)

    # Logs

    async def list_movements(
        self,
        item_id: int | None = None,
        limit: Any = DEFAULT_LIMIT,
        movement_type: MovementType | None = None,
        search: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[StockMovementDetails]:
        if limit is DEFAULT_LIMIT:
            limit = self._movement_limit
        start, end = time_range(start, end)
        return await self._store.list_movements(
            item_id=item_id,
            limit=limit,
            movement_type=movement_type,
            search=search.strip() if search else None,
            start=start,
            end=end,
        )

    async def list_activity(self, limit: Any = DEFAULT_LIMIT) -> list[ActivityLogEntry]:
        if self._activity_store is None:
            return []
        if limit is DEFAULT_LIMIT:
            limit = self._activity_limit
        return await self._activity_store.list_entries(limit=limit)
