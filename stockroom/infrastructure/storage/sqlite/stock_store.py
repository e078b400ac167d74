"""SQLite implementation of generic stock storage."""

from datetime import datetime
from typing import Any, NoReturn

import aiosqlite

from stockroom.config import get_logger
from stockroom.core.entities.inventory import (
    Category,
    StockItem,
    StockItemDetails,
    StockMovement,
    StockMovementDetails,
)
from stockroom.core.entities.ledger import MovementType, QuantityChange, utc_now
from stockroom.core.exceptions import (
    CategoryNotFoundError,
    DuplicateCategoryError,
    StaleQuantityError,
    StockItemNotFoundError,
)
from stockroom.core.interfaces.stock_store import IStockStore
from stockroom.infrastructure.storage.sqlite.connection import (
    get_connection,
    get_transaction,
)
from stockroom.infrastructure.storage.sqlite.rows import (
    build_update,
    contains_pattern,
    created_between,
    from_db_timestamp,
    insert_movement,
    sql_limit,
    to_db_timestamp,
    where_clause,
)

logger = get_logger(__name__)

CATEGORY_COLUMNS = ("name", "description", "color")
ITEM_COLUMNS = (
    "name",
    "category_id",
    "quantity",
    "min_quantity",
    "person_responsible",
    "notes",
)

_ITEM_WITH_CATEGORY = """
    SELECT i.*,
           c.id AS c_id, c.name AS c_name, c.description AS c_description,
           c.color AS c_color, c.created_at AS c_created_at
    FROM stock_items i
    LEFT JOIN categories c ON c.id = i.category_id
"""


class SQLiteStockStore(IStockStore):
    """SQLite implementation of category, stock item and movement storage."""

    # Categories

    async def create_category(self, category: Category) -> Category:
        async with get_transaction("create_category") as conn:
            await self._ensure_name_free(conn, category.name)
            try:
                cursor = await conn.execute(
                    """
                    INSERT INTO categories (name, description, color, created_at)
                    VALUES (?, ?, ?, ?)
                    """,
                    (
                        category.name,
                        category.description,
                        category.color,
                        to_db_timestamp(category.created_at),
                    ),
                )
            except aiosqlite.IntegrityError:
                raise DuplicateCategoryError(category.name)
            category.id = cursor.lastrowid
        logger.info("category_stored", category_id=category.id)
        return category

    async def get_category(self, category_id: int) -> Category | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM categories WHERE id = ?", (category_id,)
            )
            row = await cursor.fetchone()
        return self._row_to_category(row) if row else None

    async def list_categories(self) -> list[Category]:
        async with get_connection() as conn:
            cursor = await conn.execute("SELECT * FROM categories ORDER BY name")
            rows = await cursor.fetchall()
        return [self._row_to_category(row) for row in rows]

    async def update_category(
        self, category_id: int, changes: dict[str, Any]
    ) -> Category:
        clause, params = build_update(changes, CATEGORY_COLUMNS)
        async with get_transaction("update_category") as conn:
            if "name" in changes:
                await self._ensure_name_free(conn, changes["name"], exclude_id=category_id)
            if clause:
                cursor = await conn.execute(
                    f"UPDATE categories SET {clause} WHERE id = ?",
                    (*params, category_id),
                )
                if cursor.rowcount == 0:
                    raise CategoryNotFoundError(category_id)
            cursor = await conn.execute(
                "SELECT * FROM categories WHERE id = ?", (category_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                raise CategoryNotFoundError(category_id)
        return self._row_to_category(row)

    async def delete_category(self, category_id: int) -> bool:
        async with get_transaction("delete_category") as conn:
            cursor = await conn.execute(
                "DELETE FROM categories WHERE id = ?", (category_id,)
            )
            return cursor.rowcount > 0

    @staticmethod
    async def _ensure_name_free(
        conn: aiosqlite.Connection, name: str, exclude_id: int | None = None
    ) -> None:
        cursor = await conn.execute(
            "SELECT id FROM categories WHERE name = ? AND id IS NOT ?",
            (name, exclude_id),
        )
        if await cursor.fetchone():
            raise DuplicateCategoryError(name)

    # Items

    async def create_item(
        self, item: StockItem, initial: QuantityChange
    ) -> tuple[StockItem, StockMovement]:
        now = utc_now()
        item.quantity = initial.new_quantity
        item.total_added = initial.added
        item.issued = 0
        item.created_at = now
        item.updated_at = now

        async with get_transaction("create_item") as conn:
            cursor = await conn.execute(
                """
                INSERT INTO stock_items (
                    name, category_id, quantity, total_added, issued,
                    min_quantity, person_responsible, notes, created_by,
                    created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    item.name,
                    item.category_id,
                    item.quantity,
                    item.total_added,
                    item.issued,
                    item.min_quantity,
                    item.person_responsible,
                    item.notes,
                    item.created_by,
                    to_db_timestamp(now),
                    to_db_timestamp(now),
                ),
            )
            item.id = cursor.lastrowid
            movement_id = await insert_movement(
                conn, "stock_movements", "item_id", item.id, initial, now
            )

        logger.info("stock_item_stored", item_id=item.id, quantity=item.quantity)
        return item, self._movement_from_change(movement_id, item.id, initial, now)

    async def get_item(self, item_id: int) -> StockItem | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM stock_items WHERE id = ?", (item_id,)
            )
            row = await cursor.fetchone()
        return self._row_to_item(row) if row else None

    async def get_item_details(self, item_id: int) -> StockItemDetails | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"{_ITEM_WITH_CATEGORY} WHERE i.id = ?", (item_id,)
            )
            row = await cursor.fetchone()
        return self._row_to_details(row) if row else None

    async def list_items(
        self,
        category_id: int | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[StockItemDetails]:
        conditions, params = created_between("i.created_at", start, end)
        if category_id is not None:
            conditions.append("i.category_id = ?")
            params.append(category_id)
        query = (
            _ITEM_WITH_CATEGORY
            + where_clause(conditions)
            + " ORDER BY i.created_at DESC, i.id DESC"
        )

        async with get_connection() as conn:
            cursor = await conn.execute(query, params)
            rows = await cursor.fetchall()
        return [self._row_to_details(row) for row in rows]

    async def update_item(self, item_id: int, changes: dict[str, Any]) -> StockItem:
        clause, params = build_update(changes, ITEM_COLUMNS)
        async with get_transaction("update_item") as conn:
            if clause:
                cursor = await conn.execute(
                    f"UPDATE stock_items SET {clause}, updated_at = ? WHERE id = ?",
                    (*params, to_db_timestamp(utc_now()), item_id),
                )
                if cursor.rowcount == 0:
                    raise StockItemNotFoundError(item_id)
            item = await self._fetch_item(conn, item_id)
        return item

    async def apply_quantity_change(
        self, item_id: int, change: QuantityChange
    ) -> tuple[StockItem, StockMovement]:
        async with get_transaction("apply_quantity_change") as conn:
            now = utc_now()
            cursor = await conn.execute(
                """
                UPDATE stock_items SET
                    quantity = ?,
                    total_added = total_added + ?,
                    issued = issued + ?,
                    updated_at = ?
                WHERE id = ? AND quantity = ?
                """,
                (
                    change.new_quantity,
                    change.added,
                    change.issued,
                    to_db_timestamp(now),
                    item_id,
                    change.previous_quantity,
                ),
            )
            if cursor.rowcount == 0:
                await self._raise_missing_or_stale(conn, item_id, change)

            movement_id = await insert_movement(
                conn, "stock_movements", "item_id", item_id, change, now
            )
            item = await self._fetch_item(conn, item_id)

        logger.debug(
            "stock_quantity_changed",
            item_id=item_id,
            movement_id=movement_id,
            type=change.movement_type.value,
            delta=change.quantity_delta,
        )
        return item, self._movement_from_change(movement_id, item_id, change, now)

    async def delete_item(
        self, item_id: int, removal: QuantityChange
    ) -> StockMovement | None:
        movement = None
        async with get_transaction("delete_item") as conn:
            now = utc_now()
            cursor = await conn.execute(
                "DELETE FROM stock_items WHERE id = ? AND quantity = ?",
                (item_id, removal.previous_quantity),
            )
            if cursor.rowcount == 0:
                await self._raise_missing_or_stale(conn, item_id, removal)

            if removal.quantity_delta != 0:
                movement_id = await insert_movement(
                    conn, "stock_movements", "item_id", item_id, removal, now
                )
                movement = self._movement_from_change(movement_id, item_id, removal, now)

        logger.info("stock_item_removed", item_id=item_id)
        return movement

    @staticmethod
    async def _raise_missing_or_stale(
        conn: aiosqlite.Connection, item_id: int, change: QuantityChange
    ) -> NoReturn:
        cursor = await conn.execute("SELECT 1 FROM stock_items WHERE id = ?", (item_id,))
        if await cursor.fetchone() is None:
            raise StockItemNotFoundError(item_id)
        raise StaleQuantityError(item_id, change.previous_quantity)

    async def _fetch_item(self, conn: aiosqlite.Connection, item_id: int) -> StockItem:
        cursor = await conn.execute("SELECT * FROM stock_items WHERE id = ?", (item_id,))
        row = await cursor.fetchone()
        if row is None:
            raise StockItemNotFoundError(item_id)
        return self._row_to_item(row)

    # Movements

    async def list_movements(
        self,
        item_id: int | None = None,
        limit: int | None = None,
        movement_type: MovementType | None = None,
        search: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[StockMovementDetails]:
        conditions, params = created_between("m.created_at", start, end)
        if item_id is not None:
            conditions.append("m.item_id = ?")
            params.append(item_id)
        if movement_type is not None:
            conditions.append("m.movement_type = ?")
            params.append(movement_type.value)
        if search:
            # Movements of deleted items match on notes only
            conditions.append(
                "(i.name LIKE ? ESCAPE '\\' OR m.notes LIKE ? ESCAPE '\\')"
            )
            pattern = contains_pattern(search)
            params.extend((pattern, pattern))

        query = (
            """
            SELECT m.*, i.name AS item_name,
                   c.name AS category_name, c.color AS category_color
            FROM stock_movements m
            LEFT JOIN stock_items i ON i.id = m.item_id
            LEFT JOIN categories c ON c.id = i.category_id
            """
            + where_clause(conditions)
            + " ORDER BY m.created_at DESC, m.id DESC LIMIT ?"
        )
        params.append(sql_limit(limit))

        async with get_connection() as conn:
            cursor = await conn.execute(query, params)
            rows = await cursor.fetchall()

        return [
            StockMovementDetails(
                movement=self._row_to_movement(row),
                item_name=row["item_name"],
                category_name=row["category_name"],
                category_color=row["category_color"],
            )
            for row in rows
        ]

    # Row mapping

    @staticmethod
    def _movement_from_change(
        movement_id: int, item_id: int, change: QuantityChange, created_at: datetime
    ) -> StockMovement:
        return StockMovement(
            id=movement_id,
            item_id=item_id,
            movement_type=change.movement_type,
            quantity_delta=change.quantity_delta,
            previous_quantity=change.previous_quantity,
            new_quantity=change.new_quantity,
            notes=change.notes,
            performed_by=change.performed_by,
            created_at=created_at,
        )

    @staticmethod
    def _row_to_category(row: aiosqlite.Row) -> Category:
        return Category(
            id=row["id"],
            name=row["name"],
            description=row["description"],
            color=row["color"],
            created_at=from_db_timestamp(row["created_at"]),
        )

    @staticmethod
    def _row_to_item(row: aiosqlite.Row) -> StockItem:
        return StockItem(
            id=row["id"],
            name=row["name"],
            category_id=row["category_id"],
            quantity=row["quantity"],
            total_added=row["total_added"],
            issued=row["issued"],
            min_quantity=row["min_quantity"],
            person_responsible=row["person_responsible"],
            notes=row["notes"],
            created_by=row["created_by"],
            created_at=from_db_timestamp(row["created_at"]),
            updated_at=from_db_timestamp(row["updated_at"]),
        )

    def _row_to_details(self, row: aiosqlite.Row) -> StockItemDetails:
        category = None
        if row["c_id"] is not None:
            category = Category(
                id=row["c_id"],
                name=row["c_name"],
                description=row["c_description"],
                color=row["c_color"],
                created_at=from_db_timestamp(row["c_created_at"]),
            )
        return StockItemDetails(item=self._row_to_item(row), category=category)

    @staticmethod
    def _row_to_movement(row: aiosqlite.Row) -> StockMovement:
        return StockMovement(
            id=row["id"],
            item_id=row["item_id"],
            movement_type=MovementType(row["movement_type"]),
            quantity_delta=row["quantity_delta"],
            previous_quantity=row["previous_quantity"],
            new_quantity=row["new_quantity"],
            notes=row["notes"],
            performed_by=row["performed_by"],
            created_at=from_db_timestamp(row["created_at"]),
        )
