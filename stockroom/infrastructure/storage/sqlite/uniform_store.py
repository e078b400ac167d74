"""SQLite implementation of uniform storage."""

from datetime import date, datetime
from typing import Any

import aiosqlite

from stockroom.config import get_logger
from stockroom.core.entities.ledger import MovementType, QuantityChange, utc_now
from stockroom.core.entities.uniform import (
    IssuedRecord,
    IssuedRecordDetails,
    UniformCategory,
    UniformItem,
    UniformMovement,
)
from stockroom.core.exceptions import (
    DuplicateCategoryError,
    IssuedRecordNotFoundError,
    StaleQuantityError,
    StaleRecordError,
    UniformItemNotFoundError,
)
from stockroom.core.interfaces.uniform_store import IUniformStore
from stockroom.infrastructure.storage.sqlite.connection import (
    get_connection,
    get_transaction,
)
from stockroom.infrastructure.storage.sqlite.rows import (
    build_update,
    contains_pattern,
    created_between,
    from_db_date,
    from_db_timestamp,
    insert_movement,
    sql_limit,
    to_db_timestamp,
    where_clause,
)

logger = get_logger(__name__)

UNIFORM_COLUMNS = (
    "name",
    "category",
    "min_quantity",
    "total_quantity",
    "remaining_quantity",
)
RECORD_COLUMNS = ("student_name", "quantity_taken", "issue_date")


def _record_condition(
    record_id: int, expected_quantity: int | None
) -> tuple[str, tuple]:
    """WHERE clause for a record write, optionally conditioned on quantity_taken."""
    if expected_quantity is None:
        return "id = ?", (record_id,)
    return "id = ? AND quantity_taken = ?", (record_id, expected_quantity)


class SQLiteUniformStore(IUniformStore):
    """SQLite implementation of uniform items, movements and issuance records."""

    # Categories

    async def create_category(self, category: UniformCategory) -> UniformCategory:
        async with get_transaction("create_uniform_category") as conn:
            cursor = await conn.execute(
                "SELECT 1 FROM uniform_categories WHERE name = ?", (category.name,)
            )
            if await cursor.fetchone():
                raise DuplicateCategoryError(category.name)
            try:
                cursor = await conn.execute(
                    "INSERT INTO uniform_categories (name, created_at) VALUES (?, ?)",
                    (category.name, to_db_timestamp(category.created_at)),
                )
            except aiosqlite.IntegrityError:
                raise DuplicateCategoryError(category.name)
            category.id = cursor.lastrowid
        return category

    async def list_categories(self) -> list[UniformCategory]:
        async with get_connection() as conn:
            cursor = await conn.execute("SELECT * FROM uniform_categories ORDER BY name")
            rows = await cursor.fetchall()
        return [
            UniformCategory(
                id=row["id"],
                name=row["name"],
                created_at=from_db_timestamp(row["created_at"]),
            )
            for row in rows
        ]

    async def delete_category(self, category_id: int) -> bool:
        async with get_transaction("delete_uniform_category") as conn:
            cursor = await conn.execute(
                "DELETE FROM uniform_categories WHERE id = ?", (category_id,)
            )
            return cursor.rowcount > 0

    # Items

    async def create_uniform(
        self, item: UniformItem, initial: QuantityChange
    ) -> tuple[UniformItem, UniformMovement]:
        now = utc_now()
        item.total_quantity = initial.added
        item.remaining_quantity = initial.new_quantity
        item.issued = 0
        item.created_at = now
        item.updated_at = now

        async with get_transaction("create_uniform") as conn:
            cursor = await conn.execute(
                """
                INSERT INTO uniform_items (
                    name, category, total_quantity, remaining_quantity,
                    issued, min_quantity, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    item.name,
                    item.category,
                    item.total_quantity,
                    item.remaining_quantity,
                    item.issued,
                    item.min_quantity,
                    to_db_timestamp(now),
                    to_db_timestamp(now),
                ),
            )
            item.id = cursor.lastrowid
            movement_id = await insert_movement(
                conn, "uniform_movements", "uniform_id", item.id, initial, now
            )

        logger.info("uniform_stored", uniform_id=item.id)
        return item, self._movement_from_change(movement_id, item.id, initial, now)

    async def get_uniform(self, uniform_id: int) -> UniformItem | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM uniform_items WHERE id = ?", (uniform_id,)
            )
            row = await cursor.fetchone()
        return self._row_to_uniform(row) if row else None

    async def list_uniforms(self) -> list[UniformItem]:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM uniform_items ORDER BY created_at DESC, id DESC"
            )
            rows = await cursor.fetchall()
        return [self._row_to_uniform(row) for row in rows]

    async def update_uniform(
        self, uniform_id: int, changes: dict[str, Any]
    ) -> UniformItem:
        clause, params = build_update(changes, UNIFORM_COLUMNS)
        async with get_transaction("update_uniform") as conn:
            if clause:
                cursor = await conn.execute(
                    f"UPDATE uniform_items SET {clause}, updated_at = ? WHERE id = ?",
                    (*params, to_db_timestamp(utc_now()), uniform_id),
                )
                if cursor.rowcount == 0:
                    raise UniformItemNotFoundError(uniform_id)
            return await self._fetch_uniform(conn, uniform_id)

    async def delete_uniform(self, uniform_id: int) -> bool:
        async with get_transaction("delete_uniform") as conn:
            cursor = await conn.execute(
                "DELETE FROM uniform_items WHERE id = ?", (uniform_id,)
            )
            return cursor.rowcount > 0

    async def apply_quantity_change(
        self, uniform_id: int, change: QuantityChange
    ) -> tuple[UniformItem, UniformMovement]:
        async with get_transaction("apply_uniform_quantity_change") as conn:
            now = utc_now()
            cursor = await conn.execute(
                """
                UPDATE uniform_items SET
                    remaining_quantity = ?,
                    total_quantity = total_quantity + ?,
                    issued = issued + ?,
                    updated_at = ?
                WHERE id = ? AND remaining_quantity = ?
                """,
                (
                    change.new_quantity,
                    change.added,
                    change.issued,
                    to_db_timestamp(now),
                    uniform_id,
                    change.previous_quantity,
                ),
            )
            if cursor.rowcount == 0:
                cursor = await conn.execute(
                    "SELECT 1 FROM uniform_items WHERE id = ?", (uniform_id,)
                )
                if await cursor.fetchone() is None:
                    raise UniformItemNotFoundError(uniform_id)
                raise StaleQuantityError(uniform_id, change.previous_quantity)

            movement_id = await insert_movement(
                conn, "uniform_movements", "uniform_id", uniform_id, change, now
            )
            item = await self._fetch_uniform(conn, uniform_id)

        return item, self._movement_from_change(movement_id, uniform_id, change, now)

    async def _fetch_uniform(
        self, conn: aiosqlite.Connection, uniform_id: int
    ) -> UniformItem:
        cursor = await conn.execute(
            "SELECT * FROM uniform_items WHERE id = ?", (uniform_id,)
        )
        row = await cursor.fetchone()
        if row is None:
            raise UniformItemNotFoundError(uniform_id)
        return self._row_to_uniform(row)

    async def list_movements(
        self,
        uniform_id: int | None = None,
        limit: int | None = None,
        movement_type: MovementType | None = None,
        search: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[UniformMovement]:
        conditions, params = created_between("m.created_at", start, end)
        if uniform_id is not None:
            conditions.append("m.uniform_id = ?")
            params.append(uniform_id)
        if movement_type is not None:
            conditions.append("m.movement_type = ?")
            params.append(movement_type.value)
        if search:
            conditions.append(
                "(u.name LIKE ? ESCAPE '\\' OR m.notes LIKE ? ESCAPE '\\')"
            )
            pattern = contains_pattern(search)
            params.extend((pattern, pattern))

        query = (
            "SELECT m.* FROM uniform_movements m"
            " LEFT JOIN uniform_items u ON u.id = m.uniform_id"
            + where_clause(conditions)
            + " ORDER BY m.created_at DESC, m.id DESC LIMIT ?"
        )
        params.append(sql_limit(limit))

        async with get_connection() as conn:
            cursor = await conn.execute(query, params)
            rows = await cursor.fetchall()
        return [self._row_to_movement(row) for row in rows]

    # Issuance records

    async def create_record(self, record: IssuedRecord) -> IssuedRecord:
        async with get_transaction("create_issued_record") as conn:
            cursor = await conn.execute(
                """
                INSERT INTO uniform_issuances (
                    student_name, uniform_id, quantity_taken, issue_date, created_at
                ) VALUES (?, ?, ?, ?, ?)
                """,
                (
                    record.student_name,
                    record.uniform_id,
                    record.quantity_taken,
                    record.issue_date.isoformat(),
                    to_db_timestamp(record.created_at),
                ),
            )
            record.id = cursor.lastrowid
        return record

    async def get_record(self, record_id: int) -> IssuedRecord | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM uniform_issuances WHERE id = ?", (record_id,)
            )
            row = await cursor.fetchone()
        return self._row_to_record(row) if row else None

    async def update_record(
        self,
        record_id: int,
        changes: dict[str, Any],
        expected_quantity: int | None = None,
    ) -> IssuedRecord:
        values = dict(changes)
        if isinstance(values.get("issue_date"), date):
            values["issue_date"] = values["issue_date"].isoformat()
        clause, params = build_update(values, RECORD_COLUMNS)
        where, where_params = _record_condition(record_id, expected_quantity)

        async with get_transaction("update_issued_record") as conn:
            if clause:
                cursor = await conn.execute(
                    f"UPDATE uniform_issuances SET {clause} WHERE {where}",
                    (*params, *where_params),
                )
                if cursor.rowcount == 0:
                    await self._raise_missing_or_stale(conn, record_id, expected_quantity)
            cursor = await conn.execute(
                "SELECT * FROM uniform_issuances WHERE id = ?", (record_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                raise IssuedRecordNotFoundError(record_id)
            if not clause and expected_quantity is not None:
                if row["quantity_taken"] != expected_quantity:
                    raise StaleRecordError(record_id, expected_quantity)
        return self._row_to_record(row)

    async def delete_record(
        self, record_id: int, expected_quantity: int | None = None
    ) -> bool:
        where, where_params = _record_condition(record_id, expected_quantity)
        async with get_transaction("delete_issued_record") as conn:
            cursor = await conn.execute(
                f"DELETE FROM uniform_issuances WHERE {where}", where_params
            )
            if cursor.rowcount > 0:
                return True
            if expected_quantity is not None:
                cursor = await conn.execute(
                    "SELECT 1 FROM uniform_issuances WHERE id = ?", (record_id,)
                )
                if await cursor.fetchone() is not None:
                    raise StaleRecordError(record_id, expected_quantity)
            return False

    @staticmethod
    async def _raise_missing_or_stale(
        conn: aiosqlite.Connection, record_id: int, expected_quantity: int | None
    ) -> None:
        cursor = await conn.execute(
            "SELECT 1 FROM uniform_issuances WHERE id = ?", (record_id,)
        )
        if await cursor.fetchone() is None or expected_quantity is None:
            raise IssuedRecordNotFoundError(record_id)
        raise StaleRecordError(record_id, expected_quantity)

    async def list_records(
        self, start_date: date | None = None, end_date: date | None = None
    ) -> list[IssuedRecordDetails]:
        query = """
            SELECT r.*, u.name AS uniform_name, u.category AS uniform_category
            FROM uniform_issuances r
            LEFT JOIN uniform_items u ON u.id = r.uniform_id
        """
        conditions = []
        params: list = []
        if start_date is not None:
            conditions.append("r.issue_date >= ?")
            params.append(start_date.isoformat())
        if end_date is not None:
            conditions.append("r.issue_date <= ?")
            params.append(end_date.isoformat())
        if conditions:
            query += " WHERE " + " AND ".join(conditions)
        query += " ORDER BY r.issue_date DESC, r.created_at DESC, r.id DESC"

        async with get_connection() as conn:
            cursor = await conn.execute(query, params)
            rows = await cursor.fetchall()

        return [
            IssuedRecordDetails(
                record=self._row_to_record(row),
                uniform_name=row["uniform_name"],
                uniform_category=row["uniform_category"],
            )
            for row in rows
        ]

    # Row mapping

    @staticmethod
    def _movement_from_change(
        movement_id: int, uniform_id: int, change: QuantityChange, created_at: datetime
    ) -> UniformMovement:
        return UniformMovement(
            id=movement_id,
            uniform_id=uniform_id,
            movement_type=change.movement_type,
            quantity_delta=change.quantity_delta,
            previous_quantity=change.previous_quantity,
            new_quantity=change.new_quantity,
            notes=change.notes,
            performed_by=change.performed_by,
            created_at=created_at,
        )

    @staticmethod
    def _row_to_uniform(row: aiosqlite.Row) -> UniformItem:
        return UniformItem(
            id=row["id"],
            name=row["name"],
            category=row["category"],
            total_quantity=row["total_quantity"],
            remaining_quantity=row["remaining_quantity"],
            issued=row["issued"],
            min_quantity=row["min_quantity"],
            created_at=from_db_timestamp(row["created_at"]),
            updated_at=from_db_timestamp(row["updated_at"]),
        )

    @staticmethod
    def _row_to_movement(row: aiosqlite.Row) -> UniformMovement:
        return UniformMovement(
            id=row["id"],
            uniform_id=row["uniform_id"],
            movement_type=MovementType(row["movement_type"]),
            quantity_delta=row["quantity_delta"],
            previous_quantity=row["previous_quantity"],
            new_quantity=row["new_quantity"],
            notes=row["notes"],
            performed_by=row["performed_by"],
            created_at=from_db_timestamp(row["created_at"]),
        )

    @staticmethod
    def _row_to_record(row: aiosqlite.Row) -> IssuedRecord:
        return IssuedRecord(
            id=row["id"],
            student_name=row["student_name"],
            uniform_id=row["uniform_id"],
            quantity_taken=row["quantity_taken"],
            issue_date=from_db_date(row["issue_date"]),
            created_at=from_db_timestamp(row["created_at"]),
        )
