"""SQLite implementation of the activity log."""

import json

import aiosqlite

from stockroom.core.entities.activity import ActivityLogEntry
from stockroom.core.interfaces.activity_store import IActivityLogStore
from stockroom.infrastructure.storage.sqlite.connection import (
    get_connection,
    get_transaction,
)
from stockroom.infrastructure.storage.sqlite.rows import (
    from_db_timestamp,
    sql_limit,
    to_db_timestamp,
)


class SQLiteActivityLogStore(IActivityLogStore):
    """Append-only activity log table."""

    async def append(self, entry: ActivityLogEntry) -> ActivityLogEntry:
        async with get_transaction("append_activity") as conn:
            cursor = await conn.execute(
                """
                INSERT INTO activity_logs (
                    actor_id, action, entity_type, entity_id, details, created_at
                ) VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    entry.actor_id,
                    entry.action,
                    entry.entity_type,
                    entry.entity_id,
                    json.dumps(entry.details, default=str) if entry.details is not None else None,
                    to_db_timestamp(entry.created_at),
                ),
            )
            entry.id = cursor.lastrowid
        return entry

    async def list_entries(self, limit: int | None = None) -> list[ActivityLogEntry]:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM activity_logs ORDER BY created_at DESC, id DESC LIMIT ?",
                (sql_limit(limit),),
            )
            rows = await cursor.fetchall()
        return [self._row_to_entry(row) for row in rows]

    @staticmethod
    def _row_to_entry(row: aiosqlite.Row) -> ActivityLogEntry:
        details = json.loads(row["details"]) if row["details"] else None
        return ActivityLogEntry(
            id=row["id"],
            actor_id=row["actor_id"],
            action=row["action"],
            entity_type=row["entity_type"],
            entity_id=row["entity_id"],
            details=details,
            created_at=from_db_timestamp(row["created_at"]),
        )
