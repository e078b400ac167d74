"""Column conversions shared by the SQLite stores."""

from datetime import UTC, date, datetime

import aiosqlite

from stockroom.core.entities.ledger import QuantityChange


def to_db_timestamp(value: datetime) -> str:
    """Fixed-width UTC ISO-8601 so text ordering matches time ordering."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat(timespec="microseconds")


def from_db_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def from_db_date(value: str) -> date:
    return date.fromisoformat(value)


def sql_limit(limit: int | None) -> int:
    """SQLite treats a negative LIMIT as no limit."""
    return -1 if limit is None else limit


def created_between(
    column: str, start: datetime | None, end: datetime | None
) -> tuple[list[str], list]:
    """WHERE conditions for an inclusive timestamp range on column."""
    conditions: list[str] = []
    params: list = []
    if start is not None:
        conditions.append(f"{column} >= ?")
        params.append(to_db_timestamp(start))
    if end is not None:
        conditions.append(f"{column} <= ?")
        params.append(to_db_timestamp(end))
    return conditions, params


def contains_pattern(text: str) -> str:
    """LIKE pattern matching text anywhere; use with ESCAPE '\\'."""
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def where_clause(conditions: list[str]) -> str:
    return f" WHERE {' AND '.join(conditions)}" if conditions else ""


async def insert_movement(
    conn: aiosqlite.Connection,
    table: str,
    ref_column: str,
    ref_id: int,
    change: QuantityChange,
    created_at: datetime,
) -> int:
    """Insert one movement row for a planned change and return its id."""
    cursor = await conn.execute(
        f"""
        INSERT INTO {table} (
            {ref_column}, movement_type, quantity_delta,
            previous_quantity, new_quantity, notes, performed_by, created_at
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            ref_id,
            change.movement_type.value,
            change.quantity_delta,
            change.previous_quantity,
            change.new_quantity,
            change.notes,
            change.performed_by,
            to_db_timestamp(created_at),
        ),
    )
    return cursor.lastrowid


def build_update(
    changes: dict, allowed: tuple[str, ...]
) -> tuple[str, list]:
    """SET clause and parameters for the allowed columns present in changes."""
    unknown = set(changes) - set(allowed)
    if unknown:
        raise ValueError(f"Cannot update columns: {sorted(unknown)}")
    columns = [c for c in allowed if c in changes]
    clause = ", ".join(f"{c} = ?" for c in columns)
    return clause, [changes[c] for c in columns]
