"""Tests for SQLite activity log store."""

import pytest

from stockroom.core.entities import ActivityLogEntry
from stockroom.infrastructure.storage.sqlite.activity_store import SQLiteActivityLogStore


@pytest.fixture
def store(migrated_db) -> SQLiteActivityLogStore:
    return SQLiteActivityLogStore()


class TestActivityLogStore:
    async def test_append_assigns_id(self, store):
        entry = await store.append(
            ActivityLogEntry(
                actor_id="u1",
                action="issued",
                entity_type="stock_item",
                entity_id=3,
                details={"quantity": 5, "notes": None},
            )
        )

        assert entry.id is not None

        (fetched,) = await store.list_entries()
        assert fetched.details == {"quantity": 5, "notes": None}
        assert fetched.actor_id == "u1"

    async def test_newest_first_with_limit(self, store):
        for i in range(5):
            await store.append(
                ActivityLogEntry(action="created", entity_type="category", entity_id=i)
            )

        latest = await store.list_entries(limit=3)

        assert [e.entity_id for e in latest] == [4, 3, 2]
        assert len(await store.list_entries(limit=None)) == 5

    async def test_entry_without_details(self, store):
        await store.append(ActivityLogEntry(action="deleted", entity_type="category"))

        (fetched,) = await store.list_entries()
        assert fetched.details is None
        assert fetched.entity_id is None
