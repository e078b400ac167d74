"""Tests for SQLite stock store."""

from datetime import UTC, datetime

import aiosqlite
import pytest

from stockroom.core.entities import Category, MovementType, StockItem
from stockroom.core.exceptions import (
    CategoryNotFoundError,
    DuplicateCategoryError,
    PersistenceError,
    StaleQuantityError,
    StockItemNotFoundError,
)
from stockroom.core.services.ledger_rules import (
    plan_initial,
    plan_issue,
    plan_removal,
    plan_return,
)
from stockroom.infrastructure.storage.sqlite.stock_store import SQLiteStockStore


@pytest.fixture
def store(migrated_db) -> SQLiteStockStore:
    return SQLiteStockStore()


async def _add(store: SQLiteStockStore, name: str = "Shirt", quantity: int = 100, **fields):
    return await store.create_item(StockItem(name=name, **fields), plan_initial(quantity))


class TestCategories:
    async def test_create_and_get(self, store):
        created = await store.create_category(Category(name="Clothing", color="#ff0000"))

        fetched = await store.get_category(created.id)

        assert fetched.name == "Clothing"
        assert fetched.color == "#ff0000"

    async def test_duplicate_name(self, store):
        await store.create_category(Category(name="Clothing"))

        with pytest.raises(DuplicateCategoryError):
            await store.create_category(Category(name="Clothing"))

    async def test_rename_onto_existing_name(self, store):
        await store.create_category(Category(name="Clothing"))
        tools = await store.create_category(Category(name="Tools"))

        with pytest.raises(DuplicateCategoryError):
            await store.update_category(tools.id, {"name": "Clothing"})

    async def test_update_missing(self, store):
        with pytest.raises(CategoryNotFoundError):
            await store.update_category(404, {"color": "#000000"})

    async def test_list_sorted_by_name(self, store):
        await store.create_category(Category(name="Tools"))
        await store.create_category(Category(name="Clothing"))

        assert [c.name for c in await store.list_categories()] == ["Clothing", "Tools"]

    async def test_delete_uncategorizes_items(self, store):
        category = await store.create_category(Category(name="Clothing"))
        item, _ = await _add(store, category_id=category.id)

        assert await store.delete_category(category.id) is True
        assert await store.delete_category(category.id) is False

        details = await store.get_item_details(item.id)
        assert details.item.category_id is None
        assert details.category is None


class TestItems:
    async def test_create_writes_opening_movement(self, store):
        item, movement = await _add(store, quantity=100, min_quantity=10)

        assert item.id is not None
        assert item.quantity == 100
        assert item.total_added == 100
        assert movement.movement_type == MovementType.ADDED
        assert (movement.previous_quantity, movement.new_quantity) == (0, 100)

        movements = await store.list_movements(item_id=item.id)
        assert len(movements) == 1
        assert movements[0].item_name == "Shirt"

    async def test_details_join_category(self, store):
        category = await store.create_category(Category(name="Clothing"))
        item, _ = await _add(store, category_id=category.id)

        details = await store.get_item_details(item.id)

        assert details.category.name == "Clothing"

    async def test_list_newest_first_and_filter(self, store):
        category = await store.create_category(Category(name="Clothing"))
        first, _ = await _add(store, name="First", category_id=category.id)
        second, _ = await _add(store, name="Second")

        assert [d.item.id for d in await store.list_items()] == [second.id, first.id]
        assert [d.item.id for d in await store.list_items(category_id=category.id)] == [
            first.id
        ]

    async def test_update_fields(self, store):
        item, _ = await _add(store)

        updated = await store.update_item(item.id, {"notes": "Shelf B", "quantity": 3})

        assert updated.notes == "Shelf B"
        assert updated.quantity == 3
        assert len(await store.list_movements(item_id=item.id)) == 1

    async def test_update_unknown_column(self, store):
        item, _ = await _add(store)

        with pytest.raises(ValueError):
            await store.update_item(item.id, {"issued": 0})

    async def test_update_missing(self, store):
        with pytest.raises(StockItemNotFoundError):
            await store.update_item(404, {"notes": "x"})


class TestQuantityChanges:
    async def test_apply_issue(self, store):
        item, _ = await _add(store, quantity=100)

        updated, movement = await store.apply_quantity_change(
            item.id, plan_issue(item.id, 100, 95)
        )

        assert updated.quantity == 5
        assert updated.issued == 95
        assert updated.total_added == 100
        assert movement.quantity_delta == -95

    async def test_apply_return_grows_total_added(self, store):
        item, _ = await _add(store, quantity=5)

        updated, _ = await store.apply_quantity_change(item.id, plan_return(5, 50))

        assert updated.quantity == 55
        assert updated.total_added == 55
        assert updated.issued == 0

    async def test_stale_quantity(self, store):
        item, _ = await _add(store, quantity=100)

        with pytest.raises(StaleQuantityError):
            await store.apply_quantity_change(item.id, plan_issue(item.id, 90, 10))

        unchanged = await store.get_item(item.id)
        assert unchanged.quantity == 100
        assert len(await store.list_movements(item_id=item.id)) == 1

    async def test_missing_item(self, store):
        with pytest.raises(StockItemNotFoundError):
            await store.apply_quantity_change(404, plan_issue(404, 10, 1))


class TestDeleteItem:
    async def test_delete_keeps_movements(self, store):
        item, _ = await _add(store, quantity=7)

        removal = await store.delete_item(item.id, plan_removal(7))

        assert removal.movement_type == MovementType.REMOVED
        assert await store.get_item(item.id) is None

        movements = await store.list_movements(item_id=item.id)
        assert [m.movement.movement_type for m in movements] == [
            MovementType.REMOVED,
            MovementType.ADDED,
        ]
        assert all(m.item_name is None for m in movements)

    async def test_delete_empty_item_writes_no_movement(self, store):
        item, _ = await _add(store, quantity=0)

        assert await store.delete_item(item.id, plan_removal(0)) is None
        assert len(await store.list_movements(item_id=item.id)) == 1

    async def test_delete_stale(self, store):
        item, _ = await _add(store, quantity=7)

        with pytest.raises(StaleQuantityError):
            await store.delete_item(item.id, plan_removal(6))
        assert await store.get_item(item.id) is not None


class TestMovementQueries:
    async def test_ordering_and_limit(self, store):
        item, _ = await _add(store, quantity=10)
        for current in (10, 9, 8):
            await store.apply_quantity_change(item.id, plan_issue(item.id, current, 1))

        movements = await store.list_movements(limit=2)

        assert [m.movement.new_quantity for m in movements] == [7, 8]
        assert len(await store.list_movements(limit=None)) == 4

    async def test_filter_by_type(self, store):
        item, _ = await _add(store, quantity=10)
        await store.apply_quantity_change(item.id, plan_issue(item.id, 10, 3))
        await store.apply_quantity_change(item.id, plan_return(7, 1))

        issued = await store.list_movements(movement_type=MovementType.ISSUED)

        assert [m.movement.quantity_delta for m in issued] == [-3]

    async def test_search_item_name_and_notes(self, store):
        shirt, _ = await _add(store, name="Polo Shirt", quantity=10)
        hammer, _ = await _add(store, name="Hammer", quantity=10)
        await store.apply_quantity_change(
            hammer.id, plan_issue(hammer.id, 10, 1, notes="Lent to the shirt printer")
        )
        await store.apply_quantity_change(
            hammer.id, plan_issue(hammer.id, 9, 1, notes="50% off sale")
        )

        by_name_or_notes = await store.list_movements(search="SHIRT")
        literal_percent = await store.list_movements(search="%")

        assert {(m.movement.item_id, m.movement.notes) for m in by_name_or_notes} == {
            (shirt.id, "Initial stock"),
            (hammer.id, "Lent to the shirt printer"),
        }
        assert [m.movement.notes for m in literal_percent] == ["50% off sale"]

    async def test_created_range_is_inclusive(self, store, backdate):
        early, _ = await _add(store, name="Early")
        late, _ = await _add(store, name="Late")
        await backdate("stock_movements", "item_id", early.id, datetime(2024, 9, 1, tzinfo=UTC))
        await backdate("stock_movements", "item_id", late.id, datetime(2024, 10, 15, tzinfo=UTC))

        september = await store.list_movements(
            start=datetime(2024, 9, 1, tzinfo=UTC), end=datetime(2024, 9, 30, tzinfo=UTC)
        )
        from_october = await store.list_movements(start=datetime(2024, 10, 1, tzinfo=UTC))

        assert [m.movement.item_id for m in september] == [early.id]
        assert [m.movement.item_id for m in from_october] == [late.id]

    async def test_filters_combine_with_item_and_limit(self, store):
        item, _ = await _add(store, quantity=10)
        other, _ = await _add(store, name="Other", quantity=10)
        for current in (10, 9, 8):
            await store.apply_quantity_change(item.id, plan_issue(item.id, current, 1))
        await store.apply_quantity_change(other.id, plan_issue(other.id, 10, 1))

        movements = await store.list_movements(
            item_id=item.id, movement_type=MovementType.ISSUED, limit=2
        )

        assert [m.movement.new_quantity for m in movements] == [7, 8]

    async def test_movement_table_rejects_unbalanced_rows(self, migrated_db):
        async with aiosqlite.connect(migrated_db) as conn:
            with pytest.raises(aiosqlite.IntegrityError):
                await conn.execute(
                    """
                    INSERT INTO stock_movements (
                        item_id, movement_type, quantity_delta,
                        previous_quantity, new_quantity, created_at
                    ) VALUES (1, 'issued', -1, 5, 5, '2024-01-01T00:00:00+00:00')
                    """
                )


class TestItemCreatedRange:
    async def test_list_items_by_created_at(self, store, backdate):
        old, _ = await _add(store, name="Old")
        new, _ = await _add(store, name="New")
        await backdate("stock_items", "id", old.id, datetime(2023, 1, 10, tzinfo=UTC))

        recent = await store.list_items(start=datetime(2024, 1, 1, tzinfo=UTC))
        older = await store.list_items(end=datetime(2023, 12, 31, tzinfo=UTC))

        assert [d.item.id for d in recent] == [new.id]
        assert [d.item.id for d in older] == [old.id]


class TestMovementInsertFailure:
    """A failed movement insert rolls back the quantity write with it."""

    async def test_quantity_change(self, store, fail_movement_insert):
        item, _ = await _add(store, quantity=100)
        fail_movement_insert("stock_store")

        with pytest.raises(PersistenceError):
            await store.apply_quantity_change(item.id, plan_issue(item.id, 100, 10))

        after = await store.get_item(item.id)
        assert (after.quantity, after.issued, after.total_added) == (100, 0, 100)
        assert len(await store.list_movements(item_id=item.id)) == 1

    async def test_return(self, store, fail_movement_insert):
        item, _ = await _add(store, quantity=5)
        fail_movement_insert("stock_store")

        with pytest.raises(PersistenceError):
            await store.apply_quantity_change(item.id, plan_return(5, 50))

        after = await store.get_item(item.id)
        assert (after.quantity, after.issued, after.total_added) == (5, 0, 5)
        assert len(await store.list_movements(item_id=item.id)) == 1

    async def test_create_item(self, store, fail_movement_insert):
        fail_movement_insert("stock_store")

        with pytest.raises(PersistenceError):
            await _add(store, quantity=100)

        assert await store.list_items() == []
        assert await store.list_movements() == []

    async def test_delete_item(self, store, fail_movement_insert):
        item, _ = await _add(store, quantity=7)
        fail_movement_insert("stock_store")

        with pytest.raises(PersistenceError):
            await store.delete_item(item.id, plan_removal(7))

        after = await store.get_item(item.id)
        assert (after.quantity, after.issued, after.total_added) == (7, 0, 7)
        assert len(await store.list_movements(item_id=item.id)) == 1
