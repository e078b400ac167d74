"""
Uniform ledger service.

Tracks uniform stock and the issuance records that hold it. Recording,
editing or deleting an issuance touches two rows that cannot share a
transaction through the store interface, so those operations run as a
compensating routine: the quantity change is applied first, the record
mutation second, and a failed record mutation is undone with an
"adjusted" movement.
"""

import asyncio
from collections.abc import Awaitable, Callable
from datetime import date, datetime
from typing import Any, TypeVar

from stockroom.config import get_logger
from stockroom.core.entities.ledger import (
    DEFAULT_MIN_QUANTITY,
    MovementType,
    QuantityChange,
)
from stockroom.core.entities.uniform import (
    IssuedRecord,
    IssuedRecordDetails,
    IssuedRecordUpdate,
    UniformCategory,
    UniformItem,
    UniformItemDetails,
    UniformItemUpdate,
    UniformMovement,
)
from stockroom.core.exceptions import (
    CompensationFailedError,
    IssuedRecordNotFoundError,
    StaleRecordError,
    UniformCategoryNotFoundError,
    UniformItemNotFoundError,
    ValidationError,
)
from stockroom.core.interfaces.change_notifier import Collection, IChangeNotifier
from stockroom.core.interfaces.uniform_store import IUniformStore
from stockroom.core.services.ledger_base import DEFAULT_LIMIT, LedgerService, Planner
from stockroom.core.services.ledger_rules import (
    plan_adjustment,
    plan_initial,
    plan_issue,
    plan_release,
    plan_return,
    require_non_negative,
    require_positive,
    time_range,
)

logger = get_logger(__name__)

R = TypeVar("R")


def parse_issue_date(value: date | str, field: str = "issue_date") -> date:
    """Accept a date or an ISO-8601 (YYYY-MM-DD) string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise ValidationError(field, "must be a YYYY-MM-DD date", value)


def _require_text(field: str, value: str | None) -> str:
    if value is None or not value.strip():
        raise ValidationError(field, "must not be empty", value)
    return value.strip()


class UniformLedgerService(LedgerService[tuple[UniformItem, UniformMovement]]):
    """Uniform items, categories, movements and issuance records."""

    ledger_name = "uniform"

    def __init__(
        self,
        store: IUniformStore,
        notifier: IChangeNotifier | None = None,
        max_conflict_retries: int = 3,
        default_min_quantity: int = DEFAULT_MIN_QUANTITY,
        movement_limit: int | None = 50,
    ):
        super().__init__(notifier=notifier, max_conflict_retries=max_conflict_retries)
        self._store = store
        self._default_min_quantity = default_min_quantity
        self._movement_limit = movement_limit
        # Record edits and deletes in this process run one at a time
        self._record_lock = asyncio.Lock()

    async def _current_quantity(self, item_id: int) -> int:
        item = await self._store.get_uniform(item_id)
        if item is None:
            raise UniformItemNotFoundError(item_id)
        return item.remaining_quantity

    async def _write_change(
        self, item_id: int, change: QuantityChange
    ) -> tuple[UniformItem, UniformMovement]:
        return await self._store.apply_quantity_change(item_id, change)

    # Categories

    async def list_categories(self) -> list[UniformCategory]:
        return await self._store.list_categories()

    async def add_category(self, name: str) -> UniformCategory:
        category = await self._store.create_category(
            UniformCategory(name=_require_text("name", name))
        )
        logger.info("uniform_category_created", category_id=category.id, name=category.name)
        await self._notify(Collection.UNIFORM_CATEGORIES)
        return category

    async def delete_category(self, category_id: int) -> None:
        if not await self._store.delete_category(category_id):
            raise UniformCategoryNotFoundError(category_id)
        logger.info("uniform_category_deleted", category_id=category_id)
        await self._notify(Collection.UNIFORM_CATEGORIES, Collection.UNIFORM_ITEMS)

    # Inventory

    async def add_uniform(
        self,
        name: str,
        category: str,
        total_quantity: int,
        min_quantity: int | None = None,
        actor_id: str | None = None,
    ) -> tuple[UniformItem, UniformMovement]:
        """Create a uniform item; remaining starts equal to total."""
        require_non_negative("total_quantity", total_quantity)
        if min_quantity is None:
            min_quantity = self._default_min_quantity
        require_non_negative("min_quantity", min_quantity)

        item = UniformItem(
            name=_require_text("name", name),
            category=_require_text("category", category),
            min_quantity=min_quantity,
        )
        initial = plan_initial(total_quantity, performed_by=actor_id)
        item, movement = await self._store.create_uniform(item, initial)

        logger.info(
            "uniform_added",
            uniform_id=item.id,
            name=item.name,
            total_quantity=item.total_quantity,
        )
        await self._notify(Collection.UNIFORM_ITEMS, Collection.UNIFORM_MOVEMENTS)
        return item, movement

    async def get_uniform(self, uniform_id: int) -> UniformItem:
        item = await self._store.get_uniform(uniform_id)
        if item is None:
            raise UniformItemNotFoundError(uniform_id)
        return item

    async def list_uniforms(self) -> list[UniformItemDetails]:
        """List uniforms, flagging those whose category no longer exists."""
        items = await self._store.list_uniforms()
        known = {c.name for c in await self._store.list_categories()}
        return [
            UniformItemDetails(item=item, category_exists=item.category in known)
            for item in items
        ]

    async def restock(
        self,
        uniform_id: int,
        quantity: int,
        notes: str | None = None,
        actor_id: str | None = None,
    ) -> tuple[UniformItem, UniformMovement]:
        """Add stock: total and remaining both grow by quantity."""
        require_positive("quantity", quantity)
        item, movement = await self._apply_change(
            uniform_id,
            lambda current: plan_return(current, quantity, notes or "Restock", actor_id),
        )
        logger.info(
            "uniform_restocked",
            uniform_id=uniform_id,
            quantity=quantity,
            remaining_quantity=item.remaining_quantity,
        )
        await self._notify(Collection.UNIFORM_ITEMS, Collection.UNIFORM_MOVEMENTS)
        return item, movement

    async def update_uniform(
        self, uniform_id: int, update: UniformItemUpdate
    ) -> UniformItem:
        """Partial update. Quantity overrides are applied without a movement."""
        changes = update.changes()
        for field in ("name", "category"):
            if field in changes:
                changes[field] = _require_text(field, changes[field])
        for field in ("min_quantity", "total_quantity", "remaining_quantity"):
            if field in changes:
                if changes[field] is None:
                    raise ValidationError(field, "must not be null", None)
                require_non_negative(field, changes[field])

        if "total_quantity" in changes or "remaining_quantity" in changes:
            total = changes.get("total_quantity")
            remaining = changes.get("remaining_quantity")
            if total is None or remaining is None:
                current = await self.get_uniform(uniform_id)
                total = current.total_quantity if total is None else total
                remaining = current.remaining_quantity if remaining is None else remaining
            if remaining > total:
                raise ValidationError(
                    "remaining_quantity", f"must not exceed total_quantity ({total})", remaining
                )
            logger.warning(
                "quantity_override_without_movement",
                uniform_id=uniform_id,
                total_quantity=changes.get("total_quantity"),
                remaining_quantity=changes.get("remaining_quantity"),
            )

        item = await self._store.update_uniform(uniform_id, changes)
        logger.info("uniform_updated", uniform_id=uniform_id, fields=sorted(changes))
        await self._notify(Collection.UNIFORM_ITEMS)
        return item

    async def delete_uniform(self, uniform_id: int) -> None:
        """Delete a uniform. Its movements and issuance records are kept."""
        if not await self._store.delete_uniform(uniform_id):
            raise UniformItemNotFoundError(uniform_id)
        logger.info("uniform_deleted", uniform_id=uniform_id)
        await self._notify(Collection.UNIFORM_ITEMS, Collection.UNIFORM_ISSUANCES)

    # Issuance

    async def issue_uniform(
        self,
        student_name: str,
        uniform_id: int,
        quantity: int,
        issue_date: date | str,
        actor_id: str | None = None,
    ) -> tuple[IssuedRecord, UniformItem]:
        """Hand uniforms to a student and keep a record of it."""
        student_name = _require_text("student_name", student_name)
        require_positive("quantity", quantity)
        parsed_date = parse_issue_date(issue_date)

        record = IssuedRecord(
            student_name=student_name,
            uniform_id=uniform_id,
            quantity_taken=quantity,
            issue_date=parsed_date,
        )
        record, item = await self._run_compensated(
            "issue",
            uniform_id,
            lambda current: plan_issue(
                uniform_id,
                current,
                quantity,
                f"Issued to {student_name}",
                actor_id,
            ),
            lambda: self._store.create_record(record),
        )

        logger.info(
            "uniform_issued",
            uniform_id=uniform_id,
            record_id=record.id,
            quantity=quantity,
            remaining_quantity=item.remaining_quantity,
        )
        await self._notify(
            Collection.UNIFORM_ITEMS,
            Collection.UNIFORM_MOVEMENTS,
            Collection.UNIFORM_ISSUANCES,
        )
        return record, item

    async def update_issued_record(
        self,
        record_id: int,
        update: IssuedRecordUpdate,
        actor_id: str | None = None,
    ) -> IssuedRecord:
        """
        Edit an issuance record.

        A changed quantity_taken moves the difference between the record and
        the uniform's remaining stock as an "adjusted" movement. The record
        write is conditioned on the quantity_taken the adjustment was computed
        from; if another writer changed it first, the adjustment is reversed
        and the edit retried from a fresh read.
        """
        changes = update.changes()
        if "student_name" in changes:
            changes["student_name"] = _require_text("student_name", changes["student_name"])
        if "issue_date" in changes:
            if changes["issue_date"] is None:
                raise ValidationError("issue_date", "must not be null", None)
            changes["issue_date"] = parse_issue_date(changes["issue_date"])
        if "quantity_taken" in changes:
            if changes["quantity_taken"] is None:
                raise ValidationError("quantity_taken", "must not be null", None)
            require_positive("quantity_taken", changes["quantity_taken"])

        async def attempt() -> tuple[IssuedRecord, UniformItem | None, int]:
            record = await self._get_record(record_id)
            taken = record.quantity_taken
            adjustment = taken - changes.get("quantity_taken", taken)
            if adjustment == 0:
                updated = await self._store.update_record(
                    record_id, changes, expected_quantity=taken
                )
                return updated, None, 0

            uniform_id = record.uniform_id
            updated, item = await self._run_compensated(
                "record_edit",
                uniform_id,
                lambda current: plan_adjustment(
                    uniform_id,
                    current,
                    adjustment,
                    issued_delta=-adjustment,
                    notes=f"Issuance record {record_id} edited",
                    performed_by=actor_id,
                ),
                lambda: self._store.update_record(
                    record_id, changes, expected_quantity=taken
                ),
            )
            return updated, item, adjustment

        async with self._record_lock:
            updated, item, adjustment = await self._retry_stale(
                attempt, StaleRecordError, record_id, entity="issued_record"
            )
        if item is None:
            await self._notify(Collection.UNIFORM_ISSUANCES)
            return updated

        logger.info(
            "issued_record_updated",
            record_id=record_id,
            uniform_id=updated.uniform_id,
            adjustment=adjustment,
            remaining_quantity=item.remaining_quantity,
        )
        await self._notify(
            Collection.UNIFORM_ITEMS,
            Collection.UNIFORM_MOVEMENTS,
            Collection.UNIFORM_ISSUANCES,
        )
        return updated

    async def delete_issued_record(
        self, record_id: int, actor_id: str | None = None
    ) -> None:
        """
        Delete an issuance record and give its quantity back to the uniform.

        Like edits, the delete only applies while the record still holds
        the quantity that was released.
        """

        async def attempt() -> tuple[IssuedRecord, UniformItem | None]:
            record = await self._get_record(record_id)
            uniform_id = record.uniform_id
            taken = record.quantity_taken
            if await self._store.get_uniform(uniform_id) is None:
                logger.warning(
                    "issued_record_deleted_without_restore",
                    record_id=record_id,
                    uniform_id=uniform_id,
                )
                await self._delete_record(record_id, taken)
                return record, None

            _, item = await self._run_compensated(
                "record_delete",
                uniform_id,
                lambda current: plan_release(
                    current,
                    taken,
                    f"Issuance record {record_id} deleted",
                    actor_id,
                ),
                lambda: self._delete_record(record_id, taken),
            )
            return record, item

        async with self._record_lock:
            record, item = await self._retry_stale(
                attempt, StaleRecordError, record_id, entity="issued_record"
            )
        if item is None:
            await self._notify(Collection.UNIFORM_ISSUANCES)
            return

        logger.info(
            "issued_record_deleted",
            record_id=record_id,
            uniform_id=record.uniform_id,
            restored=record.quantity_taken,
            remaining_quantity=item.remaining_quantity,
        )
        await self._notify(
            Collection.UNIFORM_ITEMS,
            Collection.UNIFORM_MOVEMENTS,
            Collection.UNIFORM_ISSUANCES,
        )

    async def _get_record(self, record_id: int) -> IssuedRecord:
        record = await self._store.get_record(record_id)
        if record is None:
            raise IssuedRecordNotFoundError(record_id)
        return record

    async def _delete_record(self, record_id: int, expected_quantity: int) -> None:
        if not await self._store.delete_record(record_id, expected_quantity):
            raise IssuedRecordNotFoundError(record_id)

    async def _run_compensated(
        self,
        operation: str,
        uniform_id: int,
        plan: Planner,
        mutate: Callable[[], Awaitable[R]],
    ) -> tuple[R, UniformItem]:
        """
        Apply a quantity change, then a record mutation.

        If the mutation fails the quantity change is reversed and the
        mutation's error re-raised. A failed reversal raises
        CompensationFailedError.
        """
        item, movement = await self._apply_change(uniform_id, plan)
        try:
            result = await mutate()
        except Exception as e:
            logger.warning(
                "issuance_record_mutation_failed",
                operation=operation,
                uniform_id=uniform_id,
                error=str(e),
            )
            await self._reverse(operation, uniform_id, movement, e)
            raise
        return result, item

    async def _reverse(
        self,
        operation: str,
        uniform_id: int,
        movement: UniformMovement,
        cause: Exception,
    ) -> None:
        delta = -movement.quantity_delta
        try:
            await self._apply_change(
                uniform_id,
                lambda current: plan_adjustment(
                    uniform_id,
                    current,
                    delta,
                    issued_delta=-delta,
                    notes=f"Reversal of failed {operation}",
                    performed_by=movement.performed_by,
                ),
            )
        except Exception as e:
            logger.critical(
                "compensation_failed",
                operation=operation,
                uniform_id=uniform_id,
                delta=delta,
                cause=str(cause),
                error=str(e),
            )
            raise CompensationFailedError(operation, uniform_id, str(e)) from cause
        logger.info(
            "compensation_applied",
            operation=operation,
            uniform_id=uniform_id,
            delta=delta,
        )

    # Reports

    async def list_issued_records(
        self,
        start_date: date | str | None = None,
        end_date: date | str | None = None,
    ) -> list[IssuedRecordDetails]:
        """Issuance records within an inclusive date range."""
        start = parse_issue_date(start_date, "start_date") if start_date is not None else None
        end = parse_issue_date(end_date, "end_date") if end_date is not None else None
        if start and end and start > end:
            raise ValidationError("start_date", "must not be after end_date", start)
        return await self._store.list_records(start_date=start, end_date=end)

    async def list_movements(
        self,
        uniform_id: int | None = None,
        limit: Any = DEFAULT_LIMIT,
        movement_type: MovementType | None = None,
        search: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[UniformMovement]:
        if limit is DEFAULT_LIMIT:
            limit = self._movement_limit
        start, end = time_range(start, end)
        return await self._store.list_movements(
            uniform_id=uniform_id,
            limit=limit,
            movement_type=movement_type,
            search=search.strip() if search else None,
            start=start,
            end=end,
        )
