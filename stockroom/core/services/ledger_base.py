"""Shared machinery for quantity ledgers: conflict retries, activity, notifications."""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any, Generic, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
)

from stockroom.config import get_logger
from stockroom.core.entities.activity import ActivityLogEntry
from stockroom.core.entities.ledger import QuantityChange
from stockroom.core.exceptions import ConcurrentModificationError, StaleQuantityError
from stockroom.core.interfaces.activity_store import IActivityLogStore
from stockroom.core.interfaces.change_notifier import Collection, IChangeNotifier

logger = get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")

# Marks "use the configured default" so that None can mean "no limit".
DEFAULT_LIMIT: Any = object()

Planner = Callable[[int], QuantityChange]
Writer = Callable[[int, QuantityChange], Awaitable[T]]


class LedgerService(ABC, Generic[T]):
    """
    Base class for the stock and uniform ledgers.

    Subclasses supply _current_quantity (raising the ledger's not-found
    error) and _write_change (the store's compare-and-set write).
    """

    ledger_name = "ledger"

    def __init__(
        self,
        notifier: IChangeNotifier | None = None,
        activity_store: IActivityLogStore | None = None,
        max_conflict_retries: int = 3,
    ):
        self._notifier = notifier
        self._activity_store = activity_store
        self._max_conflict_retries = max_conflict_retries

    @abstractmethod
    async def _current_quantity(self, item_id: int) -> int:
        pass

    @abstractmethod
    async def _write_change(self, item_id: int, change: QuantityChange) -> T:
        pass

    async def _apply_change(
        self,
        item_id: int,
        plan: Planner,
        write: Writer | None = None,
    ) -> Any:
        """
        Read the item, plan the change and write it with compare-and-set.

        A lost compare-and-set re-reads and re-plans, so validation always
        runs against the quantity the write is conditioned on.
        """
        write = write or self._write_change

        async def attempt() -> Any:
            current = await self._current_quantity(item_id)
            return await write(item_id, plan(current))

        return await self._retry_stale(attempt, StaleQuantityError, item_id)

    async def _retry_stale(
        self,
        attempt: Callable[[], Awaitable[R]],
        stale: type[Exception],
        entity_id: int,
        entity: str = "item",
    ) -> R:
        """
        Run attempt until it stops raising stale.

        Gives up with ConcurrentModificationError after max_conflict_retries
        retries; any other error propagates from the attempt that raised it.
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._max_conflict_retries + 1),
            retry=retry_if_exception_type(stale),
            before_sleep=self._log_conflict_retry,
        )
        try:
            return await retrying(attempt)
        except RetryError as e:
            attempts = e.last_attempt.attempt_number
            logger.error(
                "ledger_conflict_exhausted",
                ledger=self.ledger_name,
                entity=entity,
                entity_id=entity_id,
                attempts=attempts,
            )
            raise ConcurrentModificationError(
                entity_id, attempts, entity=entity
            ) from e.last_attempt.exception()

    def _log_conflict_retry(self, retry_state: RetryCallState) -> None:
        logger.warning(
            "ledger_conflict_retry",
            ledger=self.ledger_name,
            attempt=retry_state.attempt_number,
            error=str(retry_state.outcome.exception()) if retry_state.outcome else None,
        )

    async def _record_activity(
        self,
        action: str,
        entity_type: str,
        entity_id: int | None,
        details: dict[str, Any] | None = None,
        actor_id: str | None = None,
    ) -> None:
        """Append an activity entry. Failures are logged, never raised."""
        if self._activity_store is None:
            return
        entry = ActivityLogEntry(
            actor_id=actor_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details,
        )
        try:
            await self._activity_store.append(entry)
        except Exception as e:
            logger.error(
                "activity_log_write_failed",
                action=action,
                entity_type=entity_type,
                entity_id=entity_id,
                error=str(e),
            )
            return
        await self._notify(Collection.ACTIVITY_LOGS)

    async def _notify(self, *collections: Collection) -> None:
        if self._notifier is not None:
            await self._notifier.notify(*collections)
