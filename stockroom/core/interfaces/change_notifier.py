"""Abstract interface for collection change notifications."""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from enum import Enum

ChangeCallback = Callable[[], Awaitable[None] | None]
Disposer = Callable[[], None]


class Collection(str, Enum):
    """Collections whose readers can be told to re-read."""

    STOCK_ITEMS = "stock_items"
    CATEGORIES = "categories"
    STOCK_MOVEMENTS = "stock_movements"
    ACTIVITY_LOGS = "activity_logs"
    UNIFORM_ITEMS = "uniform_items"
    UNIFORM_CATEGORIES = "uniform_categories"
    UNIFORM_MOVEMENTS = "uniform_movements"
    UNIFORM_ISSUANCES = "uniform_issuances"


class IChangeNotifier(ABC):
    """
    Subscription channel for "collection changed" signals.

    Signals carry no payload; subscribers re-read the collection.
    """

    @abstractmethod
    def subscribe(self, collection: Collection, callback: ChangeCallback) -> Disposer:
        """Register a callback. The returned disposer unsubscribes it."""
        pass

    @abstractmethod
    def unsubscribe(self, collection: Collection, callback: ChangeCallback) -> None:
        pass

    @abstractmethod
    async def notify(self, *collections: Collection) -> None:
        """Signal every subscriber of the given collections."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Drop all subscriptions."""
        pass
