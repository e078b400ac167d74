"""In-process change notifier."""

import inspect
from collections import defaultdict

from stockroom.config import get_logger
from stockroom.core.interfaces.change_notifier import (
    ChangeCallback,
    Collection,
    Disposer,
    IChangeNotifier,
)

logger = get_logger(__name__)


class InProcessChangeNotifier(IChangeNotifier):
    """
    Fan-out of "collection changed" signals to callbacks in this process.

    Callbacks may be plain functions or coroutine functions. A failing
    subscriber is logged and does not stop delivery to the others.
    """

    def __init__(self) -> None:
        self._subscribers: dict[Collection, list[ChangeCallback]] = defaultdict(list)
        self._closed = False

    def subscribe(self, collection: Collection, callback: ChangeCallback) -> Disposer:
        if self._closed:
            raise RuntimeError("notifier is closed")
        self._subscribers[collection].append(callback)
        logger.debug("change_subscriber_added", collection=collection.value)

        def dispose() -> None:
            self.unsubscribe(collection, callback)

        return dispose

    def unsubscribe(self, collection: Collection, callback: ChangeCallback) -> None:
        callbacks = self._subscribers.get(collection)
        if callbacks and callback in callbacks:
            callbacks.remove(callback)
            logger.debug("change_subscriber_removed", collection=collection.value)

    def subscriber_count(self, collection: Collection) -> int:
        return len(self._subscribers.get(collection, []))

    async def notify(self, *collections: Collection) -> None:
        for collection in dict.fromkeys(collections):
            # Copy so callbacks can dispose themselves while being called
            for callback in list(self._subscribers.get(collection, [])):
                try:
                    result = callback()
                    if inspect.isawaitable(result):
                        await result
                except Exception:
                    logger.exception(
                        "change_subscriber_failed",
                        collection=collection.value,
                    )

    async def close(self) -> None:
        self._subscribers.clear()
        self._closed = True
        logger.info("change_notifier_closed")
