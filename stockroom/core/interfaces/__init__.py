"""Core interfaces (ports) for storage and notifications."""

from stockroom.core.interfaces.activity_store import IActivityLogStore
from stockroom.core.interfaces.change_notifier import (
    ChangeCallback,
    Collection,
    Disposer,
    IChangeNotifier,
)
from stockroom.core.interfaces.stock_store import IStockStore
from stockroom.core.interfaces.uniform_store import IUniformStore

__all__ = [
    "IStockStore",
    "IUniformStore",
    "IActivityLogStore",
    "IChangeNotifier",
    "Collection",
    "ChangeCallback",
    "Disposer",
]
