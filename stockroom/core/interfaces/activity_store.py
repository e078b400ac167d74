"""Abstract interface for the activity log."""

from abc import ABC, abstractmethod

from stockroom.core.entities.activity import ActivityLogEntry


class IActivityLogStore(ABC):
    """Append-only store of activity log entries."""

    @abstractmethod
    async def append(self, entry: ActivityLogEntry) -> ActivityLogEntry:
        """Append an entry."""
        pass

    @abstractmethod
    async def list_entries(self, limit: int | None = None) -> list[ActivityLogEntry]:
        """List entries newest first. None means no limit."""
        pass
