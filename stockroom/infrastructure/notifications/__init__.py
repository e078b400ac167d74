"""Change notification implementations."""

from stockroom.infrastructure.notifications.in_process import InProcessChangeNotifier

_notifier: InProcessChangeNotifier | None = None


def get_notifier() -> InProcessChangeNotifier:
    """Get singleton change notifier instance."""
    global _notifier
    if _notifier is None:
        _notifier = InProcessChangeNotifier()
    return _notifier


async def close_notifier() -> None:
    """Close and drop the singleton notifier."""
    global _notifier
    if _notifier is not None:
        await _notifier.close()
        _notifier = None


__all__ = ["InProcessChangeNotifier", "get_notifier", "close_notifier"]
