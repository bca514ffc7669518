"""
User Notices - transient acknowledgments shown after cart actions.

The storefront renders these as toasts. The cart store only emits them;
how (and whether) they are displayed belongs to the UI layer.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Protocol

from medstore.logging import get_logger, sanitize_string_for_logging

logger = get_logger(__name__)


class NoticeLevel(str, Enum):
    """Toast severity."""
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


# Log level used by LogNotifier for each notice level
_LOG_LEVELS = {
    NoticeLevel.SUCCESS: logging.INFO,
    NoticeLevel.INFO: logging.INFO,
    NoticeLevel.WARNING: logging.WARNING,
    NoticeLevel.ERROR: logging.ERROR,
}


@dataclass(frozen=True)
class Notice:
    """A single user-visible message."""
    level: NoticeLevel
    message: str


class Notifier(Protocol):
    """Anything that can show a notice to the user."""

    def notify(self, level: NoticeLevel, message: str) -> None:
        ...


class LogNotifier:
    """Default notifier: writes notices to the log."""

    def notify(self, level: NoticeLevel, message: str) -> None:
        logger.log(_LOG_LEVELS[level], "[%s] %s", level.value, sanitize_string_for_logging(message, max_length=200))


class NoticeBuffer:
    """
    Collects notices in emission order.

    Usage:
        notices = NoticeBuffer()
        store = CartStore(storage, notifier=notices)
        store.add_to_cart(product)
        for notice in notices.drain():
            render_toast(notice)
    """

    def __init__(self) -> None:
        self.notices: List[Notice] = []

    def notify(self, level: NoticeLevel, message: str) -> None:
        self.notices.append(Notice(level=level, message=message))

    def drain(self) -> List[Notice]:
        """Return all pending notices and forget them."""
        pending, self.notices = self.notices, []
        return pending

    @property
    def messages(self) -> List[str]:
        return [notice.message for notice in self.notices]

    @property
    def last(self) -> Notice | None:
        return self.notices[-1] if self.notices else None


__all__ = [
    "NoticeLevel",
    "Notice",
    "Notifier",
    "LogNotifier",
    "NoticeBuffer",
]
