"""Submission outcome notifications.

A Notification is a one-shot message to the presentation layer (a toast in
the web page) describing how a submit attempt ended. The core never reads a
return value from the notifier.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional
import logging

from cancelform.types import NotificationKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    """Message describing a submission outcome.

    Attributes:
        kind: success or error
        title: Short headline
        description: One-sentence explanation
    """
    kind: NotificationKind
    title: str
    description: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return {
            "kind": self.kind.value,
            "title": self.title,
            "description": self.description,
        }


SUCCESS_NOTIFICATION = Notification(
    kind=NotificationKind.SUCCESS,
    title="送信完了",
    description="退会理由が正常に送信されました。",
)

ERROR_NOTIFICATION = Notification(
    kind=NotificationKind.ERROR,
    title="エラーが発生しました",
    description="送信に失敗しました。もう一度お試しください。",
)


Notifier = Callable[[Notification], None]
"""Type alias for notification callbacks."""


class LoggingNotifier:
    """Notifier that writes outcomes to the log.

    Used when no presentation layer is attached.
    """

    def __init__(self, log: logging.Logger = logger):
        self._log = log

    def __call__(self, notification: Notification) -> None:
        level = logging.INFO if notification.kind == NotificationKind.SUCCESS else logging.ERROR
        self._log.log(level, "%s: %s", notification.title, notification.description)


class RecordingNotifier:
    """Notifier that keeps every notification it receives, in order."""

    def __init__(self):
        self.notifications: List[Notification] = []

    def __call__(self, notification: Notification) -> None:
        self.notifications.append(notification)

    @property
    def last(self) -> Optional[Notification]:
        return self.notifications[-1] if self.notifications else None


__all__ = [
    "Notification",
    "Notifier",
    "LoggingNotifier",
    "RecordingNotifier",
    "SUCCESS_NOTIFICATION",
    "ERROR_NOTIFICATION",
]
