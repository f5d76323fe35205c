"""Bounded queue of short-lived user-facing notifications.

At most ``limit`` notifications are active at once; showing one more evicts
the oldest, whatever its severity. Each notification expires on a timer from
the injected scheduler, and dismissing it cancels that timer.
"""
import asyncio
import enum
import itertools
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from .config import NOTIFICATION_LIMIT

logger = logging.getLogger(__name__)


class Severity(str, enum.Enum):
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


# Seconds a notification stays visible unless the caller overrides it.
DEFAULT_DURATIONS = {
    Severity.SUCCESS: 4.0,
    Severity.ERROR: 6.0,
    Severity.WARNING: 5.0,
    Severity.INFO: 4.0,
}

ERROR_MESSAGES = {
    "failed-precondition": "Task was modified by another user. Board will refresh with latest data.",
    "permission-denied": "You don't have permission to perform this action.",
    "not-found": "The item you're trying to access no longer exists.",
    "invalid-argument": "Invalid data provided. Please check your input and try again.",
    "unauthenticated": "You need to sign in to perform this action.",
}
NETWORK_ERROR_MESSAGE = "Network error. Please check your connection and try again."


@dataclass
class Notification:
    id: str
    message: str
    severity: Severity
    duration: float
    created_at: float
    visible: bool = True


class AsyncioScheduler:
    """Schedules callbacks on the running asyncio loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], Any]):
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)


class NotificationQueue:
    def __init__(self, limit: int = NOTIFICATION_LIMIT, scheduler=None, clock: Callable[[], float] = time.monotonic):
        if limit < 1:
            raise ValueError("limit must be at least 1")
        self.limit = limit
        self.scheduler = scheduler or AsyncioScheduler()
        self.clock = clock
        self._active: "OrderedDict[str, Notification]" = OrderedDict()
        self._timers: Dict[str, Any] = {}
        self._ids = itertools.count(1)

    def __len__(self) -> int:
        return len(self._active)

    def active(self) -> List[Notification]:
        """Visible notifications, oldest first."""
        return list(self._active.values())

    def show(self, message: str, severity: Any = Severity.INFO, duration: Optional[float] = None) -> str:
        severity = Severity(severity)
        while len(self._active) >= self.limit:
            oldest_id = next(iter(self._active))
            logger.debug("Evicting notification %s", oldest_id)
            self.dismiss(oldest_id)

        notification = Notification(
            id=f"notification-{next(self._ids)}",
            message=message,
            severity=severity,
            duration=duration or DEFAULT_DURATIONS[severity],
            created_at=self.clock(),
        )
        self._active[notification.id] = notification
        self._timers[notification.id] = self.scheduler.call_later(
            notification.duration, lambda: self._expire(notification.id)
        )
        return notification.id

    def success(self, message: str, duration: Optional[float] = None) -> str:
        return self.show(message, Severity.SUCCESS, duration)

    def error(self, message: str, duration: Optional[float] = None) -> str:
        return self.show(message, Severity.ERROR, duration)

    def warning(self, message: str, duration: Optional[float] = None) -> str:
        return self.show(message, Severity.WARNING, duration)

    def info(self, message: str, duration: Optional[float] = None) -> str:
        return self.show(message, Severity.INFO, duration)

    def dismiss(self, notification_id: str) -> None:
        """Remove a notification now; unknown ids are ignored."""
        timer = self._timers.pop(notification_id, None)
        if timer is not None:
            timer.cancel()
        notification = self._active.pop(notification_id, None)
        if notification is not None:
            notification.visible = False

    def dismiss_all(self) -> None:
        for notification_id in list(self._active):
            self.dismiss(notification_id)

    def _expire(self, notification_id: str) -> None:
        self._timers.pop(notification_id, None)
        notification = self._active.pop(notification_id, None)
        if notification is not None:
            notification.visible = False

    def handle_error(self, error: BaseException, operation: str = "operation") -> str:
        """Show an error notification with a message suited to the error's code."""
        logger.error("Error during %s: %s", operation, error)

        code = getattr(error, "code", None)
        message = getattr(error, "message", None) or str(error)
        if code == "failed-precondition":
            return self.error(ERROR_MESSAGES[code], 5.0)
        if code in ERROR_MESSAGES:
            return self.error(ERROR_MESSAGES[code])
        if "network" in message.lower():
            return self.error(NETWORK_ERROR_MESSAGE)
        return self.error(message or f"Failed to {operation}")
