"""Notification lifecycle manager.

Each notification goes through::

    created --(entrance delay)--> visible --(duration)--> exiting --(exit delay)--> removed

The auto-exit step is skipped for persistent notifications and for a
``duration`` of ``0``; those stay visible until ``dismiss``.  Dismissing
cancels any pending timer and runs the same exit sequence.  Timers are
``loop.call_later`` handles, one pending per notification.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from uuid import uuid4

from loguru import logger

from sandboxlink.client.models.enums import Severity
from sandboxlink.client.models.notification import Notification

NotificationListener = Callable[[list[Notification]], None]

DEFAULT_DURATION = 5.0
ENTRANCE_DELAY = 0.01
EXIT_DELAY = 0.3


class NotificationManager:
    """Holds the current notifications and drives their timers.

    Must be used from within a running event loop.
    """

    def __init__(
        self,
        *,
        default_duration: float = DEFAULT_DURATION,
        entrance_delay: float = ENTRANCE_DELAY,
        exit_delay: float = EXIT_DELAY,
    ) -> None:
        self._default_duration = default_duration
        self._entrance_delay = entrance_delay
        self._exit_delay = exit_delay
        self._notifications: dict[str, Notification] = {}
        self._timers: dict[str, asyncio.TimerHandle] = {}
        self._listeners: list[NotificationListener] = []

    @property
    def notifications(self) -> list[Notification]:
        """Snapshot of current notifications, oldest first."""
        return [n.model_copy() for n in self._notifications.values()]

    def get(self, notification_id: str) -> Notification | None:
        notification = self._notifications.get(notification_id)
        return notification.model_copy() if notification else None

    # -- Listeners -------------------------------------------------------------

    def subscribe(self, listener: NotificationListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _changed(self) -> None:
        snapshot = self.notifications
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Notification listener failed")

    # -- Timers ----------------------------------------------------------------

    def _schedule(self, notification_id: str, delay: float, callback: Callable[[str], None]) -> None:
        self._cancel(notification_id)
        loop = asyncio.get_running_loop()
        self._timers[notification_id] = loop.call_later(delay, callback, notification_id)

    def _cancel(self, notification_id: str) -> None:
        handle = self._timers.pop(notification_id, None)
        if handle is not None:
            handle.cancel()

    # -- Lifecycle -------------------------------------------------------------

    def add(
        self,
        severity: Severity,
        title: str,
        message: str | None = None,
        *,
        duration: float | None = None,
        persistent: bool = False,
    ) -> str:
        """Queue a notification.  Returns its id."""
        notification = Notification(
            id=uuid4().hex,
            severity=severity,
            title=title,
            message=message,
            duration=duration,
            persistent=persistent,
        )
        self._notifications[notification.id] = notification
        self._schedule(notification.id, self._entrance_delay, self._show)
        self._changed()
        return notification.id

    def _show(self, notification_id: str) -> None:
        self._timers.pop(notification_id, None)
        notification = self._notifications.get(notification_id)
        if notification is None or notification.exiting:
            return
        notification.visible = True
        if notification.auto_dismiss:
            duration = self._default_duration if notification.duration is None else notification.duration
            self._schedule(notification_id, duration, self.dismiss)
        self._changed()

    def dismiss(self, notification_id: str) -> None:
        """Start the exit sequence.  No-op for unknown or already exiting notifications."""
        notification = self._notifications.get(notification_id)
        if notification is None or notification.exiting:
            return
        notification.visible = False
        notification.exiting = True
        self._schedule(notification_id, self._exit_delay, self._remove)
        self._changed()

    def _remove(self, notification_id: str) -> None:
        self._cancel(notification_id)
        if self._notifications.pop(notification_id, None) is not None:
            self._changed()

    def clear_all(self) -> None:
        """Drop every notification immediately, without exit animations."""
        for notification_id in list(self._timers):
            self._cancel(notification_id)
        if self._notifications:
            self._notifications.clear()
            self._changed()

    def close(self) -> None:
        """Cancel all pending timers and detach listeners."""
        for notification_id in list(self._timers):
            self._cancel(notification_id)
        self._notifications.clear()
        self._listeners.clear()

    # -- Helpers ---------------------------------------------------------------

    def success(self, title: str, message: str | None = None, *, duration: float | None = None) -> str:
        return self.add(Severity.SUCCESS, title, message, duration=duration)

    def error(self, title: str, message: str | None = None, *, persistent: bool = True) -> str:
        """Errors stay until dismissed unless ``persistent=False``."""
        return self.add(Severity.ERROR, title, message, persistent=persistent)

    def warning(self, title: str, message: str | None = None, *, duration: float | None = None) -> str:
        return self.add(Severity.WARNING, title, message, duration=duration)

    def info(self, title: str, message: str | None = None, *, duration: float | None = None) -> str:
        return self.add(Severity.INFO, title, message, duration=duration)
