"""
nspass.collection.notifications - User-facing notification channel

The orchestrator pushes success and error messages here; hosts register
async handlers that forward them to their notification surface (toast,
stderr, a log). Handler failures are logged but never propagate.

Example:
    >>> center = NotificationCenter()
    >>> async def toast(notification):
    ...     print(notification.level, notification.message)
    >>> center.register(toast)
    >>> await center.success("Created successfully", operation="create")
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import StrEnum

logger = logging.getLogger(__name__)


class NotificationLevel(StrEnum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    level: NotificationLevel
    message: str
    operation: str | None = None
    error_code: str | None = None


NotificationHandler = Callable[[Notification], Awaitable[None]]


class NotificationCenter:
    """Registry of async notification handlers."""

    def __init__(self) -> None:
        self._handlers: list[NotificationHandler] = []

    def register(self, handler: NotificationHandler) -> None:
        """Register a handler."""
        self._handlers.append(handler)

    def unregister(self, handler: NotificationHandler) -> bool:
        """Unregister a handler. Returns True if found."""
        if handler in self._handlers:
            self._handlers.remove(handler)
            return True
        return False

    def clear(self) -> None:
        self._handlers.clear()

    def has_handlers(self) -> bool:
        return bool(self._handlers)

    async def emit(self, notification: Notification) -> None:
        """Deliver ``notification`` to every handler.

        Errors are logged but do not propagate or affect other handlers.
        """
        logger.debug(
            "Notification: %s",
            notification.message,
            extra={
                "notification_level": str(notification.level),
                "operation": notification.operation,
                "error_code": notification.error_code,
            },
        )
        for handler in list(self._handlers):
            try:
                await handler(notification)
            except Exception:
                handler_name = getattr(handler, "__qualname__", repr(handler))
                logger.error(
                    "Notification handler %r failed",
                    handler_name,
                    exc_info=True,
                    extra={"notification_handler": handler_name},
                )

    async def success(self, message: str, operation: str | None = None) -> None:
        await self.emit(Notification(NotificationLevel.SUCCESS, message, operation))

    async def error(
        self,
        message: str,
        operation: str | None = None,
        error_code: str | None = None,
    ) -> None:
        await self.emit(Notification(NotificationLevel.ERROR, message, operation, error_code))
