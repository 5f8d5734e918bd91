"""User-facing notifications emitted alongside API calls."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

_logger = logging.getLogger(__name__)


class NotificationLevel(Enum):
    """Severity of a notification."""

    INFO = "info"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    """A message meant for the console operator."""

    title: str
    description: str
    level: NotificationLevel = NotificationLevel.INFO


class Notifier(Protocol):
    """Side channel for operator notifications."""

    def notify(self, notification: Notification) -> None:
        """Deliver a notification."""


@dataclass
class LoggingNotifier(Notifier):
    """Notifier that writes notifications to the application log."""

    def notify(self, notification: Notification) -> None:
        """Log the notification at a level matching its severity."""
        level = (
            logging.ERROR
            if notification.level is NotificationLevel.ERROR
            else logging.INFO
        )
        _logger.log(level, "%s: %s", notification.title, notification.description)


def success(description: str) -> Notification:
    return Notification(title="Успешно", description=description)


def failure(description: str, status_code: int | None = None) -> Notification:
    title = f"Ошибка {status_code}" if status_code else "Ошибка"
    return Notification(
        title=title, description=description, level=NotificationLevel.ERROR
    )
