"""
Notification Reducer — pure state transitions over the stored list.

    reduce(notifications, intent) -> notifications

The list is newest-first and holds at most MAX_STORED_NOTIFICATIONS
records. Transitions never mutate their input; a transition that
changes nothing returns the input list itself.
"""

import logging

from whatsapp_clone.core.config import MAX_STORED_NOTIFICATIONS
from whatsapp_clone.models.notifications import (
    Acknowledge,
    ClearAll,
    Intent,
    NotificationRecord,
    Receive,
)

logger = logging.getLogger(__name__)


def _receive(
    notifications: list[NotificationRecord],
    intent: Receive,
) -> list[NotificationRecord]:
    updated = [intent.record, *notifications]
    return updated[:MAX_STORED_NOTIFICATIONS]


def _acknowledge(
    notifications: list[NotificationRecord],
    intent: Acknowledge,
) -> list[NotificationRecord]:
    for index, record in enumerate(notifications):
        if record.id != intent.id:
            continue
        if record.read:
            return notifications
        updated = list(notifications)
        updated[index] = record.model_copy(update={"read": True})
        return updated

    logger.debug("Acknowledge for unknown notification %s — ignoring", intent.id)
    return notifications


def reduce(
    notifications: list[NotificationRecord],
    intent: Intent,
) -> list[NotificationRecord]:
    """
    Apply one intent to the notification list.

    Args:
        notifications: Current list, newest first.
        intent: Receive, Acknowledge or ClearAll.

    Returns:
        The resulting list (the same object when nothing changed).
    """
    if isinstance(intent, Receive):
        return _receive(notifications, intent)
    if isinstance(intent, Acknowledge):
        return _acknowledge(notifications, intent)
    if isinstance(intent, ClearAll):
        return notifications if not notifications else []
    raise TypeError(f"Unsupported intent: {type(intent).__name__}")
