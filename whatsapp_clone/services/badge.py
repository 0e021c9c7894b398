"""
Badge Counter — unread count derived from the stored notifications.

The count is always recomputed from the list and never tracked
incrementally, so it cannot drift from the records it describes.
"""

from collections.abc import Iterable

from whatsapp_clone.models.notifications import NotificationRecord


def badge_count(notifications: Iterable[NotificationRecord]) -> int:
    """Number of records not yet read."""
    return sum(1 for n in notifications if not n.read)
