"""
Notification Store — durable copy of the notification list.

Persists the newest-first list as a single JSON array under the
"notifications" storage key, plus a non-authoritative mirror of the
badge count under "badge_count".

Failure handling:
- load() degrades to an empty list when nothing is stored or the blob
  cannot be parsed.
- save() logs and drops the write on any I/O failure.
Neither ever raises into the caller.

Writes are serialized per store through one asyncio.Lock. The lock is
fair (FIFO), so writes land in the order save() was called and an
earlier list never overwrites a later one.
"""

import asyncio
import json
import logging

from pydantic import TypeAdapter, ValidationError

from whatsapp_clone.core.config import (
    BADGE_COUNT_STORAGE_KEY,
    MAX_STORED_NOTIFICATIONS,
    NOTIFICATIONS_STORAGE_KEY,
)
from whatsapp_clone.db.storage import FileStorage, get_storage
from whatsapp_clone.models.notifications import NotificationRecord

logger = logging.getLogger(__name__)

_records_adapter = TypeAdapter(list[NotificationRecord])


def serialize_notifications(notifications: list[NotificationRecord]) -> str:
    return json.dumps([n.model_dump(mode="json") for n in notifications])


class NotificationStore:
    """Loads and saves the notification list through a FileStorage."""

    def __init__(self, storage: FileStorage | None = None):
        self._storage = storage or get_storage()
        self._write_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Load
    # ------------------------------------------------------------------

    def _read(self) -> list[NotificationRecord]:
        try:
            raw = self._storage.get_item(NOTIFICATIONS_STORAGE_KEY)
        except Exception as exc:
            logger.error("Error loading stored notifications: %s", exc)
            return []

        if not raw:
            return []

        try:
            notifications = _records_adapter.validate_json(raw)
        except (ValidationError, ValueError) as exc:
            logger.warning(
                "Stored notifications are corrupt — starting empty: %s", exc
            )
            return []

        return notifications[:MAX_STORED_NOTIFICATIONS]

    async def load(self) -> list[NotificationRecord]:
        """Return the persisted list, or [] if none or unreadable."""
        return await asyncio.to_thread(self._read)

    # ------------------------------------------------------------------
    # Save
    # ------------------------------------------------------------------

    def _write(self, key: str, value: str) -> bool:
        try:
            self._storage.set_item(key, value)
        except Exception as exc:
            logger.error("Error storing %s: %s", key, exc)
            return False
        return True

    async def save(self, notifications: list[NotificationRecord]) -> None:
        """
        Overwrite the persisted list.

        Accepts any list of records; never raises. Waits for earlier
        writes, so the last call always wins.
        """
        payload = serialize_notifications(notifications)

        async with self._write_lock:
            await asyncio.to_thread(
                self._write, NOTIFICATIONS_STORAGE_KEY, payload
            )

    async def save_badge_count(self, count: int) -> None:
        """Mirror the badge count for out-of-process readers."""
        async with self._write_lock:
            await asyncio.to_thread(
                self._write, BADGE_COUNT_STORAGE_KEY, str(count)
            )
