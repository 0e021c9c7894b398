"""
Notification Center — the single owner of the device's notification state.

Holds the in-memory notification list, applies intents through the
reducer one at a time, and schedules a persistence write after every
transition. Presentation code and the delivery adapter only ever call:

    state = await center.submit_intent(intent)
    state = center.get_state()

Lifecycle:
    center = NotificationCenter()
    await center.start()     # load persisted list
    ...
    await center.close()     # stop accepting intents, final save

or `async with NotificationCenter() as center: ...`.
"""

import asyncio
import logging

from whatsapp_clone.models.notifications import (
    Intent,
    NotificationRecord,
    NotificationState,
)
from whatsapp_clone.services.badge import badge_count
from whatsapp_clone.services.notification_store import NotificationStore
from whatsapp_clone.services.reducer import reduce

logger = logging.getLogger(__name__)


class NotificationCenter:
    """Serializes intents over one notification list and persists results."""

    def __init__(self, store: NotificationStore | None = None):
        self._store = store or NotificationStore()
        self._notifications: list[NotificationRecord] = []
        self._lock = asyncio.Lock()
        self._pending_writes: set[asyncio.Task] = set()
        self._started = False
        self._closed = False
        self._close_task: asyncio.Task | None = None

    async def __aenter__(self) -> "NotificationCenter":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @property
    def started(self) -> bool:
        return self._started

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> NotificationState:
        """
        Load the persisted list and mirror its badge count.

        If an intent already forced the load, the in-memory list is kept.
        """
        async with self._lock:
            if not self._started:
                await self._load()
            state = self._snapshot()
        await self._store.save_badge_count(state.badge_count)
        logger.info(
            "Loaded %d stored notifications (%d unread)",
            len(state.notifications),
            state.badge_count,
        )
        return state

    async def close(self) -> None:
        """
        Reject further intents, wait for pending writes, save once more.

        Concurrent callers all wait for the same final save. A center that
        never loaded its list skips the final save so the stored copy is
        left untouched.
        """
        if self._close_task is None:
            self._closed = True
            self._close_task = asyncio.create_task(self._close())
        await asyncio.shield(self._close_task)

    async def _close(self) -> None:
        async with self._lock:
            await self.flush()
            if not self._started:
                logger.warning("Notification center closed before start()")
                return
            await self._store.save(self._notifications)
            await self._store.save_badge_count(badge_count(self._notifications))

    async def flush(self) -> None:
        """Wait until every scheduled persistence write has finished."""
        while True:
            pending = [t for t in self._pending_writes if not t.done()]
            if not pending:
                return
            await asyncio.gather(*pending)

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def get_state(self) -> NotificationState:
        return self._snapshot()

    async def submit_intent(self, intent: Intent) -> NotificationState:
        """
        Apply an intent and return the resulting state.

        Intents are applied strictly one after another. The persistence
        write runs in the background; its failure never reaches the caller.
        Intents submitted after close() are ignored. The stored list is
        loaded first if start() has not run yet.
        """
        async with self._lock:
            if self._closed:
                logger.warning(
                    "Notification center is closed — ignoring %s intent",
                    type(intent).__name__,
                )
                return self._snapshot()

            if not self._started:
                await self._load()

            try:
                updated = reduce(self._notifications, intent)
            except Exception:
                logger.exception("Failed to apply %s intent", type(intent).__name__)
                return self._snapshot()

            self._notifications = updated
            state = self._snapshot()
            self._schedule_persist(updated, state.badge_count)
            return state

    async def refresh_badge(self) -> int:
        """Recompute the badge count from the list and mirror it to storage."""
        async with self._lock:
            count = badge_count(self._notifications)
        await self._store.save_badge_count(count)
        return count

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _load(self) -> None:
        self._notifications = await self._store.load()
        self._started = True

    def _snapshot(self) -> NotificationState:
        notifications = list(self._notifications)
        return NotificationState(
            notifications=notifications,
            badge_count=badge_count(notifications),
        )

    def _schedule_persist(
        self,
        notifications: list[NotificationRecord],
        count: int,
    ) -> None:
        task = asyncio.create_task(self._persist(notifications, count))
        self._pending_writes.add(task)
        task.add_done_callback(self._pending_writes.discard)

    async def _persist(
        self,
        notifications: list[NotificationRecord],
        count: int,
    ) -> None:
        try:
            await self._store.save(notifications)
            await self._store.save_badge_count(count)
        except Exception:
            logger.exception("Unexpected error persisting notifications")
