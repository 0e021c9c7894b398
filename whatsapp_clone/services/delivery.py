"""
Delivery Adapter — bridges the push messaging client to the notification center.

The messaging client reports push messages in three delivery contexts:
1. foreground — message arrived while the app was open (stored unread)
2. background tap — the user tapped a notification while the app was
   backgrounded (stored read)
3. quit relaunch — the app was launched from a tapped notification
   (stored read; reported once via get_initial_notification)

Each message becomes a Receive intent submitted to the NotificationCenter.
Listener registration returns Subscription handles; stop() cancels them so
no message reaches the center after teardown.

On start the adapter also requests notification permission, fetches the
device token, stores it locally and optionally registers it with the
dispatch backend.
"""

import asyncio
import logging
import uuid
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any, Optional, Protocol

from whatsapp_clone.core.config import (
    FCM_TOKEN_STORAGE_KEY,
    REGISTER_TOKEN_WITH_BACKEND,
)
from whatsapp_clone.db.storage import FileStorage, get_storage
from whatsapp_clone.models.notifications import (
    Acknowledge,
    DeliveryContext,
    NotificationRecord,
    NotificationState,
    Receive,
    RemoteMessage,
)
from whatsapp_clone.services.dispatch_client import register_token
from whatsapp_clone.services.notification_center import NotificationCenter

logger = logging.getLogger(__name__)

MessageHandler = Callable[[RemoteMessage], Awaitable[None]]
RecordCallback = Callable[[NotificationRecord], None]

TEST_NOTIFICATION = RemoteMessage(
    data={
        "title": "Test Message",
        "body": "This is a test notification to simulate WhatsApp-style messaging!",
        "screen": "chat",
    }
)


class AuthorizationStatus(str, Enum):
    NOT_DETERMINED = "not_determined"
    DENIED = "denied"
    AUTHORIZED = "authorized"
    PROVISIONAL = "provisional"


class MessagingClient(Protocol):
    """What the adapter needs from a push messaging client."""

    async def request_permission(self) -> AuthorizationStatus: ...

    async def get_token(self) -> Optional[str]: ...

    def on_message(self, handler: MessageHandler) -> Callable[[], None]: ...

    def on_notification_opened_app(
        self, handler: MessageHandler
    ) -> Callable[[], None]: ...

    async def get_initial_notification(self) -> Optional[RemoteMessage]: ...


class Subscription:
    """Handle for a registered listener; cancel() unregisters it once."""

    def __init__(self, unsubscribe: Callable[[], None]):
        self._unsubscribe: Optional[Callable[[], None]] = unsubscribe

    @property
    def active(self) -> bool:
        return self._unsubscribe is not None

    def cancel(self) -> None:
        if self._unsubscribe is None:
            return
        unsubscribe, self._unsubscribe = self._unsubscribe, None
        unsubscribe()


# ===================================================================
# In-process messaging client
# ===================================================================

class LoopbackMessagingClient:
    """
    Messaging client that delivers messages pushed into it in-process.

    Used for local runs without a device and throughout the tests:
    deliver() plays a foreground message, open_app() a background tap.
    """

    def __init__(
        self,
        *,
        token: Optional[str] = None,
        authorization: AuthorizationStatus = AuthorizationStatus.AUTHORIZED,
        initial_notification: Optional[RemoteMessage] = None,
    ):
        self.token = token or f"loopback-{uuid.uuid4().hex}"
        self.authorization = authorization
        self._initial_notification = initial_notification
        self._message_handlers: list[MessageHandler] = []
        self._opened_handlers: list[MessageHandler] = []

    async def request_permission(self) -> AuthorizationStatus:
        return self.authorization

    async def get_token(self) -> str:
        return self.token

    @staticmethod
    def _register(
        handlers: list[MessageHandler], handler: MessageHandler
    ) -> Callable[[], None]:
        handlers.append(handler)

        def unsubscribe() -> None:
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    def on_message(self, handler: MessageHandler) -> Callable[[], None]:
        return self._register(self._message_handlers, handler)

    def on_notification_opened_app(
        self, handler: MessageHandler
    ) -> Callable[[], None]:
        return self._register(self._opened_handlers, handler)

    async def get_initial_notification(self) -> Optional[RemoteMessage]:
        message, self._initial_notification = self._initial_notification, None
        return message

    @property
    def listener_count(self) -> int:
        return len(self._message_handlers) + len(self._opened_handlers)

    async def deliver(self, message: RemoteMessage | dict[str, Any]) -> None:
        """Play a message that arrived while the app is in the foreground."""
        message = RemoteMessage.model_validate(message)
        for handler in list(self._message_handlers):
            await handler(message)

    async def open_app(self, message: RemoteMessage | dict[str, Any]) -> None:
        """Play a notification tap that brought the app to the foreground."""
        message = RemoteMessage.model_validate(message)
        for handler in list(self._opened_handlers):
            await handler(message)


# ===================================================================
# Adapter
# ===================================================================

class DeliveryAdapter:
    """Turns messaging client events into notification center intents."""

    def __init__(
        self,
        center: NotificationCenter,
        client: MessagingClient,
        *,
        storage: FileStorage | None = None,
        register_with_backend: bool = REGISTER_TOKEN_WITH_BACKEND,
        on_notification_received: Optional[RecordCallback] = None,
        on_notification_opened: Optional[RecordCallback] = None,
    ):
        self._center = center
        self._client = client
        self._storage = storage or get_storage()
        self._register_with_backend = register_with_backend
        self._on_notification_received = on_notification_received
        self._on_notification_opened = on_notification_opened
        self._subscriptions: list[Subscription] = []
        self._running = False
        self.token: Optional[str] = None

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Register the device, subscribe to messages, replay the launch message."""
        if self._running:
            return
        self._running = True

        self.token = await self._register_device()
        if not self._running:
            logger.info("Adapter stopped during startup, not subscribing")
            return

        self._subscriptions = [
            Subscription(self._client.on_message(self._handle_foreground)),
            Subscription(
                self._client.on_notification_opened_app(self._handle_opened)
            ),
        ]

        try:
            initial = await self._client.get_initial_notification()
        except Exception as exc:
            logger.error("Error reading initial notification: %s", exc)
            initial = None

        if initial is not None:
            logger.info("App opened from quit state by a notification")
            await self._handle(initial, DeliveryContext.QUIT_RELAUNCH)

    async def stop(self) -> None:
        """Cancel every subscription; later events are dropped."""
        self._running = False
        for subscription in self._subscriptions:
            subscription.cancel()
        self._subscriptions = []

    # ------------------------------------------------------------------
    # Device registration
    # ------------------------------------------------------------------

    async def _register_device(self) -> Optional[str]:
        try:
            status = AuthorizationStatus(await self._client.request_permission())
        except Exception as exc:
            logger.error("Error requesting notification permission: %s", exc)
            return None

        if status not in (
            AuthorizationStatus.AUTHORIZED,
            AuthorizationStatus.PROVISIONAL,
        ):
            logger.warning(
                "Notification permission not granted (status=%s). "
                "Please enable notifications to receive messages.",
                status.value,
            )
            return None

        logger.info("Authorization status: %s", status.value)

        try:
            token = await self._client.get_token()
        except Exception as exc:
            logger.error("Error getting FCM token: %s", exc)
            return None

        if not token:
            logger.warning("Messaging client returned no FCM token")
            return None

        logger.info("FCM token: %s...", token[:20])

        try:
            await asyncio.to_thread(
                self._storage.set_item, FCM_TOKEN_STORAGE_KEY, token
            )
        except OSError as exc:
            logger.error("Error storing FCM token: %s", exc)

        if self._register_with_backend:
            await register_token(token)

        return token

    # ------------------------------------------------------------------
    # Message handling
    # ------------------------------------------------------------------

    async def _handle_foreground(self, message: RemoteMessage) -> None:
        logger.info("Foreground message received")
        await self._handle(message, DeliveryContext.FOREGROUND)

    async def _handle_opened(self, message: RemoteMessage) -> None:
        logger.info("App opened from background state by a notification")
        await self._handle(message, DeliveryContext.BACKGROUND_TAP)

    async def _handle(
        self,
        message: RemoteMessage,
        context: DeliveryContext,
    ) -> Optional[NotificationRecord]:
        if not self._running:
            logger.debug("Adapter stopped — dropping %s message", context.value)
            return None

        try:
            intent = Receive.from_message(message, context)
            await self._center.submit_intent(intent)
        except Exception:
            logger.exception("Error handling %s message", context.value)
            return None

        callback = (
            self._on_notification_received
            if context is DeliveryContext.FOREGROUND
            else self._on_notification_opened
        )
        if callback is not None:
            try:
                callback(intent.record)
            except Exception:
                logger.exception("Notification callback failed")

        return intent.record

    # ------------------------------------------------------------------
    # Presentation-side events
    # ------------------------------------------------------------------

    async def acknowledge(self, notification_id: str) -> NotificationState:
        """The user tapped a notification in the list."""
        return await self._center.submit_intent(Acknowledge(id=notification_id))

    async def handle_app_state_change(self, app_state: str) -> None:
        """Refresh the badge count whenever the app becomes active."""
        if app_state == "active":
            await self._center.refresh_badge()

    async def simulate_test_notification(self) -> Optional[NotificationRecord]:
        """Store a canned test message as if it arrived in the foreground."""
        return await self._handle(TEST_NOTIFICATION, DeliveryContext.FOREGROUND)
