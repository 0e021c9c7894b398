"""
Notification Models — Pydantic schemas for locally stored notifications.

Defines the stored record, the inbound push payload shape reported by the
messaging provider, the delivery contexts, and the intents accepted by the
notification reducer:
- Receive — a push message arrived (foreground, background tap, quit relaunch)
- Acknowledge — the user opened a notification
- ClearAll — the user cleared the list
"""

from __future__ import annotations

import time
import uuid
from enum import Enum
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_TITLE = "New Message"
DEFAULT_BODY = "You have a new message"
DEFAULT_SCREEN = "home"


class DeliveryContext(str, Enum):
    """How the provider delivered a push message to the app."""

    FOREGROUND = "foreground"
    BACKGROUND_TAP = "background_tap"
    QUIT_RELAUNCH = "quit_relaunch"


# ======================================================================
# Inbound provider payload
# ======================================================================

class RemoteNotification(BaseModel):
    """The `notification` block of a push message (display fields only)."""

    title: Optional[str] = None
    body: Optional[str] = None


class RemoteMessage(BaseModel):
    """
    A push message as reported by the messaging client.

    Shape: {data?: {title, body, screen, ...}, notification?: {title, body}}.
    Every field is optional; missing fields are filled in with defaults
    when the message is turned into a NotificationRecord.
    """

    model_config = ConfigDict(extra="ignore")

    data: Optional[dict[str, Any]] = None
    notification: Optional[RemoteNotification] = None

    def _data_field(self, key: str) -> Optional[str]:
        if not self.data:
            return None
        value = self.data.get(key)
        if value is None or value == "":
            return None
        return str(value)

    def resolved_title(self) -> str:
        """data.title, then notification.title, then the default."""
        return (
            self._data_field("title")
            or (self.notification.title if self.notification else None)
            or DEFAULT_TITLE
        )

    def resolved_body(self) -> str:
        """data.body, then notification.body, then the default."""
        return (
            self._data_field("body")
            or (self.notification.body if self.notification else None)
            or DEFAULT_BODY
        )

    def resolved_screen(self) -> str:
        return self._data_field("screen") or DEFAULT_SCREEN


# ======================================================================
# Stored record and derived state
# ======================================================================

class NotificationRecord(BaseModel):
    """One notification as stored on the device."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str = DEFAULT_TITLE
    body: str = DEFAULT_BODY
    screen: Optional[str] = DEFAULT_SCREEN
    timestamp: int  # milliseconds since epoch
    read: bool = False


class NotificationState(BaseModel):
    """Snapshot handed to the presentation layer."""

    notifications: list[NotificationRecord] = Field(default_factory=list)
    badge_count: int = 0


# ======================================================================
# Intents
# ======================================================================

def new_notification_id() -> str:
    """Collision-resistant record id."""
    return uuid.uuid4().hex


def now_ms() -> int:
    return int(time.time() * 1000)


class Receive(BaseModel):
    """A push message was received; carries the fully built record."""

    kind: Literal["receive"] = "receive"
    record: NotificationRecord

    @classmethod
    def from_message(
        cls,
        message: RemoteMessage,
        context: DeliveryContext = DeliveryContext.FOREGROUND,
        *,
        notification_id: Optional[str] = None,
        timestamp: Optional[int] = None,
    ) -> "Receive":
        """
        Build a Receive intent from a provider message.

        Messages that opened the app (background tap or quit-state
        relaunch) are stored as already read.
        """
        record = NotificationRecord(
            id=notification_id or new_notification_id(),
            title=message.resolved_title(),
            body=message.resolved_body(),
            screen=message.resolved_screen(),
            timestamp=timestamp if timestamp is not None else now_ms(),
            read=context is not DeliveryContext.FOREGROUND,
        )
        return cls(record=record)


class Acknowledge(BaseModel):
    """The user opened the notification with this id."""

    kind: Literal["acknowledge"] = "acknowledge"
    id: str


class ClearAll(BaseModel):
    kind: Literal["clear_all"] = "clear_all"


Intent = Union[Receive, Acknowledge, ClearAll]
