"""
Dispatch Models — Pydantic schemas for the mock dispatch backend.

Defines request/response models for:
- POST /register-token — register a device's FCM token
- POST /send-notification — push a notification through FCM
- GET /tokens — list registered tokens
- DELETE /clear-tokens — forget every registered token
"""

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


class RegisterTokenRequest(BaseModel):
    """
    Payload for POST /register-token.

    The token is optional at the schema level so a missing token is
    answered with 400 by the route rather than a validation error.
    """

    token: Optional[str] = Field(
        default=None,
        max_length=4096,
        description="FCM registration token of the device.",
    )

    @field_validator("token")
    @classmethod
    def strip_token(cls, v: Optional[str]) -> Optional[str]:
        """Strip whitespace; blank tokens count as missing."""
        if v is None:
            return None
        v = v.strip()
        return v or None


class SendNotificationRequest(BaseModel):
    """
    Payload for POST /send-notification.

    When token is omitted the notification goes to every registered token.
    """

    title: Optional[str] = Field(default=None, description="Notification title.")
    body: Optional[str] = Field(default=None, description="Notification body text.")
    screen: Optional[str] = Field(
        default=None,
        description="Screen the app should open on tap (home, chat, call, ...).",
    )
    token: Optional[str] = Field(
        default=None,
        description="Send only to this token instead of all registered tokens.",
    )


class DispatchResponse(BaseModel):
    """Generic success envelope."""

    success: bool = Field(default=True)
    message: str = Field(..., description="Human-readable result.")


class SendNotificationResponse(DispatchResponse):
    """Response for POST /send-notification."""

    result: dict[str, Any] = Field(
        default_factory=dict,
        description="FCM result: message_id, or per-token multicast results.",
    )


class TokenListResponse(BaseModel):
    """Response for GET /tokens."""

    tokens: list[str] = Field(default_factory=list)
    count: int = Field(..., description="Number of registered tokens.")
