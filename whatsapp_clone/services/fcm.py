"""
FCM Push Service — Firebase Cloud Messaging delivery via firebase-admin.

Initializes the Firebase Admin SDK from a service account key and sends
push notifications either to a single device token or to a list of
tokens (multicast).

Every message carries:
- a `notification` block (title, body) shown by the OS
- a `data` block (title, body, screen, timestamp) read by the app
- Android config: high priority, default sound, the app's channel id

Setup:
1. Firebase Console > Project Settings > Service Accounts
2. "Generate New Private Key"
3. Save the JSON file at FIREBASE_SERVICE_ACCOUNT_PATH
"""

import asyncio
import logging
import time
from typing import Optional

import firebase_admin
from firebase_admin import credentials, messaging

from whatsapp_clone.core.config import (
    ANDROID_CHANNEL_ID,
    FIREBASE_SERVICE_ACCOUNT_PATH,
    is_firebase_configured,
)

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "New Message"
DEFAULT_BODY = "You have a new message!"
DEFAULT_SCREEN = "home"

# Initialized lazily on first use
_firebase_app: Optional[firebase_admin.App] = None


# ===================================================================
# Firebase Admin Initialization
# ===================================================================

def get_firebase_app() -> Optional[firebase_admin.App]:
    """
    Return the Firebase Admin app, initializing it on first call.

    Returns None (and logs setup instructions) when no service account
    key is available, so the dispatch service can still start.
    """
    global _firebase_app

    if _firebase_app is not None:
        return _firebase_app

    if firebase_admin._apps:
        _firebase_app = firebase_admin.get_app()
        return _firebase_app

    if not is_firebase_configured():
        logger.warning(
            "Firebase service account not found at %s. To test FCM notifications: "
            "Firebase Console > Project Settings > Service Accounts > "
            "Generate New Private Key, save the JSON file at that path and restart.",
            FIREBASE_SERVICE_ACCOUNT_PATH,
        )
        return None

    try:
        cred = credentials.Certificate(FIREBASE_SERVICE_ACCOUNT_PATH)
        _firebase_app = firebase_admin.initialize_app(cred)
    except Exception as exc:
        logger.error("Error initializing Firebase Admin SDK: %s", exc)
        return None

    logger.info("Firebase Admin SDK initialized successfully")
    return _firebase_app


def is_firebase_ready() -> bool:
    return get_firebase_app() is not None


# ===================================================================
# Message Builders
# ===================================================================

def build_message_fields(
    *,
    title: Optional[str] = None,
    body: Optional[str] = None,
    screen: Optional[str] = None,
    timestamp: Optional[int] = None,
) -> dict:
    """
    Build the notification, data and android parts shared by single and
    multicast messages. Missing fields fall back to the defaults.
    """
    title = title or DEFAULT_TITLE
    body = body or DEFAULT_BODY
    screen = screen or DEFAULT_SCREEN
    if timestamp is None:
        timestamp = int(time.time() * 1000)

    return {
        "notification": messaging.Notification(title=title, body=body),
        # FCM data values must be strings
        "data": {
            "title": title,
            "body": body,
            "screen": screen,
            "timestamp": str(timestamp),
        },
        "android": messaging.AndroidConfig(
            priority="high",
            notification=messaging.AndroidNotification(
                sound="default",
                channel_id=ANDROID_CHANNEL_ID,
                priority="high",
            ),
        ),
    }


def build_message(token: str, **fields) -> messaging.Message:
    return messaging.Message(token=token, **build_message_fields(**fields))


def build_multicast_message(
    tokens: list[str], **fields
) -> messaging.MulticastMessage:
    return messaging.MulticastMessage(
        tokens=tokens, **build_message_fields(**fields)
    )


# ===================================================================
# Delivery
# ===================================================================

def _require_app() -> firebase_admin.App:
    app = get_firebase_app()
    if app is None:
        raise RuntimeError(
            "Firebase Admin SDK not initialized. "
            "Please add your service account key."
        )
    return app


async def send_to_token(
    token: str,
    *,
    title: Optional[str] = None,
    body: Optional[str] = None,
    screen: Optional[str] = None,
) -> dict:
    """
    Send a push notification to one device.

    Returns:
        dict with key message_id (the FCM-assigned message name).

    Raises:
        RuntimeError: If Firebase is not configured.
        firebase_admin.exceptions.FirebaseError: If FCM rejects the send.
    """
    app = _require_app()
    message = build_message(token, title=title, body=body, screen=screen)

    message_id = await asyncio.to_thread(messaging.send, message, app=app)

    logger.info("Notification sent to token %s...", token[:20])
    return {"message_id": message_id}


async def send_to_tokens(
    tokens: list[str],
    *,
    title: Optional[str] = None,
    body: Optional[str] = None,
    screen: Optional[str] = None,
) -> dict:
    """
    Send one push notification to several devices.

    Returns:
        dict with keys:
        - success_count (int)
        - failure_count (int)
        - responses (list): per-token {token, success, message_id, error}

    Raises:
        RuntimeError: If Firebase is not configured.
        firebase_admin.exceptions.FirebaseError: If the batch request fails.
    """
    app = _require_app()
    message = build_multicast_message(tokens, title=title, body=body, screen=screen)

    batch = await asyncio.to_thread(
        messaging.send_each_for_multicast, message, app=app
    )

    responses = []
    for token, response in zip(tokens, batch.responses):
        responses.append({
            "token": token,
            "success": response.success,
            "message_id": response.message_id,
            "error": str(response.exception) if response.exception else None,
        })
        if not response.success:
            logger.warning(
                "FCM delivery failed for token %s...: %s",
                token[:20],
                response.exception,
            )

    logger.info(
        "Notification sent to %d/%d devices", batch.success_count, len(tokens)
    )
    return {
        "success_count": batch.success_count,
        "failure_count": batch.failure_count,
        "responses": responses,
    }
