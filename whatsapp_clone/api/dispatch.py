"""
Dispatch API — mock backend that registers devices and triggers FCM sends.

Endpoints:
- POST   /register-token     — remember a device's FCM token
- POST   /send-notification  — send to one token, or multicast to all
- GET    /tokens             — list registered tokens
- DELETE /clear-tokens       — forget every token
- POST   /test-message, /test-voice-call, /test-video-call
                             — canned payloads through the same send path

Provider failures are returned to the caller as 500 responses; there is
no retry.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from whatsapp_clone.models.dispatch import (
    DispatchResponse,
    RegisterTokenRequest,
    SendNotificationRequest,
    SendNotificationResponse,
    TokenListResponse,
)
from whatsapp_clone.services.fcm import (
    is_firebase_ready,
    send_to_token,
    send_to_tokens,
)
from whatsapp_clone.services.token_registry import TokenRegistry, get_token_registry

logger = logging.getLogger(__name__)

router = APIRouter(tags=["dispatch"])

TEST_MESSAGE = SendNotificationRequest(
    title="Test Message",
    body="This is a test notification from the backend!",
    screen="chat",
)
TEST_VOICE_CALL = SendNotificationRequest(
    title="Incoming Voice Call",
    body="John Doe is calling you...",
    screen="call",
)
TEST_VIDEO_CALL = SendNotificationRequest(
    title="Incoming Video Call",
    body="Jane Smith is calling you...",
    screen="call",
)


# ===================================================================
# Token Registration
# ===================================================================

@router.post(
    "/register-token",
    status_code=status.HTTP_200_OK,
    response_model=DispatchResponse,
)
async def register_token(
    payload: RegisterTokenRequest,
    registry: TokenRegistry = Depends(get_token_registry),
) -> DispatchResponse:
    """
    Register a device token for multicast sends.

    Returns:
        200: Token registered (re-registering the same token is fine).
        400: Token missing or blank.
    """
    if not payload.token:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Token is required",
        )

    registry.add(payload.token)
    return DispatchResponse(message="Token registered successfully")


@router.get("/tokens", response_model=TokenListResponse)
async def list_tokens(
    registry: TokenRegistry = Depends(get_token_registry),
) -> TokenListResponse:
    tokens = registry.tokens()
    return TokenListResponse(tokens=tokens, count=len(tokens))


@router.delete("/clear-tokens", response_model=DispatchResponse)
async def clear_tokens(
    registry: TokenRegistry = Depends(get_token_registry),
) -> DispatchResponse:
    registry.clear()
    return DispatchResponse(message="All tokens cleared")


# ===================================================================
# Sending
# ===================================================================

async def _dispatch(
    payload: SendNotificationRequest,
    registry: TokenRegistry,
) -> SendNotificationResponse:
    """
    Shared send path for /send-notification and the canned test endpoints.

    Order of checks:
    1. Firebase Admin must be initialized (500 otherwise)
    2. With an explicit token, send only to it
    3. Without one, at least one token must be registered (400 otherwise)
    4. Any provider error becomes a 500
    """
    if not is_firebase_ready():
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=(
                "Firebase Admin SDK not initialized. "
                "Please add your service account key."
            ),
        )

    fields = {
        "title": payload.title,
        "body": payload.body,
        "screen": payload.screen,
    }

    if payload.token:
        send = send_to_token(payload.token, **fields)
    else:
        tokens = registry.tokens()
        if not tokens:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="No FCM tokens registered. Please register a token first.",
            )
        send = send_to_tokens(tokens, **fields)

    try:
        result = await send
    except Exception as exc:
        logger.error("Error sending notification: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to send notification: {exc}",
        )

    return SendNotificationResponse(
        message="Notification sent successfully",
        result=result,
    )


@router.post("/send-notification", response_model=SendNotificationResponse)
async def send_notification(
    payload: SendNotificationRequest,
    registry: TokenRegistry = Depends(get_token_registry),
) -> SendNotificationResponse:
    """
    Send a push notification through FCM.

    Returns:
        200: FCM accepted the request (see result for per-token outcomes).
        400: No token given and none registered.
        500: Firebase not initialized or FCM rejected the send.
    """
    return await _dispatch(payload, registry)


@router.post("/test-message", response_model=SendNotificationResponse)
async def send_test_message(
    registry: TokenRegistry = Depends(get_token_registry),
) -> SendNotificationResponse:
    return await _dispatch(TEST_MESSAGE, registry)


@router.post("/test-voice-call", response_model=SendNotificationResponse)
async def send_test_voice_call(
    registry: TokenRegistry = Depends(get_token_registry),
) -> SendNotificationResponse:
    return await _dispatch(TEST_VOICE_CALL, registry)


@router.post("/test-video-call", response_model=SendNotificationResponse)
async def send_test_video_call(
    registry: TokenRegistry = Depends(get_token_registry),
) -> SendNotificationResponse:
    return await _dispatch(TEST_VIDEO_CALL, registry)
