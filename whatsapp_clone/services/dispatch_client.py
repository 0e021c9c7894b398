"""
Dispatch Client — device-side calls to the mock dispatch backend.

Registers the device's FCM token so the backend can target it with
multicast sends. Failures are logged and reported as False; there is
no retry.
"""

import logging

import httpx

from whatsapp_clone.core.config import DISPATCH_BASE_URL

logger = logging.getLogger(__name__)


async def register_token(token: str, base_url: str = DISPATCH_BASE_URL) -> bool:
    """
    POST the token to the dispatch backend's /register-token endpoint.

    Args:
        token: FCM registration token of this device.
        base_url: Root URL of the dispatch backend.

    Returns:
        True when the backend accepted the token, False otherwise.
    """
    url = f"{base_url.rstrip('/')}/register-token"

    try:
        async with httpx.AsyncClient() as client:
            response = await client.post(url, json={"token": token}, timeout=10.0)
    except httpx.HTTPError as exc:
        logger.error("Failed to reach dispatch backend at %s: %s", url, exc)
        return False

    if response.status_code != 200:
        logger.warning(
            "Dispatch backend rejected token registration: status=%d, body=%s",
            response.status_code,
            response.text,
        )
        return False

    logger.info("FCM token registered with dispatch backend: %s...", token[:20])
    return True
