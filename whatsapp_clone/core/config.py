"""
Application Configuration

Loads environment variables and provides typed settings for the
notification core and the mock dispatch backend. Uses python-dotenv
to load from a .env file at the project root.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env file from the project root
_env_path = Path(__file__).resolve().parent.parent.parent / ".env"
load_dotenv(dotenv_path=_env_path)

# --- App Settings ---
PROJECT_NAME = "WhatsApp Clone"
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# --- Local Notification Storage ---
STORAGE_DIR: str = os.path.expanduser(
    os.getenv("WHATSAPP_CLONE_STORAGE_DIR", "~/.whatsapp_clone")
)
MAX_STORED_NOTIFICATIONS = 50

NOTIFICATIONS_STORAGE_KEY = "notifications"
BADGE_COUNT_STORAGE_KEY = "badge_count"
FCM_TOKEN_STORAGE_KEY = "fcm_token"

# --- Firebase Cloud Messaging ---
FIREBASE_SERVICE_ACCOUNT_PATH: str = os.getenv(
    "FIREBASE_SERVICE_ACCOUNT_PATH", "firebase-service-account.json"
)
ANDROID_CHANNEL_ID = "whatsapp_clone_channel"

# --- Mock Dispatch Backend ---
DISPATCH_PORT: int = int(os.getenv("DISPATCH_PORT", "3000"))
DISPATCH_BASE_URL: str = os.getenv(
    "DISPATCH_BASE_URL", f"http://localhost:{DISPATCH_PORT}"
)
REGISTER_TOKEN_WITH_BACKEND: bool = (
    os.getenv("REGISTER_TOKEN_WITH_BACKEND", "false").lower() in ("1", "true", "yes")
)


def is_firebase_configured() -> bool:
    """
    Check whether a Firebase service account key file is available.

    Used by the dispatch service to decide whether sends can be attempted.
    Never raises — a missing key just disables sending.
    """
    return bool(FIREBASE_SERVICE_ACCOUNT_PATH) and Path(
        FIREBASE_SERVICE_ACCOUNT_PATH
    ).is_file()
