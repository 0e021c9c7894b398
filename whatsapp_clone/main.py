"""
WhatsApp Clone Dispatch Backend — FastAPI Entry Point

Mock backend used to exercise push notifications end to end. It keeps
registered FCM tokens in memory and sends through Firebase Admin.

Run with: uvicorn whatsapp_clone.main:app --port 3000
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from whatsapp_clone.api.dispatch import router as dispatch_router
from whatsapp_clone.core.config import DISPATCH_BASE_URL, LOG_LEVEL, PROJECT_NAME
from whatsapp_clone.services.fcm import get_firebase_app

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=f"{PROJECT_NAME} Dispatch",
    description="Mock backend that registers device tokens and sends FCM pushes",
    version="0.1.0",
)

# CORS for mobile app access
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Register API routers ---
app.include_router(dispatch_router)


@app.get("/health")
async def health_check():
    """Health check endpoint. Returns service status."""
    return {"status": "ok"}


@app.on_event("startup")
async def startup_event():
    get_firebase_app()
    logger.info("Dispatch backend running on %s", DISPATCH_BASE_URL)
    logger.info(
        "Available endpoints: POST /register-token, POST /send-notification, "
        "GET /tokens, DELETE /clear-tokens, POST /test-message, "
        "POST /test-voice-call, POST /test-video-call"
    )
