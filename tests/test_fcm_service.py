"""
FCM Push Service

Tests that:
1. build_message_fields fills defaults and string-only data
2. Android config uses high priority, default sound and the app channel
3. build_message / build_multicast_message target token(s)
4. get_firebase_app initializes lazily and degrades to None without a key
5. send_to_token / send_to_tokens call firebase-admin and shape results
6. Sending without Firebase raises RuntimeError

Run with: pytest tests/test_fcm_service.py -v
"""

from unittest.mock import MagicMock, patch

import pytest
from firebase_admin import messaging

from whatsapp_clone.core.config import ANDROID_CHANNEL_ID
from whatsapp_clone.services.fcm import (
    DEFAULT_BODY,
    DEFAULT_SCREEN,
    DEFAULT_TITLE,
    build_message,
    build_message_fields,
    build_multicast_message,
    get_firebase_app,
    send_to_token,
    send_to_tokens,
)


# ===================================================================
# Test Class: message builders (pure unit tests)
# ===================================================================

class TestBuildMessageFields:

    def test_defaults_when_fields_missing(self):
        fields = build_message_fields(timestamp=123)
        assert fields["notification"].title == DEFAULT_TITLE
        assert fields["notification"].body == DEFAULT_BODY
        assert fields["data"] == {
            "title": DEFAULT_TITLE,
            "body": DEFAULT_BODY,
            "screen": DEFAULT_SCREEN,
            "timestamp": "123",
        }

    def test_explicit_fields(self):
        fields = build_message_fields(
            title="Alice", body="Hi", screen="chat", timestamp=1
        )
        assert fields["notification"].title == "Alice"
        assert fields["data"]["screen"] == "chat"

    def test_data_values_are_strings(self):
        fields = build_message_fields(title="T")
        assert all(isinstance(v, str) for v in fields["data"].values())
        assert fields["data"]["timestamp"].isdigit()

    def test_android_config(self):
        android = build_message_fields()["android"]
        assert android.priority == "high"
        assert android.notification.sound == "default"
        assert android.notification.channel_id == ANDROID_CHANNEL_ID
        assert android.notification.priority == "high"

    def test_build_message_targets_token(self):
        message = build_message("tok-1", title="T")
        assert isinstance(message, messaging.Message)
        assert message.token == "tok-1"
        assert message.data["title"] == "T"

    def test_build_multicast_targets_tokens(self):
        message = build_multicast_message(["a", "b"], screen="call")
        assert isinstance(message, messaging.MulticastMessage)
        assert message.tokens == ["a", "b"]
        assert message.data["screen"] == "call"


# ===================================================================
# Test Class: Firebase Admin initialization
# ===================================================================

class TestGetFirebaseApp:

    @patch("whatsapp_clone.services.fcm._firebase_app", None)
    @patch("whatsapp_clone.services.fcm.firebase_admin._apps", {})
    @patch("whatsapp_clone.services.fcm.is_firebase_configured", return_value=False)
    def test_returns_none_without_service_account(self, mock_configured):
        assert get_firebase_app() is None

    @patch("whatsapp_clone.services.fcm._firebase_app", None)
    @patch("whatsapp_clone.services.fcm.firebase_admin._apps", {})
    @patch("whatsapp_clone.services.fcm.is_firebase_configured", return_value=True)
    def test_initializes_from_certificate(self, mock_configured):
        fake_app = MagicMock()
        with patch(
            "whatsapp_clone.services.fcm.credentials.Certificate"
        ) as mock_cert, patch(
            "whatsapp_clone.services.fcm.firebase_admin.initialize_app",
            return_value=fake_app,
        ) as mock_init:
            assert get_firebase_app() is fake_app
            mock_init.assert_called_once_with(mock_cert.return_value)

    @patch("whatsapp_clone.services.fcm._firebase_app", None)
    @patch("whatsapp_clone.services.fcm.firebase_admin._apps", {})
    @patch("whatsapp_clone.services.fcm.is_firebase_configured", return_value=True)
    def test_bad_certificate_returns_none(self, mock_configured):
        with patch(
            "whatsapp_clone.services.fcm.credentials.Certificate",
            side_effect=ValueError("Invalid service account certificate"),
        ):
            assert get_firebase_app() is None

    def test_cached_app_is_reused(self):
        fake_app = MagicMock()
        with patch("whatsapp_clone.services.fcm._firebase_app", fake_app):
            assert get_firebase_app() is fake_app


# ===================================================================
# Test Class: delivery
# ===================================================================

class TestSend:

    @pytest.mark.asyncio
    @patch("whatsapp_clone.services.fcm.get_firebase_app", return_value=None)
    async def test_send_without_firebase_raises(self, mock_app):
        with pytest.raises(RuntimeError, match="not initialized"):
            await send_to_token("tok")

    @pytest.mark.asyncio
    @patch("whatsapp_clone.services.fcm.get_firebase_app")
    async def test_send_to_token(self, mock_app):
        with patch(
            "whatsapp_clone.services.fcm.messaging.send",
            return_value="projects/demo/messages/1",
        ) as mock_send:
            result = await send_to_token("tok-abc", title="Hi", screen="chat")

        assert result == {"message_id": "projects/demo/messages/1"}
        message = mock_send.call_args[0][0]
        assert message.token == "tok-abc"
        assert message.data["screen"] == "chat"
        assert mock_send.call_args[1]["app"] is mock_app.return_value

    @pytest.mark.asyncio
    @patch("whatsapp_clone.services.fcm.get_firebase_app")
    async def test_send_to_tokens_reports_each_token(self, mock_app):
        ok = MagicMock(success=True, message_id="m-1", exception=None)
        failed = MagicMock(
            success=False, message_id=None, exception=Exception("unregistered")
        )
        batch = MagicMock(success_count=1, failure_count=1, responses=[ok, failed])

        with patch(
            "whatsapp_clone.services.fcm.messaging.send_each_for_multicast",
            return_value=batch,
        ) as mock_send:
            result = await send_to_tokens(["a", "b"], title="Group")

        assert result["success_count"] == 1
        assert result["failure_count"] == 1
        assert result["responses"] == [
            {"token": "a", "success": True, "message_id": "m-1", "error": None},
            {"token": "b", "success": False, "message_id": None, "error": "unregistered"},
        ]
        assert mock_send.call_args[0][0].tokens == ["a", "b"]

    @pytest.mark.asyncio
    @patch("whatsapp_clone.services.fcm.get_firebase_app")
    async def test_provider_error_propagates(self, mock_app):
        with patch(
            "whatsapp_clone.services.fcm.messaging.send",
            side_effect=ValueError("invalid registration token"),
        ):
            with pytest.raises(ValueError):
                await send_to_token("bad")
