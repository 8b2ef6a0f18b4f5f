"""Tests for TelegramClient transport, envelope decoding, and bindings."""

import json
import sys
import os
from unittest.mock import patch, MagicMock

import pytest
import requests

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from sdk.client import TelegramClient
from sdk.exceptions import APIError, DecodeError, TelegramError, TransportError
from sdk.models import (
    AnswerCallbackQueryRequest,
    ForwardMessageRequest,
    Message,
    SendMessageRequest,
    SendStickerRequest,
    Update,
    UpdateBatch,
    UpdateKind,
    User,
)


def _response(body) -> MagicMock:
    """Build a fake ``requests.Response`` whose content is *body* (JSON-encoded unless bytes)."""
    mock_resp = MagicMock()
    mock_resp.content = body if isinstance(body, bytes) else json.dumps(body).encode("utf-8")
    return mock_resp


def _sent_json(mock_post: MagicMock) -> dict:
    return json.loads(mock_post.call_args.kwargs["data"])


_MESSAGE = {
    "message_id": 7,
    "date": 1700000000,
    "chat": {"id": 42, "type": "private"},
    "from": {"id": 1, "is_bot": True, "first_name": "Bot"},
    "text": "hello",
}


# ── Exceptions ───────────────────────────────────────────────────────────────


class TestExceptions:
    """Validate the exception hierarchy."""

    def test_all_derive_from_telegram_error(self) -> None:
        for cls in (TransportError, APIError, DecodeError):
            assert issubclass(cls, TelegramError)

    def test_api_error_keeps_description_verbatim(self) -> None:
        exc = APIError("Bad Request: chat not found", "sendMessage", 400)
        assert exc.description == "Bad Request: chat not found"
        assert exc.error_code == 400
        assert exc.method == "sendMessage"
        assert str(exc) == "Bad Request: chat not found"

    def test_decode_error_body_preview(self) -> None:
        exc = DecodeError("bad", "getMe", b"<html>" + b"x" * 500)
        assert exc.body_preview.startswith("<html>")
        assert len(exc.body_preview) == 200


# ── Construction ─────────────────────────────────────────────────────────────


class TestClientInit:
    """Validate client initialisation."""

    def test_base_url_contains_token(self) -> None:
        c = TelegramClient("123:abc")
        assert c._base_url == "https://api.telegram.org/bot123:abc"
        assert c.token == "123:abc"

    def test_custom_api_url_strip(self) -> None:
        c = TelegramClient("123:abc", api_url="http://localhost:8081/")
        assert c._base_url == "http://localhost:8081/bot123:abc"

    def test_default_timeout(self) -> None:
        assert TelegramClient("t")._timeout == 10

    def test_empty_token_rejected(self) -> None:
        with pytest.raises(ValueError):
            TelegramClient("")


# ── Transport ────────────────────────────────────────────────────────────────


class TestCallMethod:
    """Validate the single-POST transport."""

    @patch("sdk.client.requests.post")
    def test_posts_json_to_method_url(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response(b"raw-bytes")

        c = TelegramClient("123:abc")
        result = c.call_method("getUpdates", {"offset": 5})

        assert result == b"raw-bytes"
        args, kwargs = mock_post.call_args
        assert args[0] == "https://api.telegram.org/bot123:abc/getUpdates"
        assert kwargs["headers"]["Content-Type"] == "application/json"
        assert json.loads(kwargs["data"]) == {"offset": 5}
        assert kwargs["timeout"] == 10

    @patch("sdk.client.requests.post")
    def test_no_params_sends_empty_object(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response(b"{}")

        TelegramClient("t").call_method("getMe")
        assert _sent_json(mock_post) == {}

    @patch("sdk.client.requests.post")
    def test_model_params_use_aliases_and_skip_none(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response(b"{}")

        TelegramClient("t").call_method("sendMessage", SendMessageRequest(chat_id=42, text="hi"))
        assert _sent_json(mock_post) == {"chat_id": 42, "text": "hi"}

    @patch("sdk.client.requests.post")
    def test_explicit_timeout(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response(b"{}")

        TelegramClient("t").call_method("getMe", timeout=3)
        assert mock_post.call_args.kwargs["timeout"] == 3

    @patch("sdk.client.requests.post")
    def test_network_error_wrapped(self, mock_post: MagicMock) -> None:
        mock_post.side_effect = requests.ConnectionError("offline")

        with pytest.raises(TransportError) as exc_info:
            TelegramClient("t").call_method("getMe")
        assert isinstance(exc_info.value.__cause__, requests.ConnectionError)
        assert exc_info.value.method == "getMe"

    @patch("sdk.client.requests.post")
    def test_unserialisable_params_wrapped(self, mock_post: MagicMock) -> None:
        with pytest.raises(TransportError):
            TelegramClient("t").call_method("sendMessage", {"chat_id": object()})
        mock_post.assert_not_called()

    @patch("sdk.client.requests.post")
    def test_http_status_not_interpreted(self, mock_post: MagicMock) -> None:
        mock_resp = _response({"ok": False, "description": "Unauthorized"})
        mock_resp.status_code = 401
        mock_post.return_value = mock_resp

        raw = TelegramClient("t").call_method("getMe")
        assert json.loads(raw)["description"] == "Unauthorized"


# ── Envelope decoding ────────────────────────────────────────────────────────


class TestEnvelope:
    """Validate ok/description/result handling shared by every binding."""

    @patch("sdk.client.requests.post")
    def test_ok_false_raises_api_error(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response({"ok": False, "error_code": 401, "description": "Unauthorized"})

        with pytest.raises(APIError) as exc_info:
            TelegramClient("t").get_me()
        assert exc_info.value.description == "Unauthorized"
        assert exc_info.value.error_code == 401

    @patch("sdk.client.requests.post")
    def test_ok_false_without_description(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response({"ok": False})

        with pytest.raises(APIError) as exc_info:
            TelegramClient("t").get_me()
        assert exc_info.value.description == ""

    @patch("sdk.client.requests.post")
    def test_malformed_json_raises_decode_error(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response(b"<html>Bad Gateway</html>")

        with pytest.raises(DecodeError) as exc_info:
            TelegramClient("t").get_me()
        assert "Bad Gateway" in exc_info.value.body_preview

    @patch("sdk.client.requests.post")
    def test_missing_ok_raises_decode_error(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response({"result": {"id": 1, "first_name": "Bot"}})

        with pytest.raises(DecodeError):
            TelegramClient("t").get_me()

    @patch("sdk.client.requests.post")
    def test_result_of_wrong_shape_raises_decode_error(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response({"ok": True, "result": "not-a-user"})

        with pytest.raises(DecodeError):
            TelegramClient("t").get_me()

    @patch("sdk.client.requests.post")
    def test_ok_without_result_raises_decode_error(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response({"ok": True})

        with pytest.raises(DecodeError):
            TelegramClient("t").get_me()

    def test_api_error_is_not_decode_error(self) -> None:
        assert not issubclass(APIError, DecodeError)
        assert not issubclass(DecodeError, APIError)


# ── Bindings ─────────────────────────────────────────────────────────────────


class TestBindings:
    """Spot-check each binding's request and typed result."""

    @patch("sdk.client.requests.post")
    def test_get_me(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response(
            {"ok": True, "result": {"id": 1, "is_bot": True, "first_name": "Bot", "username": "test_bot"}}
        )

        me = TelegramClient("t").get_me()
        assert isinstance(me, User)
        assert me.username == "test_bot"
        assert mock_post.call_args.args[0].endswith("/getMe")

    @patch("sdk.client.requests.post")
    def test_get_updates_payload_and_result(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response({
            "ok": True,
            "result": [
                {"update_id": 10, "message": _MESSAGE},
                {"update_id": 11, "callback_query": {"id": "cb", "from": {"id": 2, "first_name": "U"}, "chat_instance": "x", "data": "go"}},
            ],
        })

        updates = TelegramClient("t").get_updates(offset=10, limit=100, timeout=120)

        assert _sent_json(mock_post) == {"offset": 10, "limit": 100, "timeout": 120}
        assert [u.update_id for u in updates] == [10, 11]
        assert all(isinstance(u, Update) for u in updates)
        assert updates[0].kind is UpdateKind.MESSAGE
        assert updates[1].kind is UpdateKind.CALLBACK_QUERY

    @patch("sdk.client.requests.post")
    def test_get_updates_http_timeout_covers_long_poll(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response({"ok": True, "result": []})

        TelegramClient("t").get_updates(timeout=120)
        assert mock_post.call_args.kwargs["timeout"] > 120

    @patch("sdk.client.requests.post")
    def test_get_updates_empty(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response({"ok": True, "result": []})

        assert TelegramClient("t").get_updates() == []

    @patch("sdk.client.requests.post")
    def test_get_updates_skips_multi_payload_update(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response({
            "ok": True,
            "result": [
                {"update_id": 5, "message": _MESSAGE},
                {"update_id": 6, "message": _MESSAGE, "edited_message": _MESSAGE},
                {"update_id": 7, "message": _MESSAGE},
            ],
        })

        updates = TelegramClient("t").get_updates()

        assert isinstance(updates, UpdateBatch)
        assert [u.update_id for u in updates] == [5, 7]
        assert updates.skipped_ids == [6]

    @patch("sdk.client.requests.post")
    def test_get_updates_skips_update_with_drifted_field(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response({
            "ok": True,
            "result": [{"update_id": 3, "message": {"message_id": "not-a-number"}}],
        })

        updates = TelegramClient("t").get_updates()

        assert updates == []
        assert updates.skipped_ids == [3]

    @patch("sdk.client.requests.post")
    def test_get_updates_without_update_id_raises_decode_error(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response({"ok": True, "result": [{"message": _MESSAGE}]})

        with pytest.raises(DecodeError) as exc_info:
            TelegramClient("t").get_updates()
        assert exc_info.value.method == "getUpdates"

    @patch("sdk.client.requests.post")
    def test_get_updates_non_object_item_raises_decode_error(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response({"ok": True, "result": [17]})

        with pytest.raises(DecodeError):
            TelegramClient("t").get_updates()

    @patch("sdk.client.requests.post")
    def test_send_message(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response({"ok": True, "result": _MESSAGE})

        msg = TelegramClient("t").send_message(SendMessageRequest(chat_id=42, text="hello", parse_mode="HTML"))

        assert isinstance(msg, Message)
        assert msg.message_id == 7
        assert msg.from_field.id == 1
        assert mock_post.call_args.args[0].endswith("/sendMessage")
        assert _sent_json(mock_post) == {"chat_id": 42, "text": "hello", "parse_mode": "HTML"}

    @patch("sdk.client.requests.post")
    def test_forward_message(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response({"ok": True, "result": _MESSAGE})

        TelegramClient("t").forward_message(ForwardMessageRequest(chat_id=42, from_chat_id="@channel", message_id=3))

        assert mock_post.call_args.args[0].endswith("/forwardMessage")
        assert _sent_json(mock_post) == {"chat_id": 42, "from_chat_id": "@channel", "message_id": 3}

    @patch("sdk.client.requests.post")
    def test_send_sticker(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response({"ok": True, "result": _MESSAGE})

        TelegramClient("t").send_sticker(SendStickerRequest(chat_id=42, sticker="CAADAgAD"))

        assert mock_post.call_args.args[0].endswith("/sendSticker")
        assert _sent_json(mock_post)["sticker"] == "CAADAgAD"

    @patch("sdk.client.requests.post")
    def test_answer_callback_query(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response({"ok": True, "result": True})

        ok = TelegramClient("t").answer_callback_query(AnswerCallbackQueryRequest(callback_query_id="cb", text="done"))

        assert ok is True
        assert _sent_json(mock_post) == {"callback_query_id": "cb", "text": "done"}

    @patch("sdk.client.requests.post")
    def test_delete_webhook(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response({"ok": True, "result": True})

        c = TelegramClient("t")
        assert c.delete_webhook() is True
        assert _sent_json(mock_post) == {}

        c.delete_webhook(drop_pending_updates=True)
        assert _sent_json(mock_post) == {"drop_pending_updates": True}
