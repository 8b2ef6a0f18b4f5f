"""TelegramClient -- transport and method bindings for the Telegram Bot API.

:meth:`TelegramClient.call_method` is the transport: one synchronous JSON
``POST`` per call, raw bytes back.  Every binding (``get_me``,
``get_updates``, ``send_message``, …) builds its request, calls the
transport, and decodes the ``{ok, description, result}`` envelope into a
typed Pydantic result.  HTTP calls use the ``requests`` library.

Failures surface as :class:`~sdk.exceptions.TransportError`,
:class:`~sdk.exceptions.APIError` or :class:`~sdk.exceptions.DecodeError`.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Union

import requests
from pydantic import BaseModel, ValidationError

from sdk.exceptions import APIError, DecodeError, TransportError
from sdk.models import (
    AnswerCallbackQueryRequest,
    ForwardMessageRequest,
    Message,
    Response,
    SendMessageRequest,
    SendStickerRequest,
    Update,
    UpdateBatch,
    User,
)

_sdk_logger = logging.getLogger("tgpoll.sdk")

DEFAULT_API_URL = "https://api.telegram.org"


class TelegramClient:
    """Client-side service layer for the Telegram Bot API.

    Each public binding corresponds to one Bot API method.  The client is
    stateless apart from the token and timeouts, so one instance can be
    shared by the dispatch loop and by handlers.
    """

    _DEFAULT_TIMEOUT: float = 10
    # Extra seconds granted on top of a long-poll timeout before the HTTP
    # read gives up locally.
    _LONG_POLL_GRACE: float = 10

    def __init__(self, token: str, api_url: str = DEFAULT_API_URL, timeout: float = _DEFAULT_TIMEOUT) -> None:
        """Create a new client for the bot identified by *token*.

        Args:
            token: Bot token issued by @BotFather.
            api_url: Bot API server root, without the ``/bot<token>`` suffix.
            timeout: Default HTTP timeout in seconds.
        """
        if not token:
            raise ValueError("A bot token is required.")
        self._token = token
        self._base_url = f"{api_url.rstrip('/')}/bot{token}"
        self._timeout = timeout

    @property
    def token(self) -> str:
        return self._token

    # ------------------------------------------------------------------
    #  Transport
    # ------------------------------------------------------------------

    def call_method(
        self,
        method: str,
        params: Union[BaseModel, Dict[str, Any], None] = None,
        *,
        timeout: Optional[float] = None,
    ) -> bytes:
        """POST *params* as JSON to *method* and return the raw response body.

        The HTTP status is not inspected: the Bot API reports failures in the
        body envelope, which the bindings decode.

        Raises:
            TransportError: On serialisation or network failure.
        """
        url = f"{self._base_url}/{method}"
        if isinstance(params, BaseModel):
            params = params.model_dump(by_alias=True, exclude_none=True)
        try:
            body = json.dumps(params if params is not None else {})
        except (TypeError, ValueError) as exc:
            raise TransportError(f"Cannot encode parameters for {method}: {exc}", method) from exc

        try:
            response = requests.post(
                url,
                data=body.encode("utf-8"),
                headers={"Content-Type": "application/json"},
                timeout=timeout if timeout is not None else self._timeout,
            )
            return response.content
        except requests.RequestException as exc:
            raise TransportError(f"{method} request failed: {exc}", method) from exc

    # ------------------------------------------------------------------
    #  Envelope decoding
    # ------------------------------------------------------------------

    def _call(
        self,
        method: str,
        result_type: Any,
        params: Union[BaseModel, Dict[str, Any], None] = None,
        *,
        timeout: Optional[float] = None,
    ) -> Any:
        """Call *method* and return its ``result`` validated as *result_type*.

        Raises:
            TransportError: Propagated from :meth:`call_method`.
            DecodeError: Body is not JSON or does not match the envelope.
            APIError: Envelope has ``ok: false``.
        """
        raw = self.call_method(method, params, timeout=timeout)
        try:
            data = json.loads(raw)
        except ValueError as exc:
            raise DecodeError(f"{method} returned malformed JSON: {exc}", method, raw) from exc

        try:
            envelope = Response[result_type].model_validate(data)
        except ValidationError as exc:
            raise DecodeError(f"{method} returned an unexpected payload: {exc}", method, raw) from exc

        if not envelope.ok:
            _sdk_logger.debug(
                "Bot API returned ok=false",
                extra={"api_endpoint": method, "error_code": envelope.error_code, "description": envelope.description},
            )
            raise APIError(envelope.description or "", method, envelope.error_code)
        if envelope.result is None:
            raise DecodeError(f"{method} returned ok=true without a result", method, raw)
        return envelope.result

    # ------------------------------------------------------------------
    #  Bindings
    # ------------------------------------------------------------------

    def get_me(self) -> User:
        """A simple method for testing your bot's auth token. Returns basic information about the bot."""
        return self._call("getMe", User)

    def get_updates(self, offset: int = 0, limit: int = 100, timeout: int = 0) -> UpdateBatch:
        """Receive incoming updates using long polling.

        Updates with an identifier lower than *offset* are confirmed and
        will not be returned again.  *timeout* is the long-poll duration in
        seconds; the HTTP read timeout is extended to cover it.

        Each update is validated on its own.  One that does not match
        :class:`Update` is logged and left out of the batch, and its
        identifier is recorded in :attr:`UpdateBatch.skipped_ids`.

        Raises:
            DecodeError: The envelope is malformed or an update has no
                integer ``update_id``.
        """
        payload = {"offset": offset, "limit": limit, "timeout": timeout}
        items = self._call(
            "getUpdates",
            List[Dict[str, Any]],
            payload,
            timeout=max(self._timeout, timeout + self._LONG_POLL_GRACE),
        )

        batch = UpdateBatch()
        for item in items:
            update_id = item.get("update_id")
            if not isinstance(update_id, int) or isinstance(update_id, bool):
                raise DecodeError(
                    f"getUpdates returned an update without an integer update_id: {update_id!r}",
                    "getUpdates",
                    json.dumps(item, default=str).encode("utf-8"),
                )
            try:
                batch.append(Update.model_validate(item))
            except ValidationError as exc:
                _sdk_logger.warning(
                    "Skipping update that failed validation",
                    extra={"update_id": update_id, "error_count": exc.error_count(), "error": str(exc)},
                )
                batch.skipped_ids.append(update_id)
        return batch

    def send_message(self, request: SendMessageRequest) -> Message:
        """Send text messages. On success, the sent Message is returned."""
        return self._call("sendMessage", Message, request)

    def forward_message(self, request: ForwardMessageRequest) -> Message:
        """Forward messages of any kind. On success, the sent Message is returned."""
        return self._call("forwardMessage", Message, request)

    def send_sticker(self, request: SendStickerRequest) -> Message:
        """Send .webp stickers. On success, the sent Message is returned."""
        return self._call("sendSticker", Message, request)

    def answer_callback_query(self, request: AnswerCallbackQueryRequest) -> bool:
        """Answer a callback query sent from an inline keyboard. Returns True on success."""
        return self._call("answerCallbackQuery", bool, request)

    def delete_webhook(self, drop_pending_updates: Optional[bool] = None) -> bool:
        """Remove webhook integration so that ``getUpdates`` can be used. Returns True on success."""
        payload: Dict[str, Any] = {}
        if drop_pending_updates is not None:
            payload["drop_pending_updates"] = drop_pending_updates
        return self._call("deleteWebhook", bool, payload)
