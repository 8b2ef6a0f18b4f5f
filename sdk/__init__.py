"""Telegram Bot API SDK — Pydantic models, client, and exceptions.

The :class:`TelegramClient` wraps the Bot API methods the dispatch loop and
handlers need with synchronous, typed calls.

Usage::

    from sdk import TelegramClient, APIError
    from sdk.models import Update, UpdateKind, SendMessageRequest
"""

from sdk.client import TelegramClient
from sdk.exceptions import APIError, DecodeError, TelegramError, TransportError

__all__ = [
    "TelegramClient",
    "TelegramError",
    "TransportError",
    "APIError",
    "DecodeError",
]
