"""Exception hierarchy for the tgpoll Telegram SDK."""

from typing import Optional


class TelegramError(Exception):
    """Base class for every failure raised by :class:`sdk.client.TelegramClient`.

    Attributes:
        method: Bot API method that was being called, when known.
    """

    def __init__(self, message: str, method: Optional[str] = None) -> None:
        self.method = method
        super().__init__(message)


class TransportError(TelegramError):
    """The HTTP request could not be built, sent, or read.

    The underlying :mod:`requests` or serialisation error is available as
    ``__cause__``.
    """


class APIError(TelegramError):
    """The Bot API answered with ``ok: false``.

    Attributes:
        description: The platform's human-readable description, verbatim.
        error_code: Numeric ``error_code`` from the envelope, when present.
    """

    def __init__(
        self,
        description: str,
        method: Optional[str] = None,
        error_code: Optional[int] = None,
    ) -> None:
        self.description = description
        self.error_code = error_code
        super().__init__(description, method)


class DecodeError(TelegramError):
    """The response body was not valid JSON or did not match the envelope.

    Attributes:
        body_preview: First bytes of the offending body, decoded leniently.
    """

    _PREVIEW_BYTES: int = 200

    def __init__(self, message: str, method: Optional[str] = None, body: bytes = b"") -> None:
        self.body_preview = body[: self._PREVIEW_BYTES].decode("utf-8", errors="replace")
        super().__init__(message, method)
