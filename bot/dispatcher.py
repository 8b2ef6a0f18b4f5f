"""Bot instance, handler chain, and the long-polling dispatch loop.

The loop alternates between two states:

* **Polling**: call ``getUpdates`` with the current offset.  Transport,
  API and decode failures are logged and retried after a back-off pause
  with the offset unchanged; an empty batch polls again immediately.
  Single updates the client could not decode are skipped by the client
  and acknowledged here without reaching the handlers.
* **Handling**: run every update of the batch, in platform order, through
  the handler chain.  A handler that raises aborts the rest of the chain for
  that update only.  The offset then advances to ``update_id + 1`` whatever
  the handlers did, so one poisoned update cannot be redelivered forever.

Everything runs on one asyncio task: handlers never overlap with each other
or with a fetch.  The blocking HTTP call is pushed to a worker thread with
:func:`asyncio.to_thread` so the event loop stays responsive to
:meth:`Bot.stop`.
"""

from __future__ import annotations

import asyncio
import inspect
import threading
from typing import Awaitable, Callable, Iterable, Optional, Protocol, runtime_checkable

from bot.exceptions import HandlerError, RetryLimitExceeded
from bot.retry import RetryPolicy
from core.logger import TgpollLogger
from sdk.client import DEFAULT_API_URL, TelegramClient
from sdk.exceptions import TelegramError
from sdk.models import (
    AnswerCallbackQueryRequest,
    ForwardMessageRequest,
    Message,
    SendMessageRequest,
    SendStickerRequest,
    Update,
    User,
)

logger = TgpollLogger.get_logger()


# ── Handler protocol ─────────────────────────────────────────────────────────

@runtime_checkable
class Handler(Protocol):
    """Callable run for every update; raise to abort the rest of the chain.

    Plain functions and coroutine functions are both accepted.
    """
    def __call__(self, bot: Bot, update: Update) -> Optional[Awaitable[None]]: ...  # noqa: E704


def _handler_name(handler: Handler) -> str:
    return getattr(handler, "__qualname__", None) or getattr(handler, "__name__", None) or repr(handler)


def _skipped_ids(updates: Iterable[Update]) -> list[int]:
    """Identifiers the client dropped from *updates* because they failed validation."""
    return list(getattr(updates, "skipped_ids", ()))


# ── Bot ──────────────────────────────────────────────────────────────────────

class Bot:
    """Long-lived bot instance: API client, handler chain, and update offset.

    Usage::

        bot = Bot.from_token(token)

        @bot.add_handler
        async def greet(bot: Bot, update: Update) -> None:
            if update.kind is UpdateKind.MESSAGE:
                await bot.send_message(SendMessageRequest(chat_id=update.message.chat.id, text="hi"))

        asyncio.run(bot.run_long_polling())
    """

    DEFAULT_LIMIT: int = 100
    DEFAULT_POLL_TIMEOUT: int = 120

    def __init__(
        self,
        client: TelegramClient,
        *,
        limit: int = DEFAULT_LIMIT,
        poll_timeout: int = DEFAULT_POLL_TIMEOUT,
        retry: RetryPolicy | None = None,
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        """Bind the bot to *client*.

        Args:
            client: Client used for ``getUpdates`` and the async helpers.
            limit: Maximum updates per fetch (1–100).
            poll_timeout: Long-poll duration in seconds passed to ``getUpdates``.
            retry: Back-off schedule for failed fetches.
            sleep: Replacement for the back-off pause, mainly for tests.
                The default pause wakes up early when :meth:`stop` is called.
        """
        if not 1 <= limit <= 100:
            raise ValueError("limit must be between 1 and 100")
        if poll_timeout < 0:
            raise ValueError("poll_timeout must be >= 0")
        self._client = client
        self._limit = limit
        self._poll_timeout = poll_timeout
        self._retry = retry or RetryPolicy()
        self._sleep = sleep

        self._handlers: list[Handler] = []
        self._offset = 0
        self._running = False
        self._stop_requested = threading.Event()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._wakeup: asyncio.Event | None = None

    @classmethod
    def from_token(cls, token: str, api_url: str = DEFAULT_API_URL, **kwargs) -> Bot:
        """Build a bot with its own :class:`TelegramClient`."""
        return cls(TelegramClient(token, api_url=api_url), **kwargs)

    # ── read-only state ──────────────────────────────────────────────────

    @property
    def client(self) -> TelegramClient:
        return self._client

    @property
    def token(self) -> str:
        return self._client.token

    @property
    def offset(self) -> int:
        """Lowest update identifier not yet acknowledged."""
        return self._offset

    @property
    def handlers(self) -> tuple[Handler, ...]:
        return tuple(self._handlers)

    @property
    def running(self) -> bool:
        return self._running

    # ── handler chain ────────────────────────────────────────────────────

    def add_handler(self, handler: Handler) -> Handler:
        """Append *handler* to the chain and return it (usable as a decorator).

        Raises:
            RuntimeError: If called while the polling loop is running.
        """
        if self._running:
            raise RuntimeError("Handlers must be registered before the polling loop starts.")
        if not callable(handler):
            raise TypeError(f"Handler must be callable, got {handler!r}")
        self._handlers.append(handler)
        logger.debug("Handler registered", extra={"handler": _handler_name(handler), "position": len(self._handlers)})
        return handler

    async def handle(self, update: Update) -> HandlerError | None:
        """Run the handler chain for one update.

        Returns ``None`` when every handler succeeded, or the
        :class:`HandlerError` describing the handler that aborted the chain.
        """
        for handler in tuple(self._handlers):
            try:
                result = handler(self, update)
                if inspect.isawaitable(result):
                    await result
            except Exception as exc:
                name = _handler_name(handler)
                if isinstance(exc, HandlerError):
                    error = exc
                    if error.update_id is None:
                        error.update_id = update.update_id
                    error.handler = error.handler or name
                else:
                    error = HandlerError(str(exc) or type(exc).__name__, update.update_id, name)
                    error.__cause__ = exc
                logger.error(
                    "Handler failed, skipping the rest of the chain",
                    extra={
                        "update_id": update.update_id,
                        "handler": name,
                        "error_type": type(exc).__name__,
                        "error": str(exc),
                    },
                    exc_info=exc,
                )
                return error
        return None

    # ── dispatch ─────────────────────────────────────────────────────────

    def _acknowledge(self, update_id: int) -> None:
        if update_id + 1 > self._offset:
            self._offset = update_id + 1

    async def process_updates(self, updates: Iterable[Update]) -> int:
        """Handle *updates* in order, advancing the offset after each one.

        Identifiers the client skipped as undecodable are acknowledged too,
        without reaching the handler chain.

        Returns the number of updates handled.
        """
        count = 0
        for update in updates:
            await self.handle(update)
            self._acknowledge(update.update_id)
            count += 1
        for update_id in _skipped_ids(updates):
            self._acknowledge(update_id)
        return count

    async def _fetch(self) -> list[Update]:
        return await asyncio.to_thread(self._client.get_updates, self._offset, self._limit, self._poll_timeout)

    async def poll_once(self) -> int:
        """Run a single Polling → Handling pass.

        Returns the number of updates handled.  Fetch errors propagate.
        """
        updates = await self._fetch()
        return await self.process_updates(updates)

    async def _pause(self, delay: float) -> None:
        if self._sleep is not None:
            await self._sleep(delay)
            return
        try:
            await asyncio.wait_for(self._wakeup.wait(), timeout=delay)
        except asyncio.TimeoutError:
            pass  # normal end of the back-off

    async def run_long_polling(self, offset: int | None = None) -> None:
        """Poll and dispatch until :meth:`stop` is called.

        Args:
            offset: Restart from this offset instead of the current one.
                Updates at or above it that the platform still holds are
                delivered (again) to the handler chain.

        Raises:
            RetryLimitExceeded: When the retry policy's ``max_attempts``
                consecutive fetch failures is reached.
            RuntimeError: If the loop is already running.
        """
        if self._running:
            raise RuntimeError("The polling loop is already running.")
        if offset is not None:
            if offset < 0:
                raise ValueError("offset must be >= 0")
            self._offset = offset

        self._loop = asyncio.get_running_loop()
        self._wakeup = asyncio.Event()
        self._running = True
        failures = 0
        logger.info(
            "Running in long polling mode",
            extra={"offset": self._offset, "handlers": len(self._handlers), "poll_timeout": self._poll_timeout},
        )
        try:
            while not self._stop_requested.is_set():
                try:
                    updates = await self._fetch()
                except TelegramError as exc:
                    failures += 1
                    if self._retry.exhausted(failures):
                        logger.error(
                            "getUpdates failed, giving up",
                            extra={"attempt": failures, "error_type": type(exc).__name__, "error": str(exc)},
                        )
                        raise RetryLimitExceeded(failures, exc) from exc
                    delay = self._retry.delay_for(failures)
                    logger.warning(
                        "getUpdates failed, retrying",
                        extra={
                            "attempt": failures,
                            "delay": delay,
                            "offset": self._offset,
                            "error_type": type(exc).__name__,
                            "error": str(exc),
                        },
                    )
                    await self._pause(delay)
                    continue

                failures = 0
                if self._stop_requested.is_set():
                    # Not acknowledged: the platform redelivers these on restart.
                    logger.info("Stop requested, leaving fetched batch unhandled", extra={"count": len(updates)})
                    break
                skipped = _skipped_ids(updates)
                if not updates and not skipped:
                    continue
                logger.debug(
                    "Received updates",
                    extra={
                        "count": len(updates),
                        "skipped": len(skipped),
                        "first_update_id": updates[0].update_id if updates else None,
                        "offset": self._offset,
                    },
                )
                await self.process_updates(updates)
        finally:
            self._running = False
            self._stop_requested.clear()
            self._loop = None
            self._wakeup = None
            logger.info("Long polling stopped", extra={"offset": self._offset})

    def stop(self) -> None:
        """Ask the polling loop to return.

        Safe to call from a handler, a signal handler, or another thread.
        The loop finishes the batch it is handling, skips a batch fetched
        after the request, and wakes up from a back-off pause immediately.
        A fetch already in flight completes first (up to ``poll_timeout``).
        """
        self._stop_requested.set()
        loop, wakeup = self._loop, self._wakeup
        if loop is not None and wakeup is not None and not loop.is_closed():
            loop.call_soon_threadsafe(wakeup.set)

    # ── async helpers for handlers ───────────────────────────────────────

    async def get_me(self) -> User:
        return await asyncio.to_thread(self._client.get_me)

    async def send_message(self, request: SendMessageRequest) -> Message:
        return await asyncio.to_thread(self._client.send_message, request)

    async def forward_message(self, request: ForwardMessageRequest) -> Message:
        return await asyncio.to_thread(self._client.forward_message, request)

    async def send_sticker(self, request: SendStickerRequest) -> Message:
        return await asyncio.to_thread(self._client.send_sticker, request)

    async def answer_callback_query(self, request: AnswerCallbackQueryRequest) -> bool:
        return await asyncio.to_thread(self._client.answer_callback_query, request)
