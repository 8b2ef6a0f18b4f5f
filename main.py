"""Process entry point: verify the token, then long-poll until signalled.

Run with ``python main.py`` or the ``tgpoll`` console script.  Settings come
from the environment (see :mod:`config`).
"""

import asyncio
import signal
import sys

import config
from bot import Bot, RetryLimitExceeded, RetryPolicy, acknowledge_callback_query, log_update
from core.logger import TgpollLogger
from sdk.exceptions import TelegramError

logger = TgpollLogger.get_logger()


def build_bot() -> Bot:
    """Create the bot from :mod:`config` and register the stock handlers."""
    retry = RetryPolicy(
        initial_delay=config.RETRY_INITIAL_DELAY,
        multiplier=config.RETRY_MULTIPLIER,
        max_delay=config.RETRY_MAX_DELAY,
        max_attempts=config.RETRY_MAX_ATTEMPTS,
    )
    bot = Bot.from_token(
        config.BOT_TOKEN,
        api_url=config.API_URL,
        limit=config.POLL_LIMIT,
        poll_timeout=config.POLL_TIMEOUT,
        retry=retry,
    )
    bot.add_handler(log_update)
    bot.add_handler(acknowledge_callback_query)
    return bot


def _install_signal_handlers(bot: Bot) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, bot.stop)
        except NotImplementedError:
            # Windows event loops: fall back to the plain signal module.
            signal.signal(sig, lambda *_: bot.stop())


async def run(bot: Bot) -> None:
    """Check the bot identity, clear any webhook, and poll until stopped."""
    me = await bot.get_me()
    logger.info("Authorised as bot", extra={"bot_id": me.id, "username": me.username})

    await asyncio.to_thread(bot.client.delete_webhook, config.DROP_PENDING_UPDATES or None)
    _install_signal_handlers(bot)
    await bot.run_long_polling()


def main() -> int:
    if not config.BOT_TOKEN:
        logger.error("BOT_TOKEN environment variable is not set or is empty.")
        return 1

    bot = build_bot()
    try:
        asyncio.run(run(bot))
    except TelegramError as exc:
        logger.error("Startup call failed", extra={"error_type": type(exc).__name__, "error": str(exc)})
        return 1
    except RetryLimitExceeded as exc:
        logger.error("Polling aborted", extra={"attempts": exc.attempts, "error": str(exc.last_error)})
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
