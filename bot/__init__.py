"""Bot application layer — handler chain, long-polling loop, stock handlers.

This package may import from ``core/`` and ``sdk/`` only.
"""

from bot.dispatcher import Bot, Handler
from bot.exceptions import HandlerError, RetryLimitExceeded
from bot.handlers import acknowledge_callback_query, log_update
from bot.retry import RetryPolicy

__all__ = [
    # Dispatcher
    "Bot",
    "Handler",
    "RetryPolicy",
    # Errors
    "HandlerError",
    "RetryLimitExceeded",
    # Stock handlers
    "log_update",
    "acknowledge_callback_query",
]
