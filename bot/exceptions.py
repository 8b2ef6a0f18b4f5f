"""Errors raised or reported by the dispatch loop."""

from typing import Optional


class HandlerError(Exception):
    """A handler in the chain failed while processing one update.

    Handlers may raise this directly to abort the chain with a message, or
    raise anything else; the dispatcher wraps foreign exceptions in a
    ``HandlerError`` for reporting.  Either way only the current update is
    affected.
    """

    def __init__(self, message: str, update_id: Optional[int] = None, handler: Optional[str] = None) -> None:
        self.update_id = update_id
        self.handler = handler
        super().__init__(message)


class RetryLimitExceeded(Exception):
    """``getUpdates`` failed ``attempts`` times in a row and the retry policy gave up.

    Attributes:
        attempts: Number of consecutive failed fetches.
        last_error: The error raised by the final attempt.
    """

    def __init__(self, attempts: int, last_error: BaseException) -> None:
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"getUpdates failed {attempts} times in a row; last error: {last_error}")
