"""Back-off schedule for failed ``getUpdates`` calls."""

from __future__ import annotations

import dataclasses


@dataclasses.dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Exponential back-off with an optional ceiling on consecutive failures.

    The pause before retry *n* (1-based) is
    ``min(max_delay, initial_delay * multiplier ** (n - 1))``.  With
    ``multiplier=1.0`` every pause equals ``initial_delay``.

    ``max_attempts=None`` retries forever; otherwise the dispatch loop gives
    up once that many fetches in a row have failed.
    """

    initial_delay: float = 1.0
    multiplier: float = 2.0
    max_delay: float = 60.0
    max_attempts: int | None = None

    def __post_init__(self) -> None:
        if self.initial_delay < 0:
            raise ValueError("initial_delay must be >= 0")
        if self.multiplier < 1:
            raise ValueError("multiplier must be >= 1")
        if self.max_delay < self.initial_delay:
            raise ValueError("max_delay must be >= initial_delay")
        if self.max_attempts is not None and self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1 or None")

    @classmethod
    def fixed(cls, delay: float = 1.0, max_attempts: int | None = None) -> RetryPolicy:
        """Constant pause between retries."""
        return cls(initial_delay=delay, multiplier=1.0, max_delay=delay, max_attempts=max_attempts)

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after the *attempt*-th consecutive failure."""
        if attempt < 1:
            raise ValueError("attempt is 1-based")
        delay = self.initial_delay
        for _ in range(attempt - 1):
            if delay == 0 or self.multiplier == 1 or delay >= self.max_delay:
                break
            delay *= self.multiplier
        return min(self.max_delay, delay)

    def exhausted(self, attempt: int) -> bool:
        """Whether *attempt* consecutive failures hit the ceiling."""
        return self.max_attempts is not None and attempt >= self.max_attempts
