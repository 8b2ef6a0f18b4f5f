"""Application configuration — environment variables and derived constants.

Loads the bot token, polling parameters, and retry schedule from the
environment via ``python-dotenv``.  All values are resolved at import time
so other modules can ``from config import …`` without repeated lookups.
Malformed values fall back to their defaults with a warning.
"""

# ── stdlib ───────────────────────────────────────────────────────────────────
import logging
import os

# ── third-party ──────────────────────────────────────────────────────────────
from dotenv import load_dotenv

# ── core ─────────────────────────────────────────────────────────────────────
from core.logger import TgpollLogger

# ── Environment bootstrap ────────────────────────────────────────────────────
load_dotenv()

# ── Logger (used for startup diagnostics at the bottom of this module) ───────
logger = TgpollLogger.get_logger()


# ── Helper functions (private) ───────────────────────────────────────────────


def _parse_int(name: str, raw: str | None, default: int | None, minimum: int | None = None) -> int | None:
    """Parse *raw* as an int, returning *default* when unset or invalid."""
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        logger.warning("Invalid integer in environment, using default", extra={"variable": name, "value": raw, "default": default})
        return default
    if minimum is not None and value < minimum:
        logger.warning("Value below minimum in environment, using default", extra={"variable": name, "value": value, "minimum": minimum, "default": default})
        return default
    return value


def _parse_float(name: str, raw: str | None, default: float, minimum: float = 0.0) -> float:
    """Parse *raw* as a float, returning *default* when unset, invalid, or below *minimum*."""
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw.strip())
    except ValueError:
        logger.warning("Invalid number in environment, using default", extra={"variable": name, "value": raw, "default": default})
        return default
    if value < minimum:
        logger.warning("Value below minimum in environment, using default", extra={"variable": name, "value": value, "minimum": minimum, "default": default})
        return default
    return value


def _parse_bool(raw: str | None, default: bool = False) -> bool:
    """Interpret ``1/true/yes/on`` (any case) as True and ``0/false/no/off`` as False."""
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    return default


def _parse_log_level(raw: str | None) -> int:
    """Map a level name such as ``DEBUG`` to its :mod:`logging` constant."""
    if not raw:
        return logging.INFO
    level = logging.getLevelName(raw.strip().upper())
    return level if isinstance(level, int) else logging.INFO


# ── Public constants ─────────────────────────────────────────────────────────

BOT_TOKEN: str | None = os.environ.get("BOT_TOKEN") or None
API_URL: str = os.environ.get("API_URL") or "https://api.telegram.org"
LOG_LEVEL: int = _parse_log_level(os.environ.get("LOG_LEVEL"))

POLL_LIMIT: int = _parse_int("POLL_LIMIT", os.environ.get("POLL_LIMIT"), 100, minimum=1)
POLL_TIMEOUT: int = _parse_int("POLL_TIMEOUT", os.environ.get("POLL_TIMEOUT"), 120, minimum=0)

RETRY_INITIAL_DELAY: float = _parse_float("RETRY_INITIAL_DELAY", os.environ.get("RETRY_INITIAL_DELAY"), 1.0)
RETRY_MULTIPLIER: float = _parse_float("RETRY_MULTIPLIER", os.environ.get("RETRY_MULTIPLIER"), 2.0, minimum=1.0)
RETRY_MAX_DELAY: float = _parse_float("RETRY_MAX_DELAY", os.environ.get("RETRY_MAX_DELAY"), 60.0)
RETRY_MAX_ATTEMPTS: int | None = _parse_int("RETRY_MAX_ATTEMPTS", os.environ.get("RETRY_MAX_ATTEMPTS"), None, minimum=1)

DROP_PENDING_UPDATES: bool = _parse_bool(os.environ.get("DROP_PENDING_UPDATES"))

if POLL_LIMIT > 100:
    logger.warning("POLL_LIMIT above the Bot API maximum, clamping to 100", extra={"value": POLL_LIMIT})
    POLL_LIMIT = 100

if RETRY_MAX_DELAY < RETRY_INITIAL_DELAY:
    logger.warning(
        "RETRY_MAX_DELAY below RETRY_INITIAL_DELAY, raising it to match",
        extra={"max_delay": RETRY_MAX_DELAY, "initial_delay": RETRY_INITIAL_DELAY},
    )
    RETRY_MAX_DELAY = RETRY_INITIAL_DELAY


# ── Startup diagnostics ─────────────────────────────────────────────────────

TgpollLogger.set_level(LOG_LEVEL)

if BOT_TOKEN:
    logger.info("Config loaded — BOT_TOKEN is set", extra={"api_url": API_URL})
else:
    logger.warning("Config loaded — BOT_TOKEN is NOT set")

logger.info(
    "Polling settings resolved",
    extra={
        "poll_limit": POLL_LIMIT,
        "poll_timeout": POLL_TIMEOUT,
        "retry_initial_delay": RETRY_INITIAL_DELAY,
        "retry_multiplier": RETRY_MULTIPLIER,
        "retry_max_delay": RETRY_MAX_DELAY,
        "retry_max_attempts": RETRY_MAX_ATTEMPTS,
    },
)
