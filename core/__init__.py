"""Framework-agnostic helpers shared by the bot layer.

This package must NEVER import from ``bot/`` or ``sdk/``.
"""

from core.logger import TgpollLogger

__all__ = [
    "TgpollLogger",
]
