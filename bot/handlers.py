"""Stock handlers that can be placed in any chain.

They carry no business logic: one records every update, the other answers
callback queries so the client's loading indicator disappears even when no
later handler replies.
"""

from core.logger import TgpollLogger
from sdk.models import AnswerCallbackQueryRequest, Update, UpdateKind

from bot.dispatcher import Bot

logger = TgpollLogger.get_logger()


def log_update(bot: Bot, update: Update) -> None:
    """Log the identifier, kind, and origin of *update*."""
    extra: dict = {"update_id": update.update_id, "kind": update.kind.value}
    payload = update.payload
    sender = getattr(payload, "from_field", None)
    if sender is not None:
        extra["user_id"] = sender.id
    chat = getattr(payload, "chat", None)
    if chat is not None:
        extra["chat_id"] = chat.id
    logger.info("Update received", extra=extra)


async def acknowledge_callback_query(bot: Bot, update: Update) -> None:
    """Answer callback queries with an empty acknowledgement.

    API and transport errors propagate, which aborts the rest of the chain
    for this update.
    """
    if update.kind is not UpdateKind.CALLBACK_QUERY:
        return
    query = update.callback_query
    await bot.answer_callback_query(AnswerCallbackQueryRequest(callback_query_id=query.id))
    logger.debug("Callback query acknowledged", extra={"update_id": update.update_id, "callback_query_id": query.id})
