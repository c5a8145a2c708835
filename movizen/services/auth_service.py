# movizen/services/auth_service.py

from collections.abc import Collection

from telegram import Update
from telegram.ext import ContextTypes

from ..config import logger

REJECTION_TEXT = "❌ This watchlist belongs to someone else."
# bot_data key: ids of strangers who have already been told off
_REJECTED_KEY = "REJECTED_USER_IDS"


def is_owner(user_id: int, allowed_ids: Collection[int]) -> bool:
    """An empty allowlist locks the watchlist for everyone."""
    return user_id in allowed_ids


async def is_user_authorized(
    update: Update, context: ContextTypes.DEFAULT_TYPE
) -> bool:
    """
    Lets only the watchlist's owner(s) through.

    A stranger is told once per run; later attempts are only logged. Button
    presses are answered with an alert on the button instead of a new message.
    """
    user = update.effective_user
    if not user:
        logger.warning("[AUTH] Update without an effective user; ignoring it.")
        return False

    allowed_ids = context.bot_data.get("ALLOWED_USER_IDS", [])
    if is_owner(user.id, allowed_ids):
        return True

    if not allowed_ids:
        logger.error(
            "[AUTH] No allowed_user_ids configured; every request is rejected."
        )

    rejected: set[int] = context.bot_data.setdefault(_REJECTED_KEY, set())
    if user.id in rejected:
        logger.info(f"[AUTH] Ignoring repeat request from user {user.id}.")
        if update.callback_query:
            await update.callback_query.answer()
        return False

    rejected.add(user.id)
    logger.warning(f"[AUTH] Rejected user {user.id} ({user.username}).")
    if update.callback_query:
        await update.callback_query.answer(REJECTION_TEXT, show_alert=True)
    else:
        await context.bot.send_message(chat_id=user.id, text=REJECTION_TEXT)
    return False
