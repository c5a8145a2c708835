# movizen/workflows/remove_workflow.py

from telegram import Message, Update
from telegram.constants import ParseMode
from telegram.ext import ContextTypes
from telegram.helpers import escape_markdown

from ..config import logger
from ..state import WatchlistStore
from ..ui.messages import EMPTY_WATCHLIST_TEXT
from ..ui.views import build_remove_keyboard
from ..utils import safe_edit_message

REMOVE_PROMPT_TEXT = "Which movie do you want to remove?"


def _get_store(context: ContextTypes.DEFAULT_TYPE) -> WatchlistStore | None:
    store = context.bot_data.get("WATCHLIST_STORE")
    if store is None:
        logger.error("No watchlist store registered in bot_data.")
    return store


async def send_remove_prompt(message: Message, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Replies with one delete button per watchlist entry."""
    store = _get_store(context)
    if store is None or not len(store):
        await message.reply_text(
            text=EMPTY_WATCHLIST_TEXT, parse_mode=ParseMode.MARKDOWN_V2
        )
        return

    await message.reply_text(
        text=REMOVE_PROMPT_TEXT, reply_markup=build_remove_keyboard(store.movies)
    )


async def handle_remove_buttons(
    update: Update, context: ContextTypes.DEFAULT_TYPE
) -> None:
    """Removes the chosen movie and refreshes the keyboard."""
    query = update.callback_query
    if not query or not isinstance(query.message, Message) or not query.data:
        return

    store = _get_store(context)
    if store is None:
        return

    movie_id = query.data.removeprefix("remove_")
    movie = store.get(movie_id)
    store.remove(movie_id)

    if movie is None:
        status = "That movie was already removed."
    else:
        status = f"🗑 Removed '{movie.title}'."

    if not len(store):
        await safe_edit_message(
            query.message,
            text=f"{escape_markdown(status, version=2)}\n\n{EMPTY_WATCHLIST_TEXT}",
            parse_mode=ParseMode.MARKDOWN_V2,
        )
        return

    await safe_edit_message(
        query.message,
        text=f"{status}\n\n{REMOVE_PROMPT_TEXT}",
        reply_markup=build_remove_keyboard(store.movies),
    )
