# movizen/handlers/command_handlers.py

from telegram import Message, Update
from telegram.constants import ParseMode
from telegram.error import BadRequest
from telegram.ext import ContextTypes

from ..config import logger
from ..services.auth_service import is_user_authorized
from ..ui.messages import format_watchlist
from ..workflows.add_session import clear_add_session
from ..workflows.add_workflow import start_add_workflow
from ..workflows.remove_workflow import send_remove_prompt


def get_help_message_text() -> str:
    """Returns the formatted help message string."""
    return r"""Here are the available commands:

`add`      \- Add a movie to the watchlist\.
`help`     \- Display this message\.
`list`     \- Show the watchlist\.
`remove` \- Remove a movie from the watchlist\.
"""


async def _delete_command_message(message: Message) -> None:
    try:
        await message.delete()
    except BadRequest:
        pass  # Ignore if message is old or bot lacks permissions


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Sends a formatted list of available commands."""
    if not await is_user_authorized(update, context):
        return
    if not isinstance(update.message, Message):
        return

    await _delete_command_message(update.message)

    chat = update.effective_chat
    if not chat:
        logger.warning("help_command was triggered but could not find an effective_chat.")
        return

    await context.bot.send_message(
        chat_id=chat.id,
        text=get_help_message_text(),
        parse_mode=ParseMode.MARKDOWN_V2,
    )


async def list_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Shows every watchlist entry in insertion order."""
    if not await is_user_authorized(update, context):
        return
    if not isinstance(update.message, Message):
        return

    await _delete_command_message(update.message)

    chat = update.effective_chat
    if not chat:
        logger.warning("list_command was triggered but could not find an effective_chat.")
        return

    store = context.bot_data.get("WATCHLIST_STORE")
    movies = store.movies if store is not None else ()
    await context.bot.send_message(
        chat_id=chat.id,
        text=format_watchlist(movies),
        parse_mode=ParseMode.MARKDOWN_V2,
    )


async def add_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Starts the add-movie conversation."""
    if not await is_user_authorized(update, context):
        return

    user = update.effective_user
    message = update.message
    if not user or not isinstance(message, Message):
        logger.warning("add_command cannot proceed without user or message.")
        return

    logger.info(f"User {user.id} initiated /add command.")
    await _delete_command_message(message)
    await start_add_workflow(message, context)


async def remove_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Shows a delete button for every watchlist entry."""
    if not await is_user_authorized(update, context):
        return
    if not isinstance(update.message, Message):
        return

    # A running add flow would otherwise swallow the next text message.
    clear_add_session(context.user_data)
    if context.user_data is not None:
        context.user_data.pop("active_workflow", None)

    await _delete_command_message(update.message)
    await send_remove_prompt(update.message, context)
