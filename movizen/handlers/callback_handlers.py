# movizen/handlers/callback_handlers.py

from telegram import Message, Update
from telegram.ext import ContextTypes

from ..config import logger
from ..services.auth_service import is_user_authorized
from ..utils import safe_edit_message
from ..workflows.add_session import clear_add_session
from ..workflows.add_workflow import handle_add_buttons
from ..workflows.remove_workflow import handle_remove_buttons


async def button_handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handles all callback queries from inline buttons. Acts as a central router.
    """
    if not await is_user_authorized(update, context):
        return

    query = update.callback_query
    if not query or not query.data:
        return

    await query.answer()
    action = query.data

    if action.startswith("add_"):
        await handle_add_buttons(update, context)

    elif action.startswith("remove_"):
        await handle_remove_buttons(update, context)

    elif action == "cancel_operation":
        clear_add_session(context.user_data)
        if context.user_data is not None:
            context.user_data.pop("active_workflow", None)
        if isinstance(query.message, Message):
            await safe_edit_message(query.message, text="Operation cancelled.")

    else:
        logger.warning(f"Received an unhandled callback query action: {action}")
