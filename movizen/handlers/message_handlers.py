# movizen/handlers/message_handlers.py

from telegram import Message, Update
from telegram.ext import ContextTypes

from ..config import logger
from ..services.auth_service import is_user_authorized
from ..workflows.add_workflow import handle_add_workflow


async def handle_text_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Routes general text messages to the appropriate workflow handler
    based on the 'active_workflow' state stored in user_data.
    """
    if not await is_user_authorized(update, context):
        return

    user = update.effective_user
    message = update.message
    if not user or not isinstance(message, Message) or not message.text:
        logger.warning("handle_text_message: Update received without a user or valid message text. Ignoring.")
        return

    if context.user_data is None:
        context.user_data = {}

    active_workflow = context.user_data.get("active_workflow")
    if active_workflow == "add":
        await handle_add_workflow(update, context)
    else:
        logger.info(f"Received a text message from user {user.id} with no active workflow.")
