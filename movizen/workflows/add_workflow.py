# movizen/workflows/add_workflow.py

from typing import Any, MutableMapping

from telegram import CallbackQuery, InlineKeyboardMarkup, Message, Update
from telegram.constants import ParseMode
from telegram.error import BadRequest
from telegram.ext import ContextTypes

from ..config import DEFAULT_DEBOUNCE_SECONDS, logger
from ..services.date_normalizer import DateEntryMode, InvalidDateError
from ..ui.messages import (
    DATE_PROMPT_TEXT,
    TITLE_PROMPT_TEXT,
    format_added_message,
    format_candidate_preview,
    format_error_with_prompt,
)
from ..ui.views import CANCEL_BUTTON, build_candidate_keyboard, build_confirm_keyboard
from ..utils import safe_edit_message, safe_send_message
from .add_session import (
    CONTEXT_LOST_MESSAGE,
    AddMovieSession,
    AddStep,
    clear_add_session,
    start_add_session,
)
from .search_session import MissingRequiredFieldError


def _get_user_data_store(
    context: ContextTypes.DEFAULT_TYPE,
) -> MutableMapping[str, Any]:
    if context.user_data is None:
        context.user_data = {}
    return context.user_data


def _get_callback_data(query: CallbackQuery) -> str:
    """Returns callback data as a string even when Telegram omits it."""
    return query.data or ""


async def start_add_workflow(
    message: Message, context: ContextTypes.DEFAULT_TYPE
) -> None:
    """Opens a new add-movie session and asks for the title."""
    user_data = _get_user_data_store(context)
    user_data["active_workflow"] = "add"
    session = start_add_session(
        user_data,
        context.bot_data.get("METADATA_CLIENT"),
        context.bot_data.get("WATCHLIST_STORE"),
        context.bot_data.get("SEARCH_DEBOUNCE_SECONDS", DEFAULT_DEBOUNCE_SECONDS),
    )
    prompt = await message.reply_text(
        text=TITLE_PROMPT_TEXT,
        reply_markup=InlineKeyboardMarkup([[CANCEL_BUTTON]]),
        parse_mode=ParseMode.MARKDOWN_V2,
    )
    session.prompt_message_id = prompt.message_id


async def handle_add_workflow(
    update: Update, context: ContextTypes.DEFAULT_TYPE
) -> None:
    """Manages text-based replies for the add-movie workflow."""
    if not isinstance(update.message, Message) or not update.message.text:
        return
    chat = update.effective_chat
    if not chat:
        return

    session = AddMovieSession.from_user_data(context.user_data)
    if session is None:
        await safe_send_message(
            context.bot, chat.id, CONTEXT_LOST_MESSAGE, parse_mode=ParseMode.MARKDOWN_V2
        )
        return

    text = update.message.text.strip()
    prompt_message_id = session.consume_prompt_message_id()
    try:
        if prompt_message_id:
            await context.bot.delete_message(
                chat_id=chat.id, message_id=prompt_message_id
            )
    except BadRequest:
        pass

    if session.step == AddStep.TITLE:
        await _handle_title_reply(chat.id, text, context, session)
    else:
        await _handle_date_reply(chat.id, text, context, session)


async def handle_add_buttons(
    update: Update, context: ContextTypes.DEFAULT_TYPE
) -> None:
    """Handles all button presses related to the add-movie workflow."""
    query = update.callback_query
    if not query or not isinstance(query.message, Message):
        return

    action = _get_callback_data(query)
    session = AddMovieSession.from_user_data(context.user_data)
    if session is None:
        await safe_edit_message(
            query.message, text=CONTEXT_LOST_MESSAGE, parse_mode=ParseMode.MARKDOWN_V2
        )
        return

    if action.startswith("add_select_"):
        await _handle_candidate_button(query, context, session)
    elif action == "add_manual":
        session.coordinator.clicked_outside()
        await _prompt_for_date(query.message, session)
    elif action == "add_change_date":
        await _prompt_for_date(query.message, session)
    elif action == "add_confirm":
        await _submit(query.message.chat_id, context, session, status_message=query.message)
    else:
        logger.warning(f"Received unhandled add callback: {action}")


# --- Step handlers ---


async def _handle_title_reply(
    chat_id: int,
    text: str,
    context: ContextTypes.DEFAULT_TYPE,
    session: AddMovieSession,
) -> None:
    coordinator = session.coordinator
    coordinator.text_changed(text)

    status_message = await safe_send_message(
        context.bot, chat_id, f"🔎 Looking up '{text}'..."
    )
    await coordinator.settle()

    state = coordinator.state
    if state.results and state.dropdown_open:
        await safe_edit_message(
            status_message,
            text=f"Found {len(state.results)} matches. Pick one, or enter the details yourself:",
            reply_markup=build_candidate_keyboard(state.results),
        )
        return

    logger.info(f"[SEARCH] No candidates for '{text}'; falling back to manual entry.")
    await _prompt_for_date(status_message, session, notice="No matches found\\.")


async def _handle_candidate_button(
    query: CallbackQuery,
    context: ContextTypes.DEFAULT_TYPE,
    session: AddMovieSession,
) -> None:
    if not isinstance(query.message, Message):
        return
    coordinator = session.coordinator
    external_id = _get_callback_data(query).removeprefix("add_select_")

    # Ids outside the current results come from an older keyboard.
    candidate = coordinator.select_candidate(external_id) if external_id else None
    if candidate is None:
        await safe_edit_message(
            query.message,
            "❌ This selection has expired\\. Please send the title again\\.",
            parse_mode=ParseMode.MARKDOWN_V2,
        )
        session.advance(AddStep.TITLE)
        return

    await safe_edit_message(query.message, text=f"⏳ Fetching details for '{candidate.title}'...")
    await coordinator.settle()

    state = coordinator.state
    preview = state.preview or candidate
    if not state.release_date_text:
        await _prompt_for_date(
            query.message, session, notice=format_candidate_preview(preview)
        )
        return

    session.advance(AddStep.CONFIRM)
    await safe_edit_message(
        query.message,
        text=format_candidate_preview(preview, state.release_date_text),
        reply_markup=build_confirm_keyboard(),
        parse_mode=ParseMode.MARKDOWN_V2,
    )


async def _handle_date_reply(
    chat_id: int,
    text: str,
    context: ContextTypes.DEFAULT_TYPE,
    session: AddMovieSession,
) -> None:
    coordinator = session.coordinator
    coordinator.set_date_mode(DateEntryMode.MANUAL)
    coordinator.set_release_date_text(text)
    await _submit(chat_id, context, session)


async def _prompt_for_date(
    message: Message, session: AddMovieSession, notice: str | None = None
) -> None:
    """Switches the flow to typed date entry and asks for the release date."""
    session.coordinator.set_date_mode(DateEntryMode.MANUAL)
    session.advance(AddStep.DATE)
    text = f"{notice}\n\n{DATE_PROMPT_TEXT}" if notice else DATE_PROMPT_TEXT
    await safe_edit_message(
        message,
        text=text,
        reply_markup=InlineKeyboardMarkup([[CANCEL_BUTTON]]),
        parse_mode=ParseMode.MARKDOWN_V2,
    )
    session.prompt_message_id = message.message_id


async def _submit(
    chat_id: int,
    context: ContextTypes.DEFAULT_TYPE,
    session: AddMovieSession,
    status_message: Message | None = None,
) -> None:
    try:
        record = await session.coordinator.submit()
    except (InvalidDateError, MissingRequiredFieldError) as e:
        session.advance(AddStep.DATE)
        prompt = await safe_send_message(
            context.bot,
            chat_id,
            format_error_with_prompt(e.user_message),
            parse_mode=ParseMode.MARKDOWN_V2,
        )
        session.prompt_message_id = prompt.message_id
        return

    clear_add_session(context.user_data)
    _get_user_data_store(context).pop("active_workflow", None)

    text = format_added_message(record)
    if status_message is not None:
        await safe_edit_message(status_message, text=text, parse_mode=ParseMode.MARKDOWN_V2)
    else:
        await safe_send_message(
            context.bot, chat_id, text, parse_mode=ParseMode.MARKDOWN_V2
        )
