from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from telegram import CallbackQuery, Update

from movizen.services.auth_service import REJECTION_TEXT, is_owner, is_user_authorized


def _context(allowed):
    bot = SimpleNamespace(send_message=AsyncMock())
    return SimpleNamespace(bot=bot, bot_data={"ALLOWED_USER_IDS": allowed})


def test_is_owner():
    assert is_owner(123, [123, 456])
    assert not is_owner(789, [123])
    assert not is_owner(123, [])


@pytest.mark.asyncio
async def test_owner_is_authorized(make_message):
    update = Update(update_id=1, message=make_message("/list"))
    context = _context([123])

    assert await is_user_authorized(update, context) is True
    context.bot.send_message.assert_not_awaited()


@pytest.mark.asyncio
async def test_stranger_is_told_only_once(make_message):
    context = _context([999])

    for update_id in (1, 2, 3):
        update = Update(update_id=update_id, message=make_message("/add"))
        assert await is_user_authorized(update, context) is False

    context.bot.send_message.assert_awaited_once_with(chat_id=123, text=REJECTION_TEXT)


@pytest.mark.asyncio
async def test_stranger_button_press_gets_an_alert(mocker, make_callback_query):
    answer_mock = mocker.patch.object(CallbackQuery, "answer", AsyncMock())
    context = _context([999])
    update = Update(update_id=1, callback_query=make_callback_query("remove_abc"))

    assert await is_user_authorized(update, context) is False

    answer_mock.assert_awaited_once_with(REJECTION_TEXT, show_alert=True)
    context.bot.send_message.assert_not_awaited()


@pytest.mark.asyncio
async def test_empty_allowlist_locks_everyone_out(mocker, make_message):
    error_mock = mocker.patch("movizen.services.auth_service.logger.error")
    context = _context([])

    update = Update(update_id=1, message=make_message("/list"))
    assert await is_user_authorized(update, context) is False
    error_mock.assert_called_once()


@pytest.mark.asyncio
async def test_update_without_user_is_rejected():
    update = Update(update_id=1)
    context = _context([123])

    assert await is_user_authorized(update, context) is False
