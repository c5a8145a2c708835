import sys
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
from telegram import Update, CallbackQuery

sys.path.append(str(Path(__file__).resolve().parent.parent.parent))

from movizen.handlers.callback_handlers import button_handler
from movizen.workflows.add_session import AddMovieSession, start_add_session

from tests.fakes import FakeMetadataClient


def _authorize(mocker):
    mocker.patch.object(CallbackQuery, "answer", AsyncMock())
    mocker.patch(
        "movizen.handlers.callback_handlers.is_user_authorized",
        AsyncMock(return_value=True),
    )


@pytest.mark.asyncio
@pytest.mark.parametrize("action", ["add_select_tt1375666", "add_manual", "add_confirm"])
async def test_button_handler_routes_add(mocker, make_callback_query, context, action):
    _authorize(mocker)
    update = Update(update_id=1, callback_query=make_callback_query(action))
    handler_mock = mocker.patch(
        "movizen.handlers.callback_handlers.handle_add_buttons", AsyncMock()
    )

    await button_handler(update, context)

    handler_mock.assert_awaited_once_with(update, context)


@pytest.mark.asyncio
async def test_button_handler_routes_remove(mocker, make_callback_query, context):
    _authorize(mocker)
    update = Update(update_id=1, callback_query=make_callback_query("remove_abc"))
    handler_mock = mocker.patch(
        "movizen.handlers.callback_handlers.handle_remove_buttons", AsyncMock()
    )

    await button_handler(update, context)

    handler_mock.assert_awaited_once_with(update, context)


@pytest.mark.asyncio
async def test_cancel_closes_add_session(mocker, make_callback_query, context, store):
    _authorize(mocker)
    start_add_session(context.user_data, FakeMetadataClient(), store)
    context.user_data["active_workflow"] = "add"
    edit_mock = mocker.patch(
        "movizen.handlers.callback_handlers.safe_edit_message", AsyncMock()
    )
    update = Update(update_id=1, callback_query=make_callback_query("cancel_operation"))

    await button_handler(update, context)

    assert AddMovieSession.from_user_data(context.user_data) is None
    assert "active_workflow" not in context.user_data
    assert edit_mock.await_args.kwargs["text"] == "Operation cancelled."


@pytest.mark.asyncio
async def test_button_handler_stops_unauthorized(mocker, make_callback_query, context):
    mocker.patch(
        "movizen.handlers.callback_handlers.is_user_authorized",
        AsyncMock(return_value=False),
    )
    handler_mock = mocker.patch(
        "movizen.handlers.callback_handlers.handle_remove_buttons", AsyncMock()
    )
    update = Update(update_id=1, callback_query=make_callback_query("remove_abc"))

    await button_handler(update, context)

    handler_mock.assert_not_awaited()
