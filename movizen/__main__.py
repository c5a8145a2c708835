# movizen/__main__.py

import re

# Ensure PTB env flags are set before importing python-telegram-bot
from movizen import _ptb_env  # noqa: F401
from telegram import Update
from telegram.ext import (
    Application,
    ApplicationBuilder,
    CallbackQueryHandler,
    MessageHandler,
    filters,
)

from movizen.config import get_configuration, logger
from movizen.handlers.callback_handlers import button_handler
from movizen.handlers.command_handlers import (
    add_command,
    help_command,
    list_command,
    remove_command,
)
from movizen.handlers.error_handler import global_error_handler
from movizen.handlers.message_handlers import handle_text_message
from movizen.services.omdb_client import OmdbClient
from movizen.state import JsonFileStorage, WatchlistStore, post_init, post_shutdown


def _command_filter(name: str) -> filters.BaseFilter:
    """Matches a command with or without its leading slash, in any case."""
    return filters.Regex(re.compile(rf"^/?{name}$", re.IGNORECASE))


def register_handlers(application: Application) -> None:
    """
    Registers all the command, message, and callback handlers for the bot.
    """
    application.add_handler(MessageHandler(_command_filter("add"), add_command))
    application.add_handler(MessageHandler(_command_filter("list"), list_command))
    application.add_handler(MessageHandler(_command_filter("remove"), remove_command))
    application.add_handler(MessageHandler(_command_filter("help"), help_command))
    application.add_handler(
        MessageHandler(_command_filter("start"), help_command)
    )  # /start redirects to help

    application.add_handler(CallbackQueryHandler(button_handler))

    # Titles and dates typed during the add-movie conversation
    application.add_handler(
        MessageHandler(filters.TEXT & ~filters.COMMAND, handle_text_message)
    )

    application.add_error_handler(global_error_handler)

    logger.info("All handlers have been registered.")


def main() -> None:
    """
    Main function to initialize and run the Telegram bot.
    """
    logger.info("Starting bot...")

    token, allowed_ids, omdb_config, watchlist_config = get_configuration()

    application = (
        ApplicationBuilder()
        .token(token)
        .post_init(post_init)  # Loads the persisted watchlist
        .post_shutdown(post_shutdown)  # Closes open add-movie sessions
        .build()
    )

    application.bot_data["ALLOWED_USER_IDS"] = allowed_ids
    application.bot_data["WATCHLIST_STORE"] = WatchlistStore(
        JsonFileStorage(watchlist_config["persistence_file"])
    )
    application.bot_data["METADATA_CLIENT"] = OmdbClient(
        omdb_config["api_key"],
        base_url=omdb_config["base_url"],
        timeout=omdb_config["timeout"],
    )
    application.bot_data["SEARCH_DEBOUNCE_SECONDS"] = watchlist_config[
        "debounce_seconds"
    ]

    register_handlers(application)

    logger.info("Bot startup complete. Starting polling...")
    application.run_polling(allowed_updates=Update.ALL_TYPES)


if __name__ == "__main__":
    main()
