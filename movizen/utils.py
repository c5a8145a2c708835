# movizen/utils.py

import asyncio
from datetime import timedelta
from typing import Any

from telegram import Bot, Message
from telegram.error import BadRequest, NetworkError, RetryAfter, TimedOut


def _retry_after_seconds(error: RetryAfter, default: float) -> float:
    ra = getattr(error, "retry_after", None)
    if isinstance(ra, timedelta):
        return ra.total_seconds()
    try:
        return float(ra) if ra is not None else default
    except (TypeError, ValueError):
        return default


def truncate_label(text: str, max_len: int) -> str:
    """Shortens text for an inline button, marking the cut with an ellipsis."""
    if len(text) <= max_len:
        return text
    return text[: max_len - 1].rstrip() + "…"


async def safe_edit_message(
    message: Message,
    text: str,
    *,
    max_attempts: int = 3,
    base_delay: float = 0.6,
    **kwargs: Any,
) -> None:
    """
    Edits a message, ignoring 'message is not modified' errors.

    If the message can no longer be edited, the text is sent as a new
    message to the same chat instead.
    """
    attempt = 0
    delay = base_delay
    last_exc: Exception | None = None

    while attempt < max_attempts:
        try:
            await message.edit_text(text=text, **kwargs)
            return
        except BadRequest as e:
            msg = str(e).lower()
            if "message is not modified" in msg:
                return
            recoverable = (
                "message to edit not found" in msg
                or "message can't be edited" in msg
                or "message not found" in msg
            )
            if recoverable:
                await safe_send_message(
                    message, chat_id=message.chat_id, text=text, **kwargs
                )
                return
            raise
        except RetryAfter as e:
            await asyncio.sleep(_retry_after_seconds(e, delay) + 0.1)
            last_exc = e
        except (TimedOut, NetworkError) as e:
            # Transient network conditions – exponential backoff
            await asyncio.sleep(delay)
            delay *= 2
            last_exc = e
        attempt += 1

    if last_exc is not None:
        raise last_exc


async def safe_send_message(
    bot_or_message: Bot | Message | Any,
    /,
    chat_id: int | None = None,
    text: str | None = None,
    *,
    max_attempts: int = 3,
    base_delay: float = 0.6,
    **kwargs: Any,
) -> Message:
    """
    Sends a message with retries on transient Telegram/network errors.

    Accepts a Bot instance, or a Message (from which a Bot can be obtained).
    Returns the sent Message on success, or raises the last exception.
    """
    if text is None:
        raise ValueError("safe_send_message requires 'text'.")

    if isinstance(bot_or_message, Message):
        bot: Bot = bot_or_message.get_bot()
        if chat_id is None:
            chat_id = bot_or_message.chat_id
    else:
        bot = bot_or_message  # type: ignore[assignment]

    if chat_id is None:
        raise ValueError("safe_send_message requires 'chat_id'.")

    attempt = 0
    delay = base_delay
    last_exc: Exception | None = None

    while attempt < max_attempts:
        try:
            return await bot.send_message(chat_id=chat_id, text=text, **kwargs)
        except RetryAfter as e:  # Respect server backoff
            await asyncio.sleep(_retry_after_seconds(e, delay) + 0.1)
            last_exc = e
        except (TimedOut, NetworkError) as e:
            await asyncio.sleep(delay)
            delay *= 2
            last_exc = e
        attempt += 1

    if last_exc is not None:
        raise last_exc
    raise ValueError("safe_send_message requires max_attempts >= 1.")
