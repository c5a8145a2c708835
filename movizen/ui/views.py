# movizen/ui/views.py

from collections.abc import Sequence

from telegram import InlineKeyboardButton, InlineKeyboardMarkup

from ..models import CandidateMetadata, MovieRecord
from ..utils import truncate_label
from .messages import format_release_date

BUTTON_LABEL_MAX_LEN = 48
CANCEL_BUTTON = InlineKeyboardButton("❌ Cancel", callback_data="cancel_operation")


def build_candidate_keyboard(
    results: Sequence[CandidateMetadata],
) -> InlineKeyboardMarkup:
    """
    One button per search result, plus manual entry and cancel.

    Buttons carry the IMDb id rather than a list position, so a button from an
    older result message can never pick a movie from a newer search.
    """
    keyboard = []
    for candidate in results:
        label = candidate.title
        if candidate.year:
            label = f"{label} ({candidate.year})"
        keyboard.append(
            [
                InlineKeyboardButton(
                    truncate_label(label, BUTTON_LABEL_MAX_LEN),
                    callback_data=f"add_select_{candidate.external_id}",
                )
            ]
        )
    keyboard.append(
        [InlineKeyboardButton("✍️ Enter details manually", callback_data="add_manual")]
    )
    keyboard.append([CANCEL_BUTTON])
    return InlineKeyboardMarkup(keyboard)


def build_confirm_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        [
            [
                InlineKeyboardButton("✅ Add to watchlist", callback_data="add_confirm"),
                InlineKeyboardButton("📅 Change date", callback_data="add_change_date"),
            ],
            [CANCEL_BUTTON],
        ]
    )


def build_remove_keyboard(movies: Sequence[MovieRecord]) -> InlineKeyboardMarkup:
    """One delete button per watchlist entry, in insertion order."""
    keyboard = [
        [
            InlineKeyboardButton(
                truncate_label(
                    f"🗑 {movie.title} ({format_release_date(movie.release_date)})",
                    BUTTON_LABEL_MAX_LEN,
                ),
                callback_data=f"remove_{movie.id}",
            )
        ]
        for movie in movies
    ]
    keyboard.append([CANCEL_BUTTON])
    return InlineKeyboardMarkup(keyboard)
