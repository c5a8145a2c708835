# movizen/ui/messages.py

from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from telegram.helpers import escape_markdown

from ..models import CandidateMetadata, MovieRecord

EMPTY_WATCHLIST_TEXT = "No movies in your watchlist yet\\. Add some with /add\\!"
TITLE_PROMPT_TEXT = "🎬 Send me the title of the movie you want to add\\."
DATE_PROMPT_TEXT = (
    "📅 Send the release date as `YYYY-MM-DD`, `MM/DD/YYYY` or `MM-DD-YYYY`\\."
)


def _esc(text: str) -> str:
    return escape_markdown(text, version=2)


def format_release_date(value: date) -> str:
    """Formats a release date for display, e.g. '16 Jul 2010'."""
    return f"{value.day} {value.strftime('%b %Y')}"


def format_genres(genre: str, shown: int = 2) -> str:
    """'Action, Adventure, Sci-Fi' -> 'Action, Adventure +1'."""
    genres = [g.strip() for g in genre.split(",") if g.strip()]
    text = ", ".join(genres[:shown])
    if len(genres) > shown:
        text += f" +{len(genres) - shown}"
    return text


def format_movie_line(movie: MovieRecord) -> str:
    """A MarkdownV2 block per watchlist entry: headline, then whatever details are stored."""
    line = f"• *{_esc(movie.title)}*"
    if movie.year:
        line += f" \\({_esc(movie.year)}\\)"
    line += f" | {_esc(format_release_date(movie.release_date))}"

    details = []
    if movie.director:
        details.append(f"🎬 {_esc(movie.director)}")
    if movie.genre:
        details.append(f"🏷 {_esc(format_genres(movie.genre))}")
    lines = [line]
    if details:
        lines.append("   " + " · ".join(details))
    summary = movie.plot or movie.description
    if summary:
        lines.append(f"   _{_esc(summary)}_")
    return "\n".join(lines)


def format_watchlist(movies: Sequence[MovieRecord]) -> str:
    """Renders the whole watchlist in insertion order."""
    if not movies:
        return EMPTY_WATCHLIST_TEXT
    lines = [f"🍿 *Upcoming Movies* \\({len(movies)}\\)", ""]
    lines.append("\n\n".join(format_movie_line(movie) for movie in movies))
    return "\n".join(lines)


def format_candidate_preview(
    candidate: CandidateMetadata, release_date_text: str = ""
) -> str:
    """
    Builds the 'Selected Movie' block shown after a search result is picked.

    Parameters
    ----------
    candidate:
        The richest metadata held for the selection.
    release_date_text:
        The pre-filled release date, if the detail lookup produced one.
    """
    header = f"*{_esc(candidate.title)}*"
    if candidate.year:
        header += f" \\({_esc(candidate.year)}\\)"
    lines = ["🎞 *Selected Movie:*", header]

    if candidate.director:
        lines.append(f"Director: {_esc(candidate.director)}")
    if candidate.genre:
        lines.append(f"Genre: {_esc(candidate.genre)}")
    if candidate.plot:
        lines.append(f"_{_esc(candidate.plot)}_")
    if release_date_text:
        lines.append("")
        lines.append(f"Release date: `{_esc(release_date_text)}`")
    return "\n".join(lines)


def format_added_message(movie: MovieRecord) -> str:
    return (
        f"✅ Added *{_esc(movie.title)}* to your watchlist\\.\n"
        f"Release date: {_esc(format_release_date(movie.release_date))}"
    )


def format_error_with_prompt(user_message: str) -> str:
    return f"❌ {_esc(user_message)}\n\n{DATE_PROMPT_TEXT}"
