from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any, MutableMapping

from ..config import DEFAULT_DEBOUNCE_SECONDS
from .search_coordinator import SearchCoordinator

CONTEXT_LOST_MESSAGE = "❓ This add\\-movie session has expired\\. Please start over with /add\\."


class AddStep(str, Enum):
    """Which reply the add-movie chat flow is waiting for."""

    TITLE = "title"
    DATE = "date"
    CONFIRM = "confirm"


@dataclass
class AddMovieSession:
    """Per-user add-movie flow stored in PTB user_data."""

    coordinator: SearchCoordinator
    step: AddStep = AddStep.TITLE
    prompt_message_id: int | None = None

    _SESSION_KEY = "add_movie_session"

    @classmethod
    def from_user_data(
        cls, user_data: MutableMapping[str, Any] | None
    ) -> "AddMovieSession | None":
        if not isinstance(user_data, MutableMapping):
            return None
        session = user_data.get(cls._SESSION_KEY)
        return session if isinstance(session, cls) else None

    def advance(self, step: AddStep) -> None:
        self.step = step

    def consume_prompt_message_id(self) -> int | None:
        message_id = self.prompt_message_id
        self.prompt_message_id = None
        return message_id

    def save(self, user_data: MutableMapping[str, Any]) -> None:
        user_data[self._SESSION_KEY] = self


def start_add_session(
    user_data: MutableMapping[str, Any],
    client: Any,
    store: Any,
    debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
) -> AddMovieSession:
    """Replaces any open session with a fresh one."""
    clear_add_session(user_data)
    session = AddMovieSession(
        coordinator=SearchCoordinator(
            client, store, debounce_seconds=debounce_seconds
        )
    )
    session.save(user_data)
    return session


def clear_add_session(user_data: MutableMapping[str, Any] | None) -> None:
    if not isinstance(user_data, MutableMapping):
        return
    session = user_data.pop(AddMovieSession._SESSION_KEY, None)
    if isinstance(session, AddMovieSession):
        session.coordinator.close()


def close_all_sessions(
    user_data_maps: Iterable[MutableMapping[str, Any]],
) -> int:
    """Closes the coordinator of every open session. Returns how many were closed."""
    closed = 0
    for user_data in user_data_maps:
        if AddMovieSession.from_user_data(user_data) is not None:
            clear_add_session(user_data)
            closed += 1
    return closed
