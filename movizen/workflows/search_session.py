from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from ..models import CandidateMetadata
from ..services.date_normalizer import DateEntryMode

MISSING_FIELDS_MESSAGE = "Title and Release Date are required."


class SearchPhase(str, Enum):
    """State machine phases for the title search of the add-movie form."""

    IDLE = "idle"
    TYPING = "typing"
    DEBOUNCED_PENDING = "debounced_pending"
    SEARCHING = "searching"
    RESULTS_SHOWN = "results_shown"
    NO_RESULTS = "no_results"
    CANDIDATE_SELECTED = "candidate_selected"


class SearchEvent(str, Enum):
    """Named events that drive SearchPhase transitions."""

    TEXT_CHANGED = "text_changed"
    TIMER_FIRED = "timer_fired"
    RESULTS_RECEIVED = "results_received"
    TITLE_FOCUSED = "title_focused"
    CLICKED_OUTSIDE = "clicked_outside"
    CANDIDATE_SELECTED = "candidate_selected"
    DETAILS_RECEIVED = "details_received"
    SUBMIT_REQUESTED = "submit_requested"
    RESET = "reset"


class MissingRequiredFieldError(Exception):
    """Raised when the form is submitted without a title or a release date."""

    def __init__(self, user_message: str = MISSING_FIELDS_MESSAGE):
        super().__init__(user_message)
        self.user_message = user_message


@dataclass
class SearchState:
    """Observable state of the add-movie form, owned by the SearchCoordinator."""

    phase: SearchPhase = SearchPhase.IDLE
    title_text: str = ""
    release_date_text: str = ""
    date_mode: DateEntryMode = DateEntryMode.PICKER
    results: list[CandidateMetadata] = field(default_factory=list)
    results_query: str | None = None
    dropdown_open: bool = False
    is_loading: bool = False
    selected: CandidateMetadata | None = None
    selected_details: CandidateMetadata | None = None

    @property
    def preview(self) -> CandidateMetadata | None:
        """The richest description held for the selected candidate."""
        return self.selected_details or self.selected

    def find_result(self, external_id: str) -> CandidateMetadata | None:
        return next((c for c in self.results if c.external_id == external_id), None)
