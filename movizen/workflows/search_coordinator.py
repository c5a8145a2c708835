# movizen/workflows/search_coordinator.py

import asyncio
from collections.abc import Coroutine
from datetime import date
from typing import Any, Protocol

from ..config import DEFAULT_DEBOUNCE_SECONDS, MIN_SEARCH_QUERY_LENGTH, logger
from ..models import CandidateMetadata, MovieRecord, MovieRecordInput
from ..services.date_normalizer import (
    DateEntryMode,
    convert_for_mode_toggle,
    normalize_release_date,
    parse_metadata_release,
    to_picker_text,
)
from ..state import WatchlistStore
from .search_session import (
    MissingRequiredFieldError,
    SearchEvent,
    SearchPhase,
    SearchState,
)


class MetadataLookup(Protocol):
    async def search(self, query: str) -> list[CandidateMetadata]: ...

    async def fetch_details(self, external_id: str) -> CandidateMetadata | None: ...


class SearchCoordinator:
    """
    Drives the add-movie form: debounced title search, candidate selection
    and the final hand-off to the WatchlistStore.

    Everything runs on the event loop. Title edits arm a single call_later
    timer (re-arming cancels the previous one); searches and detail lookups
    run as tasks whose answers are checked against the current input before
    being applied, so a slow response for an abandoned query is dropped.
    """

    def __init__(
        self,
        client: MetadataLookup,
        store: WatchlistStore,
        *,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        date_mode: DateEntryMode = DateEntryMode.PICKER,
    ) -> None:
        self._client = client
        self._store = store
        self._debounce_seconds = debounce_seconds
        self.state = SearchState(date_mode=date_mode)
        self._timer: asyncio.TimerHandle | None = None
        # Bumped by every input change; search answers carry the value they were issued under.
        self._generation = 0
        self._tasks: set[asyncio.Task] = set()

    # --- Internal helpers ---

    def _transition(self, event: SearchEvent, phase: SearchPhase | None = None) -> None:
        previous = self.state.phase
        if phase is not None:
            self.state.phase = phase
        logger.debug(
            f"[SEARCH] {event.value}: {previous.value} -> {self.state.phase.value}"
        )

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _clear_results(self) -> None:
        self.state.results = []
        self.state.results_query = None
        self.state.dropdown_open = False

    async def _fetch_details_safely(self, external_id: str) -> CandidateMetadata | None:
        try:
            return await self._client.fetch_details(external_id)
        except Exception as e:
            logger.error(f"[SEARCH] Detail lookup for '{external_id}' raised: {e}")
            return None

    # --- Title input ---

    def text_changed(self, text: str) -> None:
        """Handles a keystroke in the title field."""
        state = self.state
        state.title_text = text
        state.is_loading = False
        self._cancel_timer()
        self._generation += 1

        if state.selected is not None:
            if text == state.selected.title:
                self._transition(SearchEvent.TEXT_CHANGED, SearchPhase.CANDIDATE_SELECTED)
                return
            logger.info(
                f"[SEARCH] Title no longer matches '{state.selected.title}'; clearing selection."
            )
            state.selected = None
            state.selected_details = None

        if len(text.strip()) < MIN_SEARCH_QUERY_LENGTH:
            self._clear_results()
            phase = SearchPhase.TYPING if text else SearchPhase.IDLE
            self._transition(SearchEvent.TEXT_CHANGED, phase)
            return

        self._timer = asyncio.get_running_loop().call_later(
            self._debounce_seconds, self._timer_fired, text, self._generation
        )
        self._transition(SearchEvent.TEXT_CHANGED, SearchPhase.DEBOUNCED_PENDING)

    def _timer_fired(self, query: str, generation: int) -> None:
        self._timer = None
        if generation != self._generation:
            return
        self.state.is_loading = True
        self._transition(SearchEvent.TIMER_FIRED, SearchPhase.SEARCHING)
        self._spawn(self._run_search(query, generation))

    async def _run_search(self, query: str, generation: int) -> None:
        try:
            results = list(await self._client.search(query.strip()))
        except Exception as e:
            logger.error(f"[SEARCH] Search for '{query}' raised: {e}")
            results = []
        self._results_received(query, generation, results)

    def _results_received(
        self, query: str, generation: int, results: list[CandidateMetadata]
    ) -> None:
        state = self.state
        if (
            generation != self._generation
            or query != state.title_text
            or state.selected is not None
        ):
            logger.info(f"[SEARCH] Dropping stale results for '{query}'.")
            return

        state.results = results
        state.results_query = query
        state.is_loading = False
        state.dropdown_open = bool(results)
        phase = SearchPhase.RESULTS_SHOWN if results else SearchPhase.NO_RESULTS
        self._transition(SearchEvent.RESULTS_RECEIVED, phase)

    def title_focused(self) -> None:
        """Re-opens the dropdown when results from the current query are held."""
        self.state.dropdown_open = bool(self.state.results)
        self._transition(SearchEvent.TITLE_FOCUSED)

    def clicked_outside(self) -> None:
        """Closes the dropdown, keeping the typed text and any selection."""
        self.state.dropdown_open = False
        self._transition(SearchEvent.CLICKED_OUTSIDE)

    # --- Candidate selection ---

    def select_candidate(self, external_id: str) -> CandidateMetadata | None:
        """
        Selects one of the shown results by its external id.

        The title field takes the candidate's title and a detail lookup runs
        in the background to enrich the preview and pre-fill the release date.
        Returns None if the id isn't among the current results.
        """
        state = self.state
        candidate = state.find_result(external_id)
        if candidate is None:
            logger.warning(f"[SEARCH] '{external_id}' is not among the current results.")
            return None

        self._cancel_timer()
        self._generation += 1
        state.selected = candidate
        state.selected_details = None
        state.title_text = candidate.title
        state.is_loading = False
        self._clear_results()
        self._transition(SearchEvent.CANDIDATE_SELECTED, SearchPhase.CANDIDATE_SELECTED)
        logger.info(f"[SEARCH] Selected '{candidate.title}' ({candidate.external_id}).")

        if candidate.external_id:
            self._spawn(self._run_detail_lookup(candidate.external_id))
        return candidate

    async def _run_detail_lookup(self, external_id: str) -> None:
        details = await self._fetch_details_safely(external_id)
        self._details_received(external_id, details)

    def _details_received(
        self, external_id: str, details: CandidateMetadata | None
    ) -> None:
        state = self.state
        if state.selected is None or state.selected.external_id != external_id:
            logger.info(f"[SEARCH] Dropping details for deselected '{external_id}'.")
            return
        if details is None:
            logger.info(f"[SEARCH] No details available for '{external_id}'.")
            return

        state.selected_details = details
        release = parse_metadata_release(details.release_date_text)
        if release is not None:
            state.release_date_text = to_picker_text(release)
        self._transition(SearchEvent.DETAILS_RECEIVED)

    # --- Release date ---

    def set_release_date_text(self, text: str) -> None:
        self.state.release_date_text = text

    def toggle_date_mode(self) -> DateEntryMode:
        """Switches between calendar-picker and manual date entry."""
        state = self.state
        new_mode = (
            DateEntryMode.MANUAL
            if state.date_mode == DateEntryMode.PICKER
            else DateEntryMode.PICKER
        )
        state.release_date_text = convert_for_mode_toggle(
            state.release_date_text, state.date_mode, new_mode
        )
        state.date_mode = new_mode
        return new_mode

    def set_date_mode(self, mode: DateEntryMode) -> None:
        if self.state.date_mode != mode:
            self.toggle_date_mode()

    # --- Submission ---

    async def submit(self) -> MovieRecord:
        """
        Validates the form, merges the freshest metadata and adds the movie.

        Raises:
            MissingRequiredFieldError: if the title or release date is empty.
            InvalidDateError: if the release date can't be normalized.
        """
        state = self.state
        self._transition(SearchEvent.SUBMIT_REQUESTED)

        title = state.title_text.strip()
        date_text = state.release_date_text.strip()
        if not title or not date_text:
            logger.info("[SEARCH] Submission rejected: missing title or release date.")
            raise MissingRequiredFieldError()

        release_date = normalize_release_date(date_text, state.date_mode)

        selected = state.selected
        metadata: CandidateMetadata | None = None
        if selected is not None:
            held_details = state.selected_details
            fresh = await self._fetch_details_safely(selected.external_id)
            metadata = fresh or held_details

        record = self._store.add(
            _assemble_movie(title, release_date, selected, metadata)
        )
        self.reset()
        return record

    def reset(self) -> None:
        """Clears all transient form state, keeping the date entry mode."""
        self._cancel_timer()
        self._generation += 1
        self.state = SearchState(date_mode=self.state.date_mode)
        self._transition(SearchEvent.RESET, SearchPhase.IDLE)

    # --- Lifecycle ---

    async def settle(self) -> None:
        """Waits until the armed timer has fired and every lookup has finished."""
        loop = asyncio.get_running_loop()
        while True:
            if self._timer is not None:
                await asyncio.sleep(max(0.0, self._timer.when() - loop.time()))
                continue
            pending = [task for task in self._tasks if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    def close(self) -> None:
        """Cancels the armed timer and every in-flight lookup."""
        self._cancel_timer()
        self._generation += 1
        for task in list(self._tasks):
            task.cancel()


def _assemble_movie(
    title: str,
    release_date: date,
    selected: CandidateMetadata | None,
    metadata: CandidateMetadata | None,
) -> MovieRecordInput:
    """Builds the record input, preferring detail metadata over the search hit."""

    def _pick(attr: str) -> str:
        for source in (metadata, selected):
            value = getattr(source, attr, "") if source is not None else ""
            if value:
                return value
        return ""

    plot = metadata.plot if metadata is not None else ""
    return MovieRecordInput(
        title=title,
        release_date=release_date,
        poster_url=_pick("poster_url"),
        description=plot,
        external_id=_pick("external_id"),
        year=_pick("year"),
        director=_pick("director"),
        genre=_pick("genre"),
        plot=plot,
    )
