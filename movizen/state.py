# movizen/state.py

import json
import os
import tempfile
import uuid
from collections.abc import Callable, Iterator
from typing import Any, Protocol

from telegram.ext import Application

from .config import WATCHLIST_SLOT, logger
from .models import MalformedRecordError, MovieRecord, MovieRecordInput


class PersistenceError(Exception):
    """Raised by storage backends when the durable slot can't be read or written."""


class WatchlistStorage(Protocol):
    """The durable slot holding the serialized watchlist."""

    def read(self) -> Any | None: ...

    def write(self, value: Any) -> None: ...


class JsonFileStorage:
    """
    Stores the watchlist under one named key of a JSON object file.

    Other keys in the file are left untouched, and writes go through a
    temporary file so a crash mid-write never leaves half a document behind.
    """

    def __init__(self, file_path: str, slot: str = WATCHLIST_SLOT) -> None:
        self.file_path = file_path
        self.slot = slot

    def _read_document(self) -> dict[str, Any]:
        if not os.path.exists(self.file_path):
            return {}
        try:
            with open(self.file_path, "r", encoding="utf-8") as f:
                document = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            raise PersistenceError(
                f"Could not read or parse '{self.file_path}': {e}"
            ) from e
        if not isinstance(document, dict):
            raise PersistenceError(f"'{self.file_path}' does not hold a JSON object.")
        return document

    def read(self) -> Any | None:
        return self._read_document().get(self.slot)

    def write(self, value: Any) -> None:
        try:
            document = self._read_document()
        except PersistenceError as e:
            logger.warning(f"[WATCHLIST] Overwriting unreadable store: {e}")
            document = {}
        document[self.slot] = value

        directory = os.path.dirname(os.path.abspath(self.file_path))
        tmp_path = None
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=4)
            os.replace(tmp_path, self.file_path)
        except (OSError, TypeError, ValueError) as e:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise PersistenceError(
                f"Could not save persistence file to '{self.file_path}': {e}"
            ) from e


class MemoryStorage:
    """In-process storage; round-trips through JSON text like the file backend."""

    def __init__(self, initial: Any | None = None) -> None:
        self._payload: str | None = None if initial is None else json.dumps(initial)
        self.writes = 0

    def read(self) -> Any | None:
        if self._payload is None:
            return None
        return json.loads(self._payload)

    def write(self, value: Any) -> None:
        self._payload = json.dumps(value)
        self.writes += 1


class WatchlistStore:
    """
    Owns the ordered collection of MovieRecords and its durable mirror.

    The in-memory list is the source of truth for the running session;
    storage failures are logged and never propagate to callers.
    """

    def __init__(
        self,
        storage: WatchlistStorage,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._storage = storage
        self._id_factory = id_factory or (lambda: str(uuid.uuid4()))
        self._movies: list[MovieRecord] = []
        self._mutated = False

    @property
    def movies(self) -> tuple[MovieRecord, ...]:
        return tuple(self._movies)

    def __len__(self) -> int:
        return len(self._movies)

    def __iter__(self) -> Iterator[MovieRecord]:
        return iter(tuple(self._movies))

    def get(self, movie_id: str) -> MovieRecord | None:
        return next((m for m in self._movies if m.id == movie_id), None)

    def load(self) -> tuple[MovieRecord, ...]:
        """Replaces the in-memory collection with the durable copy."""
        self._movies = self._read_collection()
        self._mutated = False
        return self.movies

    def _read_collection(self) -> list[MovieRecord]:
        try:
            raw = self._storage.read()
        except PersistenceError as e:
            logger.error(f"[WATCHLIST] {e}. Starting with an empty watchlist.")
            return []

        if raw is None:
            logger.info("[WATCHLIST] No saved watchlist found. Starting fresh.")
            return []

        if not isinstance(raw, list):
            logger.error(
                f"[WATCHLIST] Saved watchlist is a {type(raw).__name__}, not a list. Discarding it."
            )
            return []

        try:
            movies = [MovieRecord.from_dict(entry) for entry in raw]
        except MalformedRecordError as e:
            logger.error(f"[WATCHLIST] Saved watchlist is malformed ({e}). Discarding it.")
            return []

        if len({m.id for m in movies}) != len(movies):
            logger.error("[WATCHLIST] Saved watchlist repeats an id. Discarding it.")
            return []

        logger.info(f"[WATCHLIST] Loaded {len(movies)} movies.")
        return movies

    def _new_id(self) -> str:
        existing = {m.id for m in self._movies}
        while True:
            candidate = self._id_factory()
            if candidate and candidate not in existing:
                return candidate
            logger.warning(f"[WATCHLIST] Generated id '{candidate}' is taken; retrying.")

    def add(self, movie: MovieRecordInput) -> MovieRecord:
        """Assigns a fresh id, appends the movie and persists the collection."""
        if not movie.title.strip():
            raise ValueError("A movie needs a title.")
        record = MovieRecord.from_input(self._new_id(), movie)
        self._movies.append(record)
        self._mutated = True
        logger.info(f"[WATCHLIST] Added '{record.title}' ({record.id}).")
        self.persist()
        return record

    def remove(self, movie_id: str) -> None:
        """Removes the movie with this id, if present, then persists."""
        for index, movie in enumerate(self._movies):
            if movie.id == movie_id:
                del self._movies[index]
                logger.info(f"[WATCHLIST] Removed '{movie.title}' ({movie_id}).")
                break
        else:
            logger.info(f"[WATCHLIST] No movie with id '{movie_id}' to remove.")
        self._mutated = True
        self.persist()

    def clear(self) -> None:
        """Drops every movie and persists the empty collection."""
        self._movies.clear()
        self._mutated = True
        logger.info("[WATCHLIST] Cleared the watchlist.")
        self.persist()

    def persist(self) -> None:
        """
        Writes the full collection to storage.

        An empty collection is not written until something has been mutated,
        so a store that hasn't finished loading can't clobber saved data.
        """
        if not self._movies and not self._mutated:
            logger.debug("[WATCHLIST] Skipping save of an untouched empty watchlist.")
            return

        try:
            self._storage.write([movie.to_dict() for movie in self._movies])
        except PersistenceError as e:
            logger.error(f"[WATCHLIST] {e}")
            return
        logger.info(f"[WATCHLIST] Saved {len(self._movies)} movies.")


async def post_init(application: Application) -> None:
    """
    Loads the persisted watchlist once the bot has been initialized.
    This function is called by the ApplicationBuilder.
    """
    store = application.bot_data.get("WATCHLIST_STORE")
    if store is None:
        logger.error("No watchlist store registered; nothing to load.")
        return

    logger.info("--- Loading persisted watchlist ---")
    store.load()


async def post_shutdown(application: Application) -> None:
    """
    Cancels pending searches and lookups before the bot shuts down.
    This function is called by the ApplicationBuilder.
    """
    from .workflows.add_session import close_all_sessions  # Avoid circular import

    logger.info("--- Shutting down: closing open add-movie sessions ---")
    closed = close_all_sessions(application.user_data.values())
    logger.info(f"--- Closed {closed} session(s). Shutdown complete. ---")
