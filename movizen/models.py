from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from datetime import date, datetime, timedelta, timezone
from typing import Any


class MalformedRecordError(ValueError):
    """Raised when a stored watchlist entry cannot be decoded."""


@dataclass(frozen=True)
class CandidateMetadata:
    """A movie description offered by the metadata service.

    Search results only carry title, year, poster and external id; detail
    lookups fill in the remaining fields. Never persisted.
    """

    title: str
    year: str = ""
    poster_url: str = ""
    external_id: str = ""
    director: str = ""
    genre: str = ""
    plot: str = ""
    release_date_text: str = ""


@dataclass(frozen=True)
class MovieRecordInput:
    """Everything needed to create a watchlist entry except its identity."""

    title: str
    release_date: date
    poster_url: str = ""
    description: str = ""
    external_id: str = ""
    year: str = ""
    director: str = ""
    genre: str = ""
    plot: str = ""


@dataclass(frozen=True)
class MovieRecord:
    """A persisted watchlist entry. Immutable once created."""

    id: str
    title: str
    release_date: date
    poster_url: str = ""
    description: str = ""
    external_id: str = ""
    year: str = ""
    director: str = ""
    genre: str = ""
    plot: str = ""

    # Python attribute -> stored JSON key
    _JSON_KEYS = {
        "id": "id",
        "title": "title",
        "release_date": "releaseDate",
        "poster_url": "posterUrl",
        "description": "description",
        "external_id": "imdbID",
        "year": "year",
        "director": "director",
        "genre": "genre",
        "plot": "plot",
    }

    @classmethod
    def from_input(cls, record_id: str, movie: MovieRecordInput) -> "MovieRecord":
        return cls(id=record_id, **asdict(movie))

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        for attr, key in self._JSON_KEYS.items():
            value = getattr(self, attr)
            if attr == "release_date":
                value = encode_release_date(value)
            payload[key] = value
        return payload

    @classmethod
    def from_dict(cls, payload: Any) -> "MovieRecord":
        if not isinstance(payload, dict):
            raise MalformedRecordError(f"Expected an object, got {type(payload).__name__}.")

        record_id = payload.get("id")
        title = payload.get("title")
        if not isinstance(record_id, str) or not record_id:
            raise MalformedRecordError("Entry has no id.")
        if not isinstance(title, str) or not title.strip():
            raise MalformedRecordError(f"Entry '{record_id}' has no title.")

        values: dict[str, Any] = {
            "id": record_id,
            "title": title,
            "release_date": decode_release_date(payload.get("releaseDate")),
        }
        optional = {f.name for f in fields(cls)} - set(values)
        for attr in optional:
            raw = payload.get(cls._JSON_KEYS[attr])
            values[attr] = raw if isinstance(raw, str) else ""
        return cls(**values)


def encode_release_date(value: date) -> str:
    """Encodes a calendar date as the UTC-midnight timestamp of that day."""
    return f"{value.isoformat()}T00:00:00.000Z"


def decode_release_date(raw: Any) -> date:
    """
    Decodes a stored release date back to a calendar day.

    Accepts a bare YYYY-MM-DD or any ISO-8601 timestamp. Timestamps are moved
    to UTC and rounded to the nearest midnight, so a value written at local
    midnight anywhere within +/-12h of UTC decodes to the intended day.
    """
    if not isinstance(raw, str) or not raw.strip():
        raise MalformedRecordError(f"Invalid release date: {raw!r}")

    text = raw.strip()
    if len(text) == 10:
        try:
            return date.fromisoformat(text)
        except ValueError as e:
            raise MalformedRecordError(f"Invalid release date: {raw!r}") from e

    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        stamp = datetime.fromisoformat(text)
    except ValueError as e:
        raise MalformedRecordError(f"Invalid release date: {raw!r}") from e

    if stamp.tzinfo is None:
        stamp = stamp.replace(tzinfo=timezone.utc)
    stamp = stamp.astimezone(timezone.utc) + timedelta(hours=12)
    return stamp.date()
