import sys
from datetime import date
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parent.parent))

import pytest

from movizen.models import (
    MalformedRecordError,
    MovieRecord,
    MovieRecordInput,
    decode_release_date,
    encode_release_date,
)


def _stored_inception() -> dict:
    return {
        "id": "a1",
        "title": "Inception",
        "releaseDate": "2010-07-16T00:00:00.000Z",
        "posterUrl": "https://example.com/inception.jpg",
        "description": "Dream heist.",
        "imdbID": "tt1375666",
        "year": "2010",
        "director": "Christopher Nolan",
        "genre": "Sci-Fi",
        "plot": "Dream heist.",
    }


def test_encode_release_date_is_utc_midnight():
    assert encode_release_date(date(2010, 7, 16)) == "2010-07-16T00:00:00.000Z"


@pytest.mark.parametrize(
    "raw",
    [
        "2010-07-16",
        "2010-07-16T00:00:00.000Z",
        "2010-07-16T00:00:00+02:00",  # local midnight east of UTC
        "2010-07-16T00:00:00-05:00",  # local midnight west of UTC
        "2010-07-15T22:00:00.000Z",
    ],
)
def test_decode_release_date_rounds_to_intended_day(raw):
    assert decode_release_date(raw) == date(2010, 7, 16)


@pytest.mark.parametrize("raw", [None, "", "not a date", "2010-13-01", 20100716])
def test_decode_release_date_rejects_garbage(raw):
    with pytest.raises(MalformedRecordError):
        decode_release_date(raw)


def test_to_dict_uses_stored_key_names():
    record = MovieRecord.from_input(
        "a1",
        MovieRecordInput(
            title="Inception",
            release_date=date(2010, 7, 16),
            external_id="tt1375666",
        ),
    )

    payload = record.to_dict()

    assert payload["imdbID"] == "tt1375666"
    assert payload["releaseDate"] == "2010-07-16T00:00:00.000Z"
    assert payload["posterUrl"] == ""
    assert "external_id" not in payload


def test_from_dict_reads_every_field():
    record = MovieRecord.from_dict(_stored_inception())

    assert record.id == "a1"
    assert record.release_date == date(2010, 7, 16)
    assert record.external_id == "tt1375666"
    assert record.director == "Christopher Nolan"
    assert MovieRecord.from_dict(record.to_dict()) == record


def test_from_dict_defaults_missing_optional_fields():
    record = MovieRecord.from_dict(
        {"id": "b2", "title": "Dune", "releaseDate": "2024-12-20", "year": None}
    )

    assert record.poster_url == ""
    assert record.year == ""
    assert record.plot == ""


@pytest.mark.parametrize("missing", ["id", "title", "releaseDate"])
def test_from_dict_requires_identity_title_and_date(missing):
    payload = _stored_inception()
    del payload[missing]

    with pytest.raises(MalformedRecordError):
        MovieRecord.from_dict(payload)


def test_from_dict_rejects_non_objects():
    with pytest.raises(MalformedRecordError):
        MovieRecord.from_dict(["a1", "Inception"])
