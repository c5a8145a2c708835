from datetime import date

import pytest

from movizen.services.date_normalizer import (
    INVALID_DATE_MESSAGE,
    INVALID_FORMAT_MESSAGE,
    DateEntryMode,
    InvalidDateError,
    convert_for_mode_toggle,
    normalize_release_date,
    parse_metadata_release,
    parse_picker_text,
    to_picker_text,
)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("2024-12-20", date(2024, 12, 20)),
        ("12/20/2024", date(2024, 12, 20)),
        ("12-20-2024", date(2024, 12, 20)),
        ("7/4/2025", date(2025, 7, 4)),
        ("  02/29/2024 ", date(2024, 2, 29)),
    ],
)
def test_manual_mode_accepts_supported_shapes(text, expected):
    assert normalize_release_date(text, DateEntryMode.MANUAL) == expected


@pytest.mark.parametrize("text", ["13/40/2024", "02/30/2024", "2023-02-29", "00-10-2024"])
def test_manual_mode_rejects_impossible_days(text):
    with pytest.raises(InvalidDateError) as exc_info:
        normalize_release_date(text, DateEntryMode.MANUAL)
    assert exc_info.value.user_message == INVALID_DATE_MESSAGE


@pytest.mark.parametrize("text", ["", "next friday", "2024/12/20", "20-12-24", "12.20.2024"])
def test_manual_mode_rejects_unknown_shapes(text):
    with pytest.raises(InvalidDateError) as exc_info:
        normalize_release_date(text, DateEntryMode.MANUAL)
    assert exc_info.value.user_message == INVALID_FORMAT_MESSAGE


def test_picker_mode_only_accepts_iso():
    assert normalize_release_date("2010-07-16", DateEntryMode.PICKER) == date(2010, 7, 16)
    with pytest.raises(InvalidDateError):
        normalize_release_date("07/16/2010", DateEntryMode.PICKER)


def test_picker_text_round_trip_is_lossless():
    for day in (date(1999, 1, 1), date(2010, 7, 16), date(2024, 2, 29)):
        assert parse_picker_text(to_picker_text(day)) == day
    assert to_picker_text(date(5, 3, 9)) == "0005-03-09"


@pytest.mark.parametrize(
    "text, expected",
    [
        ("16 Jul 2010", date(2010, 7, 16)),
        ("20 December 2024", date(2024, 12, 20)),
        ("Jul 16, 2010", date(2010, 7, 16)),
        ("2010-07-16", date(2010, 7, 16)),
        ("N/A", None),
        ("", None),
        (None, None),
        ("sometime in 2026", None),
    ],
)
def test_parse_metadata_release(text, expected):
    assert parse_metadata_release(text) == expected


def test_toggle_to_picker_converts_valid_manual_text():
    assert (
        convert_for_mode_toggle("12/20/2024", DateEntryMode.MANUAL, DateEntryMode.PICKER)
        == "2024-12-20"
    )


def test_toggle_to_picker_clears_invalid_manual_text():
    assert (
        convert_for_mode_toggle("13/40/2024", DateEntryMode.MANUAL, DateEntryMode.PICKER)
        == ""
    )


def test_toggle_to_manual_keeps_text():
    assert (
        convert_for_mode_toggle("2024-12-20", DateEntryMode.PICKER, DateEntryMode.MANUAL)
        == "2024-12-20"
    )
    assert convert_for_mode_toggle("", DateEntryMode.PICKER, DateEntryMode.MANUAL) == ""
