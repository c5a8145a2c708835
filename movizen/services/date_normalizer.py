# movizen/services/date_normalizer.py

import re
from datetime import date, datetime
from enum import Enum

INVALID_DATE_MESSAGE = "Please enter a valid date."
INVALID_FORMAT_MESSAGE = (
    "Please enter the release date in YYYY-MM-DD, MM/DD/YYYY, or MM-DD-YYYY format."
)

ISO_DATE_PATTERN = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
US_SLASH_PATTERN = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
US_DASH_PATTERN = re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$")

# Release strings as the metadata service formats them, e.g. "16 Jul 2010".
METADATA_RELEASE_FORMATS = ("%d %b %Y", "%d %B %Y", "%b %d, %Y", "%B %d, %Y")


class DateEntryMode(str, Enum):
    """Where a release-date string came from."""

    PICKER = "picker"
    MANUAL = "manual"


class InvalidDateError(ValueError):
    """Raised when a release date is malformed or not a real calendar day."""

    def __init__(self, user_message: str = INVALID_DATE_MESSAGE):
        super().__init__(user_message)
        self.user_message = user_message


def _build_date(year: str, month: str, day: str) -> date:
    try:
        return date(int(year), int(month), int(day))
    except ValueError:
        raise InvalidDateError(INVALID_DATE_MESSAGE)


def parse_picker_text(text: str) -> date:
    """Parses the strict YYYY-MM-DD form produced by a calendar picker."""
    match = ISO_DATE_PATTERN.match((text or "").strip())
    if not match:
        raise InvalidDateError(INVALID_DATE_MESSAGE)
    return _build_date(*match.groups())


def to_picker_text(value: date) -> str:
    """Formats a calendar date as YYYY-MM-DD."""
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def normalize_release_date(text: str, mode: DateEntryMode) -> date:
    """
    Converts user-supplied release-date text into a calendar date.

    Validation happens in two phases: the text must first match one of the
    accepted shapes, then the numbers must describe a real day (no month 13,
    no February 30th).

    Raises:
        InvalidDateError: if either phase fails.
    """
    cleaned = (text or "").strip()
    if mode == DateEntryMode.PICKER:
        return parse_picker_text(cleaned)

    match = ISO_DATE_PATTERN.match(cleaned)
    if match:
        return _build_date(*match.groups())

    match = US_SLASH_PATTERN.match(cleaned) or US_DASH_PATTERN.match(cleaned)
    if match:
        month, day, year = match.groups()
        return _build_date(year, month, day)

    raise InvalidDateError(INVALID_FORMAT_MESSAGE)


def parse_metadata_release(text: str | None) -> date | None:
    """
    Parses a release string from the metadata service.

    Returns None when the value is missing, the "N/A" placeholder, or in a
    format we don't recognize.
    """
    cleaned = (text or "").strip()
    if not cleaned or cleaned.upper() == "N/A":
        return None

    for fmt in METADATA_RELEASE_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt).date()
        except ValueError:
            continue

    try:
        return normalize_release_date(cleaned, DateEntryMode.MANUAL)
    except InvalidDateError:
        return None


def convert_for_mode_toggle(
    text: str, from_mode: DateEntryMode, to_mode: DateEntryMode
) -> str:
    """Carries the date field's text across an entry-mode switch."""
    cleaned = (text or "").strip()
    if not cleaned or from_mode == to_mode:
        return cleaned

    if to_mode == DateEntryMode.PICKER:
        try:
            return to_picker_text(normalize_release_date(cleaned, from_mode))
        except InvalidDateError:
            return ""

    return cleaned
