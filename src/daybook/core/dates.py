"""Date expression normalization - pure, no I/O.

Every date the journal knows about is a canonical key of the shape
``M.D.YYYY`` with no leading zeros. Expressions that cannot be resolved raise
DateParseError; nothing here ever defaults to today on its own.
"""

import re
from datetime import date, timedelta

# Header lines in the document. Leading zeros are accepted here so that
# hand-edited headers still count as sections.
HEADER_PATTERN = re.compile(r"^\d{1,2}\.\d{1,2}\.\d{4}$")

_NUMERIC = re.compile(r"^(\d{1,2})[./-](\d{1,2})[./-](\d{4})$")
_NUMERIC_NO_YEAR = re.compile(r"^(\d{1,2})[/-](\d{1,2})$")
_WEEKDAY = re.compile(r"^(last\s+)?([a-z]+day)$")
_MONTH_DAY = re.compile(
    r"^([a-z]+)\.?\s+(\d{1,2})(?:st|nd|rd|th)?(?:,?\s+(\d{4}))?$"
)

WEEKDAYS = {
    "monday": 0,
    "tuesday": 1,
    "wednesday": 2,
    "thursday": 3,
    "friday": 4,
    "saturday": 5,
    "sunday": 6,
}

MONTHS = {
    "january": 1, "jan": 1,
    "february": 2, "feb": 2,
    "march": 3, "mar": 3,
    "april": 4, "apr": 4,
    "may": 5,
    "june": 6, "jun": 6,
    "july": 7, "jul": 7,
    "august": 8, "aug": 8,
    "september": 9, "sep": 9, "sept": 9,
    "october": 10, "oct": 10,
    "november": 11, "nov": 11,
    "december": 12, "dec": 12,
}


class DateParseError(ValueError):
    """Raised when a date expression cannot be normalized."""

    def __init__(self, expr: object, reason: str = "unrecognized date expression"):
        self.expr = expr
        super().__init__(f"{reason}: {expr!r}")


def format_key(d: date) -> str:
    """Format a date as a canonical M.D.YYYY key."""
    return f"{d.month}.{d.day}.{d.year:04d}"


def today_key(as_of: date | None = None) -> str:
    """Canonical key for the current date."""
    return format_key(as_of or date.today())


def is_header(line: str) -> bool:
    """True if the line (ignoring surrounding whitespace) is a date header."""
    return bool(HEADER_PATTERN.match(line.strip()))


def is_canonical_key(value: str) -> bool:
    """True if value is exactly what normalize_date would produce."""
    if not isinstance(value, str) or not HEADER_PATTERN.match(value):
        return False
    month, day, year = value.split(".")
    return not month.startswith("0") and not day.startswith("0")


def _build(expr: str, year: int, month: int, day: int) -> str:
    try:
        return format_key(date(year, month, day))
    except ValueError:
        raise DateParseError(expr, "not a calendar date") from None


def normalize_date(expr: str, as_of: date | None = None) -> str:
    """
    Normalize a date expression to a canonical M.D.YYYY key.

    Recognized forms:
        9.21.2025, 9/21/2025, 9-21-2025   explicit date
        9/21, 9-21                        current year
        today, yesterday
        Friday, last Friday               most recent past occurrence
        September 21st, Sep 21, 2025      month name plus day, optional year

    Raises DateParseError for anything else.
    """
    if not isinstance(expr, str):
        raise DateParseError(expr, "date expression must be a string")

    as_of = as_of or date.today()
    text = expr.strip()
    lowered = text.lower()

    m = _NUMERIC.match(text)
    if m:
        return _build(expr, int(m.group(3)), int(m.group(1)), int(m.group(2)))

    m = _NUMERIC_NO_YEAR.match(text)
    if m:
        return _build(expr, as_of.year, int(m.group(1)), int(m.group(2)))

    if lowered == "today":
        return format_key(as_of)

    if lowered == "yesterday":
        return format_key(as_of - timedelta(days=1))

    m = _WEEKDAY.match(lowered)
    if m and m.group(2) in WEEKDAYS:
        # Bare name on its own weekday means today; "last" is always a week further back
        days_back = (as_of.weekday() - WEEKDAYS[m.group(2)]) % 7
        if m.group(1):
            days_back += 7
        return format_key(as_of - timedelta(days=days_back))

    m = _MONTH_DAY.match(lowered)
    if m and m.group(1) in MONTHS:
        year = int(m.group(3)) if m.group(3) else as_of.year
        return _build(expr, year, MONTHS[m.group(1)], int(m.group(2)))

    raise DateParseError(expr)
