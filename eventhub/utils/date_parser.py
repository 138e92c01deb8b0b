"""Date and time parsing for free-text event listings."""

import re
from datetime import date, datetime, timedelta

from dateutil import parser as dateutil_parser

# First three letters of each month name
MONTHS = {
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}

# Indexed like date.weekday()
WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

# Explicit patterns, tried in order. Each names the role of its groups;
# "month" is a month name, "month_num" a number.
DATE_PATTERNS: tuple[tuple[re.Pattern[str], tuple[str, ...]], ...] = (
    # "Mon, Jan 15, 2024"
    (re.compile(r"(\w+),?\s+(\w+)\s+(\d{1,2}),?\s+(\d{4})"), ("weekday", "month", "day", "year")),
    # "Jan 15, 2024"
    (re.compile(r"(\w+)\s+(\d{1,2}),?\s+(\d{4})"), ("month", "day", "year")),
    # "15 Jan 2024"
    (re.compile(r"(\d{1,2})\s+(\w+),?\s+(\d{4})"), ("day", "month", "year")),
    # "15/01/2024"
    (re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})"), ("day", "month_num", "year")),
    # "2024-01-15"
    (re.compile(r"(\d{4})-(\d{1,2})-(\d{1,2})"), ("year", "month_num", "day")),
)

TIME_PATTERN = re.compile(r"(\d{1,2}):(\d{2})\s*(AM|PM)", re.IGNORECASE)
YEAR_PATTERN = re.compile(r"\b\d{4}\b")

DEFAULT_TIME = "00:00"

# Two defaults differing in year, month and day (both leap years)
FIELD_CHECK_DEFAULTS = (datetime(2000, 1, 1), datetime(2004, 2, 2))


def parse_month(month_str: str) -> int | None:
    """Parse an English month name (full or abbreviated) to its number.

    Args:
        month_str: Month name (e.g., "January", "jan", "Sept")

    Returns:
        Month number (1-12) or None if not recognized
    """
    return MONTHS.get(month_str.lower().strip()[:3])


def _match_explicit(text: str) -> date | None:
    for pattern, roles in DATE_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue

        parts = dict(zip(roles, match.groups()))
        if "month" in parts:
            month = parse_month(parts["month"])
            if month is None:
                continue
        else:
            month = int(parts["month_num"])

        try:
            return date(int(parts["year"]), month, int(parts["day"]))
        except ValueError:
            continue

    return None


def _match_relative(text: str, today: date) -> date | None:
    lowered = text.lower()
    if "today" in lowered:
        return today
    if "tomorrow" in lowered:
        return today + timedelta(days=1)

    for index, name in enumerate(WEEKDAYS):
        if name in lowered:
            return today + timedelta(days=(index - today.weekday()) % 7)

    return None


def _parse_without_defaults(text: str) -> date | None:
    # dateutil fills missing fields from `default`; two different defaults
    # expose any year/month/day the text did not state
    try:
        first, second = (dateutil_parser.parse(text, default=d) for d in FIELD_CHECK_DEFAULTS)
    except (ValueError, OverflowError):
        return None

    if first.date() != second.date():
        return None
    return first.date()


def _parse_with_current_year(text: str, today: date) -> date | None:
    if YEAR_PATTERN.search(text):
        return None

    parsed = _parse_without_defaults(f"{text} {today.year}")
    if parsed is None:
        return None

    if parsed < today:
        try:
            parsed = parsed.replace(year=parsed.year + 1)
        except ValueError:
            # Feb 29 with no leap day next year
            parsed = parsed.replace(year=parsed.year + 1, day=28)
    return parsed


def _parse_free_form(text: str) -> date | None:
    return _parse_without_defaults(text)


def parse_event_date(date_str: str | None, today: date | None = None) -> date | None:
    """Parse a free-text event date.

    Tries, in order:
    1. Explicit patterns ("Mon, Jan 15, 2024", "Jan 15, 2024",
       "15 Jan 2024", "15/01/2024", "2024-01-15")
    2. Relative words ("today", "tomorrow", weekday names)
    3. The text with the current year appended, rolled to next year if past
    4. Free-form parsing

    Args:
        date_str: Date text scraped from a listing
        today: Reference date (defaults to the current date)

    Returns:
        date object or None if every strategy failed
    """
    if not date_str:
        return None

    text = re.sub(r"\s+", " ", date_str).strip()
    if not text:
        return None

    today = today or date.today()

    return (
        _match_explicit(text)
        or _match_relative(text, today)
        or _parse_with_current_year(text, today)
        or _parse_free_form(text)
    )


def extract_time(text: str | None) -> str:
    """Return the first "H:MM AM/PM" token in the text, or "00:00".

    Args:
        text: Text that may contain a time (usually the date line)

    Returns:
        The time token as written, or "00:00"
    """
    if not text:
        return DEFAULT_TIME

    match = TIME_PATTERN.search(text)
    return match.group(0) if match else DEFAULT_TIME
