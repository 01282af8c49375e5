# src/taskbell/tasks/date_parsing.py

"""
Loose date/time handling for task entries.

Tasks carry their due time as the string the user typed, e.g. "25/12/2025 6:30 PM"
or "31-01-26". Both the extraction done when a task is created and the parsing done
by the reminder loop use the patterns defined here, so anything extracted is
guaranteed to be parseable later.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta

# <day><sep><month><sep><year>, sep is "/" or "-"
_DATE_PART = r"(\d{1,2})[/-](\d{1,2})[/-](\d{2,4})"
# H:MM or HH:MM with an optional AM/PM marker
_TIME_PART = r"(\d{1,2}):(\d{2})(?:\s?(AM|PM)\b)?"

DATE_TIME_RE = re.compile(
    rf"{_DATE_PART}(?:\s+\d{{1,2}}:\d{{2}}(?:\s?(?:AM|PM)\b)?)?",
    re.IGNORECASE,
)
TIME_ONLY_RE = re.compile(r"\b\d{1,2}:\d{2}\s?(?:AM|PM)\b", re.IGNORECASE)
DATE_RE = re.compile(_DATE_PART)
TIME_RE = re.compile(_TIME_PART, re.IGNORECASE)

DATE_FORMAT = "%d-%m-%Y"


def extract_date_time(text: str) -> str | None:
    """Return the first date(+time) substring verbatim, or None."""
    m = DATE_TIME_RE.search(text or "")
    return m.group(0) if m else None


def extract_time_only(text: str) -> str | None:
    """Return the first standalone "H:MM AM|PM" substring, or None."""
    m = TIME_ONLY_RE.search(text or "")
    return m.group(0) if m else None


def remove_date_time(text: str) -> str:
    """Drop the first date(+time) substring and trim surrounding whitespace."""
    return DATE_TIME_RE.sub("", text or "", count=1).strip()


def today_date(now: datetime | None = None) -> str:
    """Local calendar day as DD-MM-YYYY."""
    return (now or datetime.now()).strftime(DATE_FORMAT)


def resolve_user_date(text: str, now: datetime | None = None) -> str | None:
    """
    Decide which due-date string a new task is stored with.

    - full date (+ optional time) in the text: stored as typed
    - only a time with AM/PM: today's date, the time itself is not kept
    - neither: no due date
    """
    full = extract_date_time(text)
    if full:
        return full
    if extract_time_only(text):
        return today_date(now)
    return None


def _to_24h(hours: int, meridiem: str | None) -> int:
    if not meridiem:
        return hours
    meridiem = meridiem.upper()
    if meridiem == "PM" and hours != 12:
        return hours + 12
    if meridiem == "AM" and hours == 12:
        return 0
    return hours


def parse_user_date(value: str | None) -> datetime | None:
    """
    Parse a stored due-date string into a naive local datetime.

    Returns None when there is no date segment. Components outside their natural
    range roll over into the next unit (day 32 of a month is the 1st/2nd of the
    following month, hour 24 is midnight of the next day), so every string that
    extract_date_time() can produce parses.
    """
    if not value:
        return None

    dm = DATE_RE.search(value)
    if not dm:
        return None

    day = int(dm.group(1))
    month_index = int(dm.group(2)) - 1
    year = int(dm.group(3))
    if year < 100:
        year += 2000

    hours = 0
    minutes = 0
    tm = TIME_RE.search(value)
    if tm:
        hours = _to_24h(int(tm.group(1)), tm.group(3))
        minutes = int(tm.group(2))

    try:
        first_of_month = datetime(year + month_index // 12, month_index % 12 + 1, 1)
        return first_of_month + timedelta(days=day - 1, hours=hours, minutes=minutes)
    except (ValueError, OverflowError):
        return None
