"""Due-date parsing and day arithmetic.

Due dates travel as day-first strings (``05/03/2025``) exactly as the web
client renders them, so parsing and formatting must round-trip.
"""

import re
from datetime import date, datetime

from core.exceptions import MalformedDueDateError

DUE_DATE_PATTERN = re.compile(r"(\d{1,2})/(\d{1,2})/([1-9]\d{3})", re.ASCII)

# Fewer days than this before the 1st of next month pushes the due date a month further.
MIN_DAYS_TO_DUE = 10


def to_day(value) -> date:
    """Truncate a datetime to its calendar day."""
    if isinstance(value, datetime):
        return value.date()
    return value


def parse_due_date(text: str, loan_id=None) -> date:
    if not isinstance(text, str):
        raise MalformedDueDateError(text, loan_id)

    match = DUE_DATE_PATTERN.fullmatch(text.strip())
    if match is None:
        raise MalformedDueDateError(text, loan_id)

    try:
        day, month, year = (int(p) for p in match.groups())
        return date(year, month, day)
    except ValueError as exc:
        raise MalformedDueDateError(text, loan_id) from exc


def format_due_date(value: date) -> str:
    return value.strftime("%d/%m/%Y")


def overdue_days(today, due_date: date) -> int:
    """Whole days past the due date, 0 when not yet late."""
    return max(0, (to_day(today) - due_date).days)


def next_due_date(now) -> date:
    today = to_day(now)
    first_of_next = _first_of_month(today.year, today.month + 1)
    if (first_of_next - today).days < MIN_DAYS_TO_DUE:
        return _first_of_month(today.year, today.month + 2)
    return first_of_next


def _first_of_month(year: int, month: int) -> date:
    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    return date(year, month, 1)
