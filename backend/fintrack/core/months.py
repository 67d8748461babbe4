"""Month keys ("YYYY-MM") and calendar-month arithmetic.

Nothing here reads the system clock: functions that need "now" take it as
a ``today`` argument.
"""

import re
from datetime import date

from dateutil.relativedelta import relativedelta

from fintrack.core.exceptions import InvalidArgumentError

_MONTH_KEY_RE = re.compile(r"^(\d{4})-(\d{2})$")
_DATE_PREFIX_RE = re.compile(r"^(\d{4})-(\d{2})(-\d{2}(?:[T ].*)?)?$")


def month_key(day: date) -> str:
    """Month key of a calendar date."""
    return f"{day.year:04d}-{day.month:02d}"


def current_month_key(today: date) -> str:
    return month_key(today)


def month_key_of(value: date | str | None, today: date) -> str:
    """Truncate a date (or ISO date string) to its month key.

    Empty input falls back to the month of ``today``.
    """
    if not value:
        return current_month_key(today)
    if isinstance(value, date):
        return month_key(value)

    value = value.strip()
    match = _DATE_PREFIX_RE.match(value)
    if not match or not 1 <= int(match.group(2)) <= 12:
        raise InvalidArgumentError(f"Malformed date: {value!r}")
    if match.group(3):
        # Full dates must exist on the calendar
        try:
            date.fromisoformat(value[:10])
        except ValueError as e:
            raise InvalidArgumentError(f"Malformed date: {value!r}") from e
    return f"{match.group(1)}-{match.group(2)}"


def parse_month_key(key: str) -> tuple[int, int]:
    """Split a month key into (year, month), validating it."""
    match = _MONTH_KEY_RE.match(key or "")
    if not match:
        raise InvalidArgumentError(f"Malformed month key: {key!r} (expected YYYY-MM)")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12 or year < 1:
        raise InvalidArgumentError(f"Malformed month key: {key!r} (expected YYYY-MM)")
    return year, month


def offset_month_key(key: str, offset: int) -> str:
    """Shift a month key by ``offset`` whole months (carrying across years)."""
    year, month = parse_month_key(key)
    try:
        shifted = date(year, month, 1) + relativedelta(months=offset)
    except (ValueError, OverflowError) as e:
        raise InvalidArgumentError(f"Month offset out of range: {key!r} + {offset}") from e
    return month_key(shifted)


def add_months(day: date, months: int) -> date:
    """Add calendar months, clamping to the last day of a shorter month.

    2024-01-31 + 1 month is 2024-02-29, never 2024-03-02.
    """
    return day + relativedelta(months=months)
