"""Date manipulation utilities"""

import calendar
import re
from datetime import date, datetime
from typing import Tuple, Union

from household_forecast.domain.exceptions import InvalidInputError

_MONTH_KEY_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def parse_date(value: Union[str, date]) -> date:
    """Parse an ISO date (YYYY-MM-DD) or ISO datetime; datetimes are truncated to their date"""
    if isinstance(value, date):
        return value if type(value) is date else value.date()
    try:
        if len(value) <= 10:
            return date.fromisoformat(value)
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        return datetime.fromisoformat(value).date()
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Malformed date: {value!r}") from e


def start_of_month(day: date) -> date:
    return day.replace(day=1)


def days_in_month(day: date) -> int:
    """Calendar length of the month containing day (28-31, leap years included)"""
    return calendar.monthrange(day.year, day.month)[1]


def end_of_month(day: date) -> date:
    return day.replace(day=days_in_month(day))


def add_months(day: date, months: int) -> date:
    """Shift to the first day of the month `months` away (negative goes back)"""
    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def same_month(a: date, b: date) -> bool:
    return (a.year, a.month) == (b.year, b.month)


def month_key(day: date) -> str:
    """Format the month containing day as YYYY-MM"""
    return f"{day.year:04d}-{day.month:02d}"


def parse_month_key(value: str) -> date:
    """Parse a YYYY-MM key into the first day of that month"""
    if not isinstance(value, str) or not _MONTH_KEY_PATTERN.match(value):
        raise InvalidInputError(f"Malformed month key: {value!r} (expected YYYY-MM)")
    year, month = value.split("-")
    return date(int(year), int(month), 1)


def month_range(start_month: date, end_month: date) -> Tuple[date, date]:
    """Inclusive date range from the first day of start_month to the last day of end_month"""
    return start_of_month(start_month), end_of_month(end_month)


def days_between(later: date, earlier: date) -> int:
    """Whole days from earlier to later (negative when later precedes earlier)"""
    return (later - earlier).days

