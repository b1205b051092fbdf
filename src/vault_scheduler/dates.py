"""
Date Utilities
ISO-8601 week arithmetic used to address weeks inside a year file.
"""
from datetime import date, datetime, timedelta
from typing import NamedTuple, Optional, Union

from vault_scheduler.models import MONTH_NAMES


class WeekInfo(NamedTuple):
    week_number: int
    year: int
    start_date: date
    end_date: date


def _as_date(value: Union[date, datetime]) -> date:
    return value.date() if isinstance(value, datetime) else value


def get_week_number(value: Union[date, datetime]) -> int:
    """ISO week number (1-53). Week 1 is the week holding the year's first Thursday."""
    return _as_date(value).isocalendar()[1]


def get_monday(value: Union[date, datetime]) -> date:
    d = _as_date(value)
    return d - timedelta(days=d.weekday())


def get_sunday(value: Union[date, datetime]) -> date:
    return get_monday(value) + timedelta(days=6)


def to_iso_date_string(value: Union[date, datetime]) -> str:
    return _as_date(value).strftime("%Y-%m-%d")


def from_iso_date_string(value: str) -> date:
    """Parse `YYYY-MM-DD`. Raises ValueError on anything else."""
    return date.fromisoformat(value.strip())


def get_week_range_string(start: date, end: date) -> str:
    """Human readable range, e.g. 'November 17-23, 2025' or 'December 29 - January 4, 2025'."""
    start_month = MONTH_NAMES[start.month - 1]
    end_month = MONTH_NAMES[end.month - 1]
    if start_month == end_month:
        return f"{start_month} {start.day}-{end.day}, {start.year}"
    return f"{start_month} {start.day} - {end_month} {end.day}, {start.year}"


def get_date_of_week(week_number: int, year: int) -> date:
    """
    Monday of ISO week `week_number` in ISO year `year`.

    January 4th always falls in week 1, so week 1 starts on the Monday of
    that week and later weeks are plain 7-day offsets. Out-of-range week
    numbers simply roll into the neighbouring year.
    """
    week1_monday = get_monday(date(year, 1, 4))
    return week1_monday + timedelta(weeks=week_number - 1)


def get_year_for_week(week_number: int, value: Union[date, datetime]) -> int:
    """
    ISO week-year for a week number observed on `value`.

    Week 1 seen in December belongs to the next year; week 52/53 seen in
    January belongs to the previous one.
    """
    d = _as_date(value)
    if week_number == 1 and d.month == 12:
        return d.year + 1
    if week_number in (52, 53) and d.month == 1:
        return d.year - 1
    return d.year


def get_current_week_info(today: Optional[date] = None) -> WeekInfo:
    today = _as_date(today or date.today())
    week_number = get_week_number(today)
    return WeekInfo(
        week_number=week_number,
        year=get_year_for_week(week_number, today),
        start_date=get_monday(today),
        end_date=get_sunday(today),
    )


def add_weeks(value: Union[date, datetime], weeks: int) -> date:
    return _as_date(value) + timedelta(weeks=weeks)


def date_in_week(week_number: int, year: int, day: int) -> date:
    """Calendar date of weekday `day` (0 = Monday) in the given ISO week."""
    return get_date_of_week(week_number, year) + timedelta(days=day)
