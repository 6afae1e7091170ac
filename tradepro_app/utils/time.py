"""
Calendar and timestamp utilities.

This module centralizes calendar-aligned interval math (day, ISO week,
month, year) and epoch conversions so every component agrees on where a
window starts and how far one navigation step moves.
"""

import calendar
from datetime import UTC, date, datetime, timedelta
from typing import Optional, Union


def to_calendar_day(value: Union[date, datetime]) -> date:
    """Reduce a datetime to its calendar day; dates pass through unchanged."""
    if isinstance(value, datetime):
        return value.date()
    return value


def start_of_week(day: date) -> date:
    """Monday of the ISO week containing ``day``."""
    return day - timedelta(days=day.weekday())


def start_of_month(day: date) -> date:
    """First day of the month containing ``day``."""
    return day.replace(day=1)


def start_of_year(day: date) -> date:
    """January 1st of the year containing ``day``."""
    return day.replace(month=1, day=1)


def add_months(day: date, months: int) -> date:
    """
    Shift a date by whole calendar months.

    The day of month is clamped to the length of the target month, so
    Jan 31 plus one month is Feb 28 (or Feb 29 in a leap year).

    Args:
        day: Date to shift
        months: Number of months, negative to move backward

    Returns:
        Shifted date
    """
    month_index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def add_years(day: date, years: int) -> date:
    """Shift a date by whole calendar years, clamping Feb 29 to Feb 28."""
    return add_months(day, years * 12)


def epoch_ms_to_datetime(epoch_ms: Union[int, float]) -> datetime:
    """
    Convert epoch milliseconds to an aware UTC datetime.

    Args:
        epoch_ms: Milliseconds since the Unix epoch

    Returns:
        UTC datetime

    Raises:
        ValueError: If the value is outside the representable range
    """
    try:
        return datetime.fromtimestamp(epoch_ms / 1000.0, tz=UTC)
    except (OverflowError, OSError) as e:
        raise ValueError(f"Timestamp out of range: {epoch_ms}") from e


def datetime_to_epoch_ms(value: datetime) -> int:
    """Convert an aware datetime to epoch milliseconds."""
    return int(round(value.timestamp() * 1000))


def utc_now(now: Optional[datetime] = None) -> datetime:
    """Current UTC time, or ``now`` when a fixed clock is supplied."""
    if now is not None:
        return now
    return datetime.now(UTC)


def format_day_label(day: date, include_year: bool = False) -> str:
    """Format a calendar day as ``Oct 06`` or ``Oct 06, 2025``."""
    if include_year:
        return day.strftime("%b %d, %Y")
    return day.strftime("%b %d")
