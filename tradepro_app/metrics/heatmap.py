"""Profit/loss heatmap aggregation over trade journal entries"""

from collections import defaultdict
from collections.abc import Iterable
from datetime import date, datetime, timedelta
from enum import Enum, IntEnum
from typing import Optional, Union

from ..config.defaults import HeatmapParams
from ..data.models import HeatmapBucket, HeatmapColor, TradeJournalEntry
from ..logging import get_logger
from ..utils.time import (
    add_months,
    add_years,
    format_day_label,
    start_of_month,
    start_of_week,
    start_of_year,
    to_calendar_day,
)

logger = get_logger(__name__)


class Granularity(Enum):
    """Calendar unit of a heatmap window."""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class Direction(IntEnum):
    """Navigation direction."""
    BACKWARD = -1
    FORWARD = 1


def window_for(anchor: Union[date, datetime], granularity: Granularity) -> tuple[date, date]:
    """
    Calendar window of ``granularity`` containing ``anchor``.

    Returns:
        (start, end) with start inclusive and end exclusive
    """
    day = to_calendar_day(anchor)
    granularity = Granularity(granularity)

    if granularity is Granularity.DAY:
        return day, day + timedelta(days=1)
    if granularity is Granularity.WEEK:
        start = start_of_week(day)
        return start, start + timedelta(days=7)
    if granularity is Granularity.MONTH:
        start = start_of_month(day)
        return start, add_months(start, 1)
    start = start_of_year(day)
    return start, add_years(start, 1)


def bucketize(entries: Iterable[TradeJournalEntry],
              granularity: Granularity,
              anchor: Union[date, datetime]) -> list[HeatmapBucket]:
    """
    Aggregate journal entries into per-day buckets for one window.

    Only entries whose trade date falls in the window of ``granularity``
    containing ``anchor`` are considered. They are always grouped by calendar
    day; the granularity bounds the window, not the grouping.

    Args:
        entries: Snapshot of journal entries
        granularity: Window size
        anchor: Any day inside the window

    Returns:
        Buckets sorted ascending by date
    """
    start, end = window_for(anchor, granularity)

    totals: dict[date, float] = defaultdict(float)
    counts: dict[date, int] = defaultdict(int)
    for entry in entries:
        day = to_calendar_day(entry.trade_date)
        if start <= day < end:
            totals[day] += entry.profit
            counts[day] += 1

    buckets = [
        HeatmapBucket(date=day, total_profit=totals[day], trade_count=counts[day])
        for day in sorted(totals)
    ]

    logger.debug("Bucketized journal entries", granularity=Granularity(granularity).value,
                 window_start=start.isoformat(), buckets=len(buckets))
    return buckets


def advance(anchor: Union[date, datetime],
            granularity: Granularity,
            direction: Union[Direction, int]) -> date:
    """
    Move the anchor one calendar unit forward or backward.

    Month and year steps clamp the day of month, so stepping back one
    month from Mar 31 lands on Feb 28 (or 29).

    Raises:
        ValueError: If direction is not +1 or -1
    """
    step = int(Direction(direction))
    day = to_calendar_day(anchor)
    granularity = Granularity(granularity)

    if granularity is Granularity.DAY:
        return day + timedelta(days=step)
    if granularity is Granularity.WEEK:
        return day + timedelta(weeks=step)
    if granularity is Granularity.MONTH:
        return add_months(day, step)
    return add_years(day, step)


def color_intensity(total_profit: float, scale: float = 1000.0) -> float:
    """Magnitude of a bucket sum scaled to 0..1."""
    return min(abs(total_profit) / scale, 1.0)


def heatmap_color(total_profit: float, params: Optional[HeatmapParams] = None) -> HeatmapColor:
    """
    Cell color for a bucket sum.

    Gains and losses share the opacity ramp ``base + intensity * span``;
    an exact zero gets the neutral color.
    """
    params = params or HeatmapParams()

    if total_profit == 0:
        return HeatmapColor(color=params.neutral_color, opacity=params.neutral_opacity)

    intensity = color_intensity(total_profit, params.intensity_scale)
    opacity = params.base_opacity + intensity * params.opacity_span
    color = params.gain_color if total_profit > 0 else params.loss_color
    return HeatmapColor(color=color, opacity=opacity)


def window_label(anchor: Union[date, datetime], granularity: Granularity) -> str:
    """Header text for the window containing ``anchor``."""
    start, end = window_for(anchor, granularity)
    granularity = Granularity(granularity)

    if granularity is Granularity.DAY:
        return start.strftime("%A, %b %d, %Y")
    if granularity is Granularity.WEEK:
        last = end - timedelta(days=1)
        if start.year != last.year:
            first_label = format_day_label(start, include_year=True)
            return f"{first_label} - {format_day_label(last, include_year=True)}"
        return f"{format_day_label(start)} - {format_day_label(last)}, {start.year}"
    if granularity is Granularity.MONTH:
        return start.strftime("%B %Y")
    return str(start.year)


def window_total(buckets: Iterable[HeatmapBucket]) -> float:
    """Sum over buckets, for the window summary."""
    return sum(b.total_profit for b in buckets)
