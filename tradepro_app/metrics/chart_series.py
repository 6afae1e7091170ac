"""Chart series selection and price statistics"""

from collections.abc import Sequence
from enum import Enum
from typing import Optional, Union

from ..data.models import ChartPayload, ChartSeries, ChartSeriesPoint, SeriesStats
from ..data.parsers import is_number
from ..logging import get_logger, log_skipped_record
from ..utils.time import epoch_ms_to_datetime

logger = get_logger(__name__)


class ChartPeriod(Enum):
    """Selectable chart time period."""
    INTRADAY = "intraday"
    ONE_MONTH = "1M"
    SIX_MONTHS = "6M"

    @property
    def display_name(self) -> str:
        return {
            ChartPeriod.INTRADAY: "Intraday",
            ChartPeriod.ONE_MONTH: "1 Month",
            ChartPeriod.SIX_MONTHS: "6 Months",
        }[self]


def series_for_period(payload: ChartPayload, period: Union[ChartPeriod, str]) -> Optional[ChartSeries]:
    """
    Backing series of a period.

    The upstream has no separate one-month series; both ONE_MONTH and
    SIX_MONTHS read ``history``.
    """
    period = ChartPeriod(period)
    if period is ChartPeriod.INTRADAY:
        return payload.series.intraday
    return payload.series.history


def select_series(payload: ChartPayload, period: Union[ChartPeriod, str]) -> list[ChartSeriesPoint]:
    """
    Decode the series backing ``period`` into sorted chart points.

    Each raw tuple is read as (epoch milliseconds, price). Tuples without two
    leading numbers are skipped. When a timestamp repeats, the later tuple
    wins. A period without a backing series yields an empty list.

    Args:
        payload: Parsed chart payload
        period: Requested time period

    Returns:
        Points sorted ascending by timestamp
    """
    series = series_for_period(payload, period)
    if series is None:
        logger.debug("No series for chart period", period=ChartPeriod(period).value)
        return []

    by_timestamp: dict = {}
    for i, raw in enumerate(series.data):
        if len(raw) < 2 or not is_number(raw[0]) or not is_number(raw[1]):
            log_skipped_record(logger, "chart_tuple", "fewer than 2 numeric elements",
                               {"series": series.id, "index": i})
            continue
        try:
            timestamp = epoch_ms_to_datetime(raw[0])
        except ValueError as e:
            log_skipped_record(logger, "chart_tuple", str(e), {"series": series.id, "index": i})
            continue
        by_timestamp[timestamp] = ChartSeriesPoint(timestamp=timestamp, price=float(raw[1]))

    return sorted(by_timestamp.values(), key=lambda p: p.timestamp)


def point_count(points: Sequence[ChartSeriesPoint]) -> int:
    return len(points)


def min_price(points: Sequence[ChartSeriesPoint]) -> Optional[float]:
    if not points:
        return None
    return min(p.price for p in points)


def max_price(points: Sequence[ChartSeriesPoint]) -> Optional[float]:
    if not points:
        return None
    return max(p.price for p in points)


def price_range(points: Sequence[ChartSeriesPoint]) -> Optional[float]:
    """max - min, None for an empty series."""
    if not points:
        return None
    return max_price(points) - min_price(points)


def first_price(points: Sequence[ChartSeriesPoint]) -> Optional[float]:
    return points[0].price if points else None


def last_price(points: Sequence[ChartSeriesPoint]) -> Optional[float]:
    return points[-1].price if points else None


def day_change(points: Sequence[ChartSeriesPoint]) -> Optional[float]:
    """Last price minus first price, None for an empty series."""
    if not points:
        return None
    return points[-1].price - points[0].price


def day_change_percent(points: Sequence[ChartSeriesPoint]) -> Optional[float]:
    """
    Change relative to the first price, in percent.

    Returns None instead of dividing by zero when the series is empty or
    its first price is 0.
    """
    if not points or points[0].price == 0:
        return None
    return (points[-1].price - points[0].price) / points[0].price * 100


def summarize(points: Sequence[ChartSeriesPoint]) -> SeriesStats:
    """All statistics of a series in one object."""
    return SeriesStats(
        point_count=point_count(points),
        min_price=min_price(points),
        max_price=max_price(points),
        price_range=price_range(points),
        first_price=first_price(points),
        last_price=last_price(points),
        day_change=day_change(points),
        day_change_percent=day_change_percent(points),
    )


def format_price_change(change: float, currency: str = "€", decimals: int = 3) -> str:
    """Signed change for display, e.g. ``+0.125 €`` or ``-1.000 €``."""
    sign = "+" if change >= 0 else ""
    return f"{sign}{change:.{decimals}f} {currency}"
