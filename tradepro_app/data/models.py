"""
Canonical data models for normalized watchlist, chart and journal data.

This module defines immutable data structures that represent clean, typed
data after normalization from scraped tables and fetched JSON payloads.
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional


class FlexKind(Enum):
    """Variant tag of a FlexibleValue, listed in decode priority order."""
    STRING = "string"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    LIST = "list"
    MAP = "map"


@dataclass(frozen=True)
class FlexibleValue:
    """
    Tagged union able to hold any JSON value without a fixed schema.

    ``value`` is a str, int, float or bool for leaf kinds, a tuple of
    FlexibleValue for LIST and a dict of str to FlexibleValue for MAP.
    """
    kind: FlexKind
    value: Any

    @property
    def string_value(self) -> Optional[str]:
        """The string payload, None for any other kind."""
        return self.value if self.kind is FlexKind.STRING else None

    @property
    def double_value(self) -> Optional[float]:
        """Numeric payload as float for INT and FLOAT, None otherwise."""
        if self.kind in (FlexKind.INT, FlexKind.FLOAT):
            return float(self.value)
        return None


@dataclass(frozen=True)
class ReferenceSecurity:
    """Static reference entry joining a security code to a chart instrument."""
    identifier: str         # WKN-like security code
    name: str
    instrument_id: str      # Identifier required by the chart data source


@dataclass(frozen=True)
class WatchlistRow:
    """One scraped watchlist row; all prices stay as display strings."""
    identifier: str
    name: str
    bid: str
    ask: str
    change: str             # Sign-prefixed absolute change
    change_percent: str     # Sign-prefixed percent change
    time: str               # Last update time as displayed
    instrument_id: Optional[str] = None

    @property
    def trend(self) -> str:
        """Direction of the change column: "up", "down" or "flat"."""
        text = self.change.strip()
        if text.startswith("+"):
            return "up"
        if text.startswith("-") or text.startswith("−"):
            return "down"
        return "flat"


@dataclass(frozen=True)
class ChartSeriesPoint:
    """Decoded chart coordinate."""
    timestamp: datetime     # UTC instant
    price: float


@dataclass(frozen=True)
class DataGrouping:
    """Upstream data-grouping hint, passed through uninterpreted."""
    enabled: bool
    forced: Optional[bool] = None
    approximation: Optional[str] = None


@dataclass(frozen=True)
class Plotline:
    """Labeled horizontal reference level on a chart."""
    label: str
    value: float
    align: str
    y: int
    id: str
    color: str


@dataclass(frozen=True)
class ChartSeries:
    """One named series with raw coordinate tuples as delivered upstream."""
    id: str
    data: tuple[tuple[Any, ...], ...]
    timeline: str
    name: str
    color: str
    data_grouping: Optional[DataGrouping] = None


@dataclass(frozen=True)
class ChartSeriesSet:
    """The two optional series of a chart payload."""
    intraday: Optional[ChartSeries] = None
    history: Optional[ChartSeries] = None


@dataclass(frozen=True)
class ChartInfo:
    """Chart metadata block."""
    isin: str
    chart_type: str
    text_max_value: str
    text_min_value: str
    plotlines: tuple[Plotline, ...] = ()
    max_range: Optional[int] = None


@dataclass(frozen=True)
class ChartPayload:
    """Top-level chart response."""
    info: ChartInfo
    series: ChartSeriesSet
    container: Optional[str] = None


class TradeType(Enum):
    """Display label of a journal entry, redundant with the profit sign."""
    PROFIT = "Profit"
    LOSS = "Loss"


@dataclass(frozen=True)
class TradeJournalEntry:
    """User-entered trade result."""
    id: str
    stock_name: str
    instrument_id: str
    profit: float               # Positive = profit, negative = loss
    trade_date: date            # User-selected calendar day
    timestamp: datetime         # Creation time
    trade_type: TradeType


@dataclass(frozen=True)
class HeatmapBucket:
    """Per-day aggregate of journal entries."""
    date: date
    total_profit: float
    trade_count: int


@dataclass(frozen=True)
class HeatmapColor:
    """Color name and opacity for one heatmap cell."""
    color: str
    opacity: float


@dataclass(frozen=True)
class SeriesStats:
    """Summary of a decoded chart series; None where the series is too short."""
    point_count: int
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    price_range: Optional[float] = None
    first_price: Optional[float] = None
    last_price: Optional[float] = None
    day_change: Optional[float] = None
    day_change_percent: Optional[float] = None
