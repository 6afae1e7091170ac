"""
Main data core coordinator.

Wires the watchlist extractor, the chart and analysis normalizers, the
heatmap aggregator and the journal store behind one object. Every call
returns a fresh snapshot; the engine never mutates results it handed out.
"""

from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any, Optional, Union

from .config.defaults import DefaultConfig
from .config.loader import ConfigLoader
from .config.validation import ConfigValidator
from .data.analysis import AnalysisDocument, AnalysisResponse, find_analysis, parse_analysis_response
from .data.models import (
    ChartPayload,
    ChartSeriesPoint,
    HeatmapBucket,
    HeatmapColor,
    ReferenceSecurity,
    SeriesStats,
    TradeJournalEntry,
    TradeType,
    WatchlistRow,
)
from .data.parsers import parse_chart_payload, parse_json_payload
from .data.reference import filter_securities, find_security, load_reference_securities_or_none
from .data.watchlist import extract_watchlist
from .errors import ReferenceDataError
from .logging.config import configure_from_params, get_logger
from .metrics.chart_series import ChartPeriod, format_price_change, select_series, summarize
from .metrics.heatmap import (
    Direction,
    Granularity,
    advance,
    bucketize,
    heatmap_color,
    window_for,
    window_label,
)
from .persistence.journal_store import JournalStore
from .utils.time import to_calendar_day

logger = get_logger(__name__)

RawPayload = Union[str, bytes, bytearray, dict]


@dataclass(frozen=True)
class ChartView:
    """Decoded series of one period with its statistics."""
    period: ChartPeriod
    points: tuple[ChartSeriesPoint, ...]
    stats: SeriesStats
    change_text: Optional[str]
    payload: ChartPayload

    @property
    def is_available(self) -> bool:
        return bool(self.points)


@dataclass(frozen=True)
class HeatmapView:
    """Buckets of one navigation window with their cell colors."""
    granularity: Granularity
    anchor: date
    window_start: date
    window_end: date
    label: str
    buckets: tuple[HeatmapBucket, ...]
    colors: tuple[HeatmapColor, ...]


class TradeProEngine:
    """
    Coordinator for the watchlist, chart, analysis and journal pipelines.

    Raw input → Normalization → Typed snapshot
    """

    def __init__(self,
                 config_dir: Optional[Union[str, Path]] = None,
                 overrides: Optional[dict[str, Any]] = None,
                 store: Optional[JournalStore] = None,
                 setup_logging: bool = False) -> None:
        """
        Initialize the engine.

        Args:
            config_dir: Directory holding settings.yaml
            overrides: Configuration overrides applied on top of the settings file
            store: Journal store to use instead of one built from configuration
            setup_logging: Configure structlog from the logging section first

        Raises:
            ValueError: If the merged configuration does not validate
        """
        self.logger = logger
        self.config_loader = ConfigLoader.create(Path(config_dir) if config_dir else None)

        merged = self.config_loader.merge_config(overrides)
        errors = ConfigValidator.validate_config(merged)
        if errors:
            messages = [f"{err.field}: {err.message} (got: {err.value!r})" for err in errors]
            self.logger.error("Configuration validation failed", errors=messages)
            raise ValueError(f"Invalid configuration: {'; '.join(messages)}")

        self.config: DefaultConfig = ConfigLoader.to_default_config(merged)
        if setup_logging:
            configure_from_params(self.config.logging)

        # Loaded once for the process lifetime; None means unavailable
        self.references: Optional[list[ReferenceSecurity]] = load_reference_securities_or_none(
            self.config.reference.path
        )

        self.store = store if store is not None else JournalStore(self.config.journal.db_path)

        self.logger.info(
            "TradePro engine initialized",
            references=len(self.references) if self.references is not None else None,
            journal=self.store.db_path
        )

    def refresh_watchlist(self, html: Union[str, bytes]) -> list[WatchlistRow]:
        """
        Extract a fresh watchlist snapshot from a scraped page.

        Raises:
            ParseError: If the page cannot be parsed at all
        """
        params = self.config.watchlist
        rows = extract_watchlist(
            html,
            self.references,
            row_selector=params.row_selector,
            cell_selector=params.cell_selector,
            min_columns=params.min_columns,
        )
        self.logger.info("Watchlist refreshed", rows=len(rows),
                         unresolved=sum(1 for r in rows if r.instrument_id is None))
        return rows

    def load_chart(self, raw: RawPayload,
                   period: Optional[Union[ChartPeriod, str]] = None) -> ChartView:
        """
        Decode a chart payload and select the series of ``period``.

        A period without a backing series gives a view with no points.

        Raises:
            ParseError: If the payload is not a usable chart response
        """
        payload = parse_chart_payload(_as_json(raw, "chart payload"))
        return self.chart_view(payload, period)

    def chart_view(self, payload: ChartPayload,
                   period: Optional[Union[ChartPeriod, str]] = None) -> ChartView:
        """Build the view of ``period`` over an already parsed payload."""
        chart_params = self.config.chart
        selected = ChartPeriod(period if period is not None else chart_params.default_period)
        points = select_series(payload, selected)
        stats = summarize(points)

        change_text = None
        if stats.day_change is not None:
            change_text = format_price_change(stats.day_change, chart_params.currency_symbol,
                                              chart_params.change_decimals)

        return ChartView(
            period=selected,
            points=tuple(points),
            stats=stats,
            change_text=change_text,
            payload=payload,
        )

    def load_analysis(self, raw: RawPayload) -> AnalysisResponse:
        """
        Decode the analysis feed.

        Raises:
            ParseError: If the envelope is unusable
        """
        response = parse_analysis_response(_as_json(raw, "analysis payload"))
        self.logger.info("Analysis feed loaded", documents=len(response.data), reported=response.count)
        return response

    def analysis_for(self, raw: RawPayload, symbol: str) -> Optional[AnalysisDocument]:
        """Decode the analysis feed and return the document of ``symbol``."""
        return find_analysis(self.load_analysis(raw), symbol)

    def search_securities(self, search_text: str) -> list[ReferenceSecurity]:
        """Reference securities matching a picker search."""
        return filter_securities(self.references or [], search_text)

    def record_trade(self,
                     identifier: str,
                     amount: Union[int, float, str],
                     trade_type: Union[TradeType, str],
                     trade_date: Union[date, datetime],
                     now: Optional[datetime] = None) -> TradeJournalEntry:
        """
        Save a journal entry for the security with code ``identifier``.

        Raises:
            ReferenceDataError: If the code is not in the reference dataset
            ValueError: If the amount is not a number
            PersistenceError: If the store rejects the entry
        """
        security = find_security(identifier, self.references)
        if security is None:
            raise ReferenceDataError(f"Unknown security: {identifier}",
                                     path=self.config.reference.path)
        return self.store.create(security, amount, trade_type, trade_date, now=now)

    def journal(self, sort_by: Optional[str] = None) -> list[TradeJournalEntry]:
        """Snapshot of the journal in the configured order."""
        params = self.config.journal
        return self.store.fetch_all(sort_by or params.default_sort, descending=params.sort_descending)

    def heatmap(self, granularity: Union[Granularity, str],
                anchor: Union[date, datetime]) -> HeatmapView:
        """Per-day buckets and colors for the window containing ``anchor``."""
        granularity = Granularity(granularity)
        start, end = window_for(anchor, granularity)
        buckets = bucketize(self.store.fetch_between(start, end), granularity, anchor)
        colors = tuple(heatmap_color(b.total_profit, self.config.heatmap) for b in buckets)

        return HeatmapView(
            granularity=granularity,
            anchor=to_calendar_day(anchor),
            window_start=start,
            window_end=end,
            label=window_label(anchor, granularity),
            buckets=tuple(buckets),
            colors=colors,
        )

    def navigate(self, anchor: Union[date, datetime], granularity: Union[Granularity, str],
                 direction: Union[Direction, int]) -> date:
        """Anchor of the neighbouring window."""
        return advance(anchor, Granularity(granularity), direction)

    def close(self) -> None:
        self.store.close()


def _as_json(raw: RawPayload, source: str) -> Any:
    if isinstance(raw, dict):
        return raw
    return parse_json_payload(raw, source=source)
