"""
News and analyst-sentiment documents.

The analysis feed returns one document per tracked stock. Fixed blocks
(price statistics, analyst consensus) decode into typed dataclasses; the
free-form blocks (article side-data, strategic initiatives, market context,
financial performance periods) decode into open maps of FlexibleValue so
their varying key sets survive a decode/encode round trip.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, Optional

from ..errors import DecodeError, ParseError
from ..logging import get_logger, log_skipped_record
from .flexible import (
    OpenMap,
    decode_open_map,
    decode_optional_named_blocks,
    encode_open_map,
)
from .parsers import optional_field, require_field

logger = get_logger(__name__)

ANALYSIS_SOURCE = "analysis payload"

FINANCIAL_PERIODS = ("q2_2025", "fy2025", "projections", "projections_2028")


def _req(raw: Mapping, key: str, expected: Any, path: str) -> Any:
    return require_field(raw, key, expected, source=ANALYSIS_SOURCE, path=path)


def _opt(raw: Mapping, key: str, expected: Any, path: str) -> Any:
    return optional_field(raw, key, expected, source=ANALYSIS_SOURCE, path=path)


def _opt_strings(raw: Mapping, key: str, path: str) -> Optional[tuple[str, ...]]:
    values = _opt(raw, key, list, path)
    if values is None:
        return None
    if not all(isinstance(v, str) for v in values):
        raise ParseError(f"'{key}' at {path} must be a list of strings", source=ANALYSIS_SOURCE)
    return tuple(values)


def _opt_open_map(raw: Mapping, key: str, path: str) -> Optional[OpenMap]:
    value = raw.get(key)
    if value is None:
        return None
    try:
        return decode_open_map(value, f"{path}.{key}")
    except DecodeError as e:
        raise ParseError(f"'{key}' at {path} must be an object", source=ANALYSIS_SOURCE, cause=e)


def _put(wire: dict[str, Any], key: str, value: Any) -> None:
    if value is not None:
        wire[key] = value


def _decode_records(raw: Mapping, key: str, record_cls: Any, path: str,
                    required: bool = True) -> Optional[tuple]:
    """Decode a list of records, skipping the ones that do not parse."""
    items = _req(raw, key, list, path) if required else _opt(raw, key, list, path)
    if items is None:
        return None

    records = []
    for i, item in enumerate(items):
        item_path = f"{path}.{key}[{i}]"
        try:
            records.append(record_cls.from_wire(item, item_path))
        except ParseError as e:
            log_skipped_record(logger, key, str(e), {"path": item_path})
    return tuple(records)


def _require_mapping(raw: Any, path: str) -> Mapping:
    if not isinstance(raw, Mapping):
        raise ParseError(f"Expected an object at {path}", source=ANALYSIS_SOURCE)
    return raw


@dataclass(frozen=True)
class WeekRange:
    """52-week trading range."""
    low: float
    high: float

    @classmethod
    def from_wire(cls, raw: Any, path: str) -> "WeekRange":
        raw = _require_mapping(raw, path)
        return cls(low=_req(raw, "low", float, path), high=_req(raw, "high", float, path))

    def to_wire(self) -> dict[str, Any]:
        return {"low": self.low, "high": self.high}


@dataclass(frozen=True)
class CurrentStockInfo:
    """Current price and volatility statistics."""
    current_price: float
    currency: str
    last_updated: str
    change_percent: float
    week_range_52: WeekRange
    year_to_date_change: str
    one_year_change: str
    market_cap_billions: float
    beta: float
    average_volume: int

    @classmethod
    def from_wire(cls, raw: Any, path: str) -> "CurrentStockInfo":
        raw = _require_mapping(raw, path)
        return cls(
            current_price=_req(raw, "current_price", float, path),
            currency=_req(raw, "currency", str, path),
            last_updated=_req(raw, "last_updated", str, path),
            change_percent=_req(raw, "change_percent", float, path),
            week_range_52=WeekRange.from_wire(_req(raw, "52_week_range", Mapping, path),
                                              f"{path}.52_week_range"),
            year_to_date_change=_req(raw, "year_to_date_change", str, path),
            one_year_change=_req(raw, "one_year_change", str, path),
            market_cap_billions=_req(raw, "market_cap_billions", float, path),
            beta=_req(raw, "beta", float, path),
            average_volume=_req(raw, "average_volume", int, path),
        )

    def to_wire(self) -> dict[str, Any]:
        return {
            "current_price": self.current_price,
            "currency": self.currency,
            "last_updated": self.last_updated,
            "change_percent": self.change_percent,
            "52_week_range": self.week_range_52.to_wire(),
            "year_to_date_change": self.year_to_date_change,
            "one_year_change": self.one_year_change,
            "market_cap_billions": self.market_cap_billions,
            "beta": self.beta,
            "average_volume": self.average_volume,
        }


@dataclass(frozen=True)
class AnalystRatings:
    """Analyst consensus block."""
    consensus: str
    target_price: float
    median_12_month_target: float
    potential_upside_downside: str

    @classmethod
    def from_wire(cls, raw: Any, path: str) -> "AnalystRatings":
        raw = _require_mapping(raw, path)
        return cls(
            consensus=_req(raw, "consensus", str, path),
            target_price=_req(raw, "target_price", float, path),
            median_12_month_target=_req(raw, "median_12_month_target", float, path),
            potential_upside_downside=_req(raw, "potential_upside_downside", str, path),
        )

    def to_wire(self) -> dict[str, Any]:
        return {
            "consensus": self.consensus,
            "target_price": self.target_price,
            "median_12_month_target": self.median_12_month_target,
            "potential_upside_downside": self.potential_upside_downside,
        }


@dataclass(frozen=True)
class NewsArticle:
    """News article with optional flexible side-data."""
    date: str
    headline: str
    summary: str
    sentiment: str
    source: str
    time: Optional[str] = None
    url: Optional[str] = None
    key_data: Optional[OpenMap] = None
    key_metrics: Optional[OpenMap] = None
    price_movement: Optional[OpenMap] = None
    key_drivers: Optional[tuple[str, ...]] = None
    closing_price: Optional[float] = None
    product: Optional[str] = None
    location: Optional[str] = None
    comparison: Optional[str] = None
    event_details: Optional[OpenMap] = None
    analyst_rating: Optional[str] = None
    potential_upside_percent: Optional[float] = None
    key_products: Optional[tuple[str, ...]] = None

    @property
    def id(self) -> str:
        return f"{self.date}_{self.headline}"

    @classmethod
    def from_wire(cls, raw: Any, path: str) -> "NewsArticle":
        raw = _require_mapping(raw, path)
        return cls(
            date=_req(raw, "date", str, path),
            headline=_req(raw, "headline", str, path),
            summary=_req(raw, "summary", str, path),
            sentiment=_req(raw, "sentiment", str, path),
            source=_req(raw, "source", str, path),
            time=_opt(raw, "time", str, path),
            url=_opt(raw, "url", str, path),
            key_data=_opt_open_map(raw, "key_data", path),
            key_metrics=_opt_open_map(raw, "key_metrics", path),
            price_movement=_opt_open_map(raw, "price_movement", path),
            key_drivers=_opt_strings(raw, "key_drivers", path),
            closing_price=_opt(raw, "closing_price", float, path),
            product=_opt(raw, "product", str, path),
            location=_opt(raw, "location", str, path),
            comparison=_opt(raw, "comparison", str, path),
            event_details=_opt_open_map(raw, "event_details", path),
            analyst_rating=_opt(raw, "analyst_rating", str, path),
            potential_upside_percent=_opt(raw, "potential_upside_percent", float, path),
            key_products=_opt_strings(raw, "key_products", path),
        )

    def to_wire(self) -> dict[str, Any]:
        wire: dict[str, Any] = {"date": self.date}
        _put(wire, "time", self.time)
        wire["headline"] = self.headline
        wire["summary"] = self.summary
        wire["sentiment"] = self.sentiment
        wire["source"] = self.source
        _put(wire, "url", self.url)
        for key in ("key_data", "key_metrics", "price_movement", "event_details"):
            entries = getattr(self, key)
            if entries is not None:
                wire[key] = encode_open_map(entries)
        for key in ("key_drivers", "key_products"):
            values = getattr(self, key)
            if values is not None:
                wire[key] = list(values)
        _put(wire, "closing_price", self.closing_price)
        _put(wire, "product", self.product)
        _put(wire, "location", self.location)
        _put(wire, "comparison", self.comparison)
        _put(wire, "analyst_rating", self.analyst_rating)
        _put(wire, "potential_upside_percent", self.potential_upside_percent)
        return wire


@dataclass(frozen=True)
class FinancialPerformance:
    """Financial figures keyed by reporting period; every period is optional."""
    q2_2025: Optional[OpenMap] = None
    fy2025: Optional[OpenMap] = None
    projections: Optional[OpenMap] = None
    projections_2028: Optional[OpenMap] = None

    @classmethod
    def from_wire(cls, raw: Any, path: str) -> "FinancialPerformance":
        blocks = decode_optional_named_blocks(raw, FINANCIAL_PERIODS, path)
        return cls(**blocks)

    def to_wire(self) -> dict[str, Any]:
        wire: dict[str, Any] = {}
        for name in FINANCIAL_PERIODS:
            block = getattr(self, name)
            if block is not None:
                wire[name] = encode_open_map(block)
        return wire


@dataclass(frozen=True)
class InsiderActivity:
    """Insider transaction record; the upstream fills different subsets."""
    date: Optional[str] = None
    person: Optional[str] = None
    title: Optional[str] = None
    transaction_type: Optional[str] = None
    shares: Optional[int] = None
    price_per_share: Optional[float] = None
    total_value: Optional[float] = None
    ownership_change_percent: Optional[float] = None
    activity_type: Optional[str] = None
    note: Optional[str] = None
    insider: Optional[str] = None
    action: Optional[str] = None
    value: Optional[str] = None

    _TYPES = {
        "date": str, "person": str, "title": str, "transaction_type": str,
        "shares": int, "price_per_share": float, "total_value": float,
        "ownership_change_percent": float, "activity_type": str, "note": str,
        "insider": str, "action": str, "value": str,
    }

    @property
    def id(self) -> str:
        return f"{self.date or 'unknown'}_{self.person or 'unknown'}"

    @classmethod
    def from_wire(cls, raw: Any, path: str) -> "InsiderActivity":
        raw = _require_mapping(raw, path)
        return cls(**{key: _opt(raw, key, kind, path) for key, kind in cls._TYPES.items()})

    def to_wire(self) -> dict[str, Any]:
        wire: dict[str, Any] = {}
        for key in self._TYPES:
            _put(wire, key, getattr(self, key))
        return wire


@dataclass(frozen=True)
class AnalystAction:
    """Analyst rating change."""
    firm: Optional[str] = None
    rating: Optional[str] = None
    target: Optional[float] = None
    rationale: Optional[str] = None
    previous_rating: Optional[str] = None
    position: Optional[str] = None
    concern: Optional[str] = None
    impact: Optional[str] = None

    _TYPES = {
        "firm": str, "rating": str, "target": float, "rationale": str,
        "previous_rating": str, "position": str, "concern": str, "impact": str,
    }

    @property
    def id(self) -> str:
        return f"{self.firm or 'unknown'}_{self.rating or 'unknown'}"

    @classmethod
    def from_wire(cls, raw: Any, path: str) -> "AnalystAction":
        raw = _require_mapping(raw, path)
        return cls(**{key: _opt(raw, key, kind, path) for key, kind in cls._TYPES.items()})

    def to_wire(self) -> dict[str, Any]:
        wire: dict[str, Any] = {}
        for key in self._TYPES:
            _put(wire, key, getattr(self, key))
        return wire


@dataclass(frozen=True)
class StoredAt:
    """Storage timestamp as a seconds + nanoseconds pair."""
    seconds: int
    nanoseconds: int

    @property
    def as_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.seconds, tz=UTC) + timedelta(microseconds=self.nanoseconds // 1000)

    @classmethod
    def from_wire(cls, raw: Any, path: str) -> "StoredAt":
        raw = _require_mapping(raw, path)
        return cls(
            seconds=_req(raw, "_seconds", int, path),
            nanoseconds=_req(raw, "_nanoseconds", int, path),
        )

    def to_wire(self) -> dict[str, Any]:
        return {"_seconds": self.seconds, "_nanoseconds": self.nanoseconds}


@dataclass(frozen=True)
class AnalysisDocument:
    """Aggregated news and analyst data for one stock."""
    id: str
    symbol: str
    company_name: str
    data_retrieved: str
    current_stock_info: CurrentStockInfo
    analyst_ratings: AnalystRatings
    news_articles: tuple[NewsArticle, ...]
    financial_performance: FinancialPerformance
    insider_activity: tuple[InsiderActivity, ...]
    strategic_initiatives: OpenMap
    risks: tuple[str, ...]
    market_context: OpenMap
    analyst_actions: Optional[tuple[AnalystAction, ...]] = None
    stored_at: Optional[StoredAt] = None

    @property
    def is_price_increasing(self) -> bool:
        return self.current_stock_info.change_percent > 0

    @property
    def formatted_market_cap(self) -> str:
        return f"${self.current_stock_info.market_cap_billions:.2f}B"

    @property
    def formatted_price(self) -> str:
        return f"${self.current_stock_info.current_price:.2f}"

    @classmethod
    def from_wire(cls, raw: Any, path: str = "$") -> "AnalysisDocument":
        """
        Decode one document of the analysis feed.

        Malformed articles, insider records and analyst actions are skipped
        individually. Missing or mistyped fixed fields fail the document.

        Raises:
            ParseError: If a required field or block is unusable
        """
        raw = _require_mapping(raw, path)

        risks = _req(raw, "risks", list, path)
        if not all(isinstance(r, str) for r in risks):
            raise ParseError(f"'risks' at {path} must be a list of strings", source=ANALYSIS_SOURCE)

        try:
            strategic_initiatives = decode_open_map(
                _req(raw, "strategic_initiatives", Mapping, path), f"{path}.strategic_initiatives")
            market_context = decode_open_map(
                _req(raw, "market_context", Mapping, path), f"{path}.market_context")
        except DecodeError as e:
            raise ParseError(f"Invalid open block at {e.path}", source=ANALYSIS_SOURCE, cause=e)

        stored_raw = raw.get("stored_at")

        return cls(
            id=_req(raw, "id", str, path),
            symbol=_req(raw, "stock_symbol", str, path),
            company_name=_req(raw, "company_name", str, path),
            data_retrieved=_req(raw, "data_retrieved", str, path),
            current_stock_info=CurrentStockInfo.from_wire(
                _req(raw, "current_stock_info", Mapping, path), f"{path}.current_stock_info"),
            analyst_ratings=AnalystRatings.from_wire(
                _req(raw, "analyst_ratings", Mapping, path), f"{path}.analyst_ratings"),
            news_articles=_decode_records(raw, "news_articles", NewsArticle, path),
            financial_performance=FinancialPerformance.from_wire(
                _req(raw, "financial_performance", Mapping, path), f"{path}.financial_performance"),
            insider_activity=_decode_records(raw, "insider_activity", InsiderActivity, path),
            strategic_initiatives=strategic_initiatives,
            risks=tuple(risks),
            market_context=market_context,
            analyst_actions=_decode_records(raw, "analyst_actions", AnalystAction, path, required=False),
            stored_at=StoredAt.from_wire(stored_raw, f"{path}.stored_at") if stored_raw is not None else None,
        )

    def to_wire(self) -> dict[str, Any]:
        wire: dict[str, Any] = {
            "id": self.id,
            "stock_symbol": self.symbol,
            "company_name": self.company_name,
            "data_retrieved": self.data_retrieved,
            "current_stock_info": self.current_stock_info.to_wire(),
            "analyst_ratings": self.analyst_ratings.to_wire(),
            "news_articles": [a.to_wire() for a in self.news_articles],
            "financial_performance": self.financial_performance.to_wire(),
            "insider_activity": [a.to_wire() for a in self.insider_activity],
            "strategic_initiatives": encode_open_map(self.strategic_initiatives),
            "risks": list(self.risks),
            "market_context": encode_open_map(self.market_context),
        }
        if self.analyst_actions is not None:
            wire["analyst_actions"] = [a.to_wire() for a in self.analyst_actions]
        if self.stored_at is not None:
            wire["stored_at"] = self.stored_at.to_wire()
        return wire


@dataclass(frozen=True)
class AnalysisResponse:
    """Feed envelope."""
    count: int
    data: tuple[AnalysisDocument, ...]
    next_cursor: Optional[str] = None


def parse_analysis_response(payload: Any) -> AnalysisResponse:
    """
    Parse the analysis feed envelope.

    Expected format:
    {"count": 2, "data": [{...}, {...}], "next_cursor": "abc"}

    Documents that fail to decode are logged and skipped; ``count`` is kept
    as reported by the feed.

    Args:
        payload: Parsed JSON object

    Returns:
        AnalysisResponse with every decodable document

    Raises:
        ParseError: If the envelope is not an object, ``count`` is not an
            integer or ``data`` is not a list
    """
    if not isinstance(payload, Mapping):
        raise ParseError("Analysis payload must be an object", source=ANALYSIS_SOURCE)

    items = _req(payload, "data", list, "$")
    count = _req(payload, "count", int, "$")
    next_cursor = _opt(payload, "next_cursor", str, "$")

    documents = []
    for i, item in enumerate(items):
        item_path = f"$.data[{i}]"
        try:
            documents.append(AnalysisDocument.from_wire(item, item_path))
        except ParseError as e:
            log_skipped_record(logger, "analysis_document", str(e), {"path": item_path})

    logger.debug("Parsed analysis feed", documents=len(documents), reported=count)

    return AnalysisResponse(
        count=count,
        data=tuple(documents),
        next_cursor=next_cursor,
    )


def analysis_response_to_wire(response: AnalysisResponse) -> dict[str, Any]:
    """Encode an AnalysisResponse back into the feed's JSON shape."""
    wire: dict[str, Any] = {
        "count": response.count,
        "data": [doc.to_wire() for doc in response.data],
    }
    _put(wire, "next_cursor", response.next_cursor)
    return wire


def find_analysis(response: AnalysisResponse, symbol: str) -> Optional[AnalysisDocument]:
    """First document for ``symbol``, or None."""
    for document in response.data:
        if document.symbol == symbol:
            return document
    return None
