"""Pytest configuration and shared fixtures."""

import json
from datetime import datetime, timezone
from typing import Any

import pytest

from tradepro_app.data.models import ReferenceSecurity
from tradepro_app.persistence.journal_store import JournalStore


@pytest.fixture
def reference_securities() -> list[ReferenceSecurity]:
    """Small reference dataset for join tests."""
    return [
        ReferenceSecurity(identifier="A1CX3T", name="Tesla", instrument_id="999"),
        ReferenceSecurity(identifier="865985", name="Apple", instrument_id="1001"),
        ReferenceSecurity(identifier="A1CX3T", name="Tesla (dup)", instrument_id="12345"),
    ]


@pytest.fixture
def reference_file(tmp_path) -> str:
    """Reference dataset written to disk as JSON."""
    path = tmp_path / "stocks.json"
    path.write_text(json.dumps([
        {"wkn": "A1CX3T", "name": "Tesla", "instrument_id": "999"},
        {"wkn": "865985", "name": "Apple", "instrument_id": 1001},
    ]), encoding="utf-8")
    return str(path)


@pytest.fixture
def watchlist_html() -> str:
    """Scraped watchlist page with a header row and a short separator row."""
    return """
    <html><body>
      <table>
        <thead><tr><th>WKN</th><th>Name</th><th>Bid</th></tr></thead>
        <tbody>
          <tr>
            <td> A1CX3T </td><td>Tesla</td><td>210,50</td><td>210,80</td>
            <td>+1,20</td><td>+0,57 %</td><td>17:35:02</td>
          </tr>
          <tr><td colspan="5">Werbung</td><td></td><td></td><td></td><td></td></tr>
          <tr>
            <td>865985</td><td>Apple   Inc.</td><td>180,10</td><td>180,30</td>
            <td>-0,40</td><td>-0,22 %</td><td>17:35:01</td>
          </tr>
          <tr>
            <td>UNKNOWN1</td><td>Unlisted</td><td>1,00</td><td>1,10</td>
            <td>0,00</td><td>0,00 %</td><td>09:00:00</td>
          </tr>
        </tbody>
      </table>
    </body></html>
    """


@pytest.fixture
def chart_payload() -> dict[str, Any]:
    """Chart response with both series and one plotline."""
    return {
        "info": {
            "isin": "US88160R1014",
            "chartType": "mountain",
            "textMaxValue": "Hoch",
            "textMinValue": "Tief",
            "plotlines": [
                {"label": "Vortag", "value": 209.3, "align": "right", "y": 4,
                 "id": "prev", "color": "#999999"},
            ],
            "maxRange": 86400000,
        },
        "series": {
            "intraday": {
                "id": "intraday",
                "data": [[1696233600000, 101.5], [1696233660000, 102.0], [1696233720000, 100.5]],
                "timeline": "intraday",
                "name": "Tesla",
                "color": "#0000ff",
                "dataGrouping": {"enabled": False},
            },
            "history": {
                "id": "history",
                "data": [[2000, 10.5], [1000, 9.0]],
                "timeline": "history",
                "name": "Tesla",
                "color": "#0000ff",
            },
        },
        "container": "chart-1",
    }


@pytest.fixture
def analysis_document() -> dict[str, Any]:
    """One document of the analysis feed."""
    return {
        "id": "doc-1",
        "stock_symbol": "TSLA",
        "company_name": "Tesla, Inc.",
        "data_retrieved": "2025-10-06",
        "current_stock_info": {
            "current_price": 250.5,
            "currency": "USD",
            "last_updated": "2025-10-06T16:00:00Z",
            "change_percent": 1.25,
            "52_week_range": {"low": 138.8, "high": 488.54},
            "year_to_date_change": "+12%",
            "one_year_change": "+40%",
            "market_cap_billions": 802.4,
            "beta": 2.3,
            "average_volume": 95000000,
        },
        "analyst_ratings": {
            "consensus": "Hold",
            "target_price": 300,
            "median_12_month_target": 295.5,
            "potential_upside_downside": "+18%",
        },
        "news_articles": [
            {
                "date": "2025-10-05",
                "headline": "Deliveries beat estimates",
                "summary": "Q3 deliveries came in above consensus.",
                "sentiment": "positive",
                "source": "Reuters",
                "key_data": {"deliveries": 497099, "growth": 7.4, "note": "record", "flag": None},
            },
            {"headline": "missing required fields"},
        ],
        "financial_performance": {
            "q2_2025": {"revenue_billions": 22.5, "eps": 0.4},
            "projections": {"fy2026_eps": 2.5},
        },
        "insider_activity": [
            {"date": "2025-09-12", "person": "Elon Musk", "shares": 2570000, "price_per_share": 372.37},
        ],
        "strategic_initiatives": {"robotaxi": "Austin pilot", "capex": [10, 11.5]},
        "risks": ["Valuation", "Competition"],
        "market_context": {"sector": "Auto", "ev_share": 0.18},
        "analyst_actions": [
            {"firm": "Wedbush", "rating": "Outperform", "target": 600},
        ],
        "stored_at": {"_seconds": 1759766400, "_nanoseconds": 500000000},
    }


@pytest.fixture
def fixed_now() -> datetime:
    """Fixed creation clock."""
    return datetime(2025, 10, 6, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def memory_store():
    """In-memory journal store."""
    store = JournalStore(":memory:")
    yield store
    store.close()
