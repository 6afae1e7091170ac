"""Tests for analysis feed decoding."""

from datetime import datetime, timezone

import pytest

from tradepro_app.data.analysis import (
    AnalysisDocument,
    FinancialPerformance,
    analysis_response_to_wire,
    find_analysis,
    parse_analysis_response,
)
from tradepro_app.data.models import FlexKind
from tradepro_app.errors import ParseError


class TestAnalysisDocument:
    """Test single document decoding."""

    def test_fixed_blocks(self, analysis_document):
        """Test typed blocks decode with their wire names mapped."""
        doc = AnalysisDocument.from_wire(analysis_document)

        assert doc.symbol == "TSLA"
        assert doc.current_stock_info.week_range_52.high == 488.54
        assert doc.current_stock_info.average_volume == 95000000
        assert doc.analyst_ratings.target_price == 300.0
        assert doc.risks == ("Valuation", "Competition")

    def test_malformed_article_skipped(self, analysis_document):
        """Test one bad article does not discard the document."""
        doc = AnalysisDocument.from_wire(analysis_document)
        assert len(doc.news_articles) == 1
        assert doc.news_articles[0].id == "2025-10-05_Deliveries beat estimates"

    def test_article_side_data_keeps_decodable_keys(self, analysis_document):
        """Test a null inside key_data drops only that key."""
        article = AnalysisDocument.from_wire(analysis_document).news_articles[0]
        assert set(article.key_data) == {"deliveries", "growth", "note"}
        assert article.key_data["deliveries"].kind is FlexKind.INT
        assert article.key_data["growth"].kind is FlexKind.FLOAT
        assert article.key_metrics is None

    def test_financial_periods(self, analysis_document):
        """Test absent periods are None, present ones decoded."""
        perf = AnalysisDocument.from_wire(analysis_document).financial_performance
        assert perf.q2_2025["revenue_billions"].double_value == 22.5
        assert perf.fy2025 is None
        assert perf.projections["fy2026_eps"].double_value == 2.5
        assert perf.projections_2028 is None

    def test_open_blocks(self, analysis_document):
        """Test strategic initiatives and market context are open maps."""
        doc = AnalysisDocument.from_wire(analysis_document)
        assert doc.strategic_initiatives["robotaxi"].string_value == "Austin pilot"
        assert doc.strategic_initiatives["capex"].kind is FlexKind.LIST
        assert doc.market_context["ev_share"].kind is FlexKind.FLOAT

    def test_optional_records(self, analysis_document):
        """Test insider activity and analyst actions."""
        doc = AnalysisDocument.from_wire(analysis_document)
        assert doc.insider_activity[0].shares == 2570000
        assert doc.insider_activity[0].id == "2025-09-12_Elon Musk"
        assert doc.analyst_actions[0].target == 600.0
        assert doc.analyst_actions[0].previous_rating is None

    def test_analyst_actions_absent(self, analysis_document):
        """Test analyst actions are optional."""
        del analysis_document["analyst_actions"]
        del analysis_document["stored_at"]
        doc = AnalysisDocument.from_wire(analysis_document)
        assert doc.analyst_actions is None
        assert doc.stored_at is None

    def test_stored_at(self, analysis_document):
        """Test the seconds/nanoseconds storage timestamp."""
        stored = AnalysisDocument.from_wire(analysis_document).stored_at
        assert stored.seconds == 1759766400
        assert stored.as_datetime == datetime(2025, 10, 6, 16, 0, 0, 500000, tzinfo=timezone.utc)

    def test_display_properties(self, analysis_document):
        """Test formatted convenience values."""
        doc = AnalysisDocument.from_wire(analysis_document)
        assert doc.is_price_increasing is True
        assert doc.formatted_market_cap == "$802.40B"
        assert doc.formatted_price == "$250.50"

    def test_missing_required_block_raises(self, analysis_document):
        """Test fixed blocks are required."""
        del analysis_document["analyst_ratings"]
        with pytest.raises(ParseError):
            AnalysisDocument.from_wire(analysis_document)

    def test_to_wire_uses_wire_names(self, analysis_document):
        """Test encoding restores the wire key names."""
        wire = AnalysisDocument.from_wire(analysis_document).to_wire()
        assert wire["stock_symbol"] == "TSLA"
        assert "52_week_range" in wire["current_stock_info"]
        assert wire["stored_at"] == {"_seconds": 1759766400, "_nanoseconds": 500000000}
        assert wire["news_articles"][0]["key_data"] == {
            "deliveries": 497099, "growth": 7.4, "note": "record",
        }
        assert wire["financial_performance"] == {
            "q2_2025": {"revenue_billions": 22.5, "eps": 0.4},
            "projections": {"fy2026_eps": 2.5},
        }


class TestFinancialPerformance:
    """Test the optional period blocks."""

    def test_empty(self):
        """Test an empty object yields all-None periods."""
        perf = FinancialPerformance.from_wire({}, "$")
        assert perf == FinancialPerformance()
        assert perf.to_wire() == {}


class TestAnalysisResponse:
    """Test the feed envelope."""

    def test_bad_document_skipped(self, analysis_document):
        """Test a broken document does not discard the feed."""
        response = parse_analysis_response({
            "count": 2,
            "data": [analysis_document, {"id": "broken"}],
            "next_cursor": "abc",
        })
        assert response.count == 2
        assert len(response.data) == 1
        assert response.next_cursor == "abc"

    def test_count_required(self, analysis_document):
        """Test the envelope count must be present and an integer."""
        with pytest.raises(ParseError):
            parse_analysis_response({"data": [analysis_document]})
        with pytest.raises(ParseError):
            parse_analysis_response({"count": "1", "data": [analysis_document]})

    def test_cursor_optional(self, analysis_document):
        """Test a missing cursor decodes as None."""
        response = parse_analysis_response({"count": 1, "data": [analysis_document]})
        assert response.count == 1
        assert response.next_cursor is None

    def test_envelope_must_have_data(self):
        """Test the data list is required."""
        with pytest.raises(ParseError):
            parse_analysis_response({"count": 0})
        with pytest.raises(ParseError):
            parse_analysis_response("not an object")

    def test_find_analysis(self, analysis_document):
        """Test lookup by symbol."""
        response = parse_analysis_response({"count": 1, "data": [analysis_document]})
        assert find_analysis(response, "TSLA").id == "doc-1"
        assert find_analysis(response, "AAPL") is None

    def test_response_to_wire(self, analysis_document):
        """Test the envelope encodes with its optional cursor omitted."""
        response = parse_analysis_response({"count": 1, "data": [analysis_document]})
        wire = analysis_response_to_wire(response)
        assert wire["count"] == 1
        assert "next_cursor" not in wire
        assert wire["data"][0]["id"] == "doc-1"
