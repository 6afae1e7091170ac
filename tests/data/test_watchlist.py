"""Tests for watchlist table extraction."""

import pytest

from tradepro_app.data.models import ReferenceSecurity
from tradepro_app.data.watchlist import (
    extract_rows,
    extract_watchlist,
    find_instrument_id,
    read_html_table,
)
from tradepro_app.errors import ParseError

TESLA_ROW = ["A1CX3T", "Tesla", "210,50", "210,80", "+1,20", "+0,57 %", "17:35:02"]


class TestExtractRows:
    """Test positional column mapping."""

    def test_seven_column_row_joined(self, reference_securities):
        """Test a full row maps onto every field and resolves its instrument."""
        rows = extract_rows([TESLA_ROW], reference_securities)

        assert len(rows) == 1
        row = rows[0]
        assert row.identifier == "A1CX3T"
        assert row.name == "Tesla"
        assert row.bid == "210,50"
        assert row.ask == "210,80"
        assert row.change == "+1,20"
        assert row.change_percent == "+0,57 %"
        assert row.time == "17:35:02"
        assert row.instrument_id == "999"

    def test_first_reference_match_wins(self, reference_securities):
        """Test duplicated codes resolve to the first dataset entry."""
        assert find_instrument_id("A1CX3T", reference_securities) == "999"

    def test_short_row_skipped(self, reference_securities):
        """Test rows with fewer than seven cells are not rows."""
        rows = extract_rows([["A", "B", "C", "D", "E"], TESLA_ROW], reference_securities)
        assert [r.identifier for r in rows] == ["A1CX3T"]

    def test_extra_columns_ignored(self):
        """Test cells beyond the seventh are ignored."""
        rows = extract_rows([TESLA_ROW + ["extra", "more"]])
        assert rows[0].time == "17:35:02"

    def test_cells_trimmed(self):
        """Test cell text is stripped."""
        rows = extract_rows([["  A1CX3T ", " Tesla ", "1", "2", "3", "4", " 5 "]])
        assert rows[0].identifier == "A1CX3T"
        assert rows[0].name == "Tesla"
        assert rows[0].time == "5"

    def test_unknown_identifier_unresolved(self, reference_securities):
        """Test a code without a reference entry keeps no instrument id."""
        rows = extract_rows([["ZZZ", "X", "1", "2", "3", "4", "5"]], reference_securities)
        assert rows[0].instrument_id is None

    def test_references_unavailable(self):
        """Test a missing reference dataset leaves every id unset."""
        rows = extract_rows([TESLA_ROW], None)
        assert rows[0].instrument_id is None

    def test_empty_table(self):
        """Test an empty table yields no rows."""
        assert extract_rows([]) == []

    def test_not_a_table(self):
        """Test non-sequence input is a parse error."""
        with pytest.raises(ParseError):
            extract_rows("A1CX3T,Tesla")
        with pytest.raises(ParseError):
            extract_rows([TESLA_ROW, 42])

    def test_trend(self):
        """Test trend derived from the change column."""
        up = extract_rows([TESLA_ROW])[0]
        down = extract_rows([["X", "Y", "1", "2", "-0,40", "-0,2 %", "t"]])[0]
        flat = extract_rows([["X", "Y", "1", "2", "0,00", "0 %", "t"]])[0]
        assert (up.trend, down.trend, flat.trend) == ("up", "down", "flat")


class TestReadHtmlTable:
    """Test reading scraped markup."""

    def test_body_rows_only(self, watchlist_html):
        """Test header rows outside tbody are not read."""
        table = read_html_table(watchlist_html)
        assert len(table) == 4
        assert table[0][0] == "A1CX3T"
        assert len(table[1]) == 5

    def test_whitespace_collapsed(self, watchlist_html):
        """Test cell text whitespace is collapsed."""
        table = read_html_table(watchlist_html)
        assert table[2][1] == "Apple Inc."

    def test_not_markup(self):
        """Test non-text input raises ParseError."""
        with pytest.raises(ParseError):
            read_html_table(None)

    def test_no_table(self):
        """Test a page without rows yields an empty table."""
        assert read_html_table("<html><body><p>maintenance</p></body></html>") == []


class TestExtractWatchlist:
    """Test the page-to-rows pipeline."""

    def test_page(self, watchlist_html, reference_securities):
        """Test a scraped page becomes joined rows."""
        rows = extract_watchlist(watchlist_html, reference_securities)

        assert [r.identifier for r in rows] == ["A1CX3T", "865985", "UNKNOWN1"]
        assert [r.instrument_id for r in rows] == ["999", "1001", None]
        assert rows[1].change == "-0,40"


class TestWorkedExamples:
    """Test the documented extraction examples."""

    ROW = ["A1", "Name1", "1", "2", "+0.1", "+1%", "10:00"]

    def test_empty_reference_list(self):
        """Test a row with no reference entry has no instrument id."""
        rows = extract_rows([self.ROW], [])
        assert len(rows) == 1
        assert rows[0].identifier == "A1"
        assert rows[0].instrument_id is None

    def test_reference_join(self):
        """Test the joined instrument id."""
        references = [ReferenceSecurity(identifier="A1", name="Name1", instrument_id="999")]
        assert extract_rows([self.ROW], references)[0].instrument_id == "999"

    def test_three_rows_one_short(self):
        """Test a five-cell row among three rows is dropped."""
        rows = extract_rows([self.ROW, self.ROW[:5], ["B2"] + self.ROW[1:]])
        assert [r.identifier for r in rows] == ["A1", "B2"]
