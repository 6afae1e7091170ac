"""Tests for the reference securities dataset."""

import pytest

from tradepro_app.data.reference import (
    filter_securities,
    find_security,
    load_reference_securities,
    load_reference_securities_or_none,
    parse_reference_securities,
)
from tradepro_app.errors import ReferenceDataError, SystemFailureError


class TestParseReferenceSecurities:
    """Test record conversion."""

    def test_numeric_instrument_id(self):
        """Test numeric instrument ids become strings."""
        securities = parse_reference_securities([{"wkn": "865985", "name": "Apple", "instrument_id": 1001}])
        assert securities[0].instrument_id == "1001"

    def test_bad_records_skipped(self):
        """Test incomplete records are dropped."""
        securities = parse_reference_securities([
            {"wkn": "A1CX3T", "name": "Tesla", "instrument_id": "999"},
            {"name": "no code", "instrument_id": "1"},
            {"wkn": "X", "name": "no id"},
            "not a record",
        ])
        assert [s.identifier for s in securities] == ["A1CX3T"]

    def test_not_a_list(self):
        """Test the dataset must be a list."""
        with pytest.raises(ReferenceDataError):
            parse_reference_securities({"wkn": "A1CX3T"})


class TestLoadReferenceSecurities:
    """Test loading from disk."""

    def test_load(self, reference_file):
        """Test a valid file loads every record."""
        securities = load_reference_securities(reference_file)
        assert [s.name for s in securities] == ["Tesla", "Apple"]

    def test_missing_file(self, tmp_path):
        """Test a missing file is a system failure."""
        with pytest.raises(ReferenceDataError) as exc_info:
            load_reference_securities(tmp_path / "missing.json")
        assert isinstance(exc_info.value, SystemFailureError)
        assert exc_info.value.recoverable is False
        assert exc_info.value.path.endswith("missing.json")

    def test_invalid_json(self, tmp_path):
        """Test an unreadable file is reported."""
        path = tmp_path / "stocks.json"
        path.write_text("[{", encoding="utf-8")
        with pytest.raises(ReferenceDataError):
            load_reference_securities(path)

    def test_or_none_degrades(self, tmp_path):
        """Test the degrading loader returns None instead of raising."""
        assert load_reference_securities_or_none(tmp_path / "missing.json") is None
        assert load_reference_securities_or_none(None) is None

    def test_or_none_loads(self, reference_file):
        """Test the degrading loader still loads a valid file."""
        assert len(load_reference_securities_or_none(reference_file)) == 2


class TestLookup:
    """Test security lookup and search."""

    def test_find_security(self, reference_securities):
        """Test exact code lookup returns the first match."""
        assert find_security("A1CX3T", reference_securities).name == "Tesla"
        assert find_security("a1cx3t", reference_securities) is None
        assert find_security("A1CX3T", None) is None

    def test_filter_by_name(self, reference_securities):
        """Test case-insensitive name search."""
        assert [s.instrument_id for s in filter_securities(reference_securities, "apple")] == ["1001"]

    def test_filter_by_code(self, reference_securities):
        """Test code search."""
        assert len(filter_securities(reference_securities, "a1cx")) == 2

    def test_empty_search_returns_all(self, reference_securities):
        """Test blank search text keeps everything."""
        assert len(filter_securities(reference_securities, "  ")) == 3
