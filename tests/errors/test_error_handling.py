"""Tests for error classification."""

import pytest

from tradepro_app.errors import (
    DataQualityError,
    DecodeError,
    ParseError,
    PersistenceError,
    ReferenceDataError,
    SystemFailureError,
)


class TestDataQualityErrors:
    """Test data quality error classes."""

    def test_decode_error(self):
        """Test DecodeError carries its JSON path."""
        error = DecodeError("Cannot decode NoneType", path="$.key_data.flag")

        assert isinstance(error, DataQualityError)
        assert error.recoverable is True
        assert error.path == "$.key_data.flag"
        assert str(error) == "Cannot decode NoneType (at $.key_data.flag)"

    def test_decode_error_default_path(self):
        """Test the root path default."""
        assert DecodeError("bad").path == "$"

    def test_parse_error(self):
        """Test ParseError carries its source and cause."""
        cause = ValueError("boom")
        error = ParseError("Invalid JSON", source="chart payload", cause=cause,
                           context={"length": 10})

        assert isinstance(error, DataQualityError)
        assert error.source == "chart payload"
        assert error.cause is cause
        assert error.context == {"length": 10}

    def test_context_defaults_empty(self):
        """Test context defaults to an empty dict."""
        assert ParseError("x").context == {}


class TestSystemFailureErrors:
    """Test system failure error classes."""

    @pytest.mark.parametrize("error", [
        PersistenceError("Journal save failed", operation="save", target="journal.db"),
        ReferenceDataError("Reference dataset not found", path="stocks.json"),
    ])
    def test_not_recoverable(self, error):
        """Test system failures are not recoverable."""
        assert isinstance(error, SystemFailureError)
        assert not isinstance(error, DataQualityError)
        assert error.recoverable is False

    def test_persistence_error_fields(self):
        """Test PersistenceError attributes."""
        error = PersistenceError("Journal save failed", operation="save", target="journal.db")
        assert error.operation == "save"
        assert error.target == "journal.db"
