"""
Data quality error classifications for external payload processing.

These exceptions describe scraped tables and fetched JSON documents that do
not match the shapes the normalizers understand.
"""

from typing import Any, Optional


class DataQualityError(Exception):
    """Base class for data quality issues that can be reported to the user."""

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = True


class DecodeError(DataQualityError):
    """A JSON node matches none of the flexible value variants."""

    def __init__(self, message: str, path: str = "$", **kwargs):
        super().__init__(message, **kwargs)
        self.path = path

    def __str__(self) -> str:
        return f"{super().__str__()} (at {self.path})"


class ParseError(DataQualityError):
    """A table or payload is structurally unparsable as a whole."""

    def __init__(self, message: str, source: Optional[str] = None,
                 cause: Optional[BaseException] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.source = source
        self.cause = cause
