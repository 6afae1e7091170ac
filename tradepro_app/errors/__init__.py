"""
Error classification for the TradePro data core.

Data quality errors cover payloads that cannot be decoded or parsed; system
failures cover the local store and the bundled reference dataset.
"""

from .data_quality import (
    DataQualityError,
    DecodeError,
    ParseError,
)
from .system_failures import (
    SystemFailureError,
    PersistenceError,
    ReferenceDataError,
)

__all__ = [
    # Data Quality Errors
    "DataQualityError",
    "DecodeError",
    "ParseError",
    # System Failures
    "SystemFailureError",
    "PersistenceError",
    "ReferenceDataError",
]
