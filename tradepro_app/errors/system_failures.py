"""
System failure error classifications.

These exceptions represent failures of local resources: the journal database
and the bundled reference dataset.
"""

from typing import Any, Optional


class SystemFailureError(Exception):
    """Base class for failures of local resources."""

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class PersistenceError(SystemFailureError):
    """Journal database failures."""

    def __init__(self, message: str, operation: Optional[str] = None,
                 target: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.operation = operation
        self.target = target


class ReferenceDataError(SystemFailureError):
    """The reference securities dataset is missing or unreadable."""

    def __init__(self, message: str, path: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.path = path
