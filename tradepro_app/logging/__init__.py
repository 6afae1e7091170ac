"""
Logging configuration and utilities for the TradePro data core.
"""
from .config import configure_from_params, configure_logging, get_logger, log_skipped_record

__all__ = ["configure_from_params", "configure_logging", "get_logger", "log_skipped_record"]
