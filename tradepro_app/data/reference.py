"""
Reference securities dataset.

The bundled dataset maps each security code (WKN) to the instrument
identifier the chart service expects. It is loaded once and passed by
value to the watchlist extractor and the journal entry factory.
"""

import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Optional, Union

from ..errors import ReferenceDataError
from ..logging import get_logger, log_skipped_record
from .models import ReferenceSecurity

logger = get_logger(__name__)


def parse_reference_securities(records: Any) -> list[ReferenceSecurity]:
    """
    Convert raw reference records into ReferenceSecurity objects.

    Expected format: [{"wkn": "A1CX3T", "name": "Tesla", "instrument_id": "43763"}]

    Records missing a code or an instrument id are skipped. Numeric
    instrument ids are converted to strings.

    Raises:
        ReferenceDataError: If ``records`` is not a list
    """
    if not isinstance(records, list):
        raise ReferenceDataError("Reference dataset must be a JSON list")

    securities = []
    for i, record in enumerate(records):
        if not isinstance(record, Mapping):
            log_skipped_record(logger, "reference_security", "record is not an object", {"index": i})
            continue

        identifier = record.get("wkn")
        instrument_id = record.get("instrument_id")
        if not isinstance(identifier, str) or not identifier or instrument_id is None or isinstance(instrument_id, bool):
            log_skipped_record(logger, "reference_security", "missing wkn or instrument_id", {"index": i})
            continue

        securities.append(ReferenceSecurity(
            identifier=identifier,
            name=str(record.get("name") or ""),
            instrument_id=str(instrument_id),
        ))

    return securities


def load_reference_securities(path: Union[str, Path]) -> list[ReferenceSecurity]:
    """
    Load the reference dataset from a JSON file.

    Raises:
        ReferenceDataError: If the file is missing, unreadable or not a JSON list
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            records = json.load(f)
    except FileNotFoundError as e:
        raise ReferenceDataError(f"Reference dataset not found: {path}", path=str(path)) from e
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ReferenceDataError(f"Cannot read reference dataset {path}: {e}", path=str(path)) from e

    try:
        securities = parse_reference_securities(records)
    except ReferenceDataError as e:
        raise ReferenceDataError(str(e), path=str(path)) from e

    logger.info("Loaded reference securities", path=str(path), count=len(securities))
    return securities


def load_reference_securities_or_none(path: Optional[Union[str, Path]]) -> Optional[list[ReferenceSecurity]]:
    """
    Load the reference dataset, degrading to None when it is unavailable.

    A None result tells the watchlist extractor to leave every instrument
    identifier unset instead of failing the refresh.
    """
    if path is None:
        logger.warning("No reference dataset configured; instrument ids will be unset")
        return None
    try:
        return load_reference_securities(path)
    except ReferenceDataError as e:
        logger.warning("Reference dataset unavailable; instrument ids will be unset",
                       path=e.path, error=str(e))
        return None


def find_security(identifier: str,
                  securities: Optional[Iterable[ReferenceSecurity]]) -> Optional[ReferenceSecurity]:
    """First security with an exactly matching code, or None."""
    if securities is None:
        return None
    for security in securities:
        if security.identifier == identifier:
            return security
    return None


def filter_securities(securities: Iterable[ReferenceSecurity], search_text: str) -> list[ReferenceSecurity]:
    """Securities whose name or code contains ``search_text`` (case-insensitive)."""
    needle = search_text.strip().casefold()
    if not needle:
        return list(securities)
    return [
        s for s in securities
        if needle in s.name.casefold() or needle in s.identifier.casefold()
    ]
