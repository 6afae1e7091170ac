"""
Watchlist table extraction.

Turns the scraped watchlist page into rows of cell text, then maps each row
of at least seven cells positionally onto a WatchlistRow and joins it with
the reference dataset to resolve the chart instrument identifier.
"""

from collections.abc import Sequence
from typing import Any, Optional, Union

from bs4 import BeautifulSoup

from ..errors import ParseError
from ..logging import get_logger
from .models import ReferenceSecurity, WatchlistRow
from .reference import find_security

logger = get_logger(__name__)

WATCHLIST_SOURCE = "watchlist table"
MIN_COLUMNS = 7


def read_html_table(html: Union[str, bytes],
                    row_selector: str = "tbody tr",
                    cell_selector: str = "td") -> list[list[str]]:
    """
    Read the data rows of a watchlist page as lists of cell text.

    Cell text has its whitespace collapsed, matching what a browser shows.

    Args:
        html: Raw page markup
        row_selector: CSS selector for data rows
        cell_selector: CSS selector for cells within a row

    Returns:
        One list of cell strings per row, in document order

    Raises:
        ParseError: If the input is not markup text
    """
    if not isinstance(html, (str, bytes)):
        raise ParseError(f"Watchlist page must be text, got {type(html).__name__}",
                         source=WATCHLIST_SOURCE)
    try:
        soup = BeautifulSoup(html, "html.parser")
        rows = soup.select(row_selector)
    except Exception as e:
        raise ParseError(f"Cannot parse watchlist page: {e}", source=WATCHLIST_SOURCE, cause=e)

    table = []
    for row in rows:
        cells = row.select(cell_selector)
        table.append([" ".join(cell.get_text(" ").split()) for cell in cells])

    logger.debug("Read watchlist page", rows=len(table))
    return table


def find_instrument_id(identifier: str,
                       references: Optional[Sequence[ReferenceSecurity]]) -> Optional[str]:
    """Instrument id of the first reference entry with this code, or None."""
    security = find_security(identifier, references)
    return security.instrument_id if security is not None else None


def _cell_text(cell: Any) -> str:
    if isinstance(cell, str):
        return cell.strip()
    if cell is None:
        return ""
    return str(cell).strip()


def extract_rows(rows: Any,
                 references: Optional[Sequence[ReferenceSecurity]] = None,
                 min_columns: int = MIN_COLUMNS) -> list[WatchlistRow]:
    """
    Map table rows onto WatchlistRow objects.

    Columns 0..6 are read as identifier, name, bid, ask, change, change
    percent and time. Rows with fewer than ``min_columns`` cells (headers,
    separators) are skipped. When ``references`` is None the reference
    dataset was unavailable and no row gets an instrument id.

    Args:
        rows: Sequence of rows, each a sequence of cell text
        references: Reference dataset, or None if it could not be loaded
        min_columns: Minimum cell count of a data row

    Returns:
        Extracted rows in table order

    Raises:
        ParseError: If ``rows`` is not a sequence of cell sequences
    """
    if isinstance(rows, (str, bytes)) or not isinstance(rows, Sequence):
        raise ParseError("Watchlist table must be a sequence of rows", source=WATCHLIST_SOURCE)

    items = []
    skipped = 0
    for i, row in enumerate(rows):
        if isinstance(row, (str, bytes)) or not isinstance(row, Sequence):
            raise ParseError(f"Row {i} is not a sequence of cells", source=WATCHLIST_SOURCE)

        if len(row) < min_columns:
            skipped += 1
            continue

        identifier = _cell_text(row[0])
        items.append(WatchlistRow(
            identifier=identifier,
            name=_cell_text(row[1]),
            bid=_cell_text(row[2]),
            ask=_cell_text(row[3]),
            change=_cell_text(row[4]),
            change_percent=_cell_text(row[5]),
            time=_cell_text(row[6]),
            instrument_id=find_instrument_id(identifier, references),
        ))

    logger.debug("Extracted watchlist rows", rows=len(items), skipped=skipped,
                 joined=references is not None)
    return items


def extract_watchlist(html: Union[str, bytes],
                      references: Optional[Sequence[ReferenceSecurity]] = None,
                      row_selector: str = "tbody tr",
                      cell_selector: str = "td",
                      min_columns: int = MIN_COLUMNS) -> list[WatchlistRow]:
    """Read a watchlist page and extract its rows in one step."""
    table = read_html_table(html, row_selector=row_selector, cell_selector=cell_selector)
    return extract_rows(table, references, min_columns=min_columns)
