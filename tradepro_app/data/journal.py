"""Construction and serialization of trade journal entries."""

import math
import uuid
from datetime import date, datetime
from typing import Any, Optional, Union

from ..utils.time import to_calendar_day, utc_now
from .models import ReferenceSecurity, TradeJournalEntry, TradeType


def new_journal_entry(security: ReferenceSecurity,
                      amount: Union[int, float, str],
                      trade_type: Union[TradeType, str],
                      trade_date: Union[date, datetime],
                      now: Optional[datetime] = None) -> TradeJournalEntry:
    """
    Build a journal entry from the user's input.

    The amount is taken as a magnitude and signed by the trade type:
    a loss of 30 (or -30) is stored as -30.

    Args:
        security: Security the trade was made in
        amount: Entered amount (numbers or numeric text)
        trade_type: Profit or loss
        trade_date: Day the trade happened, independent of creation time
        now: Creation time override for deterministic callers

    Returns:
        New TradeJournalEntry with a fresh id

    Raises:
        ValueError: If the amount is not a finite number
    """
    try:
        value = abs(float(amount))
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid amount: {amount!r}") from e
    if not math.isfinite(value):
        raise ValueError(f"Invalid amount: {amount!r}")

    trade_type = TradeType(trade_type)
    profit = value if trade_type is TradeType.PROFIT else -value

    return TradeJournalEntry(
        id=str(uuid.uuid4()),
        stock_name=security.name,
        instrument_id=security.instrument_id,
        profit=profit,
        trade_date=to_calendar_day(trade_date),
        timestamp=utc_now(now),
        trade_type=trade_type,
    )


def entry_to_dict(entry: TradeJournalEntry) -> dict[str, Any]:
    """JSON-ready export of one entry, using the journal export key names."""
    return {
        "id": entry.id,
        "stockName": entry.stock_name,
        "instrumentID": entry.instrument_id,
        "profit": entry.profit,
        "date": entry.trade_date.isoformat(),
        "timestamp": entry.timestamp.isoformat(),
        "tradeType": entry.trade_type.value,
    }
