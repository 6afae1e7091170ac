"""Trade journal persistence layer."""

import json
import sqlite3
import threading
from contextlib import contextmanager
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Any, Optional, Union

from ..data.journal import entry_to_dict, new_journal_entry
from ..data.models import ReferenceSecurity, TradeJournalEntry, TradeType
from ..errors import PersistenceError
from ..logging import get_logger
from ..utils.time import to_calendar_day

MEMORY_DB = ":memory:"
SORT_COLUMNS = {"timestamp": "timestamp", "date": "trade_date"}


def _utc_iso(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat(timespec="microseconds")


class JournalStore:
    """SQLite-based trade journal store."""

    def __init__(self, db_path: str = "journal.db"):
        self.db_path = db_path
        self.logger = get_logger("journal.store")
        self._lock = threading.Lock()
        self._memory_conn: Optional[sqlite3.Connection] = None

        if db_path == MEMORY_DB:
            self._memory_conn = sqlite3.connect(MEMORY_DB, check_same_thread=False)
            self._memory_conn.row_factory = sqlite3.Row
        else:
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        self._init_database()

    def _init_database(self) -> None:
        """Initialize database schema."""
        with self._get_connection("init") as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS journal_entries (
                    id TEXT PRIMARY KEY,
                    stock_name TEXT NOT NULL,
                    instrument_id TEXT NOT NULL,
                    profit REAL NOT NULL,
                    trade_date TEXT NOT NULL,
                    timestamp TEXT NOT NULL,
                    trade_type TEXT NOT NULL
                )
            """)

            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_journal_trade_date ON journal_entries(trade_date)
            """)

            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_journal_timestamp ON journal_entries(timestamp)
            """)

            conn.commit()

    @contextmanager
    def _get_connection(self, operation: str):
        """Get database connection, converting sqlite errors to PersistenceError."""
        conn = None
        try:
            conn = self._memory_conn or sqlite3.connect(self.db_path, timeout=30.0)
            conn.row_factory = sqlite3.Row
            yield conn
        except sqlite3.Error as e:
            if conn:
                conn.rollback()
            self.logger.error("Database error", operation=operation, error=str(e))
            raise PersistenceError(f"Journal {operation} failed: {e}",
                                   operation=operation, target=self.db_path) from e
        finally:
            if conn and conn is not self._memory_conn:
                conn.close()

    def save(self, entry: TradeJournalEntry) -> TradeJournalEntry:
        """
        Persist a new entry.

        Entries are never updated in place; saving an id twice fails.

        Raises:
            PersistenceError: If the insert fails
        """
        with self._lock:
            with self._get_connection("save") as conn:
                conn.execute("""
                    INSERT INTO journal_entries (
                        id, stock_name, instrument_id, profit,
                        trade_date, timestamp, trade_type
                    ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """, (
                    entry.id,
                    entry.stock_name,
                    entry.instrument_id,
                    entry.profit,
                    to_calendar_day(entry.trade_date).isoformat(),
                    _utc_iso(entry.timestamp),
                    entry.trade_type.value,
                ))
                conn.commit()

        self.logger.info(
            "Journal entry saved",
            entry_id=entry.id,
            stock_name=entry.stock_name,
            profit=entry.profit,
            trade_date=to_calendar_day(entry.trade_date).isoformat()
        )
        return entry

    def create(self,
               security: ReferenceSecurity,
               amount: Union[int, float, str],
               trade_type: Union[TradeType, str],
               trade_date: Union[date, datetime],
               now: Optional[datetime] = None) -> TradeJournalEntry:
        """Build an entry from user input and save it."""
        entry = new_journal_entry(security, amount, trade_type, trade_date, now=now)
        return self.save(entry)

    def get(self, entry_id: str) -> Optional[TradeJournalEntry]:
        """Get an entry by id."""
        with self._get_connection("get") as conn:
            row = conn.execute("""
                SELECT * FROM journal_entries WHERE id = ?
            """, (entry_id,)).fetchone()

            return self._row_to_entry(row) if row else None

    def fetch_all(self, sort_by: str = "timestamp", descending: bool = True) -> list[TradeJournalEntry]:
        """
        Snapshot of all entries.

        Args:
            sort_by: "timestamp" (creation time) or "date" (trade date)
            descending: Newest first when True

        Raises:
            ValueError: If sort_by is not a known key
        """
        if sort_by not in SORT_COLUMNS:
            raise ValueError(f"Unknown sort key: {sort_by}")
        column = SORT_COLUMNS[sort_by]
        order = "DESC" if descending else "ASC"

        with self._get_connection("fetch") as conn:
            rows = conn.execute(
                f"SELECT * FROM journal_entries ORDER BY {column} {order}, id {order}"
            ).fetchall()

            return [self._row_to_entry(row) for row in rows]

    def fetch_between(self, start: date, end: date) -> list[TradeJournalEntry]:
        """Entries with start <= trade date < end, oldest first."""
        with self._get_connection("fetch") as conn:
            rows = conn.execute("""
                SELECT * FROM journal_entries
                WHERE trade_date >= ? AND trade_date < ?
                ORDER BY trade_date, timestamp
            """, (start.isoformat(), end.isoformat())).fetchall()

            return [self._row_to_entry(row) for row in rows]

    def delete(self, entry_id: str) -> bool:
        """Delete an entry; True if it existed."""
        with self._lock:
            with self._get_connection("delete") as conn:
                cursor = conn.execute("""
                    DELETE FROM journal_entries WHERE id = ?
                """, (entry_id,))
                conn.commit()
                deleted = cursor.rowcount > 0

        if deleted:
            self.logger.info("Journal entry deleted", entry_id=entry_id)
        return deleted

    def count(self) -> int:
        with self._get_connection("count") as conn:
            return conn.execute("SELECT COUNT(*) FROM journal_entries").fetchone()[0]

    def get_stats(self) -> dict[str, Any]:
        """Entry counts and profit totals by trade type."""
        with self._get_connection("stats") as conn:
            total_count = conn.execute("SELECT COUNT(*) FROM journal_entries").fetchone()[0]

            by_type = {}
            for row in conn.execute("""
                SELECT trade_type, COUNT(*) AS count, SUM(profit) AS total
                FROM journal_entries GROUP BY trade_type
            """):
                by_type[row["trade_type"]] = {"count": row["count"], "total": row["total"]}

            net = conn.execute("SELECT COALESCE(SUM(profit), 0) FROM journal_entries").fetchone()[0]

            return {
                "total_entries": total_count,
                "entries_by_type": by_type,
                "net_profit": net,
            }

    def export_json(self, indent: int = 2) -> str:
        """All entries as a JSON array, newest first."""
        return json.dumps([entry_to_dict(e) for e in self.fetch_all()], indent=indent)

    def close(self) -> None:
        if self._memory_conn is not None:
            self._memory_conn.close()
            self._memory_conn = None

    def _row_to_entry(self, row: sqlite3.Row) -> TradeJournalEntry:
        """Convert database row to TradeJournalEntry."""
        return TradeJournalEntry(
            id=row["id"],
            stock_name=row["stock_name"],
            instrument_id=row["instrument_id"],
            profit=row["profit"],
            trade_date=date.fromisoformat(row["trade_date"]),
            timestamp=datetime.fromisoformat(row["timestamp"]),
            trade_type=TradeType(row["trade_type"]),
        )
