"""End-to-end pipeline tests: scraped page and payloads through to the heatmap."""

import json
from datetime import date, datetime, timedelta, timezone

from tradepro_app.data.models import TradeType
from tradepro_app.engine import TradeProEngine
from tradepro_app.metrics.heatmap import Direction, Granularity


class TestFullPipeline:
    """Test the engine over a file-backed journal and a settings file."""

    def test_watchlist_to_journal_to_heatmap(self, tmp_path, reference_file, watchlist_html, chart_payload):
        """Test a session: refresh, open a chart, record trades, browse the heatmap."""
        (tmp_path / "settings.yaml").write_text(
            f"journal:\n  db_path: {tmp_path / 'data' / 'journal.db'}\n"
            f"reference:\n  path: {reference_file}\n"
            "chart:\n  default_period: 6M\n",
            encoding="utf-8",
        )
        engine = TradeProEngine(config_dir=tmp_path)

        rows = engine.refresh_watchlist(watchlist_html)
        tesla = rows[0]
        assert tesla.instrument_id == "999"

        view = engine.load_chart(json.dumps(chart_payload))
        assert [p.price for p in view.points] == [9.0, 10.5]
        assert view.change_text == "+1.500 €"

        created = datetime(2025, 10, 6, 12, 0, tzinfo=timezone.utc)
        engine.record_trade(tesla.identifier, 50, TradeType.PROFIT, date(2025, 10, 6), now=created)
        engine.record_trade(tesla.identifier, 80, TradeType.LOSS, date(2025, 10, 7),
                            now=created + timedelta(seconds=1))
        engine.record_trade("865985", 20, TradeType.PROFIT, date(2025, 10, 13),
                            now=created + timedelta(seconds=2))

        week = engine.heatmap(Granularity.WEEK, date(2025, 10, 8))
        assert week.label == "Oct 06 - Oct 12, 2025"
        assert [(b.date.day, b.total_profit) for b in week.buckets] == [(6, 50.0), (7, -80.0)]
        assert [c.color for c in week.colors] == ["green", "red"]

        next_anchor = engine.navigate(date(2025, 10, 8), Granularity.WEEK, Direction.FORWARD)
        next_week = engine.heatmap(Granularity.WEEK, next_anchor)
        assert [b.total_profit for b in next_week.buckets] == [20.0]

        engine.close()

        reopened = TradeProEngine(config_dir=tmp_path)
        assert [e.stock_name for e in reopened.journal()] == ["Apple", "Tesla", "Tesla"]
        assert [e.trade_date.day for e in reopened.journal(sort_by="date")] == [13, 7, 6]
        reopened.close()
