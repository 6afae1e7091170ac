"""Default configuration parameters for the TradePro data core."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class HeatmapParams:
    """Heatmap color-intensity parameters."""
    intensity_scale: float = 1000.0     # |profit| at which intensity saturates
    base_opacity: float = 0.3           # Opacity of the faintest non-zero cell
    opacity_span: float = 0.7           # Added on top of base at full intensity
    neutral_opacity: float = 0.2        # Opacity of a zero-profit cell
    gain_color: str = "green"
    loss_color: str = "red"
    neutral_color: str = "gray"


@dataclass(frozen=True)
class WatchlistParams:
    """Watchlist table extraction parameters."""
    min_columns: int = 7                # Rows with fewer cells are skipped
    row_selector: str = "tbody tr"      # CSS selector for data rows
    cell_selector: str = "td"           # CSS selector for cells within a row


@dataclass(frozen=True)
class ChartParams:
    """Chart series parameters."""
    default_period: str = "intraday"
    currency_symbol: str = "€"
    change_decimals: int = 3


@dataclass(frozen=True)
class JournalParams:
    """Trade journal store parameters."""
    db_path: str = "journal.db"
    default_sort: str = "timestamp"     # "timestamp" or "date"
    sort_descending: bool = True


@dataclass(frozen=True)
class ReferenceDataParams:
    """Reference securities dataset parameters."""
    path: Optional[str] = None          # JSON list of {wkn, name, instrument_id}


@dataclass(frozen=True)
class LoggingParams:
    """Logging output parameters."""
    level: str = "INFO"
    format_json: bool = False


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    heatmap: HeatmapParams
    watchlist: WatchlistParams
    chart: ChartParams
    journal: JournalParams
    reference: ReferenceDataParams
    logging: LoggingParams


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        heatmap=HeatmapParams(),
        watchlist=WatchlistParams(),
        chart=ChartParams(),
        journal=JournalParams(),
        reference=ReferenceDataParams(),
        logging=LoggingParams(),
    )
