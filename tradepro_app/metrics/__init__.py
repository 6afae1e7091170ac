"""Aggregations and statistics over normalized data"""

from .chart_series import ChartPeriod, select_series, summarize
from .heatmap import Granularity, Direction, advance, bucketize, heatmap_color

__all__ = [
    "ChartPeriod",
    "select_series",
    "summarize",
    "Granularity",
    "Direction",
    "advance",
    "bucketize",
    "heatmap_color",
]
