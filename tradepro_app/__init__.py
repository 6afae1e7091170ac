"""
TradePro App - Watchlist, chart and trade journal data core

Normalizes scraped watchlist tables and fetched chart/analysis JSON into typed
domain objects, and aggregates locally journaled trades into heatmap buckets.
"""

__version__ = "0.1.0"
__author__ = "TradePro Team"
