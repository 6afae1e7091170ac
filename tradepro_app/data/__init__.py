"""
Data ingestion and normalization module.

Handles decoding of chart and analysis JSON payloads, extraction of scraped
watchlist tables and construction of trade journal entries.
"""
