"""
Utility functions module.

Calendar arithmetic and timestamp conversion shared by the heatmap
aggregator, the chart series selector and the journal store.

Time Semantics:
- Trade dates are calendar days, independent of when an entry was created
- Weeks are ISO weeks starting on Monday
- Chart timestamps arrive as epoch milliseconds and are exposed as UTC datetimes
"""
