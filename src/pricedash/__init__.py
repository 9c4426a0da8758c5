"""
Live Price Comparison Dashboard.

Polls a price aggregation endpoint for one symbol across a user-selected
set of exchanges, keeps the latest snapshot and a rolling history for charting.
"""

__version__ = "1.0.0"
__author__ = "Tim"
