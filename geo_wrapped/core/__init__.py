"""
Core domain models and aggregation logic.

This package contains the feed data types and the aggregator, which
are independent of HTTP and rendering.
"""

from .types import AggregationProgress, FeedEntry, FeedPage, GamePayload, MapCounter, Report
from .aggregator import FeedAggregator

__all__ = [
    "AggregationProgress",
    "FeedEntry",
    "FeedPage",
    "GamePayload",
    "MapCounter",
    "Report",
    "FeedAggregator",
]
