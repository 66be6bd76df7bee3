"""
GeoGuessr Wrapped - yearly map play counts from the private activity feed.

This package walks a player's GeoGuessr activity feed, counts completed
Standard games per map for one calendar year, and renders the ranking as
a table, an HTML/Markdown report and a shareable image.

Main entry point is the CLI via `geo-wrapped run` command.

Example:
    $ geo-wrapped run --cookie "$GEOGUESSR_NCFA" -o output/
"""

__all__ = ["__version__", "FeedAggregator", "FeedClient", "FeedFetchError", "Report"]
__version__ = "0.1.0"

from .core.aggregator import FeedAggregator
from .core.types import Report
from .fetch.client import FeedClient, FeedFetchError
