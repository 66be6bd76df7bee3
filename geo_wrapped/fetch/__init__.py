"""
Feed page fetching.

This package handles authenticated HTTP access to the private feed.
"""

from .client import FeedClient, FeedFetchError

__all__ = ["FeedClient", "FeedFetchError"]
