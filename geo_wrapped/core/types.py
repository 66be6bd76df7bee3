"""
Core data types for GeoGuessr Wrapped.

This module defines the data structures that flow through the pipeline:
- FeedPage / FeedEntry: Raw pages and entries of the private activity feed
- GamePayload: A decoded sub-payload of an activity group entry
- MapCounter: Per-map play counter built during aggregation
- AggregationProgress: Snapshot handed to progress observers after each page
- Report: Final ranked summary consumed by the renderers
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

ACTIVITY_GROUP_ENTRY = 7
COMPLETED_GAME_PAYLOAD = 1
STANDARD_GAME_MODE = "Standard"


@dataclass
class FeedEntry:
    """A raw item from a feed page.

    Attributes:
        type: Entry discriminator; only ACTIVITY_GROUP_ENTRY carries games
        payload: Serialized JSON payload (one object or a list of objects)
        time: Entry timestamp, used when a sub-payload has none of its own
    """
    type: Any
    payload: Any
    time: Any = None


@dataclass
class FeedPage:
    """One fetched page of the feed, newest entries first.

    Attributes:
        entries: Entries in reverse chronological order
        pagination_token: Cursor for the next page, None once the feed is exhausted
    """
    entries: list[FeedEntry] = field(default_factory=list)
    pagination_token: str | None = None


@dataclass
class GamePayload:
    """A candidate game record after decoding and fan-out.

    Attributes:
        type: Payload discriminator; only COMPLETED_GAME_PAYLOAD is counted
        payload: Game body as decoded (normally an object with gameMode,
            mapSlug and mapName), or None when absent
        time: Own timestamp, or None to fall back to the entry time
    """
    type: Any
    payload: Any
    time: Any = None

    @property
    def game_mode(self) -> str | None:
        return self._text_field("gameMode")

    @property
    def map_slug(self) -> str | None:
        return self._text_field("mapSlug")

    @property
    def map_name(self) -> str | None:
        return self._text_field("mapName")

    def _text_field(self, key: str) -> str | None:
        if not isinstance(self.payload, dict):
            return None
        value = self.payload.get(key)
        return value if isinstance(value, str) else None


@dataclass
class MapCounter:
    """Play counter for one map, keyed by its slug.

    map_name is bound when the counter is created and never updated, so with
    newest-first traversal it holds the most recent name of the map.
    """
    map_slug: str
    map_name: str
    count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"mapSlug": self.map_slug, "mapName": self.map_name, "count": self.count}


@dataclass(frozen=True)
class AggregationProgress:
    total_games: int
    page_count: int
    unique_maps: int


@dataclass
class Report:
    """Ranked per-map play counts for one calendar year.

    Attributes:
        total_games: Number of qualifying games counted
        unique_maps: Number of distinct maps
        top_maps: Prefix of all_maps (at most top_n entries)
        all_maps: Every counter, most played first
        year: Calendar year the report covers
        page_count: Number of feed pages read
        top_n: Configured length of the top list, used for its heading
    """
    total_games: int
    unique_maps: int
    top_maps: list[MapCounter]
    all_maps: list[MapCounter]
    year: int
    page_count: int = 0
    top_n: int = 30

    def share(self, counter: MapCounter) -> float:
        """Percentage of all games played on the counter's map."""
        if not self.total_games:
            return 0.0
        return counter.count / self.total_games * 100

    def to_dict(self) -> dict[str, Any]:
        return {
            "year": self.year,
            "totalGames": self.total_games,
            "uniqueMaps": self.unique_maps,
            "pageCount": self.page_count,
            "topMaps": [counter.to_dict() for counter in self.top_maps],
            "allMaps": [counter.to_dict() for counter in self.all_maps],
        }
