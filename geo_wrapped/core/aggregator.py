"""
Yearly map play counts from the private activity feed.

FeedAggregator walks the feed page by page, newest first, and counts every
completed Standard game of the target year per map. The walk stops at the
first game older than the target year.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from ..input.feed_parser import PayloadDecodeError, decode_activity_entry, parse_timestamp
from ..utils.logging import log_event
from .types import (
    ACTIVITY_GROUP_ENTRY,
    COMPLETED_GAME_PAYLOAD,
    STANDARD_GAME_MODE,
    AggregationProgress,
    FeedEntry,
    FeedPage,
    GamePayload,
    MapCounter,
    Report,
)

FetchPage = Callable[[str | None], Awaitable[FeedPage]]
ProgressCallback = Callable[[AggregationProgress], None]

DEFAULT_YEAR = 2025
DEFAULT_TOP_N = 30
DEFAULT_PAGE_DELAY = 0.1


class FeedAggregator:
    """Builds a Report for one calendar year from a paginated feed.

    The feed must be strictly newest-first. Counting stops at the first game
    dated before target_year; games counted earlier are never revisited and
    same-year games after an out-of-order older one are not seen.

    Args:
        fetch_page: Coroutine returning the page for a cursor (None = first page).
            Any exception it raises aborts the run.
        target_year: Calendar year to count
        page_delay: Seconds to wait between page requests
        sleep: Awaitable sleep used for the delay
        top_n: Length of Report.top_maps
        logger: Optional logger for per-page events
    """

    def __init__(
        self,
        fetch_page: FetchPage,
        target_year: int = DEFAULT_YEAR,
        page_delay: float = DEFAULT_PAGE_DELAY,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        top_n: int = DEFAULT_TOP_N,
        logger: logging.Logger | None = None,
    ):
        self._fetch_page = fetch_page
        self.target_year = target_year
        self.page_delay = page_delay
        self._sleep = sleep
        self.top_n = top_n
        self._logger = logger

    async def aggregate(self, progress_callback: ProgressCallback | None = None) -> Report:
        """Fetch pages until the year boundary or the end of the feed.

        Each call starts from an empty counter mapping.

        Raises:
            Whatever fetch_page raises; no partial report is returned.
        """
        counters: dict[str, MapCounter] = {}
        total_games = 0
        page_count = 0
        cursor: str | None = None
        reached_older_year = False

        while not reached_older_year:
            page = await self._fetch_page(cursor)
            cursor = page.pagination_token
            page_count += 1

            for entry in page.entries:
                counted, reached_older_year = self._process_entry(entry, counters)
                total_games += counted
                if reached_older_year:
                    break

            log_event(
                self._logger,
                "Feed page processed",
                event="page_fetched",
                page=page_count,
                entries=len(page.entries),
                total_games=total_games,
                unique_maps=len(counters),
            )
            self._notify(
                progress_callback,
                AggregationProgress(
                    total_games=total_games,
                    page_count=page_count,
                    unique_maps=len(counters),
                ),
            )

            if cursor is None or reached_older_year:
                break

            await self._sleep(self.page_delay)

        log_event(
            self._logger,
            "Aggregation stopped",
            event="aggregation_stopped",
            reason="year_boundary" if reached_older_year else "feed_exhausted",
            pages=page_count,
            total_games=total_games,
        )
        return self._build_report(counters, total_games, page_count)

    def _process_entry(
        self, entry: FeedEntry, counters: dict[str, MapCounter]
    ) -> tuple[int, bool]:
        """Count the games of one entry.

        Returns:
            (games counted, whether a game older than the target year was hit)
        """
        if not _is_tag(entry.type, ACTIVITY_GROUP_ENTRY):
            return 0, False

        try:
            payloads = decode_activity_entry(entry)
        except PayloadDecodeError as exc:
            if self._logger is not None:
                self._logger.debug("Skipping malformed feed entry: %s", exc)
            return 0, False

        counted = 0
        for game in payloads:
            if not _is_tag(game.type, COMPLETED_GAME_PAYLOAD) or not _has_body(game.payload):
                continue

            played_at = parse_timestamp(game.time or entry.time)
            if played_at is None:
                continue
            if played_at.year < self.target_year:
                return counted, True
            if played_at.year == self.target_year and _is_countable(game):
                counter = counters.get(game.map_slug)
                if counter is None:
                    counter = MapCounter(map_slug=game.map_slug, map_name=game.map_name)
                    counters[game.map_slug] = counter
                counter.count += 1
                counted += 1
        return counted, False

    def _notify(
        self, progress_callback: ProgressCallback | None, progress: AggregationProgress
    ) -> None:
        if progress_callback is None:
            return
        try:
            progress_callback(progress)
        except Exception as exc:  # noqa: BLE001
            if self._logger is not None:
                self._logger.warning("Progress callback failed: %s", exc)

    def _build_report(
        self, counters: dict[str, MapCounter], total_games: int, page_count: int
    ) -> Report:
        # sorted() is stable, so ties keep first-seen (most recent) order
        all_maps = sorted(counters.values(), key=lambda c: c.count, reverse=True)
        return Report(
            total_games=total_games,
            unique_maps=len(counters),
            top_maps=all_maps[: self.top_n],
            all_maps=all_maps,
            year=self.target_year,
            page_count=page_count,
            top_n=self.top_n,
        )


def _is_tag(value: object, tag: int) -> bool:
    # bool is an int subclass; True must not pass as 1
    return type(value) is int and value == tag


def _has_body(body: object) -> bool:
    """Whether a game body is present; empty objects and lists count as present."""
    if body is None or isinstance(body, (str, bool, int, float)):
        return bool(body)
    return True


def _is_countable(game: GamePayload) -> bool:
    # map_slug and map_name are None unless the body holds non-empty strings
    return game.game_mode == STANDARD_GAME_MODE and bool(game.map_slug) and bool(game.map_name)
