"""Tests for the yearly feed aggregation."""

from __future__ import annotations

import asyncio
import json

import pytest

from geo_wrapped.core.aggregator import FeedAggregator
from geo_wrapped.core.types import AggregationProgress, FeedEntry, FeedPage
from geo_wrapped.fetch.client import FeedFetchError


def _game(slug, name, time="2025-06-01T12:00:00.000Z", mode="Standard", payload_type=1):
    body = {"gameMode": mode}
    if slug is not None:
        body["mapSlug"] = slug
    if name is not None:
        body["mapName"] = name
    return {"type": payload_type, "time": time, "payload": body}


def _entry(*games, time=None, entry_type=7) -> FeedEntry:
    return FeedEntry(type=entry_type, payload=json.dumps(list(games)), time=time)


def _pages(*entry_lists) -> dict[str | None, FeedPage]:
    """Chain pages by cursor: None -> cursor-1 -> cursor-2 ..."""
    pages: dict[str | None, FeedPage] = {}
    for index, entries in enumerate(entry_lists):
        cursor = None if index == 0 else f"cursor-{index}"
        next_cursor = f"cursor-{index + 1}" if index + 1 < len(entry_lists) else None
        pages[cursor] = FeedPage(entries=list(entries), pagination_token=next_cursor)
    return pages


class FakeFeed:
    def __init__(self, pages: dict[str | None, FeedPage], fail_on: str | None = None):
        self.pages = pages
        self.fail_on = fail_on
        self.calls: list[str | None] = []

    async def fetch_page(self, cursor: str | None) -> FeedPage:
        self.calls.append(cursor)
        if cursor is not None and cursor == self.fail_on:
            raise FeedFetchError("HTTP error! status: 500", status_code=500)
        return self.pages[cursor]


class FakeSleep:
    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def _aggregate(feed: FakeFeed, progress_callback=None, **kwargs):
    sleep = kwargs.pop("sleep", FakeSleep())
    aggregator = FeedAggregator(feed.fetch_page, sleep=sleep, **kwargs)
    return asyncio.run(aggregator.aggregate(progress_callback))


def test_all_maps_sorted_descending_and_totals_consistent():
    games = []
    for index in range(35):
        games.extend(_game(f"map-{index}", f"Map {index}") for _ in range(index % 7 + 1))
    feed = FakeFeed(_pages([_entry(*games[:60])], [_entry(*games[60:])]))

    report = _aggregate(feed)

    counts = [counter.count for counter in report.all_maps]
    assert counts == sorted(counts, reverse=True)
    assert sum(counts) == report.total_games == len(games)
    assert report.unique_maps == 35
    assert len(report.top_maps) == 30
    assert report.top_maps == report.all_maps[:30]


def test_top_maps_is_whole_list_when_fewer_than_thirty():
    feed = FakeFeed(_pages([_entry(_game("a", "A"), _game("b", "B"), _game("a", "A"))]))

    report = _aggregate(feed)

    assert report.top_maps == report.all_maps
    assert [(c.map_slug, c.count) for c in report.all_maps] == [("a", 2), ("b", 1)]


def test_ties_keep_first_seen_order():
    feed = FakeFeed(_pages([_entry(_game("new", "New"), _game("old", "Old"))]))

    report = _aggregate(feed)

    assert [c.map_slug for c in report.all_maps] == ["new", "old"]


def test_most_recent_map_name_wins():
    feed = FakeFeed(
        _pages(
            [_entry(_game("renamed", "B", time="2025-11-01T10:00:00Z"))],
            [_entry(_game("renamed", "A", time="2025-02-01T10:00:00Z"))],
        )
    )

    report = _aggregate(feed)

    assert report.unique_maps == 1
    assert report.all_maps[0].map_name == "B"
    assert report.all_maps[0].count == 2


def test_stops_at_first_game_of_previous_year():
    feed = FakeFeed(
        _pages(
            [_entry(_game("a", "A")), _entry(_game("b", "B")), _entry(_game("a", "A"))],
            [
                _entry(_game("c", "C", time="2025-01-02T00:00:00Z")),
                _entry(_game("d", "D", time="2024-12-31T23:00:00Z")),
                _entry(_game("e", "E", time="2025-01-01T08:00:00Z")),
            ],
            [_entry(_game("f", "F"))],
        )
    )
    sleep = FakeSleep()

    report = _aggregate(feed, sleep=sleep)

    assert feed.calls == [None, "cursor-1"]
    assert sleep.delays == [0.1]
    assert report.total_games == 4
    assert {c.map_slug for c in report.all_maps} == {"a", "b", "c"}
    assert report.page_count == 2


def test_stop_abandons_rest_of_sub_payloads():
    feed = FakeFeed(
        _pages(
            [
                _entry(
                    _game("a", "A"),
                    _game("old", "Old", time="2024-06-01T00:00:00Z"),
                    _game("b", "B"),
                ),
                _entry(_game("c", "C")),
            ]
        )
    )

    report = _aggregate(feed)

    assert report.total_games == 1
    assert [c.map_slug for c in report.all_maps] == ["a"]


def test_malformed_entry_is_skipped():
    feed = FakeFeed(
        _pages(
            [
                _entry(_game("a", "A")),
                FeedEntry(type=7, payload="{not json", time="2025-05-05T00:00:00Z"),
                _entry(_game("b", "B")),
            ]
        )
    )

    report = _aggregate(feed)

    assert report.total_games == 2


@pytest.mark.parametrize(
    "game",
    [
        _game("a", "A", mode="Duels"),
        _game(None, "A"),
        _game("a", None),
        _game("a", ""),
        _game("a", "A", payload_type=2),
        _game("a", "A", payload_type=True),
        _game("a", 7),
        {"type": 1, "time": "2025-06-01T00:00:00Z"},
        {"type": 1, "time": "2025-06-01T00:00:00Z", "payload": "Standard"},
    ],
)
def test_non_qualifying_games_are_not_counted(game):
    feed = FakeFeed(_pages([_entry(game)]))

    report = _aggregate(feed)

    assert report.total_games == 0
    assert report.all_maps == []


def test_other_entry_types_are_ignored():
    old = _game("old", "Old", time="2020-01-01T00:00:00Z")
    feed = FakeFeed(_pages([_entry(old, entry_type=6), _entry(_game("a", "A"))], [_entry(_game("b", "B"))]))

    report = _aggregate(feed)

    assert report.total_games == 2
    assert feed.calls == [None, "cursor-1"]


def test_boolean_entry_type_is_not_an_activity_group():
    feed = FakeFeed(_pages([_entry(_game("a", "A"), entry_type=True), _entry(_game("b", "B"))]))

    report = _aggregate(feed)

    assert [c.map_slug for c in report.all_maps] == ["b"]


@pytest.mark.parametrize("slug", [["world"], {"id": "world"}, 42])
def test_non_string_map_slug_is_skipped_without_error(slug):
    feed = FakeFeed(_pages([_entry(_game("a", "A")), _entry(_game(slug, "World")), _entry(_game("a", "A"))]))

    report = _aggregate(feed)

    assert report.total_games == 2
    assert [(c.map_slug, c.count) for c in report.all_maps] == [("a", 2)]


@pytest.mark.parametrize("body", [{}, [], "not a game", 5])
def test_older_game_with_any_present_body_stops_the_walk(body):
    older = {"type": 1, "time": "2024-12-31T12:00:00Z", "payload": body}
    feed = FakeFeed(_pages([_entry(_game("a", "A")), _entry(older), _entry(_game("b", "B"))], [_entry(_game("c", "C"))]))

    report = _aggregate(feed)

    assert report.total_games == 1
    assert feed.calls == [None]


@pytest.mark.parametrize("body", [None, "", 0, False])
def test_older_game_without_body_does_not_stop_the_walk(body):
    older = {"type": 1, "time": "2024-12-31T12:00:00Z", "payload": body}
    feed = FakeFeed(_pages([_entry(older), _entry(_game("a", "A"))], [_entry(_game("b", "B"))]))

    report = _aggregate(feed)

    assert report.total_games == 2
    assert feed.calls == [None, "cursor-1"]


def test_single_object_payload_is_counted():
    entry = FeedEntry(type=7, payload=json.dumps(_game("solo", "Solo")))
    feed = FakeFeed(_pages([entry]))

    report = _aggregate(feed)

    assert report.total_games == 1
    assert report.all_maps[0].map_slug == "solo"


def test_entry_time_is_used_when_game_has_none():
    counted = _entry(_game("a", "A", time=None), time="2025-03-01T00:00:00Z")
    older = _entry(_game("b", "B", time=None), time="2024-03-01T00:00:00Z")
    feed = FakeFeed(_pages([counted, older], [_entry(_game("c", "C"))]))

    report = _aggregate(feed)

    assert report.total_games == 1
    assert feed.calls == [None]


def test_undated_game_neither_counts_nor_stops():
    undated = _entry(_game("a", "A", time=None))
    feed = FakeFeed(_pages([undated], [_entry(_game("b", "B"))]))

    report = _aggregate(feed)

    assert report.total_games == 1
    assert feed.calls == [None, "cursor-1"]


def test_games_after_target_year_are_skipped():
    feed = FakeFeed(_pages([_entry(_game("future", "Future", time="2026-01-03T00:00:00Z"), _game("a", "A"))]))

    report = _aggregate(feed)

    assert [c.map_slug for c in report.all_maps] == ["a"]


def test_target_year_is_configurable():
    feed = FakeFeed(
        _pages(
            [_entry(_game("a", "A", time="2024-05-01T00:00:00Z"))],
            [_entry(_game("b", "B", time="2023-05-01T00:00:00Z"))],
        )
    )

    report = _aggregate(feed, target_year=2024)

    assert report.year == 2024
    assert report.total_games == 1
    assert feed.calls == [None, "cursor-1"]


def test_empty_feed_returns_zero_report():
    feed = FakeFeed({None: FeedPage(entries=[], pagination_token=None)})
    sleep = FakeSleep()

    report = _aggregate(feed, sleep=sleep)

    assert report.total_games == 0
    assert report.unique_maps == 0
    assert report.top_maps == []
    assert sleep.delays == []


def test_fetch_failure_propagates_without_report():
    feed = FakeFeed(_pages([_entry(_game("a", "A"))], [_entry(_game("b", "B"))]), fail_on="cursor-1")
    seen: list[AggregationProgress] = []

    with pytest.raises(FeedFetchError) as excinfo:
        _aggregate(feed, seen.append)

    assert excinfo.value.status_code == 500
    assert len(seen) == 1


def test_progress_reported_after_every_page():
    feed = FakeFeed(_pages([_entry(_game("a", "A"))], [_entry(_game("b", "B")), _entry(_game("a", "A"))]))
    seen: list[AggregationProgress] = []

    _aggregate(feed, seen.append)

    assert seen == [
        AggregationProgress(total_games=1, page_count=1, unique_maps=1),
        AggregationProgress(total_games=3, page_count=2, unique_maps=2),
    ]


def test_progress_callback_errors_do_not_abort():
    feed = FakeFeed(_pages([_entry(_game("a", "A"))], [_entry(_game("b", "B"))]))

    def broken_callback(progress):
        raise RuntimeError("display gone")

    report = _aggregate(feed, broken_callback)

    assert report.total_games == 2


def test_each_run_starts_from_empty_counters():
    feed = FakeFeed(_pages([_entry(_game("a", "A"), _game("b", "B"))]))
    aggregator = FeedAggregator(feed.fetch_page, sleep=FakeSleep())

    first = asyncio.run(aggregator.aggregate())
    second = asyncio.run(aggregator.aggregate())

    assert first.total_games == second.total_games == 2
    assert first.all_maps[0] is not second.all_maps[0]
