"""JSON parser for GeoGuessr private feed pages.

A page of /api/v4/feed/private looks like:

    {
        "entries": [
            {
                "type": 7,
                "time": "2025-03-02T18:11:09.000Z",
                "payload": "[{\"type\": 1, \"time\": \"...\", \"payload\": {...}}]"
            }
        ],
        "paginationToken": "..."
    }

Entry payloads are JSON strings that decode to a single object or a list of
objects. Only the shapes needed for map play counts are recognized.
"""

from __future__ import annotations

from datetime import datetime, timezone
import json
import logging
import re
from typing import Any

from ..core.types import FeedEntry, FeedPage, GamePayload

logger = logging.getLogger(__name__)

_FRACTION_RE = re.compile(r"(?<=\d)\.(\d+)")


class PayloadDecodeError(ValueError):
    """Raised when a single entry payload cannot be decoded."""


def parse_feed_page(data: Any) -> FeedPage:
    """Parse one decoded feed response into a FeedPage.

    Args:
        data: The parsed JSON body of a feed response

    Returns:
        FeedPage with entries in feed order. Items that are not JSON
        objects are dropped.

    Raises:
        ValueError: If the body is not an object with an 'entries' list
    """
    if not isinstance(data, dict) or not isinstance(data.get("entries"), list):
        raise ValueError("Invalid feed page: missing 'entries' list")

    entries: list[FeedEntry] = []
    for item in data["entries"]:
        if not isinstance(item, dict):
            logger.debug("Skipping non-object feed entry: %r", item)
            continue
        entries.append(
            FeedEntry(
                type=item.get("type"),
                payload=item.get("payload"),
                time=item.get("time"),
            )
        )

    token = data.get("paginationToken") or None
    return FeedPage(entries=entries, pagination_token=token)


def decode_activity_entry(entry: FeedEntry) -> list[GamePayload]:
    """Decode an entry payload and fan it out into GamePayload records.

    Raises:
        PayloadDecodeError: If the payload is malformed JSON or has an
            unexpected shape
    """
    raw = entry.payload
    if isinstance(raw, (str, bytes, bytearray)):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise PayloadDecodeError(f"Malformed payload JSON: {exc}") from exc

    items = raw if isinstance(raw, list) else [raw]
    payloads: list[GamePayload] = []
    for item in items:
        if not isinstance(item, dict):
            raise PayloadDecodeError(f"Unexpected payload item: {type(item).__name__}")
        payloads.append(
            GamePayload(
                type=item.get("type"),
                payload=item.get("payload"),
                time=item.get("time"),
            )
        )
    return payloads


def parse_timestamp(value: Any) -> datetime | None:
    """Parse a feed timestamp, returning None when it is unusable.

    Accepts ISO 8601 strings (with "Z" or an offset, or a bare date) and
    epoch milliseconds.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    text = _FRACTION_RE.sub(_six_digit_fraction, text)
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def _six_digit_fraction(match: re.Match) -> str:
    # fromisoformat before 3.11 only takes 3 or 6 fractional digits
    return "." + match.group(1)[:6].ljust(6, "0")
