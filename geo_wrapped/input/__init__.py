"""
Input parsing utilities.

This package contains code for decoding feed pages and entry payloads.
"""

from .feed_parser import PayloadDecodeError, decode_activity_entry, parse_feed_page, parse_timestamp

__all__ = ["PayloadDecodeError", "decode_activity_entry", "parse_feed_page", "parse_timestamp"]
