"""Timestamp conversion.

Span and event timestamps are nanoseconds since the epoch; trace-level
timestamps (request_time, execution_duration) are milliseconds. All unit
conversion goes through here.
"""

from __future__ import annotations

import time
from datetime import datetime, timedelta, timezone

NS_PER_MS = 1_000_000
NS_PER_US = 1_000

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def now_ns() -> int:
    return time.time_ns()


def now_ms() -> int:
    return time.time_ns() // NS_PER_MS


def ms_to_ns(ms: int) -> int:
    return ms * NS_PER_MS


def ns_to_ms(ns: int) -> int:
    # Truncates toward zero.
    if ns < 0:
        return -(-ns // NS_PER_MS)
    return ns // NS_PER_MS


def ns_to_datetime(ns: int) -> datetime:
    """Convert epoch nanoseconds to an aware UTC datetime.

    ``datetime`` stops at microseconds, so the last three digits are dropped.
    """
    return _EPOCH + timedelta(microseconds=ns // NS_PER_US)


def ms_to_datetime(ms: int) -> datetime:
    return _EPOCH + timedelta(milliseconds=ms)


def datetime_to_ns(value: datetime) -> int:
    """Convert a datetime to epoch nanoseconds. Naive values are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return (value - _EPOCH) // timedelta(microseconds=1) * NS_PER_US


def datetime_to_ms(value: datetime) -> int:
    return ns_to_ms(datetime_to_ns(value))
