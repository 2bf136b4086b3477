"""
Shared time helpers for chart lookups.

Chart points are unix timestamps in seconds (UTC). Offsets are whole days
counted back from a reference "now", which callers may pin for
reproducible output.
"""

from __future__ import annotations
from datetime import datetime, timezone
from typing import Optional

from .config import SECONDS_PER_DAY


def to_dt(ts: int) -> datetime:
    """Convert a unix timestamp to an aware UTC datetime."""
    return datetime.fromtimestamp(int(ts), tz=timezone.utc)


def to_date_utc(ts: int) -> str:
    """Convert a unix timestamp to a UTC calendar date (YYYY-MM-DD)."""
    return to_dt(ts).date().isoformat()


def now_ts() -> int:
    return int(datetime.now(timezone.utc).timestamp())


def days_before(days: int, now: Optional[int] = None) -> int:
    """Timestamp `days` whole days before `now` (defaults to the current time)."""
    ref = now_ts() if now is None else int(now)
    return ref - int(days) * SECONDS_PER_DAY
