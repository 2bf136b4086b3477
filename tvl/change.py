from __future__ import annotations

from typing import Optional


def percent_change(current: Optional[float], previous: Optional[float]) -> Optional[float]:
    """Percent change from previous to current.

    Returns None when there is no valid baseline (previous is None or 0)
    or no current value. No rounding is applied here.
    """
    if current is None or previous is None or previous == 0:
        return None
    return ((current - previous) / previous) * 100
