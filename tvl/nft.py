from __future__ import annotations

import math
from typing import Any, Dict, Mapping, Optional, Sequence


def _ieee_divide(numerator: float, denominator: Optional[float]) -> float:
    # float division that yields inf/nan instead of raising
    if denominator is None:
        return math.nan
    if denominator == 0:
        if numerator == 0 or math.isnan(numerator):
            return math.nan
        return math.copysign(math.inf, numerator)
    return numerator / denominator


def get_nft_statistics(chart: Sequence[Mapping[str, Any]]) -> Dict[str, float]:
    """Cumulative and latest-day volume figures for an NFT volume chart.

    daily_change compares the last two volumeUSD values without a baseline
    guard: a zero previous day gives inf (or nan), a missing one gives nan.
    """
    total_volume = sum(point.get("volume") or 0 for point in chart)
    total_volume_usd = sum(point.get("volumeUSD") or 0 for point in chart)

    last = chart[-1] if chart else {}
    daily_volume = last.get("volume") or 0
    daily_volume_usd = last.get("volumeUSD") or 0

    daily_change: float = 0
    if len(chart) >= 2:
        previous = chart[-2].get("volumeUSD")
        if previous is None:
            daily_change = math.nan
        else:
            daily_change = _ieee_divide(daily_volume_usd - previous, previous) * 100

    return {
        "totalVolumeUSD": total_volume_usd,
        "totalVolume": total_volume,
        "dailyVolumeUSD": daily_volume_usd,
        "dailyVolume": daily_volume,
        "dailyChange": daily_change,
    }
