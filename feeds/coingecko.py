# feeds/coingecko.py
# CoinGecko market caps for chain native assets, with API-key auth and pacing.

from __future__ import annotations
from typing import Any, Dict, Iterable, List

from .config import API_CFG
from .http import get_json

_CG = API_CFG["coingecko"]
CG_PRO_KEY = (_CG.get("coingecko_pro_api_key") or "").strip()
CG_DEMO_KEY = (_CG.get("coingecko_demo_api_key") or "").strip()

CG_BASE = "https://pro-api.coingecko.com/api/v3" if CG_PRO_KEY else "https://api.coingecko.com/api/v3"

# Default pacing: Demo ≈ 30/min → ~2.2s; Pro Analyst 250/min → ~0.24s.
_MIN_INTERVAL = 0.24 if CG_PRO_KEY else 2.2


def _cg_headers() -> dict:
    if CG_PRO_KEY:
        return {"x-cg-pro-api-key": CG_PRO_KEY}
    if CG_DEMO_KEY:
        return {"x-cg-demo-api-key": CG_DEMO_KEY}
    return {}


def _batches(ids: List[str], size: int) -> Iterable[List[str]]:
    for i in range(0, len(ids), size):
        yield ids[i:i + size]


def fetch_market_caps(gecko_ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
    """price-feed id -> {usd, usd_market_cap} from /simple/price."""
    ids = sorted({g for g in gecko_ids if g})
    out: Dict[str, Dict[str, Any]] = {}
    for batch in _batches(ids, int(_CG.get("batch_size") or 100)):
        params = {
            "ids": ",".join(batch),
            "vs_currencies": "usd",
            "include_market_cap": "true",
        }
        data = get_json(
            f"{CG_BASE}/simple/price",
            params=params,
            headers=_cg_headers(),
            rate_key="coingecko",
            min_interval=_MIN_INTERVAL,
        )
        out.update(data or {})
    return out
