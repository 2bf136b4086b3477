"""
Protocol list shaping.

Takes the raw protocol collection from the protocols feed and produces the
rows shown on protocol listing pages:

    * optional chain filter (chain-scoped TVL + chain-prefixed extra TVL)
    * optional case-insensitive category filter
    * change_1d / change_7d / change_1m against the three TVL baselines
    * projection down to an allow-list of display fields

Input dicts are copied before fields are attached; callers keep their data.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from .change import percent_change
from .classification import classify_section
from .config import BASIC_PROPERTIES, DEFAULT_PROTOCOL_PROPS


def standardize_protocol_name(name: Optional[str]) -> str:
    """Slug used to key protocols by name, e.g. "Curve Finance" -> "curve-finance"."""
    return (name or "").lower().replace(" ", "-").replace("'", "")


def get_protocol_names(protocols: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [{"name": p.get("name"), "symbol": p.get("symbol")} for p in protocols]


def keep_needed_properties(protocol: Dict[str, Any], properties: Optional[List[str]] = None) -> Dict[str, Any]:
    """Project a protocol onto `properties`; absent keys are left out, None values kept."""
    properties = BASIC_PROPERTIES if properties is None else properties
    return {prop: protocol[prop] for prop in properties if prop in protocol}


def index_protocols(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Normalize a raw protocols payload into protocols / chains / categories."""
    protocols = payload.get("protocols") or []
    return {
        "protocols_dict": {standardize_protocol_name(p.get("name")): p for p in protocols},
        "protocols": protocols,
        "chains": payload.get("chains") or [],
        "categories": payload.get("protocolCategories") or [],
    }


def _matches_category(protocol: Dict[str, Any], category: str) -> bool:
    protocol_category = protocol.get("category") or ""
    return category.lower() == protocol_category.lower()


def _extra_tvl(chain_tvls: Dict[str, Any], chain: Optional[str]) -> Dict[str, Any]:
    extra: Dict[str, Any] = {}
    for section_name, section_tvl in chain_tvls.items():
        is_aux, key = classify_section(section_name, chain)
        if is_aux:
            extra[key] = section_tvl
    return extra


def shape_protocol(protocol: Dict[str, Any], chain: Optional[str] = None) -> Dict[str, Any]:
    """Return a copy of `protocol` with chain-scoped TVL, change_* and extraTvl attached."""
    shaped = dict(protocol)
    chain_tvls = shaped.get("chainTvls") or {}

    if chain:
        section = chain_tvls.get(chain) or {}
        tvl = section.get("tvl")
        shaped["tvl"] = 0 if tvl is None else tvl
        shaped["tvlPrevDay"] = section.get("tvlPrevDay")
        shaped["tvlPrevWeek"] = section.get("tvlPrevWeek")
        shaped["tvlPrevMonth"] = section.get("tvlPrevMonth")

    tvl = shaped.get("tvl")
    shaped["change_1d"] = percent_change(tvl, shaped.get("tvlPrevDay"))
    shaped["change_7d"] = percent_change(tvl, shaped.get("tvlPrevWeek"))
    shaped["change_1m"] = percent_change(tvl, shaped.get("tvlPrevMonth"))
    shaped["extraTvl"] = _extra_tvl(chain_tvls, chain)
    return shaped


def format_protocols_data(
    protocols: Optional[Iterable[Dict[str, Any]]] = None,
    chain: Optional[str] = None,
    category: Optional[str] = None,
    protocol_props: Optional[List[str]] = None,
) -> List[Dict[str, Any]]:
    """Filter and reshape protocols for a listing page.

    With `chain`, only protocols on that chain survive, their TVL fields come
    from chainTvls[chain] and the result is sorted by tvl, highest first.
    Without `chain` the input order is preserved.
    """
    props = DEFAULT_PROTOCOL_PROPS if protocol_props is None else protocol_props
    filtered = list(protocols or [])

    if chain:
        filtered = [p for p in filtered if chain in (p.get("chains") or [])]

    if category:
        filtered = [p for p in filtered if _matches_category(p, category)]

    rows = [keep_needed_properties(shape_protocol(p, chain), props) for p in filtered]

    if chain:
        rows.sort(key=lambda r: r.get("tvl") or 0, reverse=True)

    return rows


def fuse_protocol_data(protocol_data: Dict[str, Any]) -> Dict[str, Any]:
    """Flatten a single-protocol payload: latest tvl, [date, usd] list, current chain TVLs."""
    tvl = protocol_data.get("tvl") or []
    latest = tvl[-1].get("totalLiquidityUSD") if tvl else 0
    return {
        **protocol_data,
        "tvl": latest if latest is not None else 0,
        "tvlList": [[p["date"], p.get("totalLiquidityUSD")] for p in tvl if p.get("date")],
        "historicalChainTvls": protocol_data.get("chainTvls") or {},
        "chainTvls": protocol_data.get("currentChainTvls") or {},
    }
