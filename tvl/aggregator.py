"""
Page-data composition.

Every function here takes payloads that the feeds layer already fetched and
returns plain, JSON-serializable structures for one page:

    protocols page  -> get_protocols_page_data / get_simple_protocols_page_data
    chain page      -> get_chain_page_data
    chains overview -> get_chains_page_data
    NFT overview    -> get_nft_data

Nothing in here touches the network.
"""

from __future__ import annotations

import math
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .chains import (
    CategoryNotFound,
    build_chain_records,
    category_exists,
    chain_categories,
    group_by_parent,
    select_chains,
)
from .config import ALL_CATEGORY, EXTRA_CHART_KINDS, NON_EVM_CATEGORY
from .nft import get_nft_statistics
from .protocols import format_protocols_data, index_protocols
from .stacked import build_stacked_dataset


def _truncate_chart(series: Optional[Sequence[Sequence[Any]]]) -> List[List[Any]]:
    return [[point[0], math.trunc(point[1] or 0)] for point in (series or [])]


def get_protocols_page_data(
    protocols_payload: Mapping[str, Any],
    category: Optional[str] = None,
    chain: Optional[str] = None,
) -> Dict[str, Any]:
    """Protocols in a category, optionally narrowed to one chain.

    The chain list offered for navigation is collected before the chain
    filter so that every chain of the category stays reachable.
    """
    indexed = index_protocols(protocols_payload)
    filtered = format_protocols_data(indexed["protocols"], category=category)

    chains_seen = {c for p in filtered for c in (p.get("chains") or [])}

    if chain:
        filtered = [p for p in filtered if chain in (p.get("chains") or [])]

    return {
        "filteredProtocols": filtered,
        "chain": chain or ALL_CATEGORY,
        "category": category,
        "chains": [c for c in indexed["chains"] if c in chains_seen],
    }


def get_simple_protocols_page_data(
    protocols_payload: Mapping[str, Any],
    props: Optional[List[str]] = None,
) -> Dict[str, Any]:
    indexed = index_protocols(protocols_payload)
    return {
        "protocols": format_protocols_data(indexed["protocols"], protocol_props=props),
        "chains": indexed["chains"],
    }


def get_chain_page_data(
    chart: Optional[Mapping[str, Any]],
    protocols_payload: Mapping[str, Any],
    chain: Optional[str] = None,
) -> Dict[str, Any]:
    """Chain page: chain-scoped protocol list plus truncated tvl and extra charts."""
    chart = chart or {}
    indexed = index_protocols(protocols_payload)
    page: Dict[str, Any] = {
        "chainsSet": indexed["chains"],
        "filteredProtocols": format_protocols_data(indexed["protocols"], chain=chain),
        "chart": _truncate_chart(chart.get("tvl")),
        "extraVolumesCharts": {kind: _truncate_chart(chart.get(kind)) for kind in EXTRA_CHART_KINDS},
    }
    if chain:
        page["chain"] = chain
    return page


def category_navigation(categories: Sequence[str]) -> List[Dict[str, str]]:
    nav = [
        {"label": ALL_CATEGORY, "to": "/chains"},
        {"label": NON_EVM_CATEGORY, "to": f"/chains/{NON_EVM_CATEGORY}"},
    ]
    return nav + [{"label": c, "to": f"/chains/{c}"} for c in categories]


def get_chains_page_data(
    category: str,
    protocols_payload: Mapping[str, Any],
    chain_meta: Mapping[str, Mapping[str, Any]],
    chain_charts: Mapping[str, Mapping[str, Any]],
    mcaps: Mapping[str, Any],
    now: Optional[int] = None,
) -> Dict[str, Any]:
    """Chains overview for a chain category.

    Raises CategoryNotFound when `category` is neither "All", "Non-EVM" nor a
    category declared in the chain metadata.
    """
    if not category_exists(category, chain_meta):
        raise CategoryNotFound(category)

    indexed = index_protocols(protocols_payload)
    chains_unique = select_chains(indexed["chains"], category, chain_meta)

    records = build_chain_records(
        chains_unique,
        chain_charts,
        chain_meta,
        mcaps,
        indexed["protocols"],
        now=now,
    )
    stacked = build_stacked_dataset({name: chain_charts.get(name) or {} for name in chains_unique})

    return {
        "chainsUnique": chains_unique,
        "chainTvls": [r.as_dict() for r in records],
        "stackedDataset": stacked,
        "category": category,
        "categories": category_navigation(chain_categories(chain_meta)),
        "chainsGroupbyParent": group_by_parent(chains_unique, chain_meta),
    }


def get_nft_data(chart: Sequence[Mapping[str, Any]], collections: Sequence[Mapping[str, Any]]) -> Dict[str, Any]:
    return {
        "chart": list(chart),
        "collections": list(collections),
        "statistics": get_nft_statistics(chart),
    }
