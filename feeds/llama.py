"""
DefiLlama feed fetchers.

Thin wrappers: each returns the decoded payload (or a lightly unwrapped part
of it) and raises FeedError on failure. Per-chain charts are fetched on a
thread pool; results come back in the order the chains were given.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import quote

from tqdm import tqdm

from .config import API_CFG
from .http import FeedError, get_json

# a daily series shorter than this is replaced by the hourly one
MIN_DAILY_POINTS = 7


def _llama_url(endpoint: str, *parts: str) -> str:
    cfg = API_CFG["llama"]
    url = cfg["base"].rstrip("/") + cfg[endpoint]
    for part in parts:
        url += "/" + quote(part, safe="")
    return url


def _nft_url(endpoint: str, *parts: str) -> str:
    cfg = API_CFG["nft"]
    url = cfg["base"].rstrip("/") + cfg[endpoint]
    for part in parts:
        url += "/" + quote(part, safe="")
    return url


def fetch_protocols() -> Dict[str, Any]:
    """Raw protocols payload: {protocols, chains, protocolCategories, ...}."""
    data = get_json(_llama_url("protocols"), rate_key="llama")
    if not isinstance(data, dict) or "protocols" not in data:
        raise FeedError("protocols payload missing 'protocols'")
    return data


def fetch_protocol(protocol_name: str) -> Dict[str, Any]:
    """Single protocol payload; short daily histories fall back to the hourly feed."""
    data = get_json(_llama_url("protocol", protocol_name), rate_key="llama")
    tvl = (data or {}).get("tvl") or []
    if len(tvl) < MIN_DAILY_POINTS:
        print(f"[info] {protocol_name}: {len(tvl)} daily points, using hourly chart")
        hourly = get_json(_llama_url("hourly_protocol", protocol_name), rate_key="llama")
        return {**hourly, "isHourlyChart": True}
    return data


def fetch_chain_chart(chain: Optional[str] = None) -> Dict[str, List[List[float]]]:
    """Chart payload for one chain ({tvl, staking, borrowed, ...}); all chains when chain is None."""
    url = _llama_url("chart", chain) if chain else _llama_url("chart")
    data = get_json(url, rate_key="llama")
    if not isinstance(data, dict):
        raise FeedError(f"unexpected chart payload for {chain or 'all chains'}")
    return data


def fetch_chain_charts(chains: Sequence[str], workers: Optional[int] = None) -> Dict[str, Dict[str, Any]]:
    """Fetch every chain's chart in parallel; a single failure fails the whole batch."""
    workers = int(workers or API_CFG["workers"])
    charts: Dict[str, Dict[str, Any]] = {}
    with ThreadPoolExecutor(max_workers=workers) as executor:
        future_to_chain = {executor.submit(fetch_chain_chart, chain): chain for chain in chains}
        for future in tqdm(as_completed(future_to_chain), total=len(future_to_chain), desc="charts"):
            chain = future_to_chain[future]
            try:
                charts[chain] = future.result()
            except FeedError as e:
                raise FeedError(f"chart for {chain} failed: {e}") from e
    return {chain: charts[chain] for chain in chains}


def fetch_chain_meta() -> Dict[str, Dict[str, Any]]:
    """chainCoingeckoIds from the config feed: chain -> {geckoId, symbol, cmcId, categories, parent?}."""
    data = get_json(_llama_url("config"), rate_key="llama")
    return (data or {}).get("chainCoingeckoIds") or {}


def fetch_nft_chart() -> List[Dict[str, Any]]:
    data = get_json(_nft_url("chart"), rate_key="nft")
    return data if isinstance(data, list) else []


def fetch_nft_collections() -> List[Dict[str, Any]]:
    data = get_json(_nft_url("collections"), rate_key="nft")
    return (data or {}).get("data") or []


def fetch_nft_collections_by_chain(chain: str) -> List[Dict[str, Any]]:
    data = get_json(_nft_url("collections", "chain", chain), rate_key="nft")
    return (data or {}).get("data") or []


def fetch_nft_collections_by_marketplace(marketplace: str) -> List[Dict[str, Any]]:
    data = get_json(_nft_url("collections", "marketplace", marketplace), rate_key="nft")
    return (data or {}).get("data") or []


def fetch_nft_collection(slug: str) -> Optional[Dict[str, Any]]:
    """Overview record of one collection (the entry with SK == "overview"), or None."""
    data = get_json(_nft_url("collection", slug), rate_key="nft")
    return next((item for item in data or [] if item.get("SK") == "overview"), None)


def fetch_nft_chain_chart(chain: str) -> List[Dict[str, Any]]:
    return get_json(_nft_url("chart", "chain", chain), rate_key="nft")


def fetch_nft_marketplace_chart(marketplace: str) -> List[Dict[str, Any]]:
    return get_json(_nft_url("chart", "marketplace", marketplace), rate_key="nft")


def fetch_nft_collection_chart(slug: str) -> List[Dict[str, Any]]:
    return get_json(_nft_url("chart", "collection", slug), rate_key="nft")


def fetch_nft_chains() -> Any:
    return get_json(_nft_url("chains"), rate_key="nft")


def fetch_nft_marketplaces() -> Any:
    return get_json(_nft_url("marketplaces"), rate_key="nft")


def search_nft_collections(query: str) -> List[Dict[str, Any]]:
    """Collection documents matching `query`; an empty query never hits the network."""
    if not query:
        return []
    data = get_json(_nft_url("search"), params={"query": query}, rate_key="nft")
    return [hit["_source"] for hit in (data or {}).get("hits") or []]
