# chains.py
# ------------------------------------------------------------
# Per-chain rollups for the chains overview page.
#
# Features:
# - ChainRecord: one row per chain (tvl at 0/1/7/30 day offsets, mcap,
#   protocol count, extra TVL by category, change_*)
# - prev_tvl_from_chart: as-of lookup into a chain's (timestamp, tvl) chart
# - count_protocols_per_chain / aggregate_extra_tvl: folds over the
#   protocol collection
# - group_by_parent: parent chain -> set of child chains
# - chain_categories / select_chains: category universe and chain selection
#
# Chain metadata entries come from the DefiLlama config feed
# (chainCoingeckoIds): {geckoId, symbol, cmcId, categories, parent?}.
# ------------------------------------------------------------

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from functools import reduce
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

import numpy as np

from .change import percent_change
from .classification import split_chain_section
from .config import (
    ALL_CATEGORY,
    EVM_CATEGORY,
    EXCLUDED_CHAINS,
    NON_EVM_CATEGORY,
    TVL_FIELDS,
    TVL_OFFSETS,
)
from .dates import days_before, now_ts

Point = Sequence[float]
ExtraTvl = Dict[str, Dict[str, float]]


def _read_only(extra_tvl: Optional[Mapping[str, Mapping[str, float]]]) -> Mapping[str, Mapping[str, float]]:
    # detached from the fold accumulator and not writable through the record
    return MappingProxyType({
        category: MappingProxyType(dict(fields)) for category, fields in (extra_tvl or {}).items()
    })


class CategoryNotFound(LookupError):
    """Requested chain category is not part of the known category universe."""

    def __init__(self, category: str) -> None:
        super().__init__(f"Unknown chain category: {category}")
        self.category = category


@dataclass(frozen=True)
class ChainRecord:
    name: str
    symbol: str
    tvl: Optional[float]
    tvl_prev_day: Optional[float]
    tvl_prev_week: Optional[float]
    tvl_prev_month: Optional[float]
    mcap: Optional[float]
    protocols: int
    extra_tvl: Mapping[str, Mapping[str, float]] = field(default_factory=lambda: MappingProxyType({}))
    change_1d: Optional[float] = None
    change_7d: Optional[float] = None
    change_1m: Optional[float] = None

    @staticmethod
    def from_chart(
        name: str,
        chart: Optional[Sequence[Point]],
        meta: Optional[Mapping[str, Any]],
        mcaps: Mapping[str, Any],
        protocols: int,
        extra_tvl: Optional[ExtraTvl],
        now: Optional[int] = None,
    ) -> "ChainRecord":
        tvls = tvl_at_offsets(chart, now)
        meta = meta or {}
        tvl = tvls["tvl"]
        return ChainRecord(
            name=name,
            symbol=meta.get("symbol") or "-",
            tvl=tvl,
            tvl_prev_day=tvls["tvlPrevDay"],
            tvl_prev_week=tvls["tvlPrevWeek"],
            tvl_prev_month=tvls["tvlPrevMonth"],
            mcap=market_cap(meta.get("geckoId"), mcaps),
            protocols=protocols,
            extra_tvl=_read_only(extra_tvl),
            change_1d=percent_change(tvl, tvls["tvlPrevDay"]),
            change_7d=percent_change(tvl, tvls["tvlPrevWeek"]),
            change_1m=percent_change(tvl, tvls["tvlPrevMonth"]),
        )

    def as_dict(self) -> Dict[str, Any]:
        """Display keys, matching the protocol rows."""
        return {
            "name": self.name,
            "symbol": self.symbol,
            "tvl": self.tvl,
            "tvlPrevDay": self.tvl_prev_day,
            "tvlPrevWeek": self.tvl_prev_week,
            "tvlPrevMonth": self.tvl_prev_month,
            "mcap": self.mcap,
            "protocols": self.protocols,
            "extraTvl": {category: dict(fields) for category, fields in self.extra_tvl.items()},
            "change_1d": self.change_1d,
            "change_7d": self.change_7d,
            "change_1m": self.change_1m,
        }


# -------------- Chart lookups --------------

def _chart_arrays(chart: Optional[Sequence[Point]]) -> Tuple[np.ndarray, List[Any]]:
    points = sorted((p for p in (chart or []) if p is not None and len(p) >= 2), key=lambda p: p[0])
    ts = np.asarray([int(p[0]) for p in points], dtype="int64")
    return ts, [p[1] for p in points]


def _asof(ts: np.ndarray, values: List[Any], target: int) -> Optional[float]:
    # latest point with timestamp <= target
    idx = int(np.searchsorted(ts, target, side="right"))
    if idx == 0:
        return None
    return values[idx - 1]


def prev_tvl_from_chart(chart: Optional[Sequence[Point]], days: int, now: Optional[int] = None) -> Optional[float]:
    """Value of the most recent chart point at or before `now - days`; None if there is none."""
    ts, values = _chart_arrays(chart)
    return _asof(ts, values, days_before(days, now))


def tvl_at_offsets(chart: Optional[Sequence[Point]], now: Optional[int] = None) -> Dict[str, Optional[float]]:
    """tvl / tvlPrevDay / tvlPrevWeek / tvlPrevMonth looked up in a single pass over the chart."""
    ref = now_ts() if now is None else int(now)
    ts, values = _chart_arrays(chart)
    return {key: _asof(ts, values, days_before(days, ref)) for key, days in TVL_OFFSETS.items()}


def market_cap(gecko_id: Optional[str], mcaps: Mapping[str, Any]) -> Optional[float]:
    if not gecko_id:
        return None
    entry = mcaps.get(gecko_id) or {}
    return entry.get("usd_market_cap") or None


# -------------- Protocol folds --------------

def count_protocols_per_chain(protocols: Iterable[Mapping[str, Any]]) -> Counter:
    return Counter(chain for p in protocols for chain in (p.get("chains") or []))


def _fold_section(acc: Dict[str, ExtraTvl], item: Tuple[str, Any]) -> Dict[str, ExtraTvl]:
    key, section = item
    parts = split_chain_section(key)
    if parts is None:
        return acc
    chain, category = parts
    section = section or {}
    per_chain = acc.setdefault(chain, {})
    prior = per_chain.get(category) or dict.fromkeys(TVL_FIELDS, 0)
    # summed across protocols, never overwritten
    per_chain[category] = {f: prior[f] + (section.get(f) or 0) for f in TVL_FIELDS}
    return acc


def aggregate_extra_tvl(protocols: Iterable[Mapping[str, Any]]) -> Dict[str, ExtraTvl]:
    """Sum every protocol's "<chain>-<category>" sections into {chain: {category: tvl fields}}."""
    sections = (
        (key, section)
        for p in protocols
        for key, section in (p.get("chainTvls") or {}).items()
    )
    return reduce(_fold_section, sections, {})


def build_chain_records(
    chains: Sequence[str],
    chain_charts: Mapping[str, Mapping[str, Sequence[Point]]],
    chain_meta: Mapping[str, Mapping[str, Any]],
    mcaps: Mapping[str, Any],
    protocols: Sequence[Mapping[str, Any]],
    now: Optional[int] = None,
) -> List[ChainRecord]:
    """One ChainRecord per chain, highest tvl first.

    chain_charts maps chain name to its chart payload ({"tvl": [[ts, v], ...], ...}).
    """
    ref = now_ts() if now is None else int(now)
    counts = count_protocols_per_chain(protocols)
    extra = aggregate_extra_tvl(protocols)

    records = [
        ChainRecord.from_chart(
            name=name,
            chart=(chain_charts.get(name) or {}).get("tvl"),
            meta=chain_meta.get(name),
            mcaps=mcaps,
            protocols=counts.get(name, 0),
            extra_tvl=extra.get(name),
            now=ref,
        )
        for name in chains
    ]
    records.sort(key=lambda r: r.tvl or 0, reverse=True)
    return records


# -------------- Chain metadata --------------

def group_by_parent(chains: Iterable[str], chain_meta: Mapping[str, Mapping[str, Any]]) -> Dict[str, Set[str]]:
    """parent -> children; chains without a declared parent are left out entirely."""
    grouping: Dict[str, Set[str]] = {}
    for chain in chains:
        parent = (chain_meta.get(chain) or {}).get("parent")
        if parent:
            grouping.setdefault(parent, set()).add(chain)
    return grouping


def chain_categories(chain_meta: Mapping[str, Mapping[str, Any]]) -> List[str]:
    """Every category declared in the chain metadata, in first-seen order."""
    seen: List[str] = []
    for meta in chain_meta.values():
        for category in (meta or {}).get("categories") or []:
            if category not in seen:
                seen.append(category)
    return seen


def category_exists(category: str, chain_meta: Mapping[str, Mapping[str, Any]]) -> bool:
    return category in (ALL_CATEGORY, NON_EVM_CATEGORY) or category in chain_categories(chain_meta)


def select_chains(
    chains: Iterable[str],
    category: str,
    chain_meta: Mapping[str, Mapping[str, Any]],
) -> List[str]:
    """Chains shown for a category; feed order is kept."""
    selected = []
    for chain in chains:
        if chain in EXCLUDED_CHAINS:
            continue
        categories = (chain_meta.get(chain) or {}).get("categories") or []
        if category == ALL_CATEGORY:
            selected.append(chain)
        elif category == NON_EVM_CATEGORY:
            if EVM_CATEGORY not in categories:
                selected.append(chain)
        elif category in categories:
            selected.append(chain)
    return selected
