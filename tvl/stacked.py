from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple

import pandas as pd

from .config import STACKED_DATASET_FLOOR
from .dates import to_date_utc

PerChain = Dict[str, Dict[str, Any]]
StackedDataset = List[Tuple[int, PerChain]]


def merge_point(
    acc: Dict[int, PerChain],
    timestamp: int,
    chain: str,
    kind: str,
    value: Any,
) -> Dict[int, PerChain]:
    """Record acc[timestamp][chain][kind] = value, keeping sibling kinds already stored."""
    per_chain = acc.setdefault(timestamp, {})
    per_chain[chain] = {**per_chain.get(chain, {}), kind: value}
    return acc


def _points(chain_series_by_name: Mapping[str, Mapping[str, Iterable[Sequence[Any]]]]):
    for chain, series_by_kind in chain_series_by_name.items():
        for kind, points in (series_by_kind or {}).items():
            for point in points or []:
                yield chain, kind, int(point[0]), point[1]


def build_stacked_dataset(
    chain_series_by_name: Mapping[str, Mapping[str, Iterable[Sequence[Any]]]],
    floor: int = STACKED_DATASET_FLOOR,
) -> StackedDataset:
    """Fold every chain's series into [(timestamp, {chain: {kind: value}})], oldest first.

    Points strictly before `floor` are dropped.
    """
    acc: Dict[int, PerChain] = {}
    for chain, kind, ts, value in _points(chain_series_by_name):
        if ts < floor:
            continue
        acc = merge_point(acc, ts, chain, kind, value)
    return sorted(acc.items(), key=lambda kv: kv[0])


def stacked_dataset_frame(dataset: StackedDataset) -> pd.DataFrame:
    """Long-format frame (timestamp, date, chain, kind, value) for CSV export."""
    rows = [
        {"timestamp": ts, "date": to_date_utc(ts), "chain": chain, "kind": kind, "value": value}
        for ts, per_chain in dataset
        for chain, kinds in per_chain.items()
        for kind, value in kinds.items()
    ]
    if not rows:
        return pd.DataFrame(columns=["timestamp", "date", "chain", "kind", "value"])
    return pd.DataFrame(rows).sort_values(["timestamp", "chain", "kind"]).reset_index(drop=True)
