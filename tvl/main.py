import argparse
import json
import math
import sys
from pathlib import Path

import pandas as pd

from feeds.coingecko import fetch_market_caps
from feeds.http import FeedError
from feeds.llama import (
    fetch_chain_chart,
    fetch_chain_charts,
    fetch_chain_meta,
    fetch_nft_chart,
    fetch_nft_collections,
    fetch_protocols,
)

from .aggregator import (
    get_chain_page_data,
    get_chains_page_data,
    get_nft_data,
    get_protocols_page_data,
)
from .chains import CategoryNotFound, category_exists, select_chains
from .config import ALL_CATEGORY
from .protocols import index_protocols
from .stacked import stacked_dataset_frame


def _json_default(obj):
    if isinstance(obj, (set, frozenset)):
        return sorted(obj)
    raise TypeError(f"not JSON serializable: {type(obj).__name__}")


def _finite(obj):
    # inf/nan (e.g. an NFT dailyChange over a zero day) have no strict-JSON form
    if isinstance(obj, float) and not math.isfinite(obj):
        return None
    if isinstance(obj, dict):
        return {k: _finite(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_finite(v) for v in obj]
    return obj


def write_json(path: Path, data) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(_finite(data), default=_json_default, indent=2, allow_nan=False))
    print(f"💾 Wrote {path}")


def run_protocols(args) -> dict:
    page = get_protocols_page_data(fetch_protocols(), category=args.category, chain=args.chain)
    print(f"🔹 protocols: category={args.category or '-'} chain={page['chain']} rows={len(page['filteredProtocols'])}")
    return page


def run_chain(args) -> dict:
    chart = fetch_chain_chart(args.chain)
    page = get_chain_page_data(chart, fetch_protocols(), chain=args.chain)
    print(f"🔹 {args.chain or 'all chains'}: protocols={len(page['filteredProtocols'])} points={len(page['chart'])}")
    return page


def run_chains(args) -> dict:
    protocols_payload = fetch_protocols()
    chain_meta = fetch_chain_meta()
    if not category_exists(args.category, chain_meta):
        raise CategoryNotFound(args.category)
    chains = select_chains(index_protocols(protocols_payload)["chains"], args.category, chain_meta)
    charts = fetch_chain_charts(chains, workers=args.workers)
    mcaps = fetch_market_caps((chain_meta.get(c) or {}).get("geckoId") for c in chains)
    page = get_chains_page_data(args.category, protocols_payload, chain_meta, charts, mcaps)

    print(f"🔹 chains: category={args.category} chains={len(page['chainsUnique'])}")
    for row in page["chainTvls"][:10]:
        tvl = row["tvl"] or 0
        print(f"   {row['name']:<20} ${tvl:,.0f}  protocols={row['protocols']}")
    return page


def run_nft(args) -> dict:
    page = get_nft_data(fetch_nft_chart(), fetch_nft_collections())
    stats = page["statistics"]
    print(f"🔹 nft: total ${stats['totalVolumeUSD']:,.0f} | daily ${stats['dailyVolumeUSD']:,.0f}")
    return page


def write_outputs(command: str, page: dict, out_root: Path) -> None:
    out_dir = out_root / "pages"
    write_json(out_dir / f"{command}.json", page)

    if command == "chains":
        chains_csv = out_dir / "chain_tvls.csv"
        pd.DataFrame(page["chainTvls"]).drop(columns=["extraTvl"], errors="ignore").to_csv(chains_csv, index=False)
        print(f"💾 Wrote {chains_csv}")
        stacked_csv = out_dir / "stacked_dataset.csv"
        stacked_dataset_frame(page["stackedDataset"]).to_csv(stacked_csv, index=False)
        print(f"💾 Wrote {stacked_csv}")


def main(argv=None) -> int:
    p = argparse.ArgumentParser(description="Build display-ready TVL page data from DefiLlama feeds.")
    p.add_argument("--out-root", default="data/out", help="Root directory for output JSON/CSV")
    p.add_argument("--no-write", action="store_true", help="Do not write files; just print")
    sub = p.add_subparsers(dest="command", required=True)

    sp = sub.add_parser("protocols", help="Protocol listing, optionally by category and chain")
    sp.add_argument("--category", default=None)
    sp.add_argument("--chain", default=None)
    sp.set_defaults(func=run_protocols)

    sp = sub.add_parser("chain", help="Single chain page (all chains when --chain is omitted)")
    sp.add_argument("--chain", default=None)
    sp.set_defaults(func=run_chain)

    sp = sub.add_parser("chains", help="Chains overview for a chain category")
    sp.add_argument("--category", default=ALL_CATEGORY)
    sp.add_argument("--workers", type=int, default=None, help="Parallel chart fetches (default from config/api.yaml)")
    sp.set_defaults(func=run_chains)

    sp = sub.add_parser("nft", help="NFT volume overview")
    sp.set_defaults(func=run_nft)

    args = p.parse_args(argv)

    try:
        page = args.func(args)
    except CategoryNotFound as e:
        print(f"[error] {e}")
        return 2
    except FeedError as e:
        print(f"[error] feed unavailable: {e}")
        return 1

    if not args.no_write:
        write_outputs(args.command, page, Path(args.out_root))
    return 0


if __name__ == "__main__":
    sys.exit(main())
