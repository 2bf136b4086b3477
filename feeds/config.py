# feeds/config.py
# Load feed endpoints and transport settings from config/api.yaml.
#
# Precedence:
#   1) Environment variables (if set)
#   2) config/api.yaml values
#   3) Hardcoded defaults

from __future__ import annotations
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULTS: Dict[str, Any] = {
    "llama": {
        "base": "https://api.llama.fi",
        "protocols": "/lite/protocols2",
        "protocol": "/updatedProtocol",
        "hourly_protocol": "/hourly",
        "chart": "/lite/charts",
        "config": "/config",
    },
    "nft": {
        "base": "https://nft.llama.fi",
        "chart": "/chart",
        "collections": "/collections",
        "collection": "/collection",
        "chains": "/chains",
        "marketplaces": "/marketplaces",
        "search": "/search",
    },
    "coingecko": {
        "coingecko_pro_api_key": "",
        "coingecko_demo_api_key": "",
        "batch_size": 100,
    },
    "timeout_sec": 30,
    "max_tries": 5,
    "workers": 4,
}


def _config_path() -> Path:
    # project root is one level up from feeds/
    return Path(__file__).resolve().parent.parent / "config" / "api.yaml"


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = _merge(out[key], value)
        else:
            out[key] = value
    return out


def _env_float(name: str) -> Optional[float]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        print(f"[warn] ignoring non-numeric {name}={raw!r}")
        return None


def load_api_config(path: Optional[Path] = None) -> Dict[str, Any]:
    cfg_path = path or _config_path()
    cfg = dict(DEFAULTS)
    try:
        if cfg_path.exists():
            cfg = _merge(cfg, yaml.safe_load(cfg_path.read_text()) or {})
    except (OSError, yaml.YAMLError) as e:
        print(f"[warn] failed to read {cfg_path}: {e}")

    base = os.getenv("LLAMA_API_BASE", "").strip()
    if base:
        cfg["llama"] = {**cfg["llama"], "base": base}

    pro = os.getenv("COINGECKO_PRO_API_KEY", "").strip()
    demo = os.getenv("COINGECKO_DEMO_API_KEY", "").strip()
    if pro or demo:
        cg = dict(cfg["coingecko"])
        if pro:
            cg["coingecko_pro_api_key"] = pro
        if demo:
            cg["coingecko_demo_api_key"] = demo
        cfg["coingecko"] = cg

    timeout = _env_float("FEEDS_TIMEOUT_SEC")
    if timeout is not None:
        cfg["timeout_sec"] = timeout

    return cfg


API_CFG = load_api_config()
