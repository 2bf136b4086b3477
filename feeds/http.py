# feeds/http.py
# JSON GET with pacing and exponential backoff, shared by every feed.

from __future__ import annotations
import random
import time
from typing import Any, Dict, Optional

import requests

from .config import API_CFG


class FeedError(RuntimeError):
    """A feed could not be fetched (network failure, retries exhausted, bad payload)."""


class FeedNotFound(FeedError):
    """The feed answered 404 for the requested resource."""


_LAST_CALL: Dict[str, float] = {}


def _rate_limit(key: str, min_interval: float) -> None:
    if min_interval <= 0:
        return
    now = time.time()
    last = _LAST_CALL.get(key, 0.0)
    delay = max(0.0, min_interval - (now - last))
    if delay > 0:
        time.sleep(delay)
    _LAST_CALL[key] = time.time()


def _backoff(attempt: int) -> float:
    return min(60, 2 ** attempt + random.random())


def get_json(
    url: str,
    params: Optional[dict] = None,
    headers: Optional[dict] = None,
    max_tries: Optional[int] = None,
    timeout: Optional[float] = None,
    rate_key: str = "default",
    min_interval: float = 0.0,
) -> Any:
    """GET `url` and decode JSON.

    Network errors, 429 and 5xx are retried with backoff. 404 raises
    FeedNotFound; anything else that never succeeds raises FeedError.
    """
    tries = int(max_tries or API_CFG["max_tries"])
    timeout = float(timeout or API_CFG["timeout_sec"])
    last_err: Optional[BaseException] = None

    for attempt in range(tries):
        _rate_limit(rate_key, min_interval)
        try:
            r = requests.get(url, params=params, headers=headers or {}, timeout=timeout)
        except requests.RequestException as e:
            last_err = e
            sleep_s = _backoff(attempt)
            print(f"[net] GET {url} attempt {attempt+1} failed; sleeping {sleep_s:.1f}s")
            time.sleep(sleep_s)
            continue

        if r.status_code == 404:
            raise FeedNotFound(f"404 for {url}")
        if r.status_code == 429 or 500 <= r.status_code < 600:
            last_err = requests.HTTPError(f"{r.status_code} on {url}")
            sleep_s = _backoff(attempt)
            print(f"[rate] {r.status_code} on {url}; sleeping {sleep_s:.1f}s and retrying")
            time.sleep(sleep_s)
            continue

        try:
            r.raise_for_status()
            return r.json()
        except (requests.HTTPError, ValueError) as e:
            raise FeedError(f"GET {url} failed: {e}") from e

    raise FeedError(f"GET failed after {tries} tries: {url}. Last error: {last_err}")
