import pytest

DAY = 86400
NOW = 1700000000


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def protocols():
    return [
        {
            "name": "Aave",
            "symbol": "AAVE",
            "category": "Lending",
            "chains": ["Ethereum", "Polygon"],
            "tvl": 300,
            "tvlPrevDay": 250,
            "tvlPrevWeek": 200,
            "tvlPrevMonth": 0,
            "mcap": 1000,
            "chainTvls": {
                "Ethereum": {"tvl": 200, "tvlPrevDay": 100, "tvlPrevWeek": 160, "tvlPrevMonth": None},
                "Polygon": {"tvl": 100, "tvlPrevDay": 150},
                "Ethereum-borrowed": {"tvl": 50, "tvlPrevDay": 40, "tvlPrevWeek": 30, "tvlPrevMonth": 20},
                "Polygon-pool2": {"tvl": 10, "tvlPrevDay": 10},
                "borrowed": {"tvl": 60},
            },
        },
        {
            "name": "Curve Finance",
            "symbol": "CRV",
            "category": "Dexes",
            "chains": ["Ethereum"],
            "tvl": 500,
            "tvlPrevDay": 400,
            "chainTvls": {
                "Ethereum": {"tvl": 500, "tvlPrevDay": 400},
                "Ethereum-staking": {"tvl": 5},
                "Treasury": {"tvl": 7},
                "Offers": {"tvl": 3},
            },
        },
        {
            "name": "QuickSwap",
            "symbol": "QUICK",
            "category": "dexes",
            "chains": ["Polygon"],
            "tvl": 80,
            "chainTvls": {
                "Polygon": {"tvl": 80, "tvlPrevDay": 40},
                "Polygon-pool2": {"tvl": 10, "tvlPrevWeek": 4},
            },
        },
        {
            "name": "Mystery",
            "symbol": "-",
            "chains": ["Ethereum"],
            "tvl": 1,
        },
    ]


@pytest.fixture
def protocols_payload(protocols):
    return {
        "protocols": protocols,
        "chains": ["Ethereum", "Polygon", "Syscoin", "Solana", "zkSync Era"],
        "protocolCategories": ["Lending", "Dexes"],
    }


@pytest.fixture
def chain_meta():
    return {
        "Ethereum": {"geckoId": "ethereum", "symbol": "ETH", "cmcId": "1027", "categories": ["EVM"]},
        "Polygon": {"geckoId": "matic-network", "symbol": "MATIC", "cmcId": "3890", "categories": ["EVM", "Rollup"]},
        "Syscoin": {"geckoId": "syscoin", "symbol": "SYS", "categories": ["EVM"]},
        "Solana": {"geckoId": "solana", "symbol": "SOL", "categories": []},
        "zkSync Era": {"geckoId": None, "categories": ["EVM", "Rollup"], "parent": "Ethereum"},
    }


def _daily(values, end=NOW):
    # one point per day, last point at `end`
    start = end - (len(values) - 1) * DAY
    return [[start + i * DAY, v] for i, v in enumerate(values)]


@pytest.fixture
def chain_charts():
    eth = _daily([float(v) for v in range(100, 131)])  # 31 days, 130 today
    return {
        "Ethereum": {"tvl": eth, "staking": _daily([5.0, 6.0])},
        "Polygon": {"tvl": _daily([40.0, 50.0])},
        "Solana": {"tvl": []},
        "zkSync Era": {"tvl": _daily([7.5])},
    }


@pytest.fixture
def mcaps():
    return {
        "ethereum": {"usd": 2000, "usd_market_cap": 240_000_000_000},
        "matic-network": {"usd": 0.8, "usd_market_cap": 0},
    }
