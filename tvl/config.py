# Engine constants shared by the page builders.

# Chain-level history before this point is discarded from stacked datasets.
STACKED_DATASET_FLOOR = 1596248105

SECONDS_PER_DAY = 86400

# days_before offsets used for tvl / tvlPrevDay / tvlPrevWeek / tvlPrevMonth
TVL_OFFSETS = {
    "tvl": 0,
    "tvlPrevDay": 1,
    "tvlPrevWeek": 7,
    "tvlPrevMonth": 30,
}

TVL_FIELDS = ["tvl", "tvlPrevDay", "tvlPrevWeek", "tvlPrevMonth"]

BASIC_PROPERTIES = [
    "tvl",
    "name",
    "symbol",
    "chains",
    "change_1d",
    "change_7d",
    "change_1m",
    "tvlPrevDay",
    "tvlPrevWeek",
    "tvlPrevMonth",
    "mcap",
]

DEFAULT_PROTOCOL_PROPS = BASIC_PROPERTIES + ["extraTvl"]

# Capitalized section names that still count as global auxiliary categories.
GLOBAL_SECTION_EXCEPTIONS = {"Offers", "Treasury"}

# Extra series shipped next to "tvl" in a chain chart payload.
EXTRA_CHART_KINDS = ["staking", "borrowed", "pool2", "offers", "treasury"]

EXCLUDED_CHAINS = {"Syscoin"}

ALL_CATEGORY = "All"
NON_EVM_CATEGORY = "Non-EVM"
EVM_CATEGORY = "EVM"
