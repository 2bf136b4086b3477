"""TVL page-data package: filter protocols, roll up chains, and stack chain TVL series for display."""
__all__ = [
    "config",
    "change",
    "classification",
    "protocols",
    "chains",
    "stacked",
    "nft",
    "aggregator",
]
