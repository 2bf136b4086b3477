"""Feed transport: DefiLlama and CoinGecko fetchers that hand raw payloads to the tvl package."""
__all__ = [
    "config",
    "http",
    "llama",
    "coingecko",
]
