"""Pool price feed: samples on-chain pool prices and serves them as OHLCV candles."""

__version__ = "0.1.0"
