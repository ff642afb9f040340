"""Shared data models for the pool price feed.

Prices are Decimal everywhere inside the service and TEXT in SQLite. They are
turned into JSON numbers only at the HTTP boundary.
"""

import time
from dataclasses import dataclass, field
from decimal import Decimal


@dataclass
class RawPoolState:
    """Pool fields read from chain during one collection round.

    Only sqrt_price is used to compute a price; the rest is kept for callers
    that want to inspect the pool.
    """

    sqrt_price: int  # Q64.64 fixed point
    liquidity: int = 0
    tick_index: int | None = None
    fee_growth_global_a: int | None = None
    fee_growth_global_b: int | None = None


@dataclass
class PriceSample:
    """A persisted price observation for one token."""

    pool_address: str
    token_name: str
    price: Decimal
    timestamp_ms: int
    created_at_ms: int


@dataclass
class Candle:
    """OHLCV summary of one time bucket. Built per query, never stored."""

    time: int  # bucket start, Unix seconds
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    volume: Decimal = Decimal("0")

    def to_dict(self) -> dict:
        return {
            "time": self.time,
            "open": float(self.open),
            "high": float(self.high),
            "low": float(self.low),
            "close": float(self.close),
            "volume": float(self.volume),
        }


@dataclass
class CurrentPrice:
    """Latest price for a token together with its 24h change."""

    token: str
    price: Decimal
    price_change_24h_percent: Decimal
    timestamp_ms: int


@dataclass
class PoolResult:
    """Outcome of collecting one pool within a round."""

    pool_address: str
    name: str
    success: bool
    price: Decimal | None = None
    error: str | None = None
    error_type: str | None = None

    def to_dict(self) -> dict:
        return {
            "pool_address": self.pool_address,
            "name": self.name,
            "success": self.success,
            "price": str(self.price) if self.price is not None else None,
            "error": self.error,
            "error_type": self.error_type,
        }


@dataclass
class CollectionReport:
    """Per-pool outcomes of one collection round, in configured pool order."""

    results: list[PoolResult] = field(default_factory=list)
    started_at: float = field(default_factory=time.time)
    finished_at: float | None = None

    @property
    def succeeded(self) -> list[PoolResult]:
        return [r for r in self.results if r.success]

    @property
    def failed(self) -> list[PoolResult]:
        return [r for r in self.results if not r.success]

    def to_dict(self) -> dict:
        return {
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "succeeded": len(self.succeeded),
            "failed": len(self.failed),
            "results": [r.to_dict() for r in self.results],
        }
