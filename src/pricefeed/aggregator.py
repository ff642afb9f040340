"""Bucket a price sample series into fixed-width OHLCV candles.

Candles are built on demand from raw samples; nothing here is persisted.
Volume is always zero since pool samples carry no trade volume.
"""

from collections.abc import Iterable
from decimal import Decimal
from itertools import groupby

from pricefeed.exceptions import InvalidParameterError
from pricefeed.models import Candle, PriceSample

INTERVAL_MINUTES: dict[str, int] = {
    "1m": 1,
    "5m": 5,
    "15m": 15,
    "1h": 60,
    "4h": 240,
    "1d": 1440,
}

DEFAULT_INTERVAL = "1h"

_MS_PER_MINUTE = 60_000


def resolve_interval(name: str | None) -> int:
    """Map an interval name to its width in minutes.

    Unknown names fall back to the hourly resolution instead of failing.
    """
    if name is None:
        return INTERVAL_MINUTES[DEFAULT_INTERVAL]
    return INTERVAL_MINUTES.get(name, INTERVAL_MINUTES[DEFAULT_INTERVAL])


def bucket_start_ms(timestamp_ms: int, interval_minutes: int) -> int:
    """Left edge of the bucket containing timestamp_ms."""
    width = interval_minutes * _MS_PER_MINUTE
    return (timestamp_ms // width) * width


def aggregate(
    samples: Iterable[PriceSample],
    interval_minutes: int,
    limit: int,
) -> list[Candle]:
    """Aggregate samples into at most ``limit`` candles, oldest first.

    Samples are sorted by timestamp first (stable, so equal timestamps keep
    their arrival order), then grouped by bucket. Only the most recent
    ``limit`` buckets are kept. Buckets without samples produce no candle.

    Raises:
        InvalidParameterError: if interval_minutes or limit is not positive.
    """
    if interval_minutes <= 0:
        raise InvalidParameterError(
            f"interval_minutes must be positive, got {interval_minutes}"
        )
    if limit <= 0:
        raise InvalidParameterError(f"limit must be positive, got {limit}")

    ordered = sorted(samples, key=lambda s: s.timestamp_ms)
    if not ordered:
        return []

    buckets: list[tuple[int, list[Decimal]]] = [
        (key, [s.price for s in group])
        for key, group in groupby(
            ordered, key=lambda s: bucket_start_ms(s.timestamp_ms, interval_minutes)
        )
    ]

    return [
        Candle(
            time=key // 1000,
            open=prices[0],
            high=max(prices),
            low=min(prices),
            close=prices[-1],
        )
        for key, prices in buckets[-limit:]
    ]
