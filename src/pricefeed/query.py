"""Read-side queries over the sample store: candles and current price.

QueryService holds no mutable state; it only reads from the store, so it is
safe to call concurrently with itself and with the collector.
"""

import time
from decimal import Decimal

from pricefeed.aggregator import aggregate, resolve_interval
from pricefeed.data.store import SampleStore
from pricefeed.exceptions import NoDataError
from pricefeed.logging import get_logger
from pricefeed.models import Candle, CurrentPrice

logger = get_logger(__name__)

_MS_PER_MINUTE = 60_000
_DAY_MS = 24 * 60 * _MS_PER_MINUTE


def _now_ms() -> int:
    return int(time.time() * 1000)


def compute_change_percent(current: Decimal, previous: Decimal | None) -> Decimal:
    """Percentage change from previous to current.

    Returns 0 when there is no previous price or it is exactly zero.
    """
    if previous is None or previous == 0:
        return Decimal("0")
    return (current - previous) / previous * 100


class QueryService:
    """Builds candles and price summaries from stored samples.

    Store errors are not caught here; the caller turns them into a failed
    response.
    """

    def __init__(self, store: SampleStore) -> None:
        self._store = store

    async def get_candles(
        self,
        token: str,
        interval: str | None,
        limit: int,
        now_ms: int | None = None,
    ) -> list[Candle]:
        """Return up to ``limit`` candles for token at the given interval.

        The lookback window is ``limit * interval`` wide. Samples are taken
        once a minute, so buckets that received no sample are simply absent.
        """
        minutes = resolve_interval(interval)
        now = _now_ms() if now_ms is None else now_ms
        # Window never starts before the epoch.
        since_ms = max(0, now - limit * minutes * _MS_PER_MINUTE)

        samples = await self._store.get_samples(token.upper(), since_ms=since_ms)
        candles = aggregate(samples, minutes, limit)

        logger.debug(
            "candles_built",
            token=token.upper(),
            interval_minutes=minutes,
            samples=len(samples),
            candles=len(candles),
        )
        return candles

    async def get_current_price(
        self, token: str, now_ms: int | None = None
    ) -> CurrentPrice:
        """Return the latest price and its change versus 24h ago.

        Raises:
            NoDataError: if no sample exists for token.
        """
        symbol = token.upper()
        latest = await self._store.get_latest_sample(symbol)
        if latest is None:
            raise NoDataError(f"No data found for token {symbol}")

        now = _now_ms() if now_ms is None else now_ms
        day_old = await self._store.get_latest_sample(
            symbol, at_or_before_ms=now - _DAY_MS
        )

        change = compute_change_percent(
            latest.price, day_old.price if day_old is not None else None
        )
        return CurrentPrice(
            token=symbol,
            price=latest.price,
            price_change_24h_percent=change,
            timestamp_ms=latest.timestamp_ms,
        )
