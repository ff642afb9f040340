"""Pool price collector -- samples every configured pool once per round.

Each round walks the pool list in order: fetch pool state from chain,
convert the sqrt price, append a sample to the store. A failure in any step
is recorded for that pool and the round moves on; nothing escapes run_once().

Pools are processed sequentially with a fixed pause between them so the RPC
endpoint sees at most one request per pool_delay_seconds. Rounds run once at
startup and then every interval_seconds. A tick that comes due while a round
is still running is skipped, never queued.
"""

import asyncio
import itertools
import time
from collections.abc import Sequence
from decimal import Decimal

import structlog

from pricefeed.chain.client import ChainClient
from pricefeed.config import CollectorSettings, PoolConfig
from pricefeed.data.store import SampleStore
from pricefeed.exceptions import TransientFetchError
from pricefeed.logging import get_logger
from pricefeed.models import CollectionReport, PoolResult, PriceSample, RawPoolState
from pricefeed.pricing import sqrt_price_to_price

logger = get_logger(__name__)


class PriceCollector:
    """Periodic price sampler for a fixed list of pools.

    Args:
        chain_client: Reader for on-chain pool objects.
        store: Destination for price samples.
        pools: Pools to sample, in collection order.
        settings: Interval, pacing and timeout parameters.
    """

    def __init__(
        self,
        chain_client: ChainClient,
        store: SampleStore,
        pools: Sequence[PoolConfig],
        settings: CollectorSettings,
    ) -> None:
        self._chain = chain_client
        self._store = store
        self._pools = tuple(pools)
        self._settings = settings
        self._round_lock = asyncio.Lock()
        self._round_ids = itertools.count(1)
        self._running = False
        self._task: asyncio.Task | None = None  # type: ignore[type-arg]
        self._last_report: CollectionReport | None = None
        self._rounds_completed = 0
        self._rounds_skipped = 0

    @property
    def pools(self) -> tuple[PoolConfig, ...]:
        return self._pools

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def last_report(self) -> CollectionReport | None:
        return self._last_report

    @property
    def rounds_completed(self) -> int:
        return self._rounds_completed

    @property
    def rounds_skipped(self) -> int:
        return self._rounds_skipped

    # ──────────────────────────────────────────────
    # Lifecycle
    # ──────────────────────────────────────────────

    async def start(self) -> None:
        """Begin collecting in the background. The first round runs immediately."""
        if self._running:
            logger.warning("price_collector_already_running")
            return
        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        logger.info(
            "price_collector_started",
            pools=[p.name for p in self._pools],
            interval_seconds=self._settings.interval_seconds,
        )

    async def stop(self) -> None:
        """Stop the loop. An in-flight round is abandoned mid-way."""
        self._running = False
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("price_collector_stopped")

    async def _run_loop(self) -> None:
        """Run a round, then sleep until the next tick that is not already past."""
        interval = self._settings.interval_seconds
        next_tick = time.monotonic()
        while self._running:
            try:
                await self.collect()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.error("collection_loop_error", exc_info=True)

            next_tick += interval
            now = time.monotonic()
            while next_tick <= now:
                # This tick came due while the previous round was still running.
                self._rounds_skipped += 1
                logger.warning("collection_round_skipped", reason="previous_round_in_progress")
                next_tick += interval
            if self._running:
                await asyncio.sleep(next_tick - now)

    async def collect(self) -> CollectionReport | None:
        """Run one round unless another is in progress.

        Returns the round's report, or None if the round was skipped.
        """
        if self._round_lock.locked():
            self._rounds_skipped += 1
            logger.warning("collection_round_skipped", reason="previous_round_in_progress")
            return None
        async with self._round_lock:
            report = await self.run_once()
        self._last_report = report
        self._rounds_completed += 1
        return report

    # ──────────────────────────────────────────────
    # Collection round
    # ──────────────────────────────────────────────

    async def run_once(self, pools: Sequence[PoolConfig] | None = None) -> CollectionReport:
        """Collect one sample from each pool.

        Never raises for pool-level failures; each one becomes a failed
        PoolResult in the report.
        """
        pools = self._pools if pools is None else tuple(pools)
        report = CollectionReport()

        with structlog.contextvars.bound_contextvars(round_id=next(self._round_ids)):
            logger.info("collection_round_started", pools=len(pools))

            for i, pool in enumerate(pools):
                report.results.append(await self._collect_pool(pool))
                if i < len(pools) - 1 and self._settings.pool_delay_seconds > 0:
                    await asyncio.sleep(self._settings.pool_delay_seconds)

            report.finished_at = time.time()
            logger.info(
                "collection_round_complete",
                succeeded=len(report.succeeded),
                failed=len(report.failed),
                duration_seconds=round(report.finished_at - report.started_at, 2),
            )
        return report

    async def _collect_pool(self, pool: PoolConfig) -> PoolResult:
        try:
            price = await self._sample_pool(pool)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(
                "pool_collection_failed",
                pool=pool.name,
                address=pool.address,
                error_type=type(e).__name__,
                error=str(e),
            )
            return PoolResult(
                pool_address=pool.address,
                name=pool.name,
                success=False,
                error=str(e),
                error_type=type(e).__name__,
            )
        return PoolResult(
            pool_address=pool.address, name=pool.name, success=True, price=price
        )

    async def _sample_pool(self, pool: PoolConfig) -> Decimal:
        """Fetch, convert and persist one pool's price."""
        state = await self._fetch_state(pool)

        price = sqrt_price_to_price(
            state.sqrt_price, pool.token_a_decimals, pool.token_b_decimals
        )

        now_ms = int(time.time() * 1000)
        await self._store.insert_sample(
            PriceSample(
                pool_address=pool.address,
                token_name=pool.name.upper(),
                price=price,
                timestamp_ms=now_ms,
                created_at_ms=now_ms,
            )
        )
        logger.info("price_sample_saved", pool=pool.name, price=f"{price:.8f}")
        return price

    async def _fetch_state(self, pool: PoolConfig) -> RawPoolState:
        timeout = self._settings.fetch_timeout_seconds
        try:
            return await asyncio.wait_for(
                self._chain.fetch_pool_state(pool.address), timeout=timeout
            )
        except asyncio.TimeoutError as e:
            raise TransientFetchError(
                f"Fetching pool {pool.address} timed out after {timeout}s"
            ) from e

    def status(self) -> dict:
        """Snapshot for the collector status endpoint."""
        return {
            "running": self._running,
            "rounds_completed": self._rounds_completed,
            "rounds_skipped": self._rounds_skipped,
            "interval_seconds": self._settings.interval_seconds,
            "pools": [p.name for p in self._pools],
            "last_report": (
                self._last_report.to_dict() if self._last_report is not None else None
            ),
        }
