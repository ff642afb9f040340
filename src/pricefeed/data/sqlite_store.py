"""SQLite implementation of SampleStore.

CRITICAL: prices are stored as TEXT and restored as Decimal on read.
"""

from decimal import Decimal

import aiosqlite

from pricefeed.data.database import PriceDatabase
from pricefeed.data.store import SampleStore
from pricefeed.exceptions import StoreError
from pricefeed.logging import get_logger
from pricefeed.models import PriceSample

logger = get_logger(__name__)

_SAMPLE_COLUMNS = "pool_address, token_name, price, timestamp_ms, created_at_ms"


def _row_to_sample(row: tuple) -> PriceSample:
    return PriceSample(
        pool_address=row[0],
        token_name=row[1],
        price=Decimal(row[2]),
        timestamp_ms=row[3],
        created_at_ms=row[4],
    )


class SqliteSampleStore(SampleStore):
    """SampleStore backed by the price_samples table.

    Every write commits immediately, so a completed insert_sample() is
    visible to the next read on any connection.
    """

    def __init__(self, database: PriceDatabase) -> None:
        self._database = database

    # ──────────────────────────────────────────────
    # Write methods
    # ──────────────────────────────────────────────

    async def insert_sample(self, sample: PriceSample) -> None:
        try:
            await self._database.db.execute(
                f"INSERT INTO price_samples ({_SAMPLE_COLUMNS}) VALUES (?, ?, ?, ?, ?)",
                (
                    sample.pool_address,
                    sample.token_name,
                    str(sample.price),
                    sample.timestamp_ms,
                    sample.created_at_ms,
                ),
            )
            await self._database.db.commit()
        except (aiosqlite.Error, OverflowError) as e:
            raise StoreError(f"Failed to insert sample for {sample.token_name}: {e}") from e

        logger.debug(
            "price_sample_inserted",
            token=sample.token_name,
            timestamp_ms=sample.timestamp_ms,
        )

    # ──────────────────────────────────────────────
    # Read methods
    # ──────────────────────────────────────────────

    async def get_samples(
        self,
        token: str,
        since_ms: int | None = None,
        until_ms: int | None = None,
    ) -> list[PriceSample]:
        conditions = ["token_name = ?"]
        params: list = [token]

        if since_ms is not None:
            conditions.append("timestamp_ms >= ?")
            params.append(since_ms)
        if until_ms is not None:
            conditions.append("timestamp_ms <= ?")
            params.append(until_ms)

        where = " AND ".join(conditions)
        try:
            cursor = await self._database.db.execute(
                f"SELECT {_SAMPLE_COLUMNS} FROM price_samples "
                f"WHERE {where} ORDER BY timestamp_ms ASC, id ASC",
                params,
            )
            rows = await cursor.fetchall()
        except (aiosqlite.Error, OverflowError) as e:
            raise StoreError(f"Failed to query samples for {token}: {e}") from e

        return [_row_to_sample(row) for row in rows]

    async def get_latest_sample(
        self, token: str, at_or_before_ms: int | None = None
    ) -> PriceSample | None:
        conditions = ["token_name = ?"]
        params: list = [token]

        if at_or_before_ms is not None:
            conditions.append("timestamp_ms <= ?")
            params.append(at_or_before_ms)

        where = " AND ".join(conditions)
        try:
            cursor = await self._database.db.execute(
                f"SELECT {_SAMPLE_COLUMNS} FROM price_samples "
                f"WHERE {where} ORDER BY timestamp_ms DESC, id DESC LIMIT 1",
                params,
            )
            row = await cursor.fetchone()
        except (aiosqlite.Error, OverflowError) as e:
            raise StoreError(f"Failed to query latest sample for {token}: {e}") from e

        if row is None:
            return None
        return _row_to_sample(row)
