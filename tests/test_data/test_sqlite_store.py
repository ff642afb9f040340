"""Tests for PriceDatabase and SqliteSampleStore against a real SQLite file."""

from decimal import Decimal

import pytest
import pytest_asyncio

from pricefeed.data.database import SCHEMA_VERSION, PriceDatabase
from pricefeed.data.sqlite_store import SqliteSampleStore
from pricefeed.exceptions import StoreError


@pytest_asyncio.fixture
async def database(tmp_path):
    async with PriceDatabase(str(tmp_path / "nested" / "prices.db")) as db:
        yield db


@pytest.fixture
def store(database: PriceDatabase) -> SqliteSampleStore:
    return SqliteSampleStore(database)


class TestPriceDatabase:
    @pytest.mark.asyncio
    async def test_creates_parent_directory_and_schema(self, database, tmp_path) -> None:
        assert (tmp_path / "nested" / "prices.db").exists()
        cursor = await database.db.execute("SELECT version FROM schema_version")
        assert await cursor.fetchall() == [(SCHEMA_VERSION,)]

    @pytest.mark.asyncio
    async def test_reconnect_keeps_single_schema_version(self, tmp_path) -> None:
        path = str(tmp_path / "prices.db")
        async with PriceDatabase(path):
            pass
        async with PriceDatabase(path) as db:
            cursor = await db.db.execute("SELECT COUNT(*) FROM schema_version")
            assert await cursor.fetchone() == (1,)

    def test_db_before_connect_raises(self) -> None:
        with pytest.raises(RuntimeError):
            PriceDatabase(":memory:").db


class TestSqliteSampleStore:
    @pytest.mark.asyncio
    async def test_insert_and_read_back_preserves_decimal(self, store, make_sample) -> None:
        sample = make_sample(1_000, "0.000123456789012345678901234567")
        await store.insert_sample(sample)

        rows = await store.get_samples("WATER")
        assert rows == [sample]
        assert rows[0].price == Decimal("0.000123456789012345678901234567")

    @pytest.mark.asyncio
    async def test_get_samples_ordered_ascending(self, store, make_sample) -> None:
        for ts in (3_000, 1_000, 2_000):
            await store.insert_sample(make_sample(ts, ts))
        rows = await store.get_samples("WATER")
        assert [r.timestamp_ms for r in rows] == [1_000, 2_000, 3_000]

    @pytest.mark.asyncio
    async def test_get_samples_time_range_inclusive(self, store, make_sample) -> None:
        for ts in (1_000, 2_000, 3_000, 4_000):
            await store.insert_sample(make_sample(ts, 1))
        rows = await store.get_samples("WATER", since_ms=2_000, until_ms=3_000)
        assert [r.timestamp_ms for r in rows] == [2_000, 3_000]

    @pytest.mark.asyncio
    async def test_get_samples_filters_by_token(self, store, make_sample) -> None:
        await store.insert_sample(make_sample(1_000, 1, token="WATER"))
        await store.insert_sample(make_sample(1_000, 2, token="COAL"))
        rows = await store.get_samples("COAL")
        assert [r.price for r in rows] == [Decimal("2")]

    @pytest.mark.asyncio
    async def test_get_latest_sample(self, store, make_sample) -> None:
        for ts in (1_000, 3_000, 2_000):
            await store.insert_sample(make_sample(ts, ts))
        latest = await store.get_latest_sample("WATER")
        assert latest is not None
        assert latest.timestamp_ms == 3_000

    @pytest.mark.asyncio
    async def test_get_latest_sample_at_or_before(self, store, make_sample) -> None:
        for ts in (1_000, 2_000, 3_000):
            await store.insert_sample(make_sample(ts, ts))
        assert (await store.get_latest_sample("WATER", at_or_before_ms=2_000)).timestamp_ms == 2_000
        assert (await store.get_latest_sample("WATER", at_or_before_ms=2_999)).timestamp_ms == 2_000
        assert await store.get_latest_sample("WATER", at_or_before_ms=999) is None

    @pytest.mark.asyncio
    async def test_get_latest_sample_missing_token(self, store) -> None:
        assert await store.get_latest_sample("NOPE") is None

    @pytest.mark.asyncio
    async def test_missing_table_raises_store_error(self, tmp_path, make_sample) -> None:
        db = PriceDatabase(str(tmp_path / "prices.db"))
        await db.connect()
        store = SqliteSampleStore(db)
        await db.db.execute("DROP TABLE price_samples")
        try:
            with pytest.raises(StoreError):
                await store.insert_sample(make_sample(1_000, 1))
            with pytest.raises(StoreError):
                await store.get_samples("WATER")
            with pytest.raises(StoreError):
                await store.get_latest_sample("WATER")
        finally:
            await db.close()

    @pytest.mark.asyncio
    async def test_out_of_range_integer_raises_store_error(self, store) -> None:
        with pytest.raises(StoreError):
            await store.get_samples("WATER", since_ms=-(2**70))
        with pytest.raises(StoreError):
            await store.get_latest_sample("WATER", at_or_before_ms=2**70)
