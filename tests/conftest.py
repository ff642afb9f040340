"""Shared test fixtures for the pool price feed."""

from decimal import Decimal

import pytest

from pricefeed.config import CollectorSettings, PoolConfig
from pricefeed.models import PriceSample


def _make_sample(
    timestamp_ms: int,
    price: str | int | Decimal,
    token: str = "WATER",
    pool_address: str = "0xpool-water",
) -> PriceSample:
    """Build a PriceSample with created_at equal to the sample time."""
    return PriceSample(
        pool_address=pool_address,
        token_name=token,
        price=Decimal(str(price)),
        timestamp_ms=timestamp_ms,
        created_at_ms=timestamp_ms,
    )


@pytest.fixture
def pools() -> list[PoolConfig]:
    """Three pools in collection order, all 6/9 decimals."""
    return [
        PoolConfig(address="0xpool-water", name="WATER", token_a_decimals=6, token_b_decimals=9),
        PoolConfig(address="0xpool-coal", name="COAL", token_a_decimals=6, token_b_decimals=9),
        PoolConfig(address="0xpool-crystal", name="CRYSTAL", token_a_decimals=6, token_b_decimals=9),
    ]


@pytest.fixture
def collector_settings() -> CollectorSettings:
    """Collector settings with no pacing so tests run instantly."""
    return CollectorSettings(
        interval_seconds=60.0,
        pool_delay_seconds=0.0,
        fetch_timeout_seconds=1.0,
    )


@pytest.fixture
def make_sample():
    """Factory fixture: make_sample(timestamp_ms, price, token=..., pool_address=...)."""
    return _make_sample
