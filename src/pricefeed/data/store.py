"""Abstract sample store interface.

The collector and the query service depend only on this interface, so tests
can swap in mocks and the SQLite details stay in SqliteSampleStore.
"""

from abc import ABC, abstractmethod

from pricefeed.models import PriceSample


class SampleStore(ABC):
    """Append-only time series of price samples keyed by token name.

    Implementations raise StoreError on any read or write failure.
    """

    @abstractmethod
    async def insert_sample(self, sample: PriceSample) -> None:
        """Append one sample. The write is visible to subsequent reads."""
        ...

    @abstractmethod
    async def get_samples(
        self,
        token: str,
        since_ms: int | None = None,
        until_ms: int | None = None,
    ) -> list[PriceSample]:
        """Return samples for token in [since_ms, until_ms], oldest first."""
        ...

    @abstractmethod
    async def get_latest_sample(
        self, token: str, at_or_before_ms: int | None = None
    ) -> PriceSample | None:
        """Return the most recent sample, optionally at or before a time."""
        ...
