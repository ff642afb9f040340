"""Price sample persistence layer.

Provides the SampleStore interface, the SQLite connection manager and the
SQLite-backed store implementation.
"""

from pricefeed.data.database import PriceDatabase
from pricefeed.data.sqlite_store import SqliteSampleStore
from pricefeed.data.store import SampleStore

__all__ = ["PriceDatabase", "SampleStore", "SqliteSampleStore"]
