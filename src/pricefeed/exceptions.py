"""Custom exceptions for the pool price feed.

Collector-side and query-side exceptions live here so the chain client,
the store and the API layer can share them without circular imports.
"""


class PriceFeedError(Exception):
    """Base exception for all price feed errors."""


class FetchError(PriceFeedError):
    """Raised when pool state cannot be read from the chain."""


class TransientFetchError(FetchError):
    """Raised on RPC timeouts, transport failures and RPC-level errors.

    The pool is retried on the next scheduled collection round.
    """


class PoolNotFoundError(FetchError):
    """Raised when the pool object does not exist or has no content."""


class MalformedStateError(PriceFeedError):
    """Raised when a pool object is missing fields needed to price it."""


class StoreError(PriceFeedError):
    """Raised when a read from or write to the sample store fails."""


class NoDataError(PriceFeedError):
    """Raised when no price sample exists for the requested token."""


class InvalidParameterError(PriceFeedError):
    """Raised when a caller passes an out-of-range argument."""
