"""Abstract chain client interface and pool field parsing.

The collector depends only on ChainClient. Sui-specific transport lives in
SuiClient; parsing of the Cetus pool object layout lives here so any client
that returns the raw Move field map can reuse it.
"""

from abc import ABC, abstractmethod

from pricefeed.exceptions import MalformedStateError
from pricefeed.models import RawPoolState
from pricefeed.pricing import parse_fixed_point

# Field names differ between pool package versions; first match wins.
_SQRT_PRICE_FIELDS = ("current_sqrt_price", "sqrt_price")
_TICK_FIELDS = ("current_tick_index", "tick_current_index")

_I32_SIGN_BIT = 2**31
_I32_RANGE = 2**32


def _first_present(fields: dict, names: tuple[str, ...]) -> object | None:
    for name in names:
        value = fields.get(name)
        if value is not None:
            return value
    return None


def _decode_tick(value: object) -> int | None:
    """Decode a Move I32 tick index.

    Cetus stores ticks as ``{"fields": {"bits": <u32>}}`` (two's complement);
    some RPC responses flatten it to a plain integer.
    """
    if value is None:
        return None
    if isinstance(value, dict):
        inner = value.get("fields", value)
        bits = parse_fixed_point(inner.get("bits"))
        return bits - _I32_RANGE if bits >= _I32_SIGN_BIT else bits
    return int(str(value))


def _optional_int(value: object) -> int | None:
    return None if value is None else parse_fixed_point(value)


def parse_pool_state(fields: dict) -> RawPoolState:
    """Build a RawPoolState from a pool object's Move fields.

    Raises:
        MalformedStateError: if the square-root price is missing or any
            numeric field cannot be parsed.
    """
    sqrt_price = _first_present(fields, _SQRT_PRICE_FIELDS)
    if sqrt_price is None:
        raise MalformedStateError(
            f"Pool object has no sqrt price field (expected one of {_SQRT_PRICE_FIELDS})"
        )

    try:
        tick_index = _decode_tick(_first_present(fields, _TICK_FIELDS))
    except (AttributeError, ValueError) as e:
        raise MalformedStateError(f"Invalid tick index: {e}") from e

    return RawPoolState(
        sqrt_price=parse_fixed_point(sqrt_price),
        liquidity=_optional_int(fields.get("liquidity")) or 0,
        tick_index=tick_index,
        fee_growth_global_a=_optional_int(fields.get("fee_growth_global_a")),
        fee_growth_global_b=_optional_int(fields.get("fee_growth_global_b")),
    )


class ChainClient(ABC):
    """Abstract base class for blockchain state readers."""

    @abstractmethod
    async def connect(self) -> None:
        """Initialize the underlying transport."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release transport resources."""
        ...

    @abstractmethod
    async def get_object_state(self, address: str) -> dict:
        """Return the Move field map of the object at address.

        Raises:
            PoolNotFoundError: if the object does not exist or has no content.
            TransientFetchError: on timeouts, transport or RPC errors.
        """
        ...

    async def fetch_pool_state(self, address: str) -> RawPoolState:
        """Fetch and parse the current state of a pool object."""
        fields = await self.get_object_state(address)
        return parse_pool_state(fields)
