"""Square-root price to spot price conversion for concentrated-liquidity pools.

Cetus (like Uniswap v3) stores sqrt(price) as a Q64.64 fixed-point integer,
where price is token-B base units per token-A base unit. The spot price in
display units is ``(sqrt_price / 2**64) ** 2 * 10 ** (decimals_a - decimals_b)``.

Values near 2**64 and above lose precision as floats, so the conversion runs
in Decimal with a 40-digit context and divides by Q64 before squaring.
"""

from decimal import Decimal, localcontext

from pricefeed.exceptions import InvalidParameterError, MalformedStateError

Q64 = Decimal(2**64)
MAX_DECIMALS = 30

_PRECISION = 40


def parse_fixed_point(value: object) -> int:
    """Parse an on-chain u128 value (int or decimal string) into an int.

    Raises:
        MalformedStateError: if the value is missing or not an integer.
    """
    if value is None or isinstance(value, bool):
        raise MalformedStateError(f"Invalid fixed-point value: {value!r}")
    try:
        return int(str(value))
    except ValueError as e:
        raise MalformedStateError(f"Invalid fixed-point value: {value!r}") from e


def sqrt_price_to_price(
    sqrt_price_x64: int | str, decimals_a: int, decimals_b: int
) -> Decimal:
    """Convert a Q64.64 square-root price into a decimal-adjusted spot price.

    Args:
        sqrt_price_x64: The pool's current_sqrt_price.
        decimals_a: Decimal precision of token A.
        decimals_b: Decimal precision of token B.

    Returns:
        Price of token B denominated in token A, as Decimal.

    Raises:
        MalformedStateError: if sqrt_price_x64 is not an integer.
        InvalidParameterError: if sqrt_price_x64 is negative or a decimal
            precision is outside [0, 30].
    """
    sqrt_price = parse_fixed_point(sqrt_price_x64)
    if sqrt_price < 0:
        raise InvalidParameterError(f"sqrt_price must be non-negative, got {sqrt_price}")
    for decimals in (decimals_a, decimals_b):
        if not 0 <= decimals <= MAX_DECIMALS:
            raise InvalidParameterError(
                f"Token decimals must be within [0, {MAX_DECIMALS}], got {decimals}"
            )

    with localcontext() as ctx:
        ctx.prec = _PRECISION
        ratio = Decimal(sqrt_price) / Q64
        raw_price = ratio * ratio
        return raw_price * Decimal(10) ** (decimals_a - decimals_b)
