"""Q64.96 square-root price math for concentrated liquidity.

Integer port of the SqrtPriceMath library used by Uniswap V3/V4 pools. All
intermediate products are exact Python ints wrapped in SafeInt, so nothing
wraps: a subtraction that would underflow raises Underflow and a result that
does not fit uint160/uint256 raises Overflow.

Rounding always favours the pool: amounts the trader pays round up, amounts
the trader receives round down.
"""

from __future__ import annotations

from math import isqrt

from flayer.safe_int import S

__all__ = [
    "Q96",
    "RESOLUTION",
    "MIN_SQRT_PRICE",
    "MAX_SQRT_PRICE",
    "encode_sqrt_price_x96",
    "get_amount0_delta",
    "get_amount1_delta",
    "get_next_sqrt_price_from_input",
    "get_next_sqrt_price_from_output",
]

RESOLUTION = 96
Q96 = 2**RESOLUTION

# sqrt(1.0001^-887272) * 2^96 and sqrt(1.0001^887272) * 2^96
MIN_SQRT_PRICE = 4295128739
MAX_SQRT_PRICE = 1461446703485210103287273052203988822378723970342


def encode_sqrt_price_x96(amount1: int, amount0: int) -> int:
    """Q64.96 square root of the price amount1 / amount0 (currency1 per currency0)."""
    ratio_x192 = (S(amount1) << 192) // amount0
    return S(isqrt(ratio_x192.value)).to_uint160()


def get_amount0_delta(
    sqrt_price_a_x96: int,
    sqrt_price_b_x96: int,
    liquidity: int,
    round_up: bool,
) -> int:
    """Amount of currency0 between two prices for the given liquidity.

    amount0 = L * 2^96 * (sqrtB - sqrtA) / (sqrtB * sqrtA)
    """
    if sqrt_price_a_x96 > sqrt_price_b_x96:
        sqrt_price_a_x96, sqrt_price_b_x96 = sqrt_price_b_x96, sqrt_price_a_x96

    numerator1 = S(liquidity) << RESOLUTION
    numerator2 = S(sqrt_price_b_x96) - sqrt_price_a_x96

    if round_up:
        inner = S.mul_div_rounding_up(numerator1, numerator2, sqrt_price_b_x96)
        return inner.ceiling_div(sqrt_price_a_x96).to_uint256()
    return (S.mul_div(numerator1, numerator2, sqrt_price_b_x96) // sqrt_price_a_x96).to_uint256()


def get_amount1_delta(
    sqrt_price_a_x96: int,
    sqrt_price_b_x96: int,
    liquidity: int,
    round_up: bool,
) -> int:
    """Amount of currency1 between two prices for the given liquidity.

    amount1 = L * (sqrtB - sqrtA) / 2^96
    """
    if sqrt_price_a_x96 > sqrt_price_b_x96:
        sqrt_price_a_x96, sqrt_price_b_x96 = sqrt_price_b_x96, sqrt_price_a_x96

    diff = S(sqrt_price_b_x96) - sqrt_price_a_x96
    if round_up:
        return S.mul_div_rounding_up(liquidity, diff, Q96).to_uint256()
    return S.mul_div(liquidity, diff, Q96).to_uint256()


def _next_from_amount0_rounding_up(
    sqrt_price_x96: int,
    liquidity: int,
    amount: int,
    add: bool,
) -> int:
    if amount == 0:
        return sqrt_price_x96
    numerator1 = S(liquidity) << RESOLUTION
    product = S(amount) * sqrt_price_x96
    if add:
        denominator = numerator1 + product
    else:
        # Raises Underflow when the output exceeds the currency0 reserves
        denominator = numerator1 - product
        if not denominator:
            raise ArithmeticError("Output drains all currency0 liquidity")
    return S.mul_div_rounding_up(numerator1, sqrt_price_x96, denominator).to_uint160()


def _next_from_amount1_rounding_down(
    sqrt_price_x96: int,
    liquidity: int,
    amount: int,
    add: bool,
) -> int:
    if add:
        quotient = (S(amount) << RESOLUTION) // liquidity
        return (S(sqrt_price_x96) + quotient).to_uint160()
    quotient = (S(amount) << RESOLUTION).ceiling_div(liquidity)
    # Raises Underflow when the output exceeds the currency1 reserves
    return (S(sqrt_price_x96) - quotient).to_uint160()


def get_next_sqrt_price_from_input(
    sqrt_price_x96: int,
    liquidity: int,
    amount_in: int,
    zero_for_one: bool,
) -> int:
    """Price after adding amount_in of the input currency."""
    if sqrt_price_x96 <= 0 or liquidity <= 0:
        raise ArithmeticError("Price and liquidity must be positive")
    if zero_for_one:
        return _next_from_amount0_rounding_up(sqrt_price_x96, liquidity, amount_in, add=True)
    return _next_from_amount1_rounding_down(sqrt_price_x96, liquidity, amount_in, add=True)


def get_next_sqrt_price_from_output(
    sqrt_price_x96: int,
    liquidity: int,
    amount_out: int,
    zero_for_one: bool,
) -> int:
    """Price after removing amount_out of the output currency."""
    if sqrt_price_x96 <= 0 or liquidity <= 0:
        raise ArithmeticError("Price and liquidity must be positive")
    if zero_for_one:
        return _next_from_amount1_rounding_down(sqrt_price_x96, liquidity, amount_out, add=False)
    return _next_from_amount0_rounding_up(sqrt_price_x96, liquidity, amount_out, add=False)
