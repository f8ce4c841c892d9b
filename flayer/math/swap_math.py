"""Single swap step within one liquidity range.

compute_swap_step() is what both the internal swap engine and the in-memory
market use to price a trade slice from the pool's current state: starting at
sqrt_price_current, move towards sqrt_price_target until either the target is
reached or the specified amount is exhausted.
"""

from __future__ import annotations

from dataclasses import dataclass

from flayer.constants import FEE_PIPS_DENOMINATOR
from flayer.math.sqrt_price_math import (
    get_amount0_delta,
    get_amount1_delta,
    get_next_sqrt_price_from_input,
    get_next_sqrt_price_from_output,
)
from flayer.safe_int import S


@dataclass(frozen=True)
class SwapStep:
    """Result of one swap step.

    Attributes:
        sqrt_price_next_x96: Price after the step
        amount_in: Input currency paid, excluding fee
        amount_out: Output currency received
        fee_amount: Input currency paid as LP fee
    """

    sqrt_price_next_x96: int
    amount_in: int
    amount_out: int
    fee_amount: int


def compute_swap_step(
    sqrt_price_current_x96: int,
    sqrt_price_target_x96: int,
    liquidity: int,
    amount_remaining: int,
    fee_pips: int,
    exact_input: bool,
) -> SwapStep:
    """Compute one swap step.

    The direction is implied by the prices: moving down (current >= target)
    is a zero-for-one trade.

    Args:
        sqrt_price_current_x96: Current pool price (Q64.96)
        sqrt_price_target_x96: Price the step may not cross
        liquidity: Active liquidity
        amount_remaining: Specified amount still to fill (positive)
        fee_pips: LP fee in 1/1_000_000
        exact_input: True if amount_remaining is input, False if output

    Returns:
        SwapStep with the filled amounts

    Raises:
        ArithmeticError: On invalid price/liquidity or out-of-range results
    """
    if fee_pips < 0 or fee_pips > FEE_PIPS_DENOMINATOR:
        raise ArithmeticError(f"Fee out of range: {fee_pips}")

    zero_for_one = sqrt_price_current_x96 >= sqrt_price_target_x96
    amount_in = 0
    amount_out = 0

    if exact_input:
        amount_less_fee = S.mul_div(
            amount_remaining, FEE_PIPS_DENOMINATOR - fee_pips, FEE_PIPS_DENOMINATOR
        ).value
        if zero_for_one:
            amount_in = get_amount0_delta(
                sqrt_price_target_x96, sqrt_price_current_x96, liquidity, True
            )
        else:
            amount_in = get_amount1_delta(
                sqrt_price_current_x96, sqrt_price_target_x96, liquidity, True
            )
        if amount_less_fee >= amount_in:
            sqrt_price_next = sqrt_price_target_x96
        else:
            sqrt_price_next = get_next_sqrt_price_from_input(
                sqrt_price_current_x96, liquidity, amount_less_fee, zero_for_one
            )
    else:
        if zero_for_one:
            amount_out = get_amount1_delta(
                sqrt_price_target_x96, sqrt_price_current_x96, liquidity, False
            )
        else:
            amount_out = get_amount0_delta(
                sqrt_price_current_x96, sqrt_price_target_x96, liquidity, False
            )
        if amount_remaining >= amount_out:
            sqrt_price_next = sqrt_price_target_x96
        else:
            sqrt_price_next = get_next_sqrt_price_from_output(
                sqrt_price_current_x96, liquidity, amount_remaining, zero_for_one
            )

    reached_target = sqrt_price_next == sqrt_price_target_x96

    if zero_for_one:
        if not (reached_target and exact_input):
            amount_in = get_amount0_delta(sqrt_price_next, sqrt_price_current_x96, liquidity, True)
        if not (reached_target and not exact_input):
            amount_out = get_amount1_delta(
                sqrt_price_next, sqrt_price_current_x96, liquidity, False
            )
    else:
        if not (reached_target and exact_input):
            amount_in = get_amount1_delta(sqrt_price_current_x96, sqrt_price_next, liquidity, True)
        if not (reached_target and not exact_input):
            amount_out = get_amount0_delta(
                sqrt_price_current_x96, sqrt_price_next, liquidity, False
            )

    # Never pay out more than requested
    if not exact_input and amount_out > amount_remaining:
        amount_out = amount_remaining

    if exact_input and not reached_target:
        # The remainder of the input goes to the fee
        fee_amount = (S(amount_remaining) - amount_in).value
    elif fee_pips == FEE_PIPS_DENOMINATOR:
        if not exact_input:
            raise ArithmeticError("Exact output cannot be filled at a 100% fee")
        fee_amount = amount_remaining
    else:
        fee_amount = S.mul_div_rounding_up(
            amount_in, fee_pips, FEE_PIPS_DENOMINATOR - fee_pips
        ).value

    return SwapStep(
        sqrt_price_next_x96=sqrt_price_next,
        amount_in=amount_in,
        amount_out=amount_out,
        fee_amount=fee_amount,
    )
