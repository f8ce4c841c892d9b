"""Tests for compute_internal_fill (pricing of the internal leg)."""

import pytest

from flayer.amm.internal_swap import InternalFill, compute_internal_fill
from flayer.models.pool import SwapKind, SwapParams
from flayer.safe_int import Overflow
from tests.helpers import DEEP_LIQUIDITY, LIMIT_UP, ONE_ETH, PRICE_ONE

# Buying currency0 with currency1 moves the price up
BUY = dict(zero_for_one=False, sqrt_price_limit_x96=LIMIT_UP)


def buy(amount: int, kind: SwapKind, **overrides) -> SwapParams:
    fields = {**BUY, **overrides}
    return SwapParams(kind=kind, amount=amount, **fields)


class TestPassthrough:
    """Orders the inventory cannot serve go to the market whole."""

    def test_no_inventory(self):
        fill = compute_internal_fill(
            buy(ONE_ETH, SwapKind.EXACT_OUTPUT), 0, PRICE_ONE, DEEP_LIQUIDITY
        )
        assert fill == InternalFill(native_in=0, token_out=0, residual=ONE_ETH)
        assert fill.is_empty

    def test_no_liquidity(self):
        fill = compute_internal_fill(buy(ONE_ETH, SwapKind.EXACT_INPUT), ONE_ETH, PRICE_ONE, 0)
        assert fill.is_empty
        assert fill.residual == ONE_ETH

    def test_dust_input_buys_nothing(self):
        """One wei of input rounds to zero output at price one."""
        fill = compute_internal_fill(buy(1, SwapKind.EXACT_INPUT), ONE_ETH, PRICE_ONE, 1)
        assert fill.is_empty
        assert fill.residual == 1


class TestExactOutput:
    def test_fully_served_below_inventory(self):
        fill = compute_internal_fill(
            buy(ONE_ETH, SwapKind.EXACT_OUTPUT), 5 * ONE_ETH, PRICE_ONE, DEEP_LIQUIDITY
        )
        assert fill.token_out == ONE_ETH
        assert fill.residual == 0
        # Priced with price impact but no fee
        assert ONE_ETH < fill.native_in < ONE_ETH + ONE_ETH // 10**5

    def test_capped_at_inventory(self):
        fill = compute_internal_fill(
            buy(5 * ONE_ETH, SwapKind.EXACT_OUTPUT), 2 * ONE_ETH, PRICE_ONE, DEEP_LIQUIDITY
        )
        assert fill.token_out == 2 * ONE_ETH
        assert fill.residual == 3 * ONE_ETH

    def test_one_over_inventory_forwards_one(self):
        fill = compute_internal_fill(
            buy(ONE_ETH + 1, SwapKind.EXACT_OUTPUT), ONE_ETH, PRICE_ONE, DEEP_LIQUIDITY
        )
        assert fill.token_out == ONE_ETH
        assert fill.residual == 1


class TestExactInput:
    def test_input_spent_entirely_when_inventory_covers(self):
        fill = compute_internal_fill(
            buy(ONE_ETH, SwapKind.EXACT_INPUT), 5 * ONE_ETH, PRICE_ONE, DEEP_LIQUIDITY
        )
        assert fill.native_in == ONE_ETH
        assert fill.residual == 0
        assert ONE_ETH - ONE_ETH // 10**5 < fill.token_out < ONE_ETH

    def test_buys_out_inventory_and_forwards_remaining_input(self):
        fill = compute_internal_fill(
            buy(5 * ONE_ETH, SwapKind.EXACT_INPUT), ONE_ETH, PRICE_ONE, DEEP_LIQUIDITY
        )
        assert fill.token_out == ONE_ETH
        assert fill.native_in > ONE_ETH
        assert fill.native_in + fill.residual == 5 * ONE_ETH


class TestPriceLimit:
    def test_reaching_limit_completes_the_trade(self):
        """The internal leg stops at the limit and nothing is forwarded."""
        limit = PRICE_ONE + PRICE_ONE // 10**9
        fill = compute_internal_fill(
            buy(ONE_ETH, SwapKind.EXACT_OUTPUT, sqrt_price_limit_x96=limit),
            5 * ONE_ETH,
            PRICE_ONE,
            DEEP_LIQUIDITY,
        )
        assert 0 < fill.token_out < ONE_ETH
        assert fill.residual == 0


class TestBounds:
    @pytest.mark.parametrize("inventory", [1, 10**6, ONE_ETH // 3, ONE_ETH, 7 * ONE_ETH])
    @pytest.mark.parametrize("kind", [SwapKind.EXACT_INPUT, SwapKind.EXACT_OUTPUT])
    def test_never_exceeds_inventory(self, inventory, kind):
        fill = compute_internal_fill(buy(3 * ONE_ETH, kind), inventory, PRICE_ONE, DEEP_LIQUIDITY)
        assert 0 <= fill.token_out <= inventory
        assert fill.residual >= 0

    def test_amounts_beyond_int128_raise(self):
        """Walking the whole price range costs more native than int128 can hold."""
        with pytest.raises(Overflow):
            compute_internal_fill(
                buy(10**30, SwapKind.EXACT_OUTPUT), 10**30, PRICE_ONE, DEEP_LIQUIDITY
            )
