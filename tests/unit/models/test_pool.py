"""Tests for pool keys and swap parameter models."""

import pytest

from flayer.errors import InvalidSwap, ValidationError, ZeroAmount
from flayer.models.pool import BalanceDelta, PoolKey, SwapKind, SwapParams
from tests.helpers import NATIVE, TOKEN, TOKEN_HIGH


class TestPoolKey:
    """Tests for canonical currency ordering."""

    def test_for_pair_sorts_currencies(self):
        key = PoolKey.for_pair(NATIVE, TOKEN)
        assert key.currency0 == TOKEN
        assert key.currency1 == NATIVE
        assert PoolKey.for_pair(TOKEN, NATIVE) == key

    def test_for_pair_normalizes_case(self):
        key = PoolKey.for_pair(NATIVE.upper(), TOKEN)
        assert key.currency1 == NATIVE

    def test_constructor_rejects_unsorted(self):
        with pytest.raises(InvalidSwap):
            PoolKey(currency0=NATIVE, currency1=TOKEN)

    def test_same_currency_rejected(self):
        with pytest.raises(InvalidSwap):
            PoolKey.for_pair(TOKEN, TOKEN)

    def test_pool_id_is_deterministic(self):
        key = PoolKey.for_pair(NATIVE, TOKEN)
        assert key.pool_id == PoolKey.for_pair(TOKEN, NATIVE).pool_id
        assert key.pool_id != PoolKey.for_pair(NATIVE, TOKEN_HIGH).pool_id
        assert key.pool_id.startswith("0x")
        assert len(key.pool_id) == 66

    def test_native_side_derived_from_ordering(self):
        low = PoolKey.for_pair(NATIVE, TOKEN)
        high = PoolKey.for_pair(NATIVE, TOKEN_HIGH)
        assert low.native_is_zero(NATIVE) is False
        assert high.native_is_zero(NATIVE) is True
        assert low.collection_token(NATIVE) == TOKEN
        assert high.collection_token(NATIVE) == TOKEN_HIGH

    def test_buy_direction_follows_ordering(self):
        """Buying the collection token pays native, whichever side native is on."""
        low = PoolKey.for_pair(NATIVE, TOKEN)
        high = PoolKey.for_pair(NATIVE, TOKEN_HIGH)
        assert low.buys_collection_token(NATIVE, zero_for_one=False)
        assert not low.buys_collection_token(NATIVE, zero_for_one=True)
        assert high.buys_collection_token(NATIVE, zero_for_one=True)

    def test_unknown_native_rejected(self):
        with pytest.raises(InvalidSwap):
            PoolKey.for_pair(NATIVE, TOKEN).native_is_zero(TOKEN_HIGH)


class TestSwapParams:
    def test_zero_amount_is_validation_error(self):
        with pytest.raises(ZeroAmount):
            SwapParams(False, SwapKind.EXACT_INPUT, 0, 1)
        assert issubclass(ZeroAmount, ValidationError)

    def test_negative_amount_rejected(self):
        with pytest.raises(ZeroAmount):
            SwapParams(False, SwapKind.EXACT_OUTPUT, -5, 1)

    def test_with_amount_keeps_everything_else(self):
        params = SwapParams(True, SwapKind.EXACT_OUTPUT, 100, 42)
        smaller = params.with_amount(7)
        assert smaller.amount == 7
        assert smaller.zero_for_one is True
        assert smaller.kind == SwapKind.EXACT_OUTPUT
        assert smaller.sqrt_price_limit_x96 == 42
        assert not smaller.exact_input


class TestBalanceDelta:
    def test_addition(self):
        total = BalanceDelta(1, 2) + BalanceDelta(10, 20)
        assert total == BalanceDelta(11, 22)

    def test_is_zero(self):
        assert BalanceDelta().is_zero
        assert not BalanceDelta(amount_out=1).is_zero
