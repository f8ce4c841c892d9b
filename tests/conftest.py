"""Pytest configuration and fixtures."""

from collections.abc import Sequence

import pytest

from flayer.collaborators.base import NonFungibleCollection, ValueReceiver
from flayer.models.pool import BalanceDelta, PoolKey, SwapParams
from flayer.protocol import FlayerProtocol
from tests.helpers import add_collection, make_protocol


@pytest.fixture
def protocol() -> FlayerProtocol:
    """Fresh protocol owned by OWNER."""
    return make_protocol()


@pytest.fixture
def key(protocol: FlayerProtocol) -> PoolKey:
    """Pool of the default collection (collection token is currency0)."""
    return add_collection(protocol)


@pytest.fixture
def collection(protocol: FlayerProtocol) -> PoolKey:
    """Default collection without market reserves.

    Supply is only what holders deposit, so it stays under the shutdown ceiling.
    """
    return add_collection(protocol, market_reserves=0)


# =============================================================================
# Mock collaborators for failure injection
# =============================================================================


class FailingPoolFactory:
    """Liquidation pool factory that always fails.

    Usage:
        protocol.shutdown.pool_factory = FailingPoolFactory()
    """

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error or RuntimeError("pool factory unavailable")
        self.calls = 0

    def create_pool(
        self,
        owner: str,
        nft: NonFungibleCollection,
        token_ids: Sequence[int],
        start_price: int,
        duration: int,
        asset_recipient: ValueReceiver,
    ):
        self.calls += 1
        raise self.error


class MisreportingMarket:
    """Market wrapper that settles correctly but reports different amounts.

    Usage:
        protocol.swaps.market = MisreportingMarket(protocol.market, extra_out=1)
    """

    def __init__(self, market, extra_out: int = 0, extra_in: int = 0) -> None:
        self.market = market
        self.extra_out = extra_out
        self.extra_in = extra_in

    def is_initialized(self, key: PoolKey) -> bool:
        return self.market.is_initialized(key)

    def get_sqrt_price(self, key: PoolKey) -> int:
        return self.market.get_sqrt_price(key)

    def get_liquidity(self, key: PoolKey) -> int:
        return self.market.get_liquidity(key)

    def swap(self, payer, recipient, key, params: SwapParams, fee_pips: int) -> BalanceDelta:
        delta = self.market.swap(payer, recipient, key, params, fee_pips)
        return BalanceDelta(
            amount_in=delta.amount_in + self.extra_in,
            amount_out=delta.amount_out + self.extra_out,
        )

    def donate(self, payer, key, amount0, amount1) -> None:
        self.market.donate(payer, key, amount0, amount1)


class ExplodingMarket(MisreportingMarket):
    """Market wrapper whose swap raises a non-protocol error after moving funds."""

    def swap(self, payer, recipient, key, params: SwapParams, fee_pips: int) -> BalanceDelta:
        self.market.swap(payer, recipient, key, params, fee_pips)
        raise ConnectionError("market node went away")


@pytest.fixture
def failing_pool_factory() -> FailingPoolFactory:
    return FailingPoolFactory()
