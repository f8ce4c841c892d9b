"""Boundary of the external market the swap engine delegates to."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from flayer.models.pool import BalanceDelta, PoolKey, SwapParams


@runtime_checkable
class Market(Protocol):
    """Concentrated-liquidity market holding the public pool for each pair.

    The swap engine reads the current price from it, forwards the residual of
    every trade to it and donates distributed fees to its liquidity providers.
    """

    def is_initialized(self, key: PoolKey) -> bool: ...

    def get_sqrt_price(self, key: PoolKey) -> int:
        """Current pool price as sqrt(currency1/currency0) in Q64.96."""
        ...

    def get_liquidity(self, key: PoolKey) -> int: ...

    def swap(
        self,
        payer: str,
        recipient: str,
        key: PoolKey,
        params: SwapParams,
        fee_pips: int,
    ) -> BalanceDelta:
        """Execute a trade, moving funds between payer/recipient and the pool.

        Args:
            payer: Account the input currency is taken from
            recipient: Account the output currency is sent to
            key: Pool to trade against
            params: Trade request
            fee_pips: LP fee override (1/1_000_000)

        Returns:
            Amounts actually paid and received
        """
        ...

    def donate(self, payer: str, key: PoolKey, amount0: int, amount1: int) -> None: ...
