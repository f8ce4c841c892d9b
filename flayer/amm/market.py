"""Single-range in-memory market.

A simulation double for the external concentrated-liquidity market: each
pool has one liquidity range spanning the whole price domain, so a swap is a
single swap step towards the trader's price limit. Trades stop early (partial
fill) when the limit is reached.

The market settles directly against the payer's and recipient's balances,
the way a pool manager settles a call it has already authorized.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from flayer.collaborators.base import FungibleToken
from flayer.errors import InvalidSwap, PoolNotInitialized, ValidationError
from flayer.journal import StateHolder
from flayer.math.sqrt_price_math import MAX_SQRT_PRICE, MIN_SQRT_PRICE
from flayer.math.swap_math import compute_swap_step
from flayer.models.pool import BalanceDelta, PoolKey, SwapParams
from flayer.models.types import normalize_address
from flayer.runtime import Runtime

logger = structlog.get_logger()


@dataclass
class PoolState:
    """Price and liquidity of one pool.

    Attributes:
        sqrt_price_x96: Current sqrt(currency1/currency0) in Q64.96
        liquidity: Active liquidity
        donated0: Cumulative donations to LPs in currency0
        donated1: Cumulative donations to LPs in currency1
    """

    sqrt_price_x96: int
    liquidity: int
    donated0: int = 0
    donated1: int = 0


def validate_price_limit(sqrt_price_x96: int, params: SwapParams) -> None:
    """Raise InvalidSwap unless the limit lies on the trade's side of the price."""
    limit = params.sqrt_price_limit_x96
    if params.zero_for_one:
        if not MIN_SQRT_PRICE < limit < sqrt_price_x96:
            raise InvalidSwap(f"Price limit {limit} invalid for zero-for-one at {sqrt_price_x96}")
    else:
        if not sqrt_price_x96 < limit < MAX_SQRT_PRICE:
            raise InvalidSwap(f"Price limit {limit} invalid for one-for-zero at {sqrt_price_x96}")


class SingleRangeMarket(StateHolder):
    """Market holding one full-range pool per pair."""

    def __init__(self, runtime: Runtime, address: str, tokens: dict[str, FungibleToken]) -> None:
        self.runtime = runtime
        self.address = normalize_address(address, validate=True)
        self.tokens = {normalize_address(a): t for a, t in tokens.items()}
        self._pools: dict[str, PoolState] = {}
        runtime.register(self)

    def add_token(self, token: FungibleToken) -> None:
        self.tokens[token.address] = token

    def initialize(self, key: PoolKey, sqrt_price_x96: int, liquidity: int) -> None:
        if not MIN_SQRT_PRICE <= sqrt_price_x96 < MAX_SQRT_PRICE:
            raise ValidationError(f"sqrt price out of range: {sqrt_price_x96}")
        if liquidity < 0:
            raise ValidationError(f"Negative liquidity: {liquidity}")
        if key.pool_id in self._pools:
            raise ValidationError(f"Pool already initialized: {key.pool_id[:18]}")
        self._pools[key.pool_id] = PoolState(sqrt_price_x96=sqrt_price_x96, liquidity=liquidity)
        logger.info(
            "market_pool_initialized",
            pool_id=key.pool_id[:18],
            sqrt_price_x96=sqrt_price_x96,
            liquidity=liquidity,
        )

    def is_initialized(self, key: PoolKey) -> bool:
        return key.pool_id in self._pools

    def pool_state(self, key: PoolKey) -> PoolState:
        try:
            return self._pools[key.pool_id]
        except KeyError:
            raise PoolNotInitialized(f"Pool not initialized: {key.pool_id[:18]}") from None

    def get_sqrt_price(self, key: PoolKey) -> int:
        return self.pool_state(key).sqrt_price_x96

    def get_liquidity(self, key: PoolKey) -> int:
        return self.pool_state(key).liquidity

    def swap(
        self,
        payer: str,
        recipient: str,
        key: PoolKey,
        params: SwapParams,
        fee_pips: int,
    ) -> BalanceDelta:
        state = self.pool_state(key)
        validate_price_limit(state.sqrt_price_x96, params)

        step = compute_swap_step(
            state.sqrt_price_x96,
            params.sqrt_price_limit_x96,
            state.liquidity,
            params.amount,
            fee_pips,
            params.exact_input,
        )
        paid = step.amount_in + step.fee_amount
        token_in, token_out = self._swap_tokens(key, params.zero_for_one)

        if paid:
            token_in.transfer(payer, self.address, paid)
        if step.amount_out:
            token_out.transfer(self.address, recipient, step.amount_out)
        state.sqrt_price_x96 = step.sqrt_price_next_x96

        logger.debug(
            "market_swap",
            pool_id=key.pool_id[:18],
            zero_for_one=params.zero_for_one,
            amount_in=paid,
            amount_out=step.amount_out,
            fee_amount=step.fee_amount,
        )
        return BalanceDelta(amount_in=paid, amount_out=step.amount_out)

    def donate(self, payer: str, key: PoolKey, amount0: int, amount1: int) -> None:
        state = self.pool_state(key)
        if amount0:
            self.tokens[key.currency0].transfer(payer, self.address, amount0)
            state.donated0 += amount0
        if amount1:
            self.tokens[key.currency1].transfer(payer, self.address, amount1)
            state.donated1 += amount1
        logger.debug("market_donation", pool_id=key.pool_id[:18], amount0=amount0, amount1=amount1)

    def _swap_tokens(self, key: PoolKey, zero_for_one: bool) -> tuple[FungibleToken, FungibleToken]:
        token0, token1 = self.tokens[key.currency0], self.tokens[key.currency1]
        return (token0, token1) if zero_for_one else (token1, token0)
