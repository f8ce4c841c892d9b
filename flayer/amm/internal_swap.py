"""Internal swap engine: fills trades from fee inventory before the market.

Collection-token fees are the non-preferred fee currency. Whenever a trader
buys the collection token with the native token, the engine first sells them
as much of the pool's collection-token fee inventory as it can, priced with a
fee-free swap step from the pool's current price and liquidity. The public
pool price does not move; only the residual of the order reaches the market.

Settlement of one swap (all inside a single transaction):
1. Internal leg: trader pays native to the ledger, ledger inventory is
   debited, trader receives collection tokens. The engine's fee is taken on
   the unspecified side of the internal leg.
2. Residual leg: forwarded to the market with the effective fee as the LP
   fee override, and reconciled against the trader's balances.
3. Pending native fees are distributed.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from flayer.amm.base import Market
from flayer.amm.market import validate_price_limit
from flayer.collaborators.base import FungibleToken
from flayer.constants import MAX_FEE
from flayer.errors import (
    ExternalCallError,
    FlayerError,
    InsufficientInventory,
    InvalidSwap,
    PoolNotInitialized,
    SettlementMismatch,
)
from flayer.fees.distributor import AmmFeeDistributor, compute_fee_amount
from flayer.fees.ledger import FeeLedger
from flayer.fees.registry import FeeRegistry
from flayer.journal import StateHolder
from flayer.math.swap_math import compute_swap_step
from flayer.models.events import PoolFeesSwapped
from flayer.models.pool import BalanceDelta, PoolKey, SwapParams
from flayer.models.types import normalize_address
from flayer.runtime import Runtime, entry_point
from flayer.safe_int import S

logger = structlog.get_logger()

# Registry fees are 1/100_000, market fees are pips (1/1_000_000)
FEE_TO_PIPS = 10


@dataclass(frozen=True)
class InternalFill:
    """Portion of a trade filled from fee inventory.

    Attributes:
        native_in: Native paid into the ledger, excluding the engine's fee
        token_out: Collection tokens taken from inventory
        residual: Specified amount still to be filled by the market, in the
            same unit as the request (native for exact input, tokens for
            exact output)
    """

    native_in: int
    token_out: int
    residual: int

    @property
    def is_empty(self) -> bool:
        return self.token_out == 0


@dataclass(frozen=True)
class SwapOutcome:
    """Result of a swap through the engine.

    Attributes:
        internal: Internal leg
        fee_amount: Engine fee taken on the internal leg
        market: Residual leg as settled by the market
        total: What the trader paid and received overall
    """

    internal: InternalFill
    fee_amount: int
    market: BalanceDelta
    total: BalanceDelta


def compute_internal_fill(
    params: SwapParams,
    inventory: int,
    sqrt_price_x96: int,
    liquidity: int,
) -> InternalFill:
    """Compute the internal fill of a buy of the collection token.

    Pure function of the trade and the pool state. The fill never exceeds
    inventory. When the internal step reaches the trade's price limit the
    trade is complete and nothing is forwarded.

    Args:
        params: Trade paying native and receiving the collection token
        inventory: Collection-token fee inventory of the pool
        sqrt_price_x96: Current pool price
        liquidity: Active pool liquidity

    Returns:
        InternalFill; token_out == 0 means the whole order passes through

    Raises:
        InsufficientInventory: If the computed fill exceeds inventory
        Overflow: If an amount does not fit int128
        Underflow: If the fill would cost more than the specified input
    """
    passthrough = InternalFill(native_in=0, token_out=0, residual=params.amount)
    if inventory <= 0 or liquidity <= 0:
        return passthrough

    limit = params.sqrt_price_limit_x96

    if params.exact_input:
        step = compute_swap_step(sqrt_price_x96, limit, liquidity, params.amount, 0, True)
        if step.amount_out >= inventory:
            # The input buys out the whole inventory; spend only what that costs
            step = compute_swap_step(sqrt_price_x96, limit, liquidity, inventory, 0, False)
            native_in = step.amount_in
        else:
            # Rounding dust of a fee-free step stays with the ledger
            native_in = step.amount_in + step.fee_amount
        residual = (S(params.amount) - native_in).value
    else:
        target = min(params.amount, inventory)
        step = compute_swap_step(sqrt_price_x96, limit, liquidity, target, 0, False)
        native_in = step.amount_in
        residual = (S(params.amount) - step.amount_out).value

    token_out = step.amount_out
    if token_out == 0:
        return passthrough
    if token_out > inventory:
        raise InsufficientInventory(f"Internal fill {token_out} exceeds inventory {inventory}")
    if step.sqrt_price_next_x96 == limit:
        residual = 0

    return InternalFill(
        native_in=S(native_in).to_int128(),
        token_out=S(token_out).to_int128(),
        residual=S(residual).to_int128(),
    )


class InternalSwapEngine(StateHolder):
    """Entry point for trades on Flayer pools."""

    def __init__(
        self,
        runtime: Runtime,
        ledger: FeeLedger,
        registry: FeeRegistry,
        distributor: AmmFeeDistributor,
        market: Market,
    ) -> None:
        self.runtime = runtime
        self.ledger = ledger
        self.registry = registry
        self.distributor = distributor
        self.market = market
        self.native = ledger.native
        self._keys: dict[str, PoolKey] = {}
        runtime.register(self)

    @property
    def address(self) -> str:
        return self.ledger.address

    @entry_point
    def register_collection(self, caller: str, collection: str, token: FungibleToken) -> PoolKey:
        """Create the pool key for a collection and open its fee ledger entry."""
        self.runtime.require_owner(caller)
        key = PoolKey.for_pair(self.native.address, token.address)
        self.ledger.register_pool(key, collection, token)
        self._keys[normalize_address(collection)] = key
        logger.info("collection_pool_registered", collection=collection, pool_id=key.pool_id[:18])
        return key

    def pool_key(self, collection: str) -> PoolKey:
        try:
            return self._keys[normalize_address(collection)]
        except KeyError:
            raise PoolNotInitialized(f"No pool for collection {collection}") from None

    def quote_internal_fill(self, key: PoolKey, params: SwapParams) -> InternalFill:
        """Internal fill the trade would get right now, without executing it."""
        sqrt_price = self._require_market(key)
        validate_price_limit(sqrt_price, params)
        if not key.buys_collection_token(self.native.address, params.zero_for_one):
            return InternalFill(native_in=0, token_out=0, residual=params.amount)
        return compute_internal_fill(
            params,
            self.ledger.claimable_fees(key).token_amount,
            sqrt_price,
            self.market.get_liquidity(key),
        )

    @entry_point
    def swap(self, sender: str, key: PoolKey, params: SwapParams) -> SwapOutcome:
        """Execute a trade, internal leg first, then the residual on the market."""
        sender = normalize_address(sender)
        self.ledger.collection_of(key)  # raises PoolNotInitialized
        fill = self.quote_internal_fill(key, params)
        fee = self.registry.get_fee(key.pool_id, sender)
        if not params.exact_input and fee >= MAX_FEE:
            raise InvalidSwap("Exact output cannot be filled at a 100% fee")

        fee_amount = 0
        if not fill.is_empty:
            fee_amount = self._settle_internal(sender, key, params, fill, fee)

        market_delta = BalanceDelta()
        if fill.residual > 0:
            market_delta = self._forward_residual(sender, key, params, fill.residual, fee)

        self.ledger.distribute(key)

        if params.exact_input:
            internal = BalanceDelta(
                amount_in=fill.native_in, amount_out=fill.token_out - fee_amount
            )
        else:
            internal = BalanceDelta(
                amount_in=fill.native_in + fee_amount, amount_out=fill.token_out
            )
        outcome = SwapOutcome(
            internal=fill,
            fee_amount=fee_amount,
            market=market_delta,
            total=internal + market_delta,
        )
        logger.info(
            "swap_executed",
            pool_id=key.pool_id[:18],
            sender=sender,
            internal_token_out=fill.token_out,
            residual=fill.residual,
            amount_in=outcome.total.amount_in,
            amount_out=outcome.total.amount_out,
        )
        return outcome

    def _require_market(self, key: PoolKey) -> int:
        if not self.market.is_initialized(key):
            raise PoolNotInitialized(f"Market pool not initialized: {key.pool_id[:18]}")
        return self.market.get_sqrt_price(key)

    def _settle_internal(
        self,
        sender: str,
        key: PoolKey,
        params: SwapParams,
        fill: InternalFill,
        fee: int,
    ) -> int:
        token = self.ledger.token_of(key)
        ledger = self.ledger.address

        if params.exact_input:
            # Fee comes out of the tokens the trader receives and is burned
            fee_amount = compute_fee_amount(fill.token_out, fee)
            self.native.transfer_from(ledger, sender, ledger, fill.native_in)
            self.ledger.record_internal_fill(key, fill.native_in, fill.token_out)
            token.transfer(ledger, sender, (S(fill.token_out) - fee_amount).value)
            self.distributor.take_fee(token, fill.token_out, fee)
        else:
            # Fee is charged on top of the native the trader pays
            fee_amount = compute_fee_amount(fill.native_in, fee)
            self.native.transfer_from(ledger, sender, ledger, fill.native_in + fee_amount)
            self.ledger.record_internal_fill(key, fill.native_in, fill.token_out)
            token.transfer(ledger, sender, fill.token_out)
            self.distributor.take_fee(self.native, fill.native_in, fee)

        if key.native_is_zero(self.native.address):
            amount0, amount1 = fill.native_in, fill.token_out
        else:
            amount0, amount1 = fill.token_out, fill.native_in
        collection = self.ledger.collection_of(key)
        self.runtime.events.emit(
            PoolFeesSwapped(
                collection=collection,
                zero_for_one=params.zero_for_one,
                amount0=amount0,
                amount1=amount1,
            )
        )
        logger.debug(
            "pool_fees_swapped",
            collection=collection,
            native_in=fill.native_in,
            token_out=fill.token_out,
            fee_amount=fee_amount,
        )
        return fee_amount

    def _forward_residual(
        self,
        sender: str,
        key: PoolKey,
        params: SwapParams,
        residual: int,
        fee: int,
    ) -> BalanceDelta:
        token = self.ledger.token_of(key)
        if key.buys_collection_token(self.native.address, params.zero_for_one):
            token_in, token_out = self.native, token
        else:
            token_in, token_out = token, self.native
        balance_in = token_in.balance_of(sender)
        balance_out = token_out.balance_of(sender)

        try:
            delta = self.market.swap(
                sender, sender, key, params.with_amount(residual), fee * FEE_TO_PIPS
            )
        except (FlayerError, ArithmeticError):
            raise
        except Exception as err:
            raise ExternalCallError(f"Market swap failed: {err}") from err

        paid = balance_in - token_in.balance_of(sender)
        received = token_out.balance_of(sender) - balance_out
        if paid != delta.amount_in or received != delta.amount_out:
            raise SettlementMismatch(
                f"Market reported in={delta.amount_in} out={delta.amount_out}, "
                f"trader paid {paid} received {received}"
            )
        specified = delta.amount_in if params.exact_input else delta.amount_out
        if specified > residual:
            raise SettlementMismatch(f"Market filled {specified}, more than residual {residual}")
        return delta

