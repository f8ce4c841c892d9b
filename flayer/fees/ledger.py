"""Fee ledger: per-pool fee inventory and per-beneficiary balances.

Fees arrive from the vault and listings (deposit_fees) and from the swap
engine's internal fills. Native fees are periodically distributed: a royalty
share is credited to the beneficiary and the rest donated to the pool's
liquidity providers. Collection-token fees stay in inventory until the swap
engine sells them into incoming buy orders.

All funds sit at the ledger's address; ClaimableFees and beneficiary
balances are claims against that holding.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from flayer.amm.base import Market
from flayer.collaborators.base import FungibleToken
from flayer.config import DEFAULT_FEE_CONFIG, FeeConfig
from flayer.constants import FEE_DENOMINATOR
from flayer.errors import (
    InsufficientInventory,
    InvalidDonateThresholds,
    InvalidRoyalty,
    NothingToClaim,
    PoolNotInitialized,
    ZeroAmount,
)
from flayer.journal import StateHolder
from flayer.models.events import (
    BeneficiaryFeesClaimed,
    BeneficiaryRoyaltyUpdated,
    BeneficiaryUpdated,
    DonateThresholdsUpdated,
    PoolFeesDistributed,
    PoolFeesReceived,
)
from flayer.models.pool import PoolKey
from flayer.models.types import normalize_address
from flayer.runtime import Runtime, entry_point
from flayer.safe_int import S

logger = structlog.get_logger()


@dataclass
class ClaimableFees:
    """Undistributed fee inventory of one pool.

    Amounts are keyed by role rather than currency order: native_amount is
    always the settlement asset and token_amount the collection token.
    """

    native_amount: int = 0
    token_amount: int = 0


class FeeLedger(StateHolder):
    """Holds fee inventory and beneficiary balances.

    Attributes:
        address: Account holding every balance tracked here
        native: Settlement asset
        beneficiary: Recipient of the royalty share of distributed fees
        beneficiary_royalty: Royalty share (1/100_000)
        donate_threshold_min: Distribute only above this pending amount
        donate_threshold_max: Upper bound released per distribution
        credited_total: Everything ever credited to beneficiary balances
        claimed_total: Everything ever paid out by claim()
    """

    def __init__(
        self,
        runtime: Runtime,
        address: str,
        native: FungibleToken,
        market: Market,
        config: FeeConfig | None = None,
    ) -> None:
        config = config or DEFAULT_FEE_CONFIG
        self.runtime = runtime
        self.address = normalize_address(address, validate=True)
        self.native = native
        self.market = market
        self.beneficiary = runtime.owner
        self.beneficiary_royalty = config.beneficiary_royalty
        self.donate_threshold_min = config.donate_threshold_min
        self.donate_threshold_max = config.donate_threshold_max
        self.credited_total = 0
        self.claimed_total = 0
        self._pools: dict[str, PoolKey] = {}
        self._collections: dict[str, str] = {}
        self._tokens: dict[str, FungibleToken] = {}
        self._fees: dict[str, ClaimableFees] = {}
        self._beneficiary_fees: dict[str, int] = {}
        runtime.register(self)

    # --- Pools ---

    def register_pool(self, key: PoolKey, collection: str, token: FungibleToken) -> None:
        self._pools[key.pool_id] = key
        self._collections[key.pool_id] = normalize_address(collection)
        self._tokens[key.pool_id] = token
        self._fees[key.pool_id] = ClaimableFees()

    def is_registered(self, key: PoolKey) -> bool:
        return key.pool_id in self._pools

    def collection_of(self, key: PoolKey) -> str:
        self._require_pool(key)
        return self._collections[key.pool_id]

    def token_of(self, key: PoolKey) -> FungibleToken:
        self._require_pool(key)
        return self._tokens[key.pool_id]

    def claimable_fees(self, key: PoolKey) -> ClaimableFees:
        """Copy of the pool's undistributed fees."""
        self._require_pool(key)
        fees = self._fees[key.pool_id]
        return ClaimableFees(native_amount=fees.native_amount, token_amount=fees.token_amount)

    def _require_pool(self, key: PoolKey) -> None:
        if key.pool_id not in self._pools:
            raise PoolNotInitialized(f"Pool not registered: {key.pool_id[:18]}")

    # --- Inflows ---

    @entry_point
    def deposit_fees(
        self, sender: str, key: PoolKey, native_amount: int, token_amount: int
    ) -> None:
        """Pull fees from sender into the pool's inventory."""
        self._require_pool(key)
        if native_amount < 0 or token_amount < 0:
            raise ZeroAmount("Fee deposits cannot be negative")
        if native_amount == 0 and token_amount == 0:
            raise ZeroAmount("Fee deposit must be non-zero")

        if native_amount:
            self.native.transfer_from(self.address, sender, self.address, native_amount)
        if token_amount:
            token = self._tokens[key.pool_id]
            token.transfer_from(self.address, sender, self.address, token_amount)

        fees = self._fees[key.pool_id]
        fees.native_amount += native_amount
        fees.token_amount += token_amount

        collection = self._collections[key.pool_id]
        amount0, amount1 = self._in_currency_order(key, native_amount, token_amount)
        self.runtime.events.emit(
            PoolFeesReceived(collection=collection, amount0=amount0, amount1=amount1)
        )
        logger.info(
            "pool_fees_received",
            collection=collection,
            native_amount=native_amount,
            token_amount=token_amount,
        )

    def record_internal_fill(self, key: PoolKey, native_in: int, token_out: int) -> None:
        """Swap token inventory for native paid by a trader.

        Raises:
            InsufficientInventory: If token_out exceeds the token inventory
        """
        fees = self._fees[key.pool_id]
        if token_out > fees.token_amount:
            raise InsufficientInventory(
                f"Internal fill {token_out} exceeds inventory {fees.token_amount}"
            )
        fees.token_amount = (S(fees.token_amount) - token_out).value
        fees.native_amount = (S(fees.native_amount) + native_in).value

    def credit(self, beneficiary: str, amount: int) -> None:
        beneficiary = normalize_address(beneficiary)
        self._beneficiary_fees[beneficiary] = self._beneficiary_fees.get(beneficiary, 0) + amount
        self.credited_total += amount

    # --- Distribution ---

    @entry_point
    def distribute_fees(self, key: PoolKey) -> tuple[int, int]:
        """Distribute pending native fees for a pool; see distribute()."""
        return self.distribute(key)

    def distribute(self, key: PoolKey) -> tuple[int, int]:
        """Release pending native fees above the donate threshold.

        Returns:
            (donate_amount, beneficiary_amount); (0, 0) below threshold
        """
        self._require_pool(key)
        fees = self._fees[key.pool_id]
        if fees.native_amount <= self.donate_threshold_min:
            return 0, 0

        released = min(fees.native_amount, self.donate_threshold_max)
        beneficiary_amount = S.mul_div(released, self.beneficiary_royalty, FEE_DENOMINATOR).value
        donate_amount = (S(released) - beneficiary_amount).value

        fees.native_amount = (S(fees.native_amount) - released).value
        if beneficiary_amount:
            self.credit(self.beneficiary, beneficiary_amount)
        if donate_amount:
            amount0, amount1 = self._in_currency_order(key, donate_amount, 0)
            self.market.donate(self.address, key, amount0, amount1)

        collection = self._collections[key.pool_id]
        self.runtime.events.emit(
            PoolFeesDistributed(
                collection=collection,
                donate_amount=donate_amount,
                beneficiary_amount=beneficiary_amount,
            )
        )
        logger.info(
            "pool_fees_distributed",
            collection=collection,
            donate_amount=donate_amount,
            beneficiary_amount=beneficiary_amount,
        )
        return donate_amount, beneficiary_amount

    # --- Beneficiaries ---

    def beneficiary_fees(self, beneficiary: str) -> int:
        return self._beneficiary_fees.get(normalize_address(beneficiary), 0)

    def total_beneficiary_fees(self) -> int:
        return sum(self._beneficiary_fees.values())

    @entry_point
    def claim(self, beneficiary: str) -> int:
        """Pay out a beneficiary's balance in the native token."""
        beneficiary = normalize_address(beneficiary)
        amount = self._beneficiary_fees.get(beneficiary, 0)
        if amount == 0:
            raise NothingToClaim(f"No fees to claim for {beneficiary}")
        self._beneficiary_fees[beneficiary] = 0
        self.claimed_total += amount
        self.native.transfer(self.address, beneficiary, amount)
        self.runtime.events.emit(BeneficiaryFeesClaimed(beneficiary=beneficiary, amount=amount))
        logger.info("beneficiary_fees_claimed", beneficiary=beneficiary, amount=amount)
        return amount

    @entry_point
    def set_beneficiary(self, caller: str, beneficiary: str) -> None:
        self.runtime.require_owner(caller)
        self.beneficiary = normalize_address(beneficiary, validate=True)
        self.runtime.events.emit(BeneficiaryUpdated(beneficiary=self.beneficiary))

    @entry_point
    def set_beneficiary_royalty(self, caller: str, royalty: int) -> None:
        self.runtime.require_owner(caller)
        if not 0 <= royalty <= FEE_DENOMINATOR:
            raise InvalidRoyalty(f"Royalty {royalty} outside [0, {FEE_DENOMINATOR}]")
        self.beneficiary_royalty = royalty
        self.runtime.events.emit(BeneficiaryRoyaltyUpdated(royalty=royalty))

    @entry_point
    def set_donate_thresholds(self, caller: str, minimum: int, maximum: int) -> None:
        self.runtime.require_owner(caller)
        if minimum < 0 or minimum > maximum:
            raise InvalidDonateThresholds(f"Invalid donate thresholds: min={minimum} max={maximum}")
        self.donate_threshold_min = minimum
        self.donate_threshold_max = maximum
        self.runtime.events.emit(
            DonateThresholdsUpdated(donate_threshold_min=minimum, donate_threshold_max=maximum)
        )

    def _in_currency_order(
        self, key: PoolKey, native_amount: int, token_amount: int
    ) -> tuple[int, int]:
        if key.native_is_zero(self.native.address):
            return native_amount, token_amount
        return token_amount, native_amount
