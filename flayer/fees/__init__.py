"""Fee handling for Flayer pools.

- registry: default, per-pool and per-counterparty fee rates
- ledger: pending fee inventory and beneficiary balances
- distributor: takes the engine fee on internal fills

Usage:
    from flayer.fees import FeeLedger, FeeRegistry

    fee = registry.get_fee(key.pool_id, trader)
    ledger.deposit_fees(vault.address, key, native_amount, token_amount)
"""

from flayer.fees.distributor import AmmFeeDistributor, compute_fee_amount
from flayer.fees.ledger import ClaimableFees, FeeLedger
from flayer.fees.registry import FeeOverride, FeeRegistry, validate_fee

__all__ = [
    "AmmFeeDistributor",
    "compute_fee_amount",
    "ClaimableFees",
    "FeeLedger",
    "FeeOverride",
    "FeeRegistry",
    "validate_fee",
]
