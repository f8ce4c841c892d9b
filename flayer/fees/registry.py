"""Fee rates: global default, per-pool fees and per-counterparty exemptions.

Resolution order for a trade (highest precedence first):
1. An enabled exemption for the counterparty
2. The pool's explicitly set fee
3. The global default fee

An exemption is authoritative in both directions: it can lower the fee to
zero or raise it above the pool/default fee.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from flayer.config import DEFAULT_FEE_CONFIG, FeeConfig
from flayer.constants import MAX_FEE
from flayer.errors import FeeTooHigh, NoBeneficiaryExemption
from flayer.journal import StateHolder
from flayer.models.events import (
    BeneficiaryFeeExemptionRemoved,
    BeneficiaryFeeExemptionSet,
    DefaultFeeSet,
    PoolFeeSet,
)
from flayer.models.types import normalize_address
from flayer.runtime import Runtime, entry_point

logger = structlog.get_logger()


@dataclass(frozen=True)
class FeeOverride:
    """Fee override for one counterparty.

    `enabled` is what marks the override as present; a fee of zero is a
    valid override that waives the fee entirely.
    """

    fee: int
    enabled: bool = True


def validate_fee(fee: int) -> int:
    """Raise FeeTooHigh unless 0 <= fee <= MAX_FEE."""
    if fee < 0:
        raise FeeTooHigh(f"Fee cannot be negative: {fee}")
    if fee > MAX_FEE:
        raise FeeTooHigh(f"Fee {fee} exceeds maximum {MAX_FEE}")
    return fee


class FeeRegistry(StateHolder):
    """Owner-managed fee table.

    Attributes:
        default_fee: Fee for pools without an explicit fee (1/100_000)
    """

    def __init__(self, runtime: Runtime, config: FeeConfig | None = None) -> None:
        config = config or DEFAULT_FEE_CONFIG
        self.runtime = runtime
        self.default_fee = validate_fee(config.default_fee)
        self._pool_fees: dict[str, int] = {}
        self._exemptions: dict[str, FeeOverride] = {}
        runtime.register(self)

    def get_fee(self, pool_id: str, counterparty: str | None = None) -> int:
        """Effective fee for a trade by counterparty on pool_id."""
        if counterparty is not None:
            override = self._exemptions.get(normalize_address(counterparty))
            if override is not None and override.enabled:
                return override.fee
        return self._pool_fees.get(pool_id, self.default_fee)

    def pool_fee(self, pool_id: str) -> int | None:
        """Explicit pool fee, or None if the pool uses the default."""
        return self._pool_fees.get(pool_id)

    def fee_exemption(self, beneficiary: str) -> FeeOverride | None:
        return self._exemptions.get(normalize_address(beneficiary))

    @entry_point
    def set_default_fee(self, caller: str, fee: int) -> None:
        self.runtime.require_owner(caller)
        self.default_fee = validate_fee(fee)
        self.runtime.events.emit(DefaultFeeSet(fee=fee))
        logger.info("default_fee_set", fee=fee)

    @entry_point
    def set_fee(self, caller: str, pool_id: str, fee: int) -> None:
        self.runtime.require_owner(caller)
        self._pool_fees[pool_id] = validate_fee(fee)
        self.runtime.events.emit(PoolFeeSet(pool_id=pool_id, fee=fee))
        logger.info("pool_fee_set", pool_id=pool_id[:18], fee=fee)

    @entry_point
    def clear_fee(self, caller: str, pool_id: str) -> None:
        """Return a pool to the default fee."""
        self.runtime.require_owner(caller)
        self._pool_fees.pop(pool_id, None)
        self.runtime.events.emit(PoolFeeSet(pool_id=pool_id, fee=self.default_fee))
        logger.info("pool_fee_cleared", pool_id=pool_id[:18])

    @entry_point
    def set_fee_exemption(self, caller: str, beneficiary: str, fee: int) -> None:
        self.runtime.require_owner(caller)
        beneficiary = normalize_address(beneficiary, validate=True)
        self._exemptions[beneficiary] = FeeOverride(fee=validate_fee(fee), enabled=True)
        self.runtime.events.emit(BeneficiaryFeeExemptionSet(beneficiary=beneficiary, fee=fee))
        logger.info("fee_exemption_set", beneficiary=beneficiary, fee=fee)

    @entry_point
    def remove_fee_exemption(self, caller: str, beneficiary: str) -> None:
        self.runtime.require_owner(caller)
        beneficiary = normalize_address(beneficiary)
        override = self._exemptions.get(beneficiary)
        if override is None or not override.enabled:
            raise NoBeneficiaryExemption(f"No fee exemption for {beneficiary}")
        del self._exemptions[beneficiary]
        self.runtime.events.emit(BeneficiaryFeeExemptionRemoved(beneficiary=beneficiary))
        logger.info("fee_exemption_removed", beneficiary=beneficiary)
