"""AMM fee distributor: takes the fee on the internal leg of a swap.

fee_amount = notional * fee // FEE_DENOMINATOR, truncating. The fee is
routed by the currency it was taken in:
- native: credited to the AMM beneficiary's claimable balance in the ledger
- collection token: burned from the ledger's holding

A zero fee amount is a no-op and emits nothing.
"""

from __future__ import annotations

import structlog

from flayer.collaborators.base import FungibleToken
from flayer.constants import FEE_DENOMINATOR
from flayer.fees.ledger import FeeLedger
from flayer.fees.registry import validate_fee
from flayer.journal import StateHolder
from flayer.models.events import AMMBeneficiarySet, AMMFeesTaken
from flayer.models.types import normalize_address
from flayer.runtime import Runtime, entry_point
from flayer.safe_int import S

logger = structlog.get_logger()


def compute_fee_amount(notional: int, fee: int) -> int:
    """Fee owed on a notional at a rate in 1/100_000, rounded toward zero."""
    return S.mul_div(notional, validate_fee(fee), FEE_DENOMINATOR).value


class AmmFeeDistributor(StateHolder):
    """Routes swap fees to the AMM beneficiary or burns them.

    Attributes:
        amm_beneficiary: Account credited with native-side fees
        collected: Total fees taken, per token address
        burned: Total collection-token fees burned, per token address
    """

    def __init__(self, runtime: Runtime, ledger: FeeLedger) -> None:
        self.runtime = runtime
        self.ledger = ledger
        self.amm_beneficiary = runtime.owner
        self.collected: dict[str, int] = {}
        self.burned: dict[str, int] = {}
        runtime.register(self)

    @entry_point
    def set_amm_beneficiary(self, caller: str, beneficiary: str) -> None:
        self.runtime.require_owner(caller)
        self.amm_beneficiary = normalize_address(beneficiary, validate=True)
        self.runtime.events.emit(AMMBeneficiarySet(beneficiary=self.amm_beneficiary))
        logger.info("amm_beneficiary_set", beneficiary=self.amm_beneficiary)

    def take_fee(self, token: FungibleToken, notional: int, fee: int) -> int:
        """Take the fee on a notional already held by the ledger.

        Returns:
            The fee amount taken (0 if nothing was taken)
        """
        amount = compute_fee_amount(notional, fee)
        if amount == 0:
            return 0

        if token.address == self.ledger.native.address:
            recipient = self.amm_beneficiary
            self.ledger.credit(recipient, amount)
        else:
            recipient = self.ledger.address
            token.burn(self.ledger.address, amount)
            self.burned[token.address] = self.burned.get(token.address, 0) + amount
        self.collected[token.address] = self.collected.get(token.address, 0) + amount

        self.runtime.events.emit(
            AMMFeesTaken(recipient=recipient, token=token.address, amount=amount)
        )
        logger.debug("amm_fees_taken", recipient=recipient, token=token.address, amount=amount)
        return amount
