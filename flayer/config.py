"""Configuration for the fee and shutdown engines."""

from dataclasses import dataclass

from flayer.constants import (
    DEFAULT_BENEFICIARY_ROYALTY,
    DEFAULT_DONATE_THRESHOLD_MAX,
    DEFAULT_DONATE_THRESHOLD_MIN,
    DEFAULT_FEE,
    MAX_SHUTDOWN_TOKENS,
    SHUTDOWN_QUORUM_PERCENT,
    SWEEPER_POOL_DURATION,
    SWEEPER_POOL_START_PRICE,
)


@dataclass(frozen=True)
class FeeConfig:
    """Initial fee settings.

    These seed the mutable settings held by the fee registry and ledger;
    the owner can change them afterwards through the setters.

    Attributes:
        default_fee: Fee applied to pools without an explicit fee (1/100_000)
        beneficiary_royalty: Share of distributed native fees for the
            royalty beneficiary (1/100_000)
        donate_threshold_min: Pending native fees must exceed this before
            they are distributed
        donate_threshold_max: Upper bound released per distribution
    """

    default_fee: int = DEFAULT_FEE
    beneficiary_royalty: int = DEFAULT_BENEFICIARY_ROYALTY
    donate_threshold_min: int = DEFAULT_DONATE_THRESHOLD_MIN
    donate_threshold_max: int = DEFAULT_DONATE_THRESHOLD_MAX


@dataclass(frozen=True)
class ShutdownConfig:
    """Collection shutdown parameters.

    Attributes:
        quorum_percent: Share of total supply that must vote
        max_shutdown_tokens: Supply ceiling for starting a shutdown, before
            scaling by the collection token's denomination
        sweeper_start_price: Sweeper pool start price per asset (wei)
        sweeper_duration: Seconds for the price to decay linearly to zero
    """

    quorum_percent: int = SHUTDOWN_QUORUM_PERCENT
    max_shutdown_tokens: int = MAX_SHUTDOWN_TOKENS
    sweeper_start_price: int = SWEEPER_POOL_START_PRICE
    sweeper_duration: int = SWEEPER_POOL_DURATION

    def __post_init__(self) -> None:
        if not 0 < self.quorum_percent <= 100:
            raise ValueError(f"quorum_percent must be in (0, 100]: {self.quorum_percent}")
        if self.sweeper_duration <= 0:
            raise ValueError(f"sweeper_duration must be positive: {self.sweeper_duration}")


# Default configuration instances
DEFAULT_FEE_CONFIG = FeeConfig()
DEFAULT_SHUTDOWN_CONFIG = ShutdownConfig()
