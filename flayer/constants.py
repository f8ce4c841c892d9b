"""Protocol constants for the Flayer core.

Centralizes fee denominators, shutdown parameters and well-known addresses.
"""

from flayer.models.types import is_valid_address

# Fees are expressed in units of 1/100_000 (three decimal digits of percent)
FEE_DENOMINATOR = 100_000

# Ceiling accepted by every fee setter (100%)
MAX_FEE = 100_000

# Default dynamic fee applied to a pool without an explicit fee (1%)
DEFAULT_FEE = 1_000

# Share of distributed native fees credited to the royalty beneficiary (5%)
DEFAULT_BENEFICIARY_ROYALTY = 5_000

# Pending native fees are only distributed once they exceed the minimum and
# at most the maximum is released per distribution
DEFAULT_DONATE_THRESHOLD_MIN = 10**15  # 0.001 ETH
DEFAULT_DONATE_THRESHOLD_MAX = 10**17  # 0.1 ETH

# Swap math runs on Uniswap fee pips (1/1_000_000)
FEE_PIPS_DENOMINATOR = 1_000_000

# Collection shutdown
SHUTDOWN_QUORUM_PERCENT = 50
# Shutdown can only start while supply is at or below 4 whole tokens,
# scaled by 10**denomination of the collection token
MAX_SHUTDOWN_TOKENS = 4 * 10**18

# Sweeper pool pricing: linear decay from the start price to zero
SWEEPER_POOL_START_PRICE = 500 * 10**18
SWEEPER_POOL_DURATION = 7 * 24 * 60 * 60  # 7 days in seconds


def _validate_address(name: str, address: str) -> str:
    """Validate and return a well-known address.

    Raises:
        ValueError: If the address is invalid
    """
    if not is_valid_address(address):
        raise ValueError(f"Invalid {name} address: {address} (must be 0x + 40 hex chars)")
    return address


# Settlement asset (lowercase for consistency)
WETH = _validate_address("WETH", "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2")

ZERO_ADDRESS = _validate_address("ZERO_ADDRESS", "0x" + "00" * 20)
