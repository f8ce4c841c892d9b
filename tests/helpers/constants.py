"""Shared constants for tests.

All addresses are lowercase for consistency with normalize_address().

Usage:
    from tests.helpers import ALICE, ONE_TOKEN
    # or
    from tests.helpers.constants import ALICE, ONE_TOKEN
"""

from flayer.constants import WETH
from flayer.math.sqrt_price_math import MAX_SQRT_PRICE, MIN_SQRT_PRICE, Q96
from flayer.protocol import DEFAULT_OWNER

# =============================================================================
# Accounts
# =============================================================================

OWNER = DEFAULT_OWNER
ALICE = "0x" + "a0" * 19 + "01"
BOB = "0x" + "a0" * 19 + "02"
CAROL = "0x" + "a0" * 19 + "03"
DAVE = "0x" + "a0" * 19 + "04"
TRADER = "0x" + "e0" * 19 + "01"
DEPOSITOR = "0x" + "d0" * 19 + "01"
BUYER = "0x" + "99" * 20

# =============================================================================
# Collections
# =============================================================================

# Collection token sorts below WETH: the token is currency0
NFT = "0x" + "11" * 20
TOKEN = "0x" + "22" * 20

# Collection token sorts above WETH: native is currency0
NFT_HIGH = "0x" + "e1" * 20
TOKEN_HIGH = "0x" + "f2" * 20

NATIVE = WETH

# =============================================================================
# Amounts and prices
# =============================================================================

ONE_TOKEN = 10**18
ONE_ETH = 10**18

# Price 1:1 with deep liquidity, so small trades barely move the price
PRICE_ONE = Q96
DEEP_LIQUIDITY = 10**24

# Widest valid limits for each direction
LIMIT_UP = MAX_SQRT_PRICE - 1
LIMIT_DOWN = MIN_SQRT_PRICE + 1


__all__ = [
    "OWNER",
    "ALICE",
    "BOB",
    "CAROL",
    "DAVE",
    "TRADER",
    "DEPOSITOR",
    "BUYER",
    "NFT",
    "TOKEN",
    "NFT_HIGH",
    "TOKEN_HIGH",
    "NATIVE",
    "ONE_TOKEN",
    "ONE_ETH",
    "PRICE_ONE",
    "DEEP_LIQUIDITY",
    "LIMIT_UP",
    "LIMIT_DOWN",
]
