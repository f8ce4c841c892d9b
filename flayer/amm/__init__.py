"""Market boundary and the in-memory single-range market.

The internal swap engine lives in flayer.amm.internal_swap; it depends on
flayer.fees, which itself depends on the Market protocol defined here.
"""

from flayer.amm.base import Market
from flayer.amm.market import PoolState, SingleRangeMarket, validate_price_limit

__all__ = [
    "Market",
    "PoolState",
    "SingleRangeMarket",
    "validate_price_limit",
]
