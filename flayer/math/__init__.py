"""Fixed-point math for pool pricing.

- sqrt_price_math: Q64.96 amount/price deltas
- swap_math: single-range swap step
"""

from flayer.math.sqrt_price_math import (
    MAX_SQRT_PRICE,
    MIN_SQRT_PRICE,
    Q96,
    encode_sqrt_price_x96,
)
from flayer.math.swap_math import SwapStep, compute_swap_step

__all__ = [
    "Q96",
    "MIN_SQRT_PRICE",
    "MAX_SQRT_PRICE",
    "encode_sqrt_price_x96",
    "SwapStep",
    "compute_swap_step",
]
