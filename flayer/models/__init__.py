"""Data models for the Flayer core."""

from flayer.models.events import Event, EventLog
from flayer.models.pool import BalanceDelta, PoolKey, SwapKind, SwapParams
from flayer.models.types import Address, Uint256, is_valid_address, normalize_address

__all__ = [
    # Types
    "Address",
    "Uint256",
    "is_valid_address",
    "normalize_address",
    # Pool models
    "PoolKey",
    "SwapKind",
    "SwapParams",
    "BalanceDelta",
    # Events
    "Event",
    "EventLog",
]
