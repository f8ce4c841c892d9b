"""Shared type definitions for Flayer models.

These types are used by the pool, event and HTTP wire models.
"""

from typing import Annotated, Any

from pydantic import BeforeValidator, Field

from flayer.safe_int import UINT256_MAX


def validate_uint256(value: Any) -> str:
    """Validate that a value is a valid uint256 decimal string.

    Args:
        value: Value to validate (string or int)

    Returns:
        Valid uint256 as decimal string

    Raises:
        ValueError: If value is not a valid non-negative integer within uint256 range
    """
    if isinstance(value, bool):
        raise ValueError("Uint256 cannot be a boolean")
    if isinstance(value, int):
        int_value = value
    elif isinstance(value, str):
        try:
            int_value = int(value)
        except ValueError as err:
            raise ValueError(f"Uint256 must be a decimal integer string: '{value}'") from err
    else:
        raise ValueError(f"Uint256 must be string or int, got {type(value).__name__}")

    if int_value < 0:
        raise ValueError(f"Uint256 cannot be negative: {value}")
    if int_value > UINT256_MAX:
        raise ValueError(f"Uint256 overflow: {value} > 2^256-1")
    return str(int_value)


# Ethereum address (40 hex chars after 0x prefix)
Address = Annotated[str, Field(pattern=r"^0x[a-fA-F0-9]{40}$")]

# 256-bit unsigned integer as decimal string (validated)
Uint256 = Annotated[
    str,
    BeforeValidator(validate_uint256),
    Field(description="256-bit unsigned integer as decimal string"),
]


def normalize_address(address: str, *, validate: bool = False) -> str:
    """Normalize an Ethereum address to lowercase with 0x prefix.

    Raises:
        ValueError: If validate=True and address is not a valid Ethereum address
    """
    addr = address.lower()
    if not addr.startswith("0x"):
        addr = "0x" + addr

    if validate and not is_valid_address(addr):
        raise ValueError(f"Invalid address: {address}")

    return addr


def is_valid_address(address: str) -> bool:
    """Check if a string is a valid Ethereum address."""
    if not isinstance(address, str):
        return False
    if not address.startswith("0x"):
        return False
    if len(address) != 42:
        return False
    try:
        int(address, 16)
        return True
    except ValueError:
        return False
