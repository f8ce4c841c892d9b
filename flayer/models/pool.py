"""Pool keys and swap parameter types for the fee-redirection engine."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from enum import Enum

from flayer.errors import InvalidSwap, ZeroAmount
from flayer.models.types import normalize_address


@dataclass(frozen=True)
class PoolKey:
    """Identifies a trading pair between a collection token and the native token.

    Currencies are ordered lexicographically by normalized address. The
    ordering is fixed when the key is built and every direction flag is
    derived from it; use for_pair() rather than the constructor.
    """

    currency0: str
    currency1: str

    def __post_init__(self) -> None:
        if self.currency0 >= self.currency1:
            raise InvalidSwap(
                f"Currencies not in canonical order: {self.currency0} >= {self.currency1}"
            )

    @classmethod
    def for_pair(cls, token_a: str, token_b: str) -> PoolKey:
        a, b = normalize_address(token_a), normalize_address(token_b)
        if a == b:
            raise InvalidSwap(f"Pool requires two distinct currencies, got {a}")
        return cls(currency0=min(a, b), currency1=max(a, b))

    @property
    def pool_id(self) -> str:
        digest = hashlib.sha3_256(f"{self.currency0}:{self.currency1}".encode()).hexdigest()
        return "0x" + digest

    def native_is_zero(self, native_token: str) -> bool:
        """True if the native token is currency0."""
        native = normalize_address(native_token)
        if native == self.currency0:
            return True
        if native == self.currency1:
            return False
        raise InvalidSwap(f"Native token {native} not in pool")

    def collection_token(self, native_token: str) -> str:
        return self.currency1 if self.native_is_zero(native_token) else self.currency0

    def buys_collection_token(self, native_token: str, zero_for_one: bool) -> bool:
        """True if a swap in this direction pays native and receives the collection token."""
        return self.native_is_zero(native_token) == zero_for_one


class SwapKind(str, Enum):
    """Which side of the trade the caller fixed."""

    EXACT_INPUT = "exact_input"
    EXACT_OUTPUT = "exact_output"


@dataclass(frozen=True)
class SwapParams:
    """A trade request against a pool.

    Attributes:
        zero_for_one: True if the trader pays currency0 and receives currency1
        kind: Whether amount is the exact input or the exact output
        amount: Specified amount, always positive
        sqrt_price_limit_x96: Price the trade may not move beyond (Q64.96)
    """

    zero_for_one: bool
    kind: SwapKind
    amount: int
    sqrt_price_limit_x96: int

    def __post_init__(self) -> None:
        if self.amount <= 0:
            raise ZeroAmount(f"Swap amount must be positive, got {self.amount}")

    @property
    def exact_input(self) -> bool:
        return self.kind == SwapKind.EXACT_INPUT

    def with_amount(self, amount: int) -> SwapParams:
        return SwapParams(
            zero_for_one=self.zero_for_one,
            kind=self.kind,
            amount=amount,
            sqrt_price_limit_x96=self.sqrt_price_limit_x96,
        )


@dataclass(frozen=True)
class BalanceDelta:
    """Amounts settled by a trade, from the trader's point of view.

    amount_in is what the trader pays in the input currency and amount_out
    what they receive in the output currency. Both are non-negative.
    """

    amount_in: int = 0
    amount_out: int = 0

    def __add__(self, other: BalanceDelta) -> BalanceDelta:
        return BalanceDelta(
            amount_in=self.amount_in + other.amount_in,
            amount_out=self.amount_out + other.amount_out,
        )

    @property
    def is_zero(self) -> bool:
        return self.amount_in == 0 and self.amount_out == 0
