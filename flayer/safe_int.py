"""Checked integer arithmetic for token amounts and fixed-point prices.

SafeInt wraps a Python int so that every operation that could silently
produce an invalid on-chain value raises instead:
- Division by zero raises DivisionByZero
- Subtraction below zero raises Underflow
- Narrowing to a bounded width (uint128, int128, uint160, uint256) raises
  Overflow when the value does not fit

Usage pattern:
    from flayer.safe_int import S

    def quote(amount: int, price_x96: int) -> int:
        scaled = S(amount) * S(price_x96)
        return S.mul_div(scaled, 1, Q96).to_uint128()

Nothing is ever clamped: callers that need a saturating value must do so
explicitly, because clamping a fill amount can leak inventory.
"""

from __future__ import annotations

UINT128_MAX = 2**128 - 1
UINT160_MAX = 2**160 - 1
UINT256_MAX = 2**256 - 1
INT128_MAX = 2**127 - 1
INT128_MIN = -(2**127)


class SafeIntError(ArithmeticError):
    """Base class for SafeInt arithmetic errors."""

    pass


class DivisionByZero(SafeIntError):
    """Division by zero."""

    pass


class Underflow(SafeIntError):
    """Subtraction would produce negative result."""

    pass


class Overflow(SafeIntError):
    """Value does not fit the requested integer width."""

    pass


class SafeInt:
    """Integer with checked arithmetic.

    Addition and multiplication are exact (Python ints are unbounded); the
    width check happens when the value is narrowed with one of the to_*
    methods, mirroring where a Solidity cast would revert.

    Attributes:
        value: The underlying integer value (read-only)
    """

    __slots__ = ("_value",)
    _value: int

    def __init__(self, value: int | SafeInt) -> None:
        if isinstance(value, SafeInt):
            self._value = value._value
        elif isinstance(value, int) and not isinstance(value, bool):
            self._value = value
        else:
            raise TypeError(f"SafeInt requires int, got {type(value).__name__}")

    @property
    def value(self) -> int:
        """The underlying integer value."""
        return self._value

    def __repr__(self) -> str:
        return f"SafeInt({self._value})"

    def __str__(self) -> str:
        return str(self._value)

    def __hash__(self) -> int:
        return hash(self._value)

    # --- Arithmetic ---

    def __add__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value + _extract_value(other))

    def __radd__(self, other: int) -> SafeInt:
        return SafeInt(other + self._value)

    def __sub__(self, other: SafeInt | int) -> SafeInt:
        """Subtract other from self.

        Raises:
            Underflow: If result would be negative
        """
        other_val = _extract_value(other)
        result = self._value - other_val
        if result < 0:
            raise Underflow(f"Underflow: {self._value} - {other_val} = {result}")
        return SafeInt(result)

    def __rsub__(self, other: int) -> SafeInt:
        result = other - self._value
        if result < 0:
            raise Underflow(f"Underflow: {other} - {self._value} = {result}")
        return SafeInt(result)

    def __mul__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value * _extract_value(other))

    def __rmul__(self, other: int) -> SafeInt:
        return SafeInt(other * self._value)

    def __floordiv__(self, other: SafeInt | int) -> SafeInt:
        """Truncating division.

        Amounts are non-negative, so floor and truncation toward zero agree.

        Raises:
            DivisionByZero: If other is zero
        """
        other_val = _extract_value(other)
        if other_val == 0:
            raise DivisionByZero(f"Division by zero: {self._value} // 0")
        return SafeInt(self._value // other_val)

    def __lshift__(self, bits: int) -> SafeInt:
        return SafeInt(self._value << bits)

    def __rshift__(self, bits: int) -> SafeInt:
        return SafeInt(self._value >> bits)

    # --- Comparison ---

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SafeInt):
            return self._value == other._value
        if isinstance(other, int):
            return self._value == other
        return NotImplemented

    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return NotImplemented
        return not result

    def __lt__(self, other: SafeInt | int) -> bool:
        return self._value < _extract_value(other)

    def __le__(self, other: SafeInt | int) -> bool:
        return self._value <= _extract_value(other)

    def __gt__(self, other: SafeInt | int) -> bool:
        return self._value > _extract_value(other)

    def __ge__(self, other: SafeInt | int) -> bool:
        return self._value >= _extract_value(other)

    # --- Conversion ---

    def __int__(self) -> int:
        return self._value

    def __bool__(self) -> bool:
        return self._value != 0

    def __index__(self) -> int:
        return self._value

    # --- Named operations ---

    def ceiling_div(self, other: SafeInt | int) -> SafeInt:
        """Division rounding up.

        Raises:
            DivisionByZero: If other is zero
        """
        other_val = _extract_value(other)
        if other_val == 0:
            raise DivisionByZero(f"Ceiling division by zero: {self._value}")
        return SafeInt(-(-self._value // other_val))

    def min(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(min(self._value, _extract_value(other)))

    def max(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(max(self._value, _extract_value(other)))

    @staticmethod
    def mul_div(a: SafeInt | int, b: SafeInt | int, denominator: SafeInt | int) -> SafeInt:
        """Compute a * b / denominator rounding down, with a full-width product."""
        return (S(a) * S(b)) // denominator

    @staticmethod
    def mul_div_rounding_up(
        a: SafeInt | int, b: SafeInt | int, denominator: SafeInt | int
    ) -> SafeInt:
        """Compute a * b / denominator rounding up, with a full-width product."""
        return (S(a) * S(b)).ceiling_div(denominator)

    def _to_bounded(self, low: int, high: int, name: str) -> int:
        if not low <= self._value <= high:
            raise Overflow(f"Value does not fit {name}: {self._value}")
        return self._value

    def to_uint128(self) -> int:
        """Raises Overflow unless 0 <= value <= 2^128-1."""
        return self._to_bounded(0, UINT128_MAX, "uint128")

    def to_int128(self) -> int:
        """Raises Overflow unless -2^127 <= value <= 2^127-1."""
        return self._to_bounded(INT128_MIN, INT128_MAX, "int128")

    def to_uint160(self) -> int:
        """Raises Overflow unless 0 <= value <= 2^160-1."""
        return self._to_bounded(0, UINT160_MAX, "uint160")

    def to_uint256(self) -> int:
        """Raises Overflow unless 0 <= value <= 2^256-1."""
        return self._to_bounded(0, UINT256_MAX, "uint256")

    @classmethod
    def zero(cls) -> SafeInt:
        return cls(0)


def _extract_value(x: SafeInt | int) -> int:
    """Extract integer value from SafeInt or int."""
    if isinstance(x, SafeInt):
        return x._value
    return x


# Convenience alias for concise code
S = SafeInt
