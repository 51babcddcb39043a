"""Unsigned 128-bit integer helpers and an 18-digit fixed-point decimal."""

from __future__ import annotations

from dataclasses import dataclass

from .errors import ArithmeticOverflow

UINT128_MAX = 2**128 - 1
DECIMAL_PLACES = 18
DECIMAL_FRACTIONAL = 10**DECIMAL_PLACES


def checked_add(a: int, b: int) -> int:
    """Add two unsigned 128-bit integers, raising on overflow."""
    result = a + b
    if result > UINT128_MAX:
        raise ArithmeticOverflow("Add", a, b)
    return result


def checked_sub(a: int, b: int) -> int:
    """Subtract two unsigned 128-bit integers, raising on underflow."""
    if b > a:
        raise ArithmeticOverflow("Sub", a, b)
    return a - b


def checked_mul(a: int, b: int) -> int:
    """Multiply two unsigned 128-bit integers, raising on overflow."""
    result = a * b
    if result > UINT128_MAX:
        raise ArithmeticOverflow("Mul", a, b)
    return result


@dataclass(frozen=True, order=True)
class Decimal:
    """Non-negative fixed-point number with 18 fractional digits."""

    atomics: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.atomics <= UINT128_MAX:
            raise ArithmeticOverflow("Mul", self.atomics, 1)

    @classmethod
    def zero(cls) -> Decimal:
        return cls(0)

    @classmethod
    def one(cls) -> Decimal:
        return cls(DECIMAL_FRACTIONAL)

    @classmethod
    def percent(cls, value: int) -> Decimal:
        return cls(value * 10 ** (DECIMAL_PLACES - 2))

    @classmethod
    def from_ratio(cls, numerator: int, denominator: int) -> Decimal:
        """The value numerator / denominator, rounded down."""
        if denominator == 0:
            raise ZeroDivisionError("Denominator must not be zero")
        atomics = numerator * DECIMAL_FRACTIONAL // denominator
        if atomics > UINT128_MAX:
            raise ArithmeticOverflow("Mul", numerator, DECIMAL_FRACTIONAL)
        return cls(atomics)

    def is_zero(self) -> bool:
        return self.atomics == 0

    def mul_floor(self, amount: int) -> int:
        """Multiply an integer amount by this decimal, rounding down."""
        result = amount * self.atomics // DECIMAL_FRACTIONAL
        if result > UINT128_MAX:
            raise ArithmeticOverflow("Mul", amount, str(self))
        return result

    def __add__(self, other: object) -> Decimal:
        if not isinstance(other, Decimal):
            return NotImplemented
        return Decimal(checked_add(self.atomics, other.atomics))

    def __str__(self) -> str:
        whole, fraction = divmod(self.atomics, DECIMAL_FRACTIONAL)
        if fraction == 0:
            return str(whole)
        digits = f"{fraction:0{DECIMAL_PLACES}d}".rstrip("0")
        return f"{whole}.{digits}"

    def __repr__(self) -> str:
        return f"Decimal({self})"