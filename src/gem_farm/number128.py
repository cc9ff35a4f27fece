"""Signed 128-bit decimal fixed point.

``Number128`` stores ``raw = value * ONE`` in an int bounded to the i128 range.
It is used for per-gem accumulators where whole-unit precision would round the
variable reward away.
"""

from __future__ import annotations

from dataclasses import dataclass

from .errors import ArithmeticOverflowError, ArithmeticUnderflowError, DivisionByZeroError
from .math import to_u64

PRECISION: int = 10
ONE: int = 10**PRECISION

I128_MIN: int = -(2**127)
I128_MAX: int = 2**127 - 1


def _checked_i128(raw: int, op: str) -> int:
    if raw > I128_MAX:
        raise ArithmeticOverflowError(f"Number128 {op} overflow")
    if raw < I128_MIN:
        raise ArithmeticUnderflowError(f"Number128 {op} underflow")
    return raw


@dataclass(frozen=True, order=True)
class Number128:
    raw: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.raw, int) or isinstance(self.raw, bool):
            raise TypeError("Number128.raw must be an int")
        if not (I128_MIN <= self.raw <= I128_MAX):
            raise ValueError(f"Number128.raw out of i128 range: {self.raw}")

    @classmethod
    def zero(cls) -> Number128:
        return cls(0)

    @classmethod
    def from_int(cls, value: int) -> Number128:
        return cls(_checked_i128(value * ONE, "from_int"))

    @classmethod
    def from_ratio(cls, numerator: int, denominator: int) -> Number128:
        """``numerator / denominator`` floored to PRECISION decimals."""
        if denominator == 0:
            raise DivisionByZeroError("Number128 ratio with zero denominator")
        return cls(_checked_i128((numerator * ONE) // denominator, "from_ratio"))

    def checked_add(self, other: Number128) -> Number128:
        return Number128(_checked_i128(self.raw + other.raw, "add"))

    def checked_sub(self, other: Number128) -> Number128:
        return Number128(_checked_i128(self.raw - other.raw, "sub"))

    def checked_mul_int(self, value: int) -> Number128:
        return Number128(_checked_i128(self.raw * value, "mul"))

    def floor(self) -> int:
        return self.raw // ONE

    def as_u64(self) -> int:
        """Floor to a whole u64 amount; negative values are an underflow."""
        return to_u64(self.floor())

    def __str__(self) -> str:
        sign = "-" if self.raw < 0 else ""
        whole, frac = divmod(abs(self.raw), ONE)
        return f"{sign}{whole}.{frac:0{PRECISION}d}"
