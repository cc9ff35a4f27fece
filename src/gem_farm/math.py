"""Checked integer arithmetic for the farmer engine.

Every function is stateless and operates on plain Python ints. Python ints never
wrap, so each helper compares the exact result against the target range and
raises instead of truncating. Division floors (toward zero for the non-negative
operands used here).
"""

from __future__ import annotations

from .errors import ArithmeticOverflowError, ArithmeticUnderflowError, DivisionByZeroError

U64_MAX: int = 2**64 - 1
U128_MAX: int = 2**128 - 1


def require_u64(name: str, value: int) -> int:
    """Validate that *value* is a non-bool int in ``[0, U64_MAX]``."""
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if not (0 <= value <= U64_MAX):
        raise ValueError(f"{name} must be in [0, 2**64 - 1]: {value}")
    return value


def _check_range(result: int, bound: int, op: str) -> int:
    if result > bound:
        raise ArithmeticOverflowError(f"{op} overflow: {result} > {bound}")
    if result < 0:
        raise ArithmeticUnderflowError(f"{op} underflow: {result} < 0")
    return result


def checked_add(a: int, b: int, *, bound: int = U64_MAX) -> int:
    return _check_range(a + b, bound, "add")


def checked_sub(a: int, b: int, *, bound: int = U64_MAX) -> int:
    return _check_range(a - b, bound, "sub")


def checked_mul(a: int, b: int, *, bound: int = U64_MAX) -> int:
    return _check_range(a * b, bound, "mul")


def checked_div(a: int, b: int, *, bound: int = U64_MAX) -> int:
    if b == 0:
        raise DivisionByZeroError(f"div by zero: {a} / 0")
    return _check_range(a // b, bound, "div")


def to_u64(value: int) -> int:
    """Narrow a wide intermediate (e.g. u128) to u64, failing on overflow."""
    return _check_range(value, U64_MAX, "cast")
