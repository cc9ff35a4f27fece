"""Exception types for the gem farm farmer engine.

Checked arithmetic and lifecycle guards raise these directly. ``engine.step()``
turns them into rejected ``StepResult`` values; ``engine.step_or_raise()``
lets them propagate.
"""

from __future__ import annotations


class GemFarmError(Exception):
    """Base class for every error raised by the engine."""

    code = "gem_farm_error"


class ArithmeticOverflowError(GemFarmError, OverflowError):
    """Raised when a checked result would exceed its integer range."""

    code = "arithmetic_overflow"


class ArithmeticUnderflowError(GemFarmError, ArithmeticError):
    """Raised when a checked result would go below zero (or its signed minimum)."""

    code = "arithmetic_underflow"


class DivisionByZeroError(GemFarmError, ZeroDivisionError):
    code = "division_by_zero"


class MinStakingNotPassedError(GemFarmError):
    """Raised when staking is ended before the minimum staking deadline."""

    code = "min_staking_not_passed"


class CooldownNotPassedError(GemFarmError):
    """Raised when the cooldown is ended before its deadline."""

    code = "cooldown_not_passed"


class FarmerInvariantError(GemFarmError):
    """Raised when a post-state violates one or more invariants."""

    code = "invariant"

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(f"invariant violations: {', '.join(violations)}")


class ConfigError(GemFarmError, ValueError):
    """Raised when farm configuration is malformed."""

    code = "config"
