"""Farmer-side checkpoint for variable-rate (pool share) rewards.

The pool-wide accumulator ``accrued_reward_per_gem`` lives outside this package
and only ever grows. A farmer remembers the last value it saw; the difference,
times the gems the farmer had staked in between, is what the farmer earned.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .errors import ArithmeticUnderflowError
from .math import require_u64
from .number128 import Number128


@dataclass(frozen=True)
class FarmerVariableRateReward:
    last_recorded_accrued_reward_per_gem: Number128 = field(default_factory=Number128.zero)

    def newly_accrued_reward(self, accrued_reward_per_gem: Number128, gems: int) -> int:
        require_u64("gems", gems)
        delta = accrued_reward_per_gem.checked_sub(self.last_recorded_accrued_reward_per_gem)
        if delta.raw < 0:
            raise ArithmeticUnderflowError(
                f"accrued_reward_per_gem moved backwards: {accrued_reward_per_gem} "
                f"< {self.last_recorded_accrued_reward_per_gem}"
            )
        return delta.checked_mul_int(gems).as_u64()

    def record(self, accrued_reward_per_gem: Number128) -> FarmerVariableRateReward:
        return FarmerVariableRateReward(last_recorded_accrued_reward_per_gem=accrued_reward_per_gem)
