"""One reward track of a farmer: accrued vs paid-out totals and claiming.

Both totals are cumulative (never decrease). ``outstanding_reward`` is their
checked difference, so ``paid_out_reward > accrued_reward`` surfaces as an
``ArithmeticUnderflowError`` at the point of use.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace

from .fixed_rate import FarmerFixedRateReward, FixedRatePromise
from .math import checked_add, checked_sub, require_u64
from .number128 import Number128
from .variable_rate import FarmerVariableRateReward

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FarmerReward:
    # totals, not per gem
    paid_out_reward: int = 0
    accrued_reward: int = 0

    variable_rate: FarmerVariableRateReward = field(default_factory=FarmerVariableRateReward)
    fixed_rate: FarmerFixedRateReward = field(default_factory=FarmerFixedRateReward)

    def __post_init__(self) -> None:
        require_u64("paid_out_reward", self.paid_out_reward)
        require_u64("accrued_reward", self.accrued_reward)

    def outstanding_reward(self) -> int:
        return checked_sub(self.accrued_reward, self.paid_out_reward)

    def claim_reward(self, pot_balance: int) -> tuple[FarmerReward, int]:
        """Pay out as much outstanding reward as the pot can cover."""
        require_u64("pot_balance", pot_balance)
        to_claim = min(self.outstanding_reward(), pot_balance)
        updated = replace(self, paid_out_reward=checked_add(self.paid_out_reward, to_claim))
        logger.debug("claimed %d (pot %d, outstanding after %d)", to_claim, pot_balance,
                     updated.outstanding_reward())
        return updated, to_claim

    # -- Folding accrual into the total --------------------------------------

    def accrue_fixed_rate(self, now_ts: int, gems: int) -> tuple[FarmerReward, int]:
        newly = self.fixed_rate.newly_accrued_reward(now_ts, gems)
        updated = replace(
            self,
            accrued_reward=checked_add(self.accrued_reward, newly),
            fixed_rate=self.fixed_rate.record_accrual(now_ts, newly),
        )
        return updated, newly

    def accrue_variable_rate(
        self, accrued_reward_per_gem: Number128, gems: int
    ) -> tuple[FarmerReward, int]:
        newly = self.variable_rate.newly_accrued_reward(accrued_reward_per_gem, gems)
        updated = replace(
            self,
            accrued_reward=checked_add(self.accrued_reward, newly),
            variable_rate=self.variable_rate.record(accrued_reward_per_gem),
        )
        return updated, newly

    def void_fixed_rate(self, gems: int) -> tuple[FarmerReward, int]:
        fixed_rate, voided = self.fixed_rate.void_remaining(gems)
        return replace(self, fixed_rate=fixed_rate), voided

    def begin_fixed_rate_cycle(self, now_ts: int, promise: FixedRatePromise) -> FarmerReward:
        return replace(self, fixed_rate=self.fixed_rate.reset_staking_cycle(now_ts, promise))
