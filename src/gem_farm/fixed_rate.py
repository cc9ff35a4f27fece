"""Per-farmer accrual for a promised (fixed-rate) reward schedule.

A staking cycle promises ``promised_schedule`` for ``promised_duration`` seconds
from ``begin_staking_ts``. Reward is folded in on demand: the caller asks for
``newly_accrued_reward(now, gems)``, adds it to the farmer's accrued total and
records the fold with ``record_accrual``. Ending a cycle early forfeits the
rest of the promise (``voided_reward``).

Timestamps are unix seconds. All window offsets are computed relative to
``begin_staking_ts`` with checked subtraction, so a ``last_updated_ts`` behind
the cycle start surfaces as an underflow rather than a silently huge window.

Windows are priced as the difference of cumulative amounts from the cycle
start, ``calc_amount(0, end) - calc_amount(0, start)``. Each cumulative amount
is floored once by the schedule denominator, so the folds of one cycle plus
its voided remainder always add up to exactly ``total_amount``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace

from .math import checked_add, checked_sub, require_u64
from .schedule import FixedRateSchedule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FixedRatePromise:
    """Schedule + duration handed to a farmer when a cycle begins."""

    schedule: FixedRateSchedule = field(default_factory=FixedRateSchedule)
    duration_sec: int = 0

    def __post_init__(self) -> None:
        require_u64("duration_sec", self.duration_sec)


@dataclass(frozen=True)
class FarmerFixedRateReward:
    begin_staking_ts: int = 0
    last_updated_ts: int = 0
    promised_schedule: FixedRateSchedule = field(default_factory=FixedRateSchedule)
    promised_duration: int = 0
    reward_counted_as_accrued: int = 0

    def __post_init__(self) -> None:
        for name in (
            "begin_staking_ts",
            "last_updated_ts",
            "promised_duration",
            "reward_counted_as_accrued",
        ):
            require_u64(name, getattr(self, name))

    # -- Time bounds ---------------------------------------------------------

    def graduation_time(self) -> int:
        return checked_add(self.begin_staking_ts, self.promised_duration)

    def is_graduation_time(self, now_ts: int) -> bool:
        return now_ts >= self.graduation_time()

    def lower_bound_ts(self) -> int:
        return max(self.begin_staking_ts, self.last_updated_ts)

    def upper_bound_ts(self, now_ts: int) -> int:
        return min(now_ts, self.graduation_time())

    # -- Reward windows ------------------------------------------------------

    def _window_amount(self, start_from: int, end_at: int, gems: int) -> int:
        schedule = self.promised_schedule
        return checked_sub(
            schedule.calc_amount(0, end_at, gems), schedule.calc_amount(0, start_from, gems)
        )

    def newly_accrued_reward(self, now_ts: int, gems: int) -> int:
        """Reward earned over ``[last_updated_ts, min(now, graduation)]``."""
        upper = self.upper_bound_ts(now_ts)
        if upper <= self.last_updated_ts:
            # `now` is at or behind the last fold; nothing new has been earned.
            return 0
        start_from = checked_sub(self.last_updated_ts, self.begin_staking_ts)
        end_at = checked_sub(upper, self.begin_staking_ts)
        return self._window_amount(start_from, end_at, gems)

    def voided_reward(self, gems: int) -> int:
        """Promised reward over ``[last_updated_ts, graduation]`` that was never earned."""
        start_from = checked_sub(self.last_updated_ts, self.begin_staking_ts)
        end_at = checked_sub(self.graduation_time(), self.begin_staking_ts)
        return self._window_amount(start_from, end_at, gems)

    # -- Transitions ---------------------------------------------------------

    def reset_staking_cycle(self, now_ts: int, promise: FixedRatePromise) -> FarmerFixedRateReward:
        """Start a new cycle at *now_ts* with a frozen copy of *promise*."""
        require_u64("now_ts", now_ts)
        fresh = FarmerFixedRateReward(
            begin_staking_ts=now_ts,
            last_updated_ts=now_ts,
            promised_schedule=promise.schedule,
            promised_duration=promise.duration_sec,
            reward_counted_as_accrued=0,
        )
        # Fail now rather than at the first fold if the promise overflows.
        fresh.graduation_time()
        return fresh

    def record_accrual(self, now_ts: int, amount: int) -> FarmerFixedRateReward:
        """Mark reward up to ``upper_bound_ts(now)`` as folded into the accrued total."""
        return replace(
            self,
            last_updated_ts=max(self.last_updated_ts, self.upper_bound_ts(now_ts)),
            reward_counted_as_accrued=checked_add(self.reward_counted_as_accrued, amount),
        )

    def void_remaining(self, gems: int) -> tuple[FarmerFixedRateReward, int]:
        """Forfeit the rest of the promise and close the cycle at graduation."""
        voided = self.voided_reward(gems)
        closed = replace(self, last_updated_ts=self.graduation_time())
        if voided:
            logger.debug("voided %d fixed-rate reward for %d gems", voided, gems)
        return closed, voided
