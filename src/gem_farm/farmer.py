"""Farmer staking lifecycle.

  UNSTAKED --begin_staking--> STAKED --end_staking_begin_cooldown--> PENDING_COOLDOWN
      ^                                                                   |
      +------------------------------ end_cooldown ------------------------+

``begin_staking`` may be called from any state (re-staking restarts the cycle).
The two other transitions require their source state and that ``now`` has
reached the recorded deadline (non-strict). Calling one out of order raises the
same "not passed" error as an early call. A failed guard raises and the
original record is unchanged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum, unique

from .errors import CooldownNotPassedError, MinStakingNotPassedError
from .fixed_rate import FixedRatePromise
from .math import checked_add, require_u64
from .reward import FarmerReward

logger = logging.getLogger(__name__)

PubKey = str


@unique
class FarmerState(Enum):
    UNSTAKED = "unstaked"
    STAKED = "staked"
    PENDING_COOLDOWN = "pending_cooldown"


@dataclass(frozen=True)
class Farmer:
    """Staking record for one (farm, identity) pair."""

    farm: PubKey
    # the identity of the farmer = their public key
    identity: PubKey
    # vault storing all of the farmer's gems
    vault: PubKey

    state: FarmerState = FarmerState.UNSTAKED

    # total number of gems at the time the vault was locked
    gems_staked: int = 0

    min_staking_ends_ts: int = 0
    cooldown_ends_ts: int = 0

    reward_a: FarmerReward = field(default_factory=FarmerReward)
    reward_b: FarmerReward = field(default_factory=FarmerReward)

    def __post_init__(self) -> None:
        for name in ("farm", "identity", "vault"):
            val = getattr(self, name)
            if not isinstance(val, str) or not val:
                raise TypeError(f"{name} must be a non-empty string")
        if not isinstance(self.state, FarmerState):
            raise TypeError(f"state must be a FarmerState, got {type(self.state).__name__}")
        require_u64("gems_staked", self.gems_staked)
        require_u64("min_staking_ends_ts", self.min_staking_ends_ts)
        require_u64("cooldown_ends_ts", self.cooldown_ends_ts)

    def can_end_staking(self, now_ts: int) -> bool:
        return now_ts >= self.min_staking_ends_ts

    def can_end_cooldown(self, now_ts: int) -> bool:
        return now_ts >= self.cooldown_ends_ts

    def begin_staking(
        self,
        min_staking_period_sec: int,
        now_ts: int,
        gems_in_vault: int,
        promise_a: FixedRatePromise | None = None,
        promise_b: FixedRatePromise | None = None,
    ) -> Farmer:
        require_u64("min_staking_period_sec", min_staking_period_sec)
        require_u64("now_ts", now_ts)
        require_u64("gems_in_vault", gems_in_vault)
        min_staking_ends_ts = checked_add(now_ts, min_staking_period_sec)

        # Begin a new cycle on both tracks; variable-rate rewards ignore this.
        reward_a = self.reward_a.begin_fixed_rate_cycle(now_ts, promise_a or FixedRatePromise())
        reward_b = self.reward_b.begin_fixed_rate_cycle(now_ts, promise_b or FixedRatePromise())

        staked = replace(
            self,
            state=FarmerState.STAKED,
            gems_staked=gems_in_vault,
            min_staking_ends_ts=min_staking_ends_ts,
            cooldown_ends_ts=0,
            reward_a=reward_a,
            reward_b=reward_b,
        )
        logger.info("%d gems staked for %s until at least %d", gems_in_vault, self.identity,
                    min_staking_ends_ts)
        return staked

    def end_staking_begin_cooldown(
        self, now_ts: int, cooldown_period_sec: int
    ) -> tuple[Farmer, int]:
        """Returns ``(farmer, gems_unstaked)``."""
        require_u64("now_ts", now_ts)
        require_u64("cooldown_period_sec", cooldown_period_sec)
        if self.state is not FarmerState.STAKED:
            raise MinStakingNotPassedError(f"{self.identity} is not staked ({self.state.value})")
        if not self.can_end_staking(now_ts):
            raise MinStakingNotPassedError(
                f"min staking ends at {self.min_staking_ends_ts}, now is {now_ts}"
            )

        gems_unstaked = self.gems_staked
        cooling = replace(
            self,
            state=FarmerState.PENDING_COOLDOWN,
            # no rewards accrue during the cooldown period
            gems_staked=0,
            cooldown_ends_ts=checked_add(now_ts, cooldown_period_sec),
        )
        logger.info("%d gems now cooling down for %s", gems_unstaked, self.identity)
        return cooling, gems_unstaked

    def end_cooldown(self, now_ts: int) -> Farmer:
        require_u64("now_ts", now_ts)
        if self.state is not FarmerState.PENDING_COOLDOWN:
            raise CooldownNotPassedError(f"{self.identity} is not cooling down ({self.state.value})")
        if not self.can_end_cooldown(now_ts):
            raise CooldownNotPassedError(
                f"cooldown ends at {self.cooldown_ends_ts}, now is {now_ts}"
            )

        unstaked = replace(
            self,
            state=FarmerState.UNSTAKED,
            gems_staked=0,
            min_staking_ends_ts=0,
            cooldown_ends_ts=0,
        )
        logger.info("gems now unstaked and available for withdrawal for %s", self.identity)
        return unstaked


def new_farmer(farm: PubKey, identity: PubKey, vault: PubKey) -> Farmer:
    """Create the record for a first-time farmer (unstaked, all zero)."""
    return Farmer(farm=farm, identity=identity, vault=vault)
