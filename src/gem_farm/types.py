"""Data types for the farmer engine.

All types are frozen dataclasses (immutable).

Units/conventions:
- ``*_ts`` values are unix seconds supplied by the caller (the engine never reads a clock).
- ``*_a`` / ``*_b`` fields belong to reward track A / B.
- ``accrued_reward_per_gem_*`` is the pool-wide variable-rate accumulator; ``None``
  skips the variable-rate fold for that track.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique

from .farmer import Farmer
from .number128 import Number128


@unique
class Action(Enum):
    STAKE = "stake"
    UNSTAKE = "unstake"
    END_COOLDOWN = "end_cooldown"
    REFRESH = "refresh"
    CLAIM = "claim"


@unique
class Event(Enum):
    STAKED = "Staked"
    COOLDOWN_STARTED = "CooldownStarted"
    UNSTAKED = "Unstaked"
    REFRESHED = "Refreshed"
    CLAIMED = "Claimed"


@dataclass(frozen=True)
class ActionParams:
    """Parameters for an action. Unused fields default to 0/None."""

    action: Action
    now_ts: int = 0
    gems_in_vault: int = 0                               # stake
    accrued_reward_per_gem_a: Number128 | None = None    # every folding action
    accrued_reward_per_gem_b: Number128 | None = None
    pot_balance_a: int = 0                               # claim
    pot_balance_b: int = 0


@dataclass(frozen=True)
class Effect:
    """Observables emitted after a successful step; the caller moves the funds."""

    event: Event
    gems_unstaked: int = 0
    newly_accrued_a: int = 0
    newly_accrued_b: int = 0
    voided_a: int = 0
    voided_b: int = 0
    claimed_a: int = 0
    claimed_b: int = 0
    outstanding_a: int = 0
    outstanding_b: int = 0


@dataclass(frozen=True)
class StepResult:
    accepted: bool
    state: Farmer | None = None
    effect: Effect | None = None
    rejection: str | None = None
