"""Invariant checkers for a ``Farmer`` record.

Each function returns True when the invariant holds, and ``check_all()`` returns
the list of violated invariant IDs (empty = all pass). The engine runs these on
every post-state before accepting a step.
"""

from __future__ import annotations

from typing import Callable

from .errors import GemFarmError
from .farmer import Farmer, FarmerState
from .fixed_rate import FarmerFixedRateReward
from .reward import FarmerReward


def inv_gems_zero_unless_staked(f: Farmer) -> bool:
    if f.state is FarmerState.STAKED:
        return True
    return f.gems_staked == 0


def inv_cooldown_zero_unless_pending(f: Farmer) -> bool:
    if f.state is FarmerState.PENDING_COOLDOWN:
        return True
    return f.cooldown_ends_ts == 0


def inv_unstaked_zeroed(f: Farmer) -> bool:
    if f.state is not FarmerState.UNSTAKED:
        return True
    return f.gems_staked == 0 and f.min_staking_ends_ts == 0 and f.cooldown_ends_ts == 0


def _paid_out_le_accrued(r: FarmerReward) -> bool:
    return r.paid_out_reward <= r.accrued_reward


def _fixed_rate_window(fr: FarmerFixedRateReward) -> bool:
    try:
        graduation = fr.graduation_time()
    except GemFarmError:
        return False
    return fr.begin_staking_ts <= fr.last_updated_ts <= graduation


def inv_paid_out_le_accrued_a(f: Farmer) -> bool:
    return _paid_out_le_accrued(f.reward_a)


def inv_paid_out_le_accrued_b(f: Farmer) -> bool:
    return _paid_out_le_accrued(f.reward_b)


def inv_fixed_rate_window_a(f: Farmer) -> bool:
    return _fixed_rate_window(f.reward_a.fixed_rate)


def inv_fixed_rate_window_b(f: Farmer) -> bool:
    return _fixed_rate_window(f.reward_b.fixed_rate)


# ---------------------------------------------------------------------------
# Registry + check_all
# ---------------------------------------------------------------------------

INVARIANT_REGISTRY: dict[str, Callable[[Farmer], bool]] = {
    "inv_gems_zero_unless_staked": inv_gems_zero_unless_staked,
    "inv_cooldown_zero_unless_pending": inv_cooldown_zero_unless_pending,
    "inv_unstaked_zeroed": inv_unstaked_zeroed,
    "inv_paid_out_le_accrued_a": inv_paid_out_le_accrued_a,
    "inv_paid_out_le_accrued_b": inv_paid_out_le_accrued_b,
    "inv_fixed_rate_window_a": inv_fixed_rate_window_a,
    "inv_fixed_rate_window_b": inv_fixed_rate_window_b,
}


def check_all(farmer: Farmer) -> list[str]:
    """Return list of violated invariant IDs (empty = all pass)."""
    return [
        inv_id
        for inv_id, check_fn in INVARIANT_REGISTRY.items()
        if not check_fn(farmer)
    ]
