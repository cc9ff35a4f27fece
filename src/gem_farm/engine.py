"""Dispatch-table engine for the farmer lifecycle and reward tracks.

``step(config, farmer, params)`` is the single entry point. It:

1. Validates parameter domains (u64 bounds, and an accumulator for exactly
   the variable-rate tracks on folding actions).
2. Dispatches to the action handler, which folds reward and applies the
   lifecycle transition.
3. Checks all invariants on the post-state.
4. Returns a ``StepResult`` (accepted or rejected with reason).

Handlers are pure: they return a new ``Farmer`` or raise, so a rejected step
never exposes a half-updated record.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable

from .config import FarmConfig
from .errors import FarmerInvariantError, GemFarmError
from .farmer import Farmer
from .invariants import check_all
from .math import U64_MAX
from .number128 import Number128
from .reward import FarmerReward
from .types import Action, ActionParams, Effect, Event, StepResult

logger = logging.getLogger(__name__)

HandlerFn = Callable[[FarmConfig, Farmer, ActionParams], tuple[Farmer, Effect]]


# -- Reward folding ----------------------------------------------------------

def _fold_track(
    reward: FarmerReward, now_ts: int, gems: int, accrued_reward_per_gem: Number128 | None
) -> tuple[FarmerReward, int]:
    reward, newly = reward.accrue_fixed_rate(now_ts, gems)
    if accrued_reward_per_gem is not None:
        reward, newly_variable = reward.accrue_variable_rate(accrued_reward_per_gem, gems)
        newly += newly_variable
    return reward, newly


def _fold(farmer: Farmer, params: ActionParams, gems: int) -> tuple[Farmer, int, int]:
    """Fold reward earned by *gems* up to ``params.now_ts`` into both tracks."""
    reward_a, newly_a = _fold_track(
        farmer.reward_a, params.now_ts, gems, params.accrued_reward_per_gem_a
    )
    reward_b, newly_b = _fold_track(
        farmer.reward_b, params.now_ts, gems, params.accrued_reward_per_gem_b
    )
    if newly_a or newly_b:
        logger.debug("folded reward for %s: a=%d b=%d", farmer.identity, newly_a, newly_b)
    return replace(farmer, reward_a=reward_a, reward_b=reward_b), newly_a, newly_b


def _outstanding(farmer: Farmer) -> dict[str, int]:
    return dict(
        outstanding_a=farmer.reward_a.outstanding_reward(),
        outstanding_b=farmer.reward_b.outstanding_reward(),
    )


# -- Action handlers ---------------------------------------------------------

def _stake(config: FarmConfig, farmer: Farmer, params: ActionParams) -> tuple[Farmer, Effect]:
    # Fold with the pre-stake gem count: a re-stake keeps what the old cycle
    # earned and a fresh stake checkpoints the variable-rate accumulator.
    folded, newly_a, newly_b = _fold(farmer, params, farmer.gems_staked)
    staked = folded.begin_staking(
        config.min_staking_period_sec,
        params.now_ts,
        params.gems_in_vault,
        promise_a=config.reward_a,
        promise_b=config.reward_b,
    )
    return staked, Effect(
        event=Event.STAKED, newly_accrued_a=newly_a, newly_accrued_b=newly_b, **_outstanding(staked)
    )


def _unstake(config: FarmConfig, farmer: Farmer, params: ActionParams) -> tuple[Farmer, Effect]:
    cooling, gems_unstaked = farmer.end_staking_begin_cooldown(
        params.now_ts, config.cooldown_period_sec
    )
    folded, newly_a, newly_b = _fold(farmer, params, gems_unstaked)
    reward_a, voided_a = folded.reward_a.void_fixed_rate(gems_unstaked)
    reward_b, voided_b = folded.reward_b.void_fixed_rate(gems_unstaked)
    cooling = replace(cooling, reward_a=reward_a, reward_b=reward_b)
    return cooling, Effect(
        event=Event.COOLDOWN_STARTED,
        gems_unstaked=gems_unstaked,
        newly_accrued_a=newly_a,
        newly_accrued_b=newly_b,
        voided_a=voided_a,
        voided_b=voided_b,
        **_outstanding(cooling),
    )


def _end_cooldown(config: FarmConfig, farmer: Farmer, params: ActionParams) -> tuple[Farmer, Effect]:
    unstaked = farmer.end_cooldown(params.now_ts)
    return unstaked, Effect(event=Event.UNSTAKED, **_outstanding(unstaked))


def _refresh(config: FarmConfig, farmer: Farmer, params: ActionParams) -> tuple[Farmer, Effect]:
    folded, newly_a, newly_b = _fold(farmer, params, farmer.gems_staked)
    return folded, Effect(
        event=Event.REFRESHED, newly_accrued_a=newly_a, newly_accrued_b=newly_b, **_outstanding(folded)
    )


def _claim(config: FarmConfig, farmer: Farmer, params: ActionParams) -> tuple[Farmer, Effect]:
    folded, newly_a, newly_b = _fold(farmer, params, farmer.gems_staked)
    reward_a, claimed_a = folded.reward_a.claim_reward(params.pot_balance_a)
    reward_b, claimed_b = folded.reward_b.claim_reward(params.pot_balance_b)
    claimed = replace(folded, reward_a=reward_a, reward_b=reward_b)
    return claimed, Effect(
        event=Event.CLAIMED,
        newly_accrued_a=newly_a,
        newly_accrued_b=newly_b,
        claimed_a=claimed_a,
        claimed_b=claimed_b,
        **_outstanding(claimed),
    )


_DISPATCH: dict[Action, HandlerFn] = {
    Action.STAKE: _stake,
    Action.UNSTAKE: _unstake,
    Action.END_COOLDOWN: _end_cooldown,
    Action.REFRESH: _refresh,
    Action.CLAIM: _claim,
}

# -- Parameter domain bounds -------------------------------------------------

_U64_FIELDS: tuple[str, ...] = ("now_ts", "gems_in_vault", "pot_balance_a", "pot_balance_b")

_FOLDING_ACTIONS = frozenset({Action.STAKE, Action.UNSTAKE, Action.REFRESH, Action.CLAIM})


def _validate_params(config: FarmConfig, params: ActionParams) -> str | None:
    """Check parameter domain bounds. Returns rejection reason or None."""
    for name in _U64_FIELDS:
        val = getattr(params, name)
        if not isinstance(val, int) or isinstance(val, bool) or not (0 <= val <= U64_MAX):
            return f"param_domain:{name}"
    for track in ("a", "b"):
        name = f"accrued_reward_per_gem_{track}"
        val = getattr(params, name)
        if val is not None and not isinstance(val, Number128):
            return f"param_domain:{name}"
        # A variable track must checkpoint on every fold, and a fixed-only
        # track must never start one.
        if params.action in _FOLDING_ACTIONS and (val is None) == getattr(config, f"variable_rate_{track}"):
            return f"param_domain:{name}"
    return None


def _apply(config: FarmConfig, farmer: Farmer, params: ActionParams) -> StepResult:
    handler = _DISPATCH.get(params.action)
    if handler is None:
        raise ValueError(f"unknown_action:{params.action}")

    domain_err = _validate_params(config, params)
    if domain_err is not None:
        raise ValueError(domain_err)

    new_farmer, effect = handler(config, farmer, params)

    violations = check_all(new_farmer)
    if violations:
        raise FarmerInvariantError(violations)

    return StepResult(accepted=True, state=new_farmer, effect=effect)


def step(config: FarmConfig, farmer: Farmer, params: ActionParams) -> StepResult:
    """Execute one action against the given farmer.

    Returns ``StepResult`` with ``accepted=True`` on success,
    or ``accepted=False`` with a ``rejection`` reason string.
    """
    try:
        return _apply(config, farmer, params)
    except FarmerInvariantError as exc:
        rejection = f"invariant:{','.join(exc.violations)}"
    except GemFarmError as exc:
        rejection = exc.code
    except ValueError as exc:
        rejection = str(exc)
    logger.debug("rejected %s for %s: %s", params.action, farmer.identity, rejection)
    return StepResult(accepted=False, rejection=rejection)


def step_or_raise(config: FarmConfig, farmer: Farmer, params: ActionParams) -> StepResult:
    """Like ``step()`` but raises on rejection instead of returning a result.

    Raises:
        ValueError: Unknown action or parameter outside its domain.
        MinStakingNotPassedError / CooldownNotPassedError: Lifecycle guard not satisfied.
        ArithmeticOverflowError / ArithmeticUnderflowError: Checked math failed.
        FarmerInvariantError: Post-state violates one or more invariants.
    """
    return _apply(config, farmer, params)
