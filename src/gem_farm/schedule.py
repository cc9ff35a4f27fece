"""Tiered fixed-rate reward schedule.

A schedule is a piecewise-constant per-gem reward rate over *tenure*, the time
elapsed since the staking cycle began:

  [0, tier1.required_tenure)                      -> base_rate
  [tier1.required_tenure, tier2.required_tenure)  -> tier1.reward_rate
  [tier2.required_tenure, tier3.required_tenure)  -> tier2.reward_rate
  [tier3.required_tenure, inf)                    -> tier3.reward_rate

Unconfigured tiers simply end the table early; the last configured rate extends
forever. Offsets are relative to ``begin_staking_ts`` so one schedule can be
reused across cycles.

Rates are expressed per ``denominator`` seconds-gems, which lets a schedule pay
less than one token per gem per second. Rounding is a single floor at the end of
``calc_amount``: adjacent windows therefore sum to at most the single joined
window, and exactly to it when ``denominator == 1``. Callers that fold a cycle
in pieces price each piece from cumulative amounts (see ``fixed_rate``) so the
floored dust is carried forward rather than dropped.
"""

from __future__ import annotations

from dataclasses import dataclass

from .math import U128_MAX, checked_add, checked_div, checked_mul, checked_sub, require_u64, to_u64


@dataclass(frozen=True)
class TierConfig:
    reward_rate: int
    required_tenure: int

    def __post_init__(self) -> None:
        require_u64("reward_rate", self.reward_rate)
        require_u64("required_tenure", self.required_tenure)


@dataclass(frozen=True)
class FixedRateSchedule:
    """Reward rate table locked into a farmer's cycle at stake time."""

    base_rate: int = 0
    tier1: TierConfig | None = None
    tier2: TierConfig | None = None
    tier3: TierConfig | None = None
    denominator: int = 1

    def __post_init__(self) -> None:
        require_u64("base_rate", self.base_rate)
        require_u64("denominator", self.denominator)
        if self.denominator == 0:
            raise ValueError("denominator must be positive")
        if self.tier2 is not None and self.tier1 is None:
            raise ValueError("tier2 requires tier1")
        if self.tier3 is not None and self.tier2 is None:
            raise ValueError("tier3 requires tier2")
        tenures = [t.required_tenure for t in self.tiers()]
        if tenures != sorted(tenures):
            raise ValueError(f"tier tenures must be non-decreasing: {tenures}")

    def tiers(self) -> tuple[TierConfig, ...]:
        return tuple(t for t in (self.tier1, self.tier2, self.tier3) if t is not None)

    def segments(self) -> list[tuple[int, int | None, int]]:
        """Return ``(start, end, rate)`` segments; ``end=None`` is unbounded."""
        out: list[tuple[int, int | None, int]] = []
        start, rate = 0, self.base_rate
        for tier in self.tiers():
            out.append((start, tier.required_tenure, rate))
            start, rate = tier.required_tenure, tier.reward_rate
        out.append((start, None, rate))
        return out

    def reward_rate_at(self, offset: int) -> int:
        """Per-gem rate in force at tenure *offset*."""
        for start, end, rate in self.segments():
            if start <= offset and (end is None or offset < end):
                return rate
        return self.base_rate

    def calc_amount(self, start_from: int, end_at: int, gems: int) -> int:
        """Reward owed to *gems* units over the tenure window ``[start_from, end_at)``."""
        require_u64("start_from", start_from)
        require_u64("end_at", end_at)
        require_u64("gems", gems)
        if start_from > end_at:
            raise ValueError(f"start_from must be <= end_at: {start_from} > {end_at}")

        per_gem_scaled = 0
        for seg_start, seg_end, rate in self.segments():
            lo = max(start_from, seg_start)
            hi = end_at if seg_end is None else min(end_at, seg_end)
            if hi <= lo:
                continue
            overlap = checked_sub(hi, lo)
            per_gem_scaled = checked_add(
                per_gem_scaled, checked_mul(overlap, rate, bound=U128_MAX), bound=U128_MAX
            )

        total_scaled = checked_mul(per_gem_scaled, gems, bound=U128_MAX)
        return to_u64(checked_div(total_scaled, self.denominator, bound=U128_MAX))

    def total_amount(self, duration: int, gems: int) -> int:
        """Full promised reward for a cycle of *duration* seconds."""
        return self.calc_amount(0, duration, gems)
