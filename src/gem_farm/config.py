"""
Farm configuration: staking periods and the fixed-rate promises handed to
farmers when they stake.

Configuration is plain data. ``load_farm_config`` reads it from YAML and
validates fail-closed: unknown keys, missing required keys and wrongly typed
values all raise ``ConfigError``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml

from .errors import ConfigError
from .fixed_rate import FixedRatePromise
from .math import require_u64
from .schedule import FixedRateSchedule, TierConfig


@dataclass(frozen=True)
class FarmConfig:
    """Runtime config for the farmer engine."""

    min_staking_period_sec: int = 0
    cooldown_period_sec: int = 0
    reward_a: FixedRatePromise = field(default_factory=FixedRatePromise)
    reward_b: FixedRatePromise = field(default_factory=FixedRatePromise)
    # A variable track is fed the pool accumulator on every folding action.
    variable_rate_a: bool = False
    variable_rate_b: bool = False

    def __post_init__(self) -> None:
        require_u64("min_staking_period_sec", self.min_staking_period_sec)
        require_u64("cooldown_period_sec", self.cooldown_period_sec)
        for name in ("reward_a", "reward_b"):
            if not isinstance(getattr(self, name), FixedRatePromise):
                raise TypeError(f"{name} must be a FixedRatePromise")
        for name in ("variable_rate_a", "variable_rate_b"):
            if not isinstance(getattr(self, name), bool):
                raise TypeError(f"{name} must be a bool")


def _require_mapping(obj: Any, *, name: str, allowed: set[str]) -> Mapping[str, Any]:
    if not isinstance(obj, Mapping):
        raise ConfigError(f"{name} must be an object")
    unknown = sorted(set(obj) - allowed)
    if unknown:
        raise ConfigError(f"{name} has unknown keys: {', '.join(map(str, unknown))}")
    return obj


def _require_u64(obj: Any, *, name: str) -> int:
    try:
        return require_u64(name, obj)
    except (TypeError, ValueError) as exc:
        raise ConfigError(str(exc)) from exc


def _optional_u64(obj: Mapping[str, Any], key: str, *, name: str, default: int) -> int:
    if key not in obj:
        return default
    return _require_u64(obj[key], name=f"{name}.{key}")


def _optional_bool(obj: Mapping[str, Any], key: str, *, name: str) -> bool:
    if key not in obj:
        return False
    value = obj[key]
    if not isinstance(value, bool):
        raise ConfigError(f"{name}.{key} must be a bool")
    return value


def _parse_tier(obj: Any, *, name: str) -> TierConfig | None:
    if obj is None:
        return None
    tier = _require_mapping(obj, name=name, allowed={"reward_rate", "required_tenure"})
    for key in ("reward_rate", "required_tenure"):
        if key not in tier:
            raise ConfigError(f"{name}.{key} is required")
    return TierConfig(
        reward_rate=_require_u64(tier["reward_rate"], name=f"{name}.reward_rate"),
        required_tenure=_require_u64(tier["required_tenure"], name=f"{name}.required_tenure"),
    )


def _parse_schedule(obj: Any, *, name: str) -> FixedRateSchedule:
    if obj is None:
        return FixedRateSchedule()
    sched = _require_mapping(
        obj, name=name, allowed={"base_rate", "tier1", "tier2", "tier3", "denominator"}
    )
    try:
        return FixedRateSchedule(
            base_rate=_optional_u64(sched, "base_rate", name=name, default=0),
            tier1=_parse_tier(sched.get("tier1"), name=f"{name}.tier1"),
            tier2=_parse_tier(sched.get("tier2"), name=f"{name}.tier2"),
            tier3=_parse_tier(sched.get("tier3"), name=f"{name}.tier3"),
            denominator=_optional_u64(sched, "denominator", name=name, default=1),
        )
    except ValueError as exc:
        if isinstance(exc, ConfigError):
            raise
        raise ConfigError(f"{name}: {exc}") from exc


def _parse_promise(obj: Any, *, name: str) -> FixedRatePromise:
    if obj is None:
        return FixedRatePromise()
    promise = _require_mapping(obj, name=name, allowed={"schedule", "duration_sec"})
    return FixedRatePromise(
        schedule=_parse_schedule(promise.get("schedule"), name=f"{name}.schedule"),
        duration_sec=_optional_u64(promise, "duration_sec", name=name, default=0),
    )


def farm_config_from_dict(d: Mapping[str, Any]) -> FarmConfig:
    root = _require_mapping(
        d,
        name="farm",
        allowed={
            "min_staking_period_sec",
            "cooldown_period_sec",
            "reward_a",
            "reward_b",
            "variable_rate_a",
            "variable_rate_b",
        },
    )
    return FarmConfig(
        min_staking_period_sec=_optional_u64(root, "min_staking_period_sec", name="farm", default=0),
        cooldown_period_sec=_optional_u64(root, "cooldown_period_sec", name="farm", default=0),
        reward_a=_parse_promise(root.get("reward_a"), name="farm.reward_a"),
        reward_b=_parse_promise(root.get("reward_b"), name="farm.reward_b"),
        variable_rate_a=_optional_bool(root, "variable_rate_a", name="farm"),
        variable_rate_b=_optional_bool(root, "variable_rate_b", name="farm"),
    )


def load_farm_config(path: Path | str) -> FarmConfig:
    raw = Path(path).read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ConfigError(f"{path}: invalid YAML: {exc}") from exc
    return farm_config_from_dict(data or {})
