"""`gem_farm`: farmer staking lifecycle and reward accrual for a gem farm.

- deterministic, integer-only transitions (time is always an input),
- immutable records (frozen dataclasses),
- checked arithmetic and fail-closed guards.

Public API:
- `new_farmer(farm, identity, vault) -> Farmer`
- `step(config, farmer, params) -> StepResult`
- `step_or_raise(config, farmer, params) -> StepResult` (raises on rejection)
"""

from .config import FarmConfig, farm_config_from_dict, load_farm_config
from .engine import step, step_or_raise
from .errors import (
    ArithmeticOverflowError,
    ArithmeticUnderflowError,
    ConfigError,
    CooldownNotPassedError,
    DivisionByZeroError,
    FarmerInvariantError,
    GemFarmError,
    MinStakingNotPassedError,
)
from .farmer import Farmer, FarmerState, new_farmer
from .fixed_rate import FarmerFixedRateReward, FixedRatePromise
from .number128 import Number128
from .reward import FarmerReward
from .schedule import FixedRateSchedule, TierConfig
from .types import Action, ActionParams, Effect, Event, StepResult
from .variable_rate import FarmerVariableRateReward

__all__ = [
    "step",
    "step_or_raise",
    "new_farmer",
    "FarmConfig",
    "farm_config_from_dict",
    "load_farm_config",
    "Farmer",
    "FarmerState",
    "FarmerReward",
    "FarmerFixedRateReward",
    "FarmerVariableRateReward",
    "FixedRatePromise",
    "FixedRateSchedule",
    "TierConfig",
    "Number128",
    "Action",
    "ActionParams",
    "Effect",
    "Event",
    "StepResult",
    "GemFarmError",
    "ArithmeticOverflowError",
    "ArithmeticUnderflowError",
    "DivisionByZeroError",
    "MinStakingNotPassedError",
    "CooldownNotPassedError",
    "FarmerInvariantError",
    "ConfigError",
]
