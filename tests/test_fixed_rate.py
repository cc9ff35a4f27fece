"""Tests for src/gem_farm/fixed_rate.py: promised-schedule accrual."""

import pytest

from gem_farm.errors import ArithmeticOverflowError, ArithmeticUnderflowError
from gem_farm.fixed_rate import FarmerFixedRateReward, FixedRatePromise
from gem_farm.math import U64_MAX
from gem_farm.schedule import FixedRateSchedule

BEGIN = 1000
DURATION = 100
GEMS = 3


def _cycle(base_rate: int = 2) -> FarmerFixedRateReward:
    promise = FixedRatePromise(schedule=FixedRateSchedule(base_rate=base_rate), duration_sec=DURATION)
    return FarmerFixedRateReward().reset_staking_cycle(BEGIN, promise)


# ---------------------------------------------------------------------------
# reset / defaults
# ---------------------------------------------------------------------------

class TestReset:
    def test_default_is_all_zero(self):
        fr = FarmerFixedRateReward()
        assert fr.begin_staking_ts == 0
        assert fr.last_updated_ts == 0
        assert fr.promised_duration == 0
        assert fr.reward_counted_as_accrued == 0
        assert fr.promised_schedule == FixedRateSchedule()

    def test_reset_starts_cycle_at_now(self):
        fr = _cycle()
        assert fr.begin_staking_ts == BEGIN
        assert fr.last_updated_ts == BEGIN
        assert fr.promised_duration == DURATION
        assert fr.promised_schedule.base_rate == 2

    def test_reset_clears_counted(self):
        fr = _cycle().record_accrual(BEGIN + 10, 60)
        assert fr.reward_counted_as_accrued == 60
        again = fr.reset_staking_cycle(5000, FixedRatePromise())
        assert again.reward_counted_as_accrued == 0
        assert again.begin_staking_ts == 5000

    def test_reset_overflowing_graduation_fails(self):
        with pytest.raises(ArithmeticOverflowError):
            FarmerFixedRateReward().reset_staking_cycle(U64_MAX, FixedRatePromise(duration_sec=1))


# ---------------------------------------------------------------------------
# Time bounds
# ---------------------------------------------------------------------------

class TestBounds:
    def test_graduation_time(self):
        assert _cycle().graduation_time() == BEGIN + DURATION

    def test_graduation_overflow(self):
        fr = FarmerFixedRateReward(begin_staking_ts=U64_MAX, last_updated_ts=U64_MAX, promised_duration=1)
        with pytest.raises(ArithmeticOverflowError):
            fr.graduation_time()

    @pytest.mark.parametrize("now,expected", [(BEGIN + 99, False), (BEGIN + 100, True), (BEGIN + 500, True)])
    def test_is_graduation_time(self, now, expected):
        assert _cycle().is_graduation_time(now) is expected

    def test_lower_bound(self):
        fr = _cycle()
        assert fr.lower_bound_ts() == BEGIN
        assert fr.record_accrual(BEGIN + 40, 0).lower_bound_ts() == BEGIN + 40

    def test_upper_bound_caps_at_graduation(self):
        fr = _cycle()
        assert fr.upper_bound_ts(BEGIN + 50) == BEGIN + 50
        assert fr.upper_bound_ts(BEGIN + 5000) == BEGIN + DURATION


# ---------------------------------------------------------------------------
# newly_accrued_reward
# ---------------------------------------------------------------------------

class TestNewlyAccrued:
    def test_mid_cycle(self):
        assert _cycle().newly_accrued_reward(BEGIN + 50, GEMS) == 50 * 2 * GEMS

    def test_graduation_cap(self):
        fr = _cycle()
        capped = fr.newly_accrued_reward(BEGIN + DURATION, GEMS)
        assert fr.newly_accrued_reward(BEGIN + 10_000, GEMS) == capped == 600

    def test_sequential_folds_sum_to_whole(self):
        fr = _cycle()
        first = fr.newly_accrued_reward(BEGIN + 30, GEMS)
        fr = fr.record_accrual(BEGIN + 30, first)
        second = fr.newly_accrued_reward(BEGIN + 100, GEMS)
        assert first == 180
        assert second == 420
        assert first + second == _cycle().newly_accrued_reward(BEGIN + 100, GEMS)

    def test_fractional_rate_folds_recover_dust(self):
        # 1/3 token per gem-second: folding second by second never loses the remainder
        promise = FixedRatePromise(schedule=FixedRateSchedule(base_rate=1, denominator=3), duration_sec=10)
        fr = FarmerFixedRateReward().reset_staking_cycle(BEGIN, promise)
        total = 0
        for offset in range(1, 8):
            newly = fr.newly_accrued_reward(BEGIN + offset, 1)
            fr = fr.record_accrual(BEGIN + offset, newly)
            total += newly
        assert total == 7 // 3
        assert total + fr.voided_reward(1) == promise.schedule.total_amount(10, 1) == 3

    def test_now_behind_last_fold_is_zero(self):
        assert _cycle().newly_accrued_reward(BEGIN - 100, GEMS) == 0

    def test_same_time_twice_is_zero(self):
        fr = _cycle()
        fr = fr.record_accrual(BEGIN + 20, fr.newly_accrued_reward(BEGIN + 20, GEMS))
        assert fr.newly_accrued_reward(BEGIN + 20, GEMS) == 0

    def test_before_any_cycle_is_zero(self):
        assert FarmerFixedRateReward().newly_accrued_reward(10_000, 50) == 0

    def test_last_updated_behind_begin_underflows(self):
        fr = FarmerFixedRateReward(
            begin_staking_ts=100,
            last_updated_ts=50,
            promised_schedule=FixedRateSchedule(base_rate=1),
            promised_duration=100,
        )
        with pytest.raises(ArithmeticUnderflowError):
            fr.newly_accrued_reward(150, 1)


# ---------------------------------------------------------------------------
# record_accrual
# ---------------------------------------------------------------------------

class TestRecordAccrual:
    def test_advances_and_counts(self):
        fr = _cycle().record_accrual(BEGIN + 25, 150)
        assert fr.last_updated_ts == BEGIN + 25
        assert fr.reward_counted_as_accrued == 150

    def test_caps_at_graduation(self):
        fr = _cycle().record_accrual(BEGIN + 9999, 600)
        assert fr.last_updated_ts == BEGIN + DURATION

    def test_never_moves_backwards(self):
        fr = _cycle().record_accrual(BEGIN + 60, 0).record_accrual(BEGIN + 10, 0)
        assert fr.last_updated_ts == BEGIN + 60

    def test_counted_overflow(self):
        fr = _cycle().record_accrual(BEGIN + 1, U64_MAX)
        with pytest.raises(ArithmeticOverflowError):
            fr.record_accrual(BEGIN + 2, 1)


# ---------------------------------------------------------------------------
# Voiding
# ---------------------------------------------------------------------------

class TestVoided:
    def test_full_promise_right_after_reset(self):
        fr = _cycle()
        assert fr.voided_reward(GEMS) == fr.promised_schedule.total_amount(DURATION, GEMS) == 600

    def test_zero_after_graduation_fold(self):
        fr = _cycle()
        fr = fr.record_accrual(BEGIN + DURATION, fr.newly_accrued_reward(BEGIN + DURATION, GEMS))
        assert fr.voided_reward(GEMS) == 0

    def test_accrued_plus_voided_is_promise(self):
        fr = _cycle()
        earned = fr.newly_accrued_reward(BEGIN + 40, GEMS)
        fr = fr.record_accrual(BEGIN + 40, earned)
        assert earned + fr.voided_reward(GEMS) == 600

    def test_void_remaining_closes_cycle(self):
        fr = _cycle().record_accrual(BEGIN + 40, 240)
        closed, voided = fr.void_remaining(GEMS)
        assert voided == 360
        assert closed.last_updated_ts == BEGIN + DURATION
        assert closed.voided_reward(GEMS) == 0
        assert closed.newly_accrued_reward(BEGIN + 5000, GEMS) == 0
        assert closed.reward_counted_as_accrued == 240

    def test_before_any_cycle_is_zero(self):
        assert FarmerFixedRateReward().voided_reward(50) == 0
