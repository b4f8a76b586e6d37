"""
Leave domain: day count formula, request window validation, the request
state machine and BalancePosition arithmetic.

Pure tests -- no database.
"""

from datetime import date
from decimal import Decimal

import pytest

from workforce_kernel.domain.leave import (
    LEAVE_TRANSITIONS,
    TERMINAL_LEAVE_STATUSES,
    BalancePosition,
    HalfDayPeriod,
    LeaveBalance,
    LeaveRequestStatus,
    compute_day_count,
    validate_leave_window,
)
from workforce_kernel.exceptions import InvalidLeaveRequestError


class TestDayCount:
    def test_single_full_day(self):
        assert compute_day_count(date(2025, 3, 3), date(2025, 3, 3), False) == Decimal("1")

    def test_monday_to_friday_is_five_days(self):
        assert compute_day_count(date(2025, 3, 3), date(2025, 3, 7), False) == Decimal("5")

    def test_weekends_are_counted(self):
        # Friday to Monday spans a weekend.
        assert compute_day_count(date(2025, 3, 7), date(2025, 3, 10), False) == Decimal("4")

    def test_half_day_is_half_regardless_of_range(self):
        assert compute_day_count(date(2025, 3, 3), date(2025, 3, 3), True) == Decimal("0.5")
        assert compute_day_count(date(2025, 3, 3), date(2025, 3, 9), True) == Decimal("0.5")

    def test_span_across_year_end(self):
        assert compute_day_count(date(2025, 12, 30), date(2026, 1, 2), False) == Decimal("4")

    def test_result_is_decimal(self):
        assert isinstance(compute_day_count(date(2025, 1, 1), date(2025, 1, 2), False), Decimal)


class TestValidateLeaveWindow:
    def test_valid_full_day_range(self):
        validate_leave_window(date(2025, 3, 3), date(2025, 3, 7), False, None)

    def test_valid_half_day(self):
        validate_leave_window(date(2025, 3, 3), date(2025, 3, 3), True, HalfDayPeriod.AM)

    def test_end_before_start_rejected(self):
        with pytest.raises(InvalidLeaveRequestError, match="before start"):
            validate_leave_window(date(2025, 3, 7), date(2025, 3, 3), False, None)

    def test_half_day_without_period_rejected(self):
        with pytest.raises(InvalidLeaveRequestError, match="AM/PM"):
            validate_leave_window(date(2025, 3, 3), date(2025, 3, 3), True, None)

    def test_period_without_half_day_rejected(self):
        with pytest.raises(InvalidLeaveRequestError) as exc_info:
            validate_leave_window(date(2025, 3, 3), date(2025, 3, 3), False, HalfDayPeriod.PM)
        assert exc_info.value.code == "INVALID_LEAVE_REQUEST"


class TestLeaveStateMachine:
    def test_pending_reaches_every_terminal_state(self):
        assert LEAVE_TRANSITIONS[LeaveRequestStatus.PENDING] == TERMINAL_LEAVE_STATUSES

    @pytest.mark.parametrize("status", sorted(TERMINAL_LEAVE_STATUSES, key=lambda s: s.value))
    def test_terminal_states_have_no_exits(self, status):
        assert LEAVE_TRANSITIONS[status] == frozenset()

    def test_every_status_has_an_entry(self):
        assert set(LEAVE_TRANSITIONS) == set(LeaveRequestStatus)


class TestBalancePosition:
    def test_opening_position(self):
        position = BalancePosition.opening(Decimal("18"))
        assert position == BalancePosition(Decimal("18"), Decimal("0"), Decimal("18"))
        assert position.is_consistent

    def test_opening_negative_rejected(self):
        with pytest.raises(ValueError):
            BalancePosition.opening(Decimal("-1"))

    def test_deduct_keeps_equation(self):
        after = BalancePosition.opening(Decimal("18")).deduct(Decimal("5"))
        assert after.used == Decimal("5")
        assert after.balance == Decimal("13")
        assert after.is_consistent

    def test_deduct_whole_balance_allowed(self):
        after = BalancePosition.opening(Decimal("3")).deduct(Decimal("3"))
        assert after.balance == Decimal("0")

    def test_deduct_beyond_balance_rejected(self):
        position = BalancePosition.opening(Decimal("13"))
        assert not position.can_cover(Decimal("15"))
        with pytest.raises(ValueError, match="exceeds balance"):
            position.deduct(Decimal("15"))

    @pytest.mark.parametrize("days", [Decimal("0"), Decimal("-2")])
    def test_deduct_non_positive_rejected(self, days):
        with pytest.raises(ValueError):
            BalancePosition.opening(Decimal("5")).deduct(days)

    def test_reverse_restores_balance(self):
        position = BalancePosition.opening(Decimal("10")).deduct(Decimal("4"))
        restored = position.reverse(Decimal("4"))
        assert restored == BalancePosition.opening(Decimal("10"))

    def test_reverse_more_than_used_rejected(self):
        position = BalancePosition.opening(Decimal("10")).deduct(Decimal("1"))
        with pytest.raises(ValueError, match="exceeds usage"):
            position.reverse(Decimal("2"))

    def test_inconsistent_position_detected(self):
        assert not BalancePosition(Decimal("10"), Decimal("2"), Decimal("9")).is_consistent

    def test_leave_balance_exposes_position(self):
        snapshot = LeaveBalance(
            employee_id=None,
            year=2025,
            category_id=None,
            allocated=Decimal("18"),
            used=Decimal("5"),
            balance=Decimal("13"),
        )
        assert snapshot.position.is_consistent
        assert snapshot.position.can_cover(Decimal("13"))
