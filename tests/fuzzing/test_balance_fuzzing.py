"""
Hypothesis property tests for ledger arithmetic and the day-count formula.

Properties:
- Any sequence of accepted deductions and reversals keeps
  balance == allocated - used and balance >= 0.
- A deduction is accepted exactly when it fits the current balance.
- Full-day count equals the inclusive calendar span; half days are 0.5.
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from workforce_kernel.domain.leave import BalancePosition, compute_day_count
from workforce_kernel.domain.time_entry import normalize_hours
from workforce_kernel.exceptions import InvalidHoursError

# Leave is booked in half-day steps.
half_days = st.integers(min_value=1, max_value=80).map(lambda n: Decimal(n) / 2)
allocations = st.integers(min_value=0, max_value=60).map(Decimal)

operations = st.lists(
    st.tuples(st.sampled_from(["deduct", "reverse"]), half_days),
    max_size=40,
)


class TestBalancePositionProperties:
    @given(allocated=allocations, ops=operations)
    @settings(max_examples=200)
    def test_equation_survives_any_operation_sequence(self, allocated, ops):
        position = BalancePosition.opening(allocated)
        for op, days in ops:
            try:
                if op == "deduct":
                    position = position.deduct(days)
                else:
                    position = position.reverse(days)
            except ValueError:
                pass
            assert position.is_consistent
            assert position.balance >= 0
            assert position.used >= 0
            assert position.allocated == allocated

    @given(allocated=allocations, days=half_days)
    def test_deduction_accepted_iff_it_fits(self, allocated, days):
        position = BalancePosition.opening(allocated)
        if days <= allocated:
            assert position.deduct(days).balance == allocated - days
        else:
            assert not position.can_cover(days)

    @given(allocated=allocations, days=half_days)
    def test_deduct_then_reverse_is_identity(self, allocated, days):
        position = BalancePosition.opening(allocated)
        if position.can_cover(days):
            assert position.deduct(days).reverse(days) == position


class TestDayCountProperties:
    @given(
        start=st.dates(min_value=date(2000, 1, 1), max_value=date(2099, 1, 1)),
        span=st.integers(min_value=0, max_value=365),
    )
    def test_full_day_count_is_inclusive_span(self, start, span):
        end = start + timedelta(days=span)
        assert compute_day_count(start, end, False) == Decimal(span + 1)

    @given(
        start=st.dates(min_value=date(2000, 1, 1), max_value=date(2099, 1, 1)),
        span=st.integers(min_value=0, max_value=30),
    )
    def test_half_day_is_always_half(self, start, span):
        assert compute_day_count(start, start + timedelta(days=span), True) == Decimal("0.5")


class TestHoursProperties:
    @given(st.decimals(min_value=0, max_value=24, allow_nan=False, places=2))
    def test_in_range_hours_accepted_unchanged(self, hours):
        assert normalize_hours(hours) == hours

    @given(st.decimals(min_value=Decimal("24.01"), max_value=10_000, allow_nan=False, places=2))
    def test_over_24_rejected(self, hours):
        with pytest.raises(InvalidHoursError):
            normalize_hours(hours)
