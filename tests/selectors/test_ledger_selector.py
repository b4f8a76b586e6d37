"""
LedgerSelector: balance views, equation audit and reconciliation of usage
against approved requests.
"""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import text

from tests.conftest import TEST_YEAR
from workforce_kernel.domain.values import DecisionOutcome
from workforce_kernel.selectors.ledger_selector import LedgerSelector


@pytest.fixture
def ledger_view(session):
    return LedgerSelector(session)


class TestBalancesFor:
    def test_ordered_by_category_name(self, ledger_view, create_employee, annual_leave, sick_leave):
        employee = create_employee("Alice", categories=[sick_leave, annual_leave])

        views = ledger_view.balances_for(employee.employee_id, TEST_YEAR)

        assert [v.category_name for v in views] == ["Annual Leave", "Sick Leave"]
        assert [v.balance.balance for v in views] == [Decimal("18"), Decimal("10")]

    def test_other_year_is_empty(self, ledger_view, create_employee, annual_leave):
        employee = create_employee("Alice", categories=[annual_leave])
        assert ledger_view.balances_for(employee.employee_id, TEST_YEAR + 1) == []


class TestInvariantAudit:
    def test_healthy_ledger_has_no_violations(self, ledger_view, ledger, team, annual_leave):
        ledger.post_deduction(team.alice.employee_id, TEST_YEAR, annual_leave.category_id, Decimal("4"))
        assert ledger_view.find_invariant_violations() == []

    def test_check_constraint_blocks_equation_drift(self, session, team):
        from sqlalchemy.exc import IntegrityError

        with pytest.raises(IntegrityError):
            with session.begin_nested():
                session.execute(
                    text("UPDATE leave_balances SET used = used + 1 WHERE employee_id = :e"),
                    {"e": str(team.alice.employee_id)},
                )


class TestReconcile:
    def test_usage_matches_approved_requests(
        self, ledger_view, leave_service, team, annual_leave,
    ):
        first = leave_service.create(
            team.alice_actor, annual_leave.category_id, date(2025, 3, 3), date(2025, 3, 7),
        )
        second = leave_service.create(
            team.alice_actor, annual_leave.category_id, date(2025, 4, 1), date(2025, 4, 1),
            half_day=True, half_day_period="AM",
        )
        rejected = leave_service.create(
            team.alice_actor, annual_leave.category_id, date(2025, 5, 1), date(2025, 5, 2),
        )
        leave_service.decide(team.manager_actor, first.request_id, DecisionOutcome.APPROVED)
        leave_service.decide(team.manager_actor, second.request_id, DecisionOutcome.APPROVED)
        leave_service.decide(team.manager_actor, rejected.request_id, DecisionOutcome.REJECTED)

        [row] = ledger_view.reconcile(team.alice.employee_id, TEST_YEAR)

        assert row.category_name == "Annual Leave"
        assert row.used == Decimal("5.5")
        assert row.approved_days == Decimal("5.5")
        assert row.is_reconciled

    def test_manual_reversal_shows_as_difference(
        self, ledger_view, ledger, leave_service, team, annual_leave,
    ):
        request = leave_service.create(
            team.alice_actor, annual_leave.category_id, date(2025, 3, 3), date(2025, 3, 5),
        )
        leave_service.decide(team.manager_actor, request.request_id, DecisionOutcome.APPROVED)
        ledger.reverse_deduction(team.alice.employee_id, TEST_YEAR, annual_leave.category_id, Decimal("1"))

        [row] = ledger_view.reconcile(team.alice.employee_id, TEST_YEAR)

        assert row.used == Decimal("2")
        assert row.approved_days == Decimal("3")
        assert row.difference == Decimal("-1")
        assert not row.is_reconciled

    def test_no_approvals(self, ledger_view, team):
        [row] = ledger_view.reconcile(team.alice.employee_id, TEST_YEAR)
        assert row.approved_days == Decimal("0")
        assert row.is_reconciled
