"""
Module: workforce_kernel.selectors.ledger_selector
Responsibility: Read-only views over the leave balance ledger: an
    employee's balances for a year, rows that break the balance equation,
    and a reconciliation of ``used`` against approved requests.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - find_invariant_violations() checks balance == allocated - used in SQL,
      independent of the check constraint, so it still reports rows written
      by anything that bypassed the ledger on a backend without the
      constraint.
    - reconcile() ties each row's ``used`` to the sum of ``day_count`` over
      approved requests whose ``ledger_year`` is that row's year.

Failure modes:
    - Returns empty lists when nothing matches.
"""

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from workforce_kernel.domain.leave import LeaveBalance, LeaveRequestStatus
from workforce_kernel.models.leave import (
    LeaveBalanceModel,
    LeaveCategoryModel,
    LeaveRequestModel,
)
from workforce_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class BalanceView:
    """A ledger row with its category name, for display."""

    category_name: str
    balance: LeaveBalance


@dataclass(frozen=True)
class ReconciliationRow:
    """Stored usage vs. usage implied by approved requests, for one category."""

    category_id: UUID
    category_name: str
    used: Decimal
    approved_days: Decimal

    @property
    def difference(self) -> Decimal:
        return self.used - self.approved_days

    @property
    def is_reconciled(self) -> bool:
        return self.difference == 0


class LedgerSelector(BaseSelector[LeaveBalanceModel]):
    """Selector for leave balance queries."""

    def __init__(self, session: Session):
        super().__init__(session)

    def balances_for(self, employee_id: UUID, year: int) -> list[BalanceView]:
        """All ledger rows for an employee-year, ordered by category name."""
        rows = self._fetch(
            select(LeaveBalanceModel, LeaveCategoryModel.name)
            .join(LeaveCategoryModel, LeaveCategoryModel.id == LeaveBalanceModel.category_id)
            .where(
                LeaveBalanceModel.employee_id == employee_id,
                LeaveBalanceModel.year == year,
            )
            .order_by(LeaveCategoryModel.name)
        ).all()
        return [BalanceView(category_name=name, balance=row.to_dto()) for row, name in rows]

    def find_invariant_violations(self) -> list[LeaveBalance]:
        rows = self._fetch(
            select(LeaveBalanceModel)
            .where(
                LeaveBalanceModel.balance
                != LeaveBalanceModel.allocated - LeaveBalanceModel.used
            )
            .order_by(LeaveBalanceModel.employee_id, LeaveBalanceModel.year)
        ).scalars()
        return [row.to_dto() for row in rows]

    def reconcile(self, employee_id: UUID, year: int) -> list[ReconciliationRow]:
        """
        Compare each row's ``used`` with approved requests posted to ``year``.

        A non-zero difference means a deduction happened outside the leave
        lifecycle (for example a manual reversal) or a write was lost.
        """
        approved = (
            select(
                LeaveRequestModel.category_id,
                func.sum(LeaveRequestModel.day_count).label("approved_days"),
            )
            .where(
                LeaveRequestModel.employee_id == employee_id,
                LeaveRequestModel.status == LeaveRequestStatus.APPROVED.value,
                LeaveRequestModel.ledger_year == year,
            )
            .group_by(LeaveRequestModel.category_id)
            .subquery()
        )

        rows = self.session.execute(
            select(
                LeaveBalanceModel.category_id,
                LeaveCategoryModel.name,
                LeaveBalanceModel.used,
                approved.c.approved_days,
            )
            .join(LeaveCategoryModel, LeaveCategoryModel.id == LeaveBalanceModel.category_id)
            .outerjoin(approved, approved.c.category_id == LeaveBalanceModel.category_id)
            .where(
                LeaveBalanceModel.employee_id == employee_id,
                LeaveBalanceModel.year == year,
            )
            .order_by(LeaveCategoryModel.name)
        ).all()

        return [
            ReconciliationRow(
                category_id=category_id,
                category_name=name,
                used=Decimal(used),
                approved_days=Decimal(approved_days or 0),
            )
            for category_id, name, used, approved_days in rows
        ]
