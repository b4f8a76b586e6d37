"""
BalanceLedger -- the single choke point for leave balance rows.

Responsibility:
    Opens ledger rows at onboarding, answers the advisory "is there enough
    balance?" question at request creation, and posts the authoritative
    deduction when a leave request is approved.  No other code writes to
    ``leave_balances``.

Architecture position:
    Kernel > Services -- imperative shell.  All arithmetic is delegated to
    ``domain.leave.BalancePosition``; this module only does locking and I/O.

Invariants enforced:
    - balance == allocated - used after every mutation (BalancePosition and
      the ``ck_leave_balances_equation`` constraint).
    - balance never goes negative: ``post_deduction`` locks the row with
      ``SELECT ... FOR UPDATE`` and applies a conditional UPDATE guarded by
      ``balance >= days``.
    - Missing rows are never created implicitly by a deduction.

Failure modes:
    - InsufficientBalanceError when the locked re-check fails.
    - LedgerRowMissingError (logged at CRITICAL) when no row exists for the
      key.  This is a data-integrity violation; onboarding provisions every
      row.
    - ReversalExceedsUsageError when a reversal would take ``used`` below 0.

Audit relevance:
    Every posted deduction and reversal is logged with the row key and the
    before/after position.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from workforce_kernel.domain.clock import Clock
from workforce_kernel.domain.leave import BalancePosition, LeaveBalance, LeaveCategory
from workforce_kernel.domain.values import SYSTEM_ACTOR_ID
from workforce_kernel.exceptions import (
    InsufficientBalanceError,
    LedgerRowMissingError,
    ReversalExceedsUsageError,
)
from workforce_kernel.logging_config import get_logger
from workforce_kernel.models.leave import LeaveBalanceModel
from workforce_kernel.services.base import BaseService

logger = get_logger("services.balance_ledger")


class BalanceLedger(BaseService[LeaveBalanceModel]):
    """
    Ledger of allocated / used / remaining leave days.

    Contract:
        Keyed by (employee_id, year, category_id).  Callers pass the year
        explicitly; the lifecycles use ``clock.current_year()``.

    Non-goals:
        - No reservation of balance at request creation.  The creation-time
          check is advisory and the decision-time re-check is the only
          source of truth.
        - No carry-over between years.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session, clock)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _find(
        self,
        employee_id: UUID,
        year: int,
        category_id: UUID,
        lock: bool = False,
    ) -> LeaveBalanceModel | None:
        stmt = select(LeaveBalanceModel).where(
            LeaveBalanceModel.employee_id == employee_id,
            LeaveBalanceModel.year == year,
            LeaveBalanceModel.category_id == category_id,
        )
        if lock:
            stmt = stmt.with_for_update(of=LeaveBalanceModel)
        return self.session.execute(
            stmt.execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def get_balance(self, employee_id: UUID, year: int, category_id: UUID) -> LeaveBalance:
        """
        Current position of one ledger row.

        Raises:
            LedgerRowMissingError: No row for the key.
        """
        row = self._find(employee_id, year, category_id)
        if row is None:
            raise LedgerRowMissingError(str(employee_id), year, str(category_id))
        return row.to_dto()

    def check_sufficient(
        self,
        employee_id: UUID,
        year: int,
        category_id: UUID,
        days: Decimal,
    ) -> bool:
        """
        Advisory check: would ``days`` fit in the current balance?

        A missing row reads as insufficient.  Never locks, never mutates.
        """
        row = self._find(employee_id, year, category_id)
        if row is None:
            logger.info(
                "balance_check_no_row",
                extra={
                    "employee_id": str(employee_id),
                    "year": year,
                    "category_id": str(category_id),
                },
            )
            return False
        return BalancePosition(row.allocated, row.used, row.balance).can_cover(days)

    def available(self, employee_id: UUID, year: int, category_id: UUID) -> Decimal:
        """Remaining days on a row, or 0 when the row is missing."""
        row = self._find(employee_id, year, category_id)
        return Decimal("0") if row is None else Decimal(row.balance)

    # ------------------------------------------------------------------
    # Provisioning
    # ------------------------------------------------------------------

    def open_balance(
        self,
        employee_id: UUID,
        year: int,
        category_id: UUID,
        allocated: Decimal,
        actor_id: UUID = SYSTEM_ACTOR_ID,
    ) -> LeaveBalance:
        """
        Create the ledger row for a key, or return it if it already exists.

        The insert runs in a SAVEPOINT so a concurrent duplicate only rolls
        back this row, not the caller's transaction.
        """
        existing = self._find(employee_id, year, category_id)
        if existing is not None:
            return existing.to_dto()

        position = BalancePosition.opening(allocated)
        savepoint = self.session.begin_nested()
        try:
            row = LeaveBalanceModel(
                employee_id=employee_id,
                year=year,
                category_id=category_id,
                allocated=position.allocated,
                used=position.used,
                balance=position.balance,
                created_by_id=actor_id,
            )
            self.session.add(row)
            self.session.flush()
            savepoint.commit()
        except IntegrityError:
            savepoint.rollback()
            logger.debug(
                "balance_open_race_retry",
                extra={
                    "employee_id": str(employee_id),
                    "year": year,
                    "category_id": str(category_id),
                },
            )
            row = self._find(employee_id, year, category_id)
            if row is None:
                raise
            return row.to_dto()

        logger.info(
            "balance_opened",
            extra={
                "employee_id": str(employee_id),
                "year": year,
                "category_id": str(category_id),
                "allocated": str(position.allocated),
            },
        )
        return row.to_dto()

    def provision_year(
        self,
        employee_id: UUID,
        year: int,
        categories: Iterable[LeaveCategory],
        actor_id: UUID = SYSTEM_ACTOR_ID,
    ) -> list[LeaveBalance]:
        """Open one row per category, seeded from its default allocation."""
        return [
            self.open_balance(
                employee_id,
                year,
                category.category_id,
                category.default_allocation,
                actor_id=actor_id,
            )
            for category in categories
        ]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _lock_row(self, employee_id: UUID, year: int, category_id: UUID) -> LeaveBalanceModel:
        row = self._find(employee_id, year, category_id, lock=True)
        if row is None:
            logger.critical(
                "ledger_row_missing",
                extra={
                    "employee_id": str(employee_id),
                    "year": year,
                    "category_id": str(category_id),
                },
            )
            raise LedgerRowMissingError(str(employee_id), year, str(category_id))
        return row

    def post_deduction(
        self,
        employee_id: UUID,
        year: int,
        category_id: UUID,
        days: Decimal,
    ) -> LeaveBalance:
        """
        Consume ``days`` from a ledger row.

        Preconditions:
            - Called inside the caller's atomic unit (the leave decision
              SAVEPOINT).  Nothing here commits.

        Postconditions:
            - ``used`` grew by ``days`` and ``balance`` shrank by ``days``.

        Raises:
            LedgerRowMissingError: No row for the key.
            InsufficientBalanceError: ``balance < days`` at lock time.
        """
        row = self._lock_row(employee_id, year, category_id)
        before = BalancePosition(row.allocated, row.used, row.balance)

        if not before.can_cover(days):
            logger.info(
                "deduction_insufficient_balance",
                extra={
                    "employee_id": str(employee_id),
                    "year": year,
                    "category_id": str(category_id),
                    "requested": str(days),
                    "available": str(before.balance),
                },
            )
            raise InsufficientBalanceError(
                str(employee_id), year, str(category_id), days, before.balance,
            )

        after = before.deduct(days)
        result = self.session.execute(
            update(LeaveBalanceModel)
            .where(
                LeaveBalanceModel.id == row.id,
                LeaveBalanceModel.balance >= days,
            )
            .values(
                used=LeaveBalanceModel.used + days,
                balance=LeaveBalanceModel.balance - days,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            # Only reachable on a backend without row locks.
            self.session.refresh(row)
            raise InsufficientBalanceError(
                str(employee_id), year, str(category_id), days, Decimal(row.balance),
            )

        self.session.refresh(row)
        logger.info(
            "deduction_posted",
            extra={
                "employee_id": str(employee_id),
                "year": year,
                "category_id": str(category_id),
                "days": str(days),
                "balance_before": str(before.balance),
                "balance_after": str(after.balance),
            },
        )
        return row.to_dto()

    def reverse_deduction(
        self,
        employee_id: UUID,
        year: int,
        category_id: UUID,
        days: Decimal,
    ) -> LeaveBalance:
        """
        Give ``days`` back to a ledger row.

        No lifecycle calls this: cancelling or rejecting a request never
        touches the ledger.  It exists for an operator-driven correction.

        Raises:
            LedgerRowMissingError: No row for the key.
            ReversalExceedsUsageError: ``days > used``.
        """
        row = self._lock_row(employee_id, year, category_id)
        before = BalancePosition(row.allocated, row.used, row.balance)

        if days > before.used:
            raise ReversalExceedsUsageError(str(employee_id), days, before.used)

        after = before.reverse(days)
        row.used = after.used
        row.balance = after.balance
        self.session.flush()

        logger.warning(
            "deduction_reversed",
            extra={
                "employee_id": str(employee_id),
                "year": year,
                "category_id": str(category_id),
                "days": str(days),
                "balance_after": str(after.balance),
            },
        )
        return row.to_dto()
