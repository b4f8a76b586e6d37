"""
Module: workforce_kernel.models.leave
Responsibility: ORM persistence for leave categories, the leave balance
    ledger and leave requests.
Architecture position: Kernel > Models.  May import from db/base.py only.
    MUST NOT import from services/, selectors/, or outer layers.

Invariants enforced:
    - One ledger row per (employee, year, category) (uq_leave_balance_key).
    - balance = allocated - used on every row (ck_leave_balances_equation).
    - balance and used are never negative.
    - Leave request status is one of pending | approved | rejected |
      cancelled; half_day_period is set iff half_day.

Failure modes:
    - IntegrityError on a second ledger row for the same key.
    - IntegrityError if a write would break the balance equation.  The
      ledger service never issues such a write; the constraint is the
      backstop for anything that bypasses it.

Audit relevance:
    ledger_year on an approved request records which ledger row the
    deduction was posted to, so LedgerSelector.reconcile can tie usage back
    to individual approvals.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from workforce_kernel.db.base import TrackedBase, UTCDateTime, UUIDString

if TYPE_CHECKING:
    from workforce_kernel.domain.leave import LeaveBalance, LeaveCategory, LeaveRequest


class LeaveCategoryModel(TrackedBase):
    """A kind of leave with its policy flags and default allocation."""

    __tablename__ = "leave_categories"

    __table_args__ = (
        UniqueConstraint("name", name="uq_leave_category_name"),
        CheckConstraint(
            "default_allocation >= 0",
            name="ck_leave_categories_allocation_non_negative",
        ),
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    is_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    requires_approval: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True,
    )
    requires_attachment: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    default_allocation: Mapped[Decimal] = mapped_column(
        nullable=False, default=Decimal("0"),
    )

    def __repr__(self) -> str:
        return f"<LeaveCategory {self.name} ({self.default_allocation})>"

    def to_dto(self) -> LeaveCategory:
        from workforce_kernel.domain.leave import LeaveCategory as LeaveCategoryDTO

        return LeaveCategoryDTO(
            category_id=self.id,
            name=self.name,
            is_paid=self.is_paid,
            requires_approval=self.requires_approval,
            requires_attachment=self.requires_attachment,
            default_allocation=Decimal(self.default_allocation),
        )


class LeaveBalanceModel(TrackedBase):
    """
    One ledger row: allocated / used / balance for an employee-year-category.

    Contract:
        Rows are created by BalanceLedger.open_balance and mutated only by
        BalanceLedger.post_deduction / reverse_deduction.
    """

    __tablename__ = "leave_balances"

    __table_args__ = (
        UniqueConstraint(
            "employee_id", "year", "category_id", name="uq_leave_balance_key",
        ),
        CheckConstraint(
            "balance = allocated - used",
            name="ck_leave_balances_equation",
        ),
        CheckConstraint("balance >= 0", name="ck_leave_balances_non_negative"),
        CheckConstraint("used >= 0", name="ck_leave_balances_used_non_negative"),
        Index("idx_leave_balances_employee_year", "employee_id", "year"),
    )

    employee_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("employees.id"), nullable=False,
    )
    year: Mapped[int] = mapped_column(nullable=False)
    category_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("leave_categories.id"), nullable=False,
    )
    allocated: Mapped[Decimal] = mapped_column(nullable=False)
    used: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    balance: Mapped[Decimal] = mapped_column(nullable=False)

    def __repr__(self) -> str:
        return (
            f"<LeaveBalance {self.employee_id} {self.year} {self.category_id} "
            f"allocated={self.allocated} used={self.used} balance={self.balance}>"
        )

    def to_dto(self) -> LeaveBalance:
        from workforce_kernel.domain.leave import LeaveBalance as LeaveBalanceDTO

        return LeaveBalanceDTO(
            employee_id=self.employee_id,
            year=self.year,
            category_id=self.category_id,
            allocated=Decimal(self.allocated),
            used=Decimal(self.used),
            balance=Decimal(self.balance),
        )


class LeaveRequestModel(TrackedBase):
    """A request for leave, from pending to a single terminal decision."""

    __tablename__ = "leave_requests"

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected', 'cancelled')",
            name="ck_leave_requests_valid_status",
        ),
        CheckConstraint(
            "end_date >= start_date",
            name="ck_leave_requests_date_order",
        ),
        CheckConstraint(
            "(half_day AND half_day_period IS NOT NULL) "
            "OR (NOT half_day AND half_day_period IS NULL)",
            name="ck_leave_requests_half_day_period",
        ),
        CheckConstraint("day_count > 0", name="ck_leave_requests_day_count"),
        Index("idx_leave_requests_status_created", "status", "created_at"),
        Index("idx_leave_requests_employee", "employee_id"),
    )

    employee_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("employees.id"), nullable=False,
    )
    category_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("leave_categories.id"), nullable=False,
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    half_day: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    half_day_period: Mapped[str | None] = mapped_column(String(2), nullable=True)
    day_count: Mapped[Decimal] = mapped_column(nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False, default="")
    backup_employee_id: Mapped[UUID | None] = mapped_column(
        UUIDString(), ForeignKey("employees.id"), nullable=True,
    )
    attachment_ref: Mapped[str | None] = mapped_column(String(500), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    reviewer_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)
    review_comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime(), nullable=True,
    )
    ledger_year: Mapped[int | None] = mapped_column(nullable=True)

    category: Mapped[LeaveCategoryModel] = relationship(lazy="joined")

    def __repr__(self) -> str:
        return (
            f"<LeaveRequest {self.id} {self.start_date}..{self.end_date} "
            f"status={self.status}>"
        )

    def to_dto(self) -> LeaveRequest:
        """Convert ORM model to frozen domain DTO."""
        from workforce_kernel.domain.leave import (
            HalfDayPeriod,
            LeaveRequest as LeaveRequestDTO,
            LeaveRequestStatus,
        )

        return LeaveRequestDTO(
            request_id=self.id,
            employee_id=self.employee_id,
            category_id=self.category_id,
            start_date=self.start_date,
            end_date=self.end_date,
            half_day=self.half_day,
            day_count=Decimal(self.day_count),
            reason=self.reason,
            status=LeaveRequestStatus(self.status),
            half_day_period=(
                HalfDayPeriod(self.half_day_period) if self.half_day_period else None
            ),
            backup_employee_id=self.backup_employee_id,
            attachment_ref=self.attachment_ref,
            reviewer_id=self.reviewer_id,
            review_comment=self.review_comment,
            reviewed_at=self.reviewed_at,
            ledger_year=self.ledger_year,
        )
