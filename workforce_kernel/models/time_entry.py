"""
Module: workforce_kernel.models.time_entry
Responsibility: ORM persistence for time entries.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - status is one of draft | submitted | approved | rejected.
    - hours lies in [0, 24].
    - reviewer_id and reviewed_at are written together by a decision.

Failure modes:
    - IntegrityError if hours fall outside [0, 24].  TimeEntryService
      validates first; the constraint is a backstop.
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
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from workforce_kernel.db.base import TrackedBase, UTCDateTime, UUIDString
from workforce_kernel.models.project import ProjectModel

if TYPE_CHECKING:
    from workforce_kernel.domain.time_entry import TimeEntry


class TimeEntryModel(TrackedBase):
    """One logged block of work, reviewed by the owner's manager or an admin."""

    __tablename__ = "time_entries"

    __table_args__ = (
        CheckConstraint(
            "status IN ('draft', 'submitted', 'approved', 'rejected')",
            name="ck_time_entries_valid_status",
        ),
        CheckConstraint(
            "hours >= 0 AND hours <= 24",
            name="ck_time_entries_hours_range",
        ),
        Index("idx_time_entries_status_submitted", "status", "submitted_at"),
        Index("idx_time_entries_employee_date", "employee_id", "work_date"),
    )

    employee_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("employees.id"), nullable=False,
    )
    work_date: Mapped[date] = mapped_column(Date, nullable=False)
    project_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("projects.id"), nullable=False,
    )
    task: Mapped[str] = mapped_column(String(200), nullable=False)
    hours: Mapped[Decimal] = mapped_column(nullable=False)
    billable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="draft")
    reviewer_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)
    review_comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    submitted_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime(), nullable=True,
    )
    reviewed_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime(), nullable=True,
    )

    project: Mapped[ProjectModel] = relationship(lazy="joined")

    def __repr__(self) -> str:
        return (
            f"<TimeEntry {self.id} {self.work_date} {self.hours}h "
            f"status={self.status}>"
        )

    def to_dto(self) -> TimeEntry:
        """Convert ORM model to frozen domain DTO."""
        from workforce_kernel.domain.time_entry import (
            TimeEntry as TimeEntryDTO,
            TimeEntryStatus,
        )

        return TimeEntryDTO(
            entry_id=self.id,
            employee_id=self.employee_id,
            work_date=self.work_date,
            project_id=self.project_id,
            task=self.task,
            hours=Decimal(self.hours),
            billable=self.billable,
            status=TimeEntryStatus(self.status),
            description=self.description,
            reviewer_id=self.reviewer_id,
            review_comment=self.review_comment,
            submitted_at=self.submitted_at,
            reviewed_at=self.reviewed_at,
        )
