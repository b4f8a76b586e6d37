"""
Module: workforce_kernel.models.employee
Responsibility: ORM persistence for the employee directory.  Only the fields
    the approval core needs are kept: names for messages, the portal role,
    and the manager reference that drives approval routing.
Architecture position: Kernel > Models.  May import from db/base.py only.
    MUST NOT import from services/, selectors/, or outer layers.

Invariants enforced:
    - employee_number is unique (uq_employee_number).
    - role is one of employee | manager | admin (ck_employees_valid_role).
    - manager_id is a self-reference; an employee is never their own manager
      (ck_employees_not_own_manager).

Failure modes:
    - IntegrityError on duplicate employee_number.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from workforce_kernel.db.base import TrackedBase, UUIDString

if TYPE_CHECKING:
    from workforce_kernel.domain.values import DirectoryEntry


class EmployeeModel(TrackedBase):
    """
    A person who logs time and requests leave.

    Contract:
        ``manager_id`` names the direct manager, the only non-admin reviewer
        for this employee's time entries and leave requests.
    """

    __tablename__ = "employees"

    __table_args__ = (
        UniqueConstraint("employee_number", name="uq_employee_number"),
        CheckConstraint(
            "role IN ('employee', 'manager', 'admin')",
            name="ck_employees_valid_role",
        ),
        CheckConstraint(
            "manager_id IS NULL OR manager_id <> id",
            name="ck_employees_not_own_manager",
        ),
        Index("idx_employees_manager", "manager_id"),
    )

    employee_number: Mapped[str] = mapped_column(String(50), nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="employee")
    manager_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("employees.id"),
        nullable=True,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self) -> str:
        return f"<Employee {self.employee_number}: {self.display_name} ({self.role})>"

    def to_directory_entry(self) -> DirectoryEntry:
        """Convert to the frozen directory view used for routing."""
        from workforce_kernel.domain.values import DirectoryEntry, Role

        return DirectoryEntry(
            employee_id=self.id,
            first_name=self.first_name,
            last_name=self.last_name,
            role=Role(self.role),
            manager_id=self.manager_id,
        )
