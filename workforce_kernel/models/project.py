"""
Module: workforce_kernel.models.project
Responsibility: ORM persistence for projects and employee-to-project
    assignments.  A time entry may only reference a project its owner is
    assigned to.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Project name is unique.
    - One assignment row per (employee, project).
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from workforce_kernel.db.base import TrackedBase, UUIDString


class ProjectModel(TrackedBase):
    """A billable or internal project time can be logged against."""

    __tablename__ = "projects"

    __table_args__ = (
        UniqueConstraint("name", name="uq_project_name"),
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<Project {self.name}>"


class ProjectAssignmentModel(TrackedBase):
    """Links an employee to a project they may log time against."""

    __tablename__ = "project_assignments"

    __table_args__ = (
        UniqueConstraint(
            "employee_id", "project_id", name="uq_project_assignment",
        ),
    )

    employee_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("employees.id"), nullable=False,
    )
    project_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("projects.id"), nullable=False,
    )

    def __repr__(self) -> str:
        return f"<ProjectAssignment {self.employee_id} -> {self.project_id}>"
