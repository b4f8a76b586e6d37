"""
DirectoryService -- onboarding and project assignment.

Responsibility:
    Adds employees to the directory and provisions their ledger rows for a
    year, creates projects, and records which employees may log time
    against which project.  This is the only place ledger rows come from
    in normal operation.

Architecture position:
    Kernel > Services.  Uses BalanceLedger for provisioning.

Failure modes:
    - EmployeeNotFoundError for an unknown manager or employee.
    - ProjectNotFoundError for an unknown project.
    - IntegrityError on a duplicate employee number or project name.
"""

from __future__ import annotations

from typing import Iterable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from workforce_kernel.domain.clock import Clock
from workforce_kernel.domain.leave import LeaveCategory
from workforce_kernel.domain.values import SYSTEM_ACTOR_ID, DirectoryEntry, Role
from workforce_kernel.exceptions import EmployeeNotFoundError, ProjectNotFoundError
from workforce_kernel.logging_config import get_logger
from workforce_kernel.models.employee import EmployeeModel
from workforce_kernel.models.leave import LeaveCategoryModel
from workforce_kernel.models.project import ProjectAssignmentModel, ProjectModel
from workforce_kernel.services.balance_ledger import BalanceLedger
from workforce_kernel.services.base import BaseService

logger = get_logger("services.directory")


class DirectoryService(BaseService[EmployeeModel]):
    """Employee directory writes needed by the approval core."""

    def __init__(
        self,
        session: Session,
        ledger: BalanceLedger | None = None,
        clock: Clock | None = None,
    ):
        super().__init__(session, clock)
        self._ledger = ledger or BalanceLedger(session, self.clock)

    def get_employee(self, employee_id: UUID) -> DirectoryEntry:
        return self._get_or_raise(EmployeeModel, employee_id, EmployeeNotFoundError).to_directory_entry()

    def onboard(
        self,
        employee_number: str,
        first_name: str,
        last_name: str,
        role: Role = Role.EMPLOYEE,
        manager_id: UUID | None = None,
        year: int | None = None,
        categories: Iterable[LeaveCategory] | None = None,
        actor_id: UUID = SYSTEM_ACTOR_ID,
    ) -> DirectoryEntry:
        """
        Add an employee and open one ledger row per leave category.

        Args:
            year: Ledger year to provision; defaults to the clock's year.
            categories: Categories to provision; defaults to every category
                on file.
        """
        if manager_id is not None:
            self._get_or_raise(EmployeeModel, manager_id, EmployeeNotFoundError)

        employee = EmployeeModel(
            employee_number=employee_number,
            first_name=first_name,
            last_name=last_name,
            role=Role(role).value,
            manager_id=manager_id,
            is_active=True,
            created_at=self.clock.now(),
            created_by_id=actor_id,
        )
        self.session.add(employee)
        self.session.flush()

        if categories is None:
            categories = [
                row.to_dto()
                for row in self.session.execute(
                    select(LeaveCategoryModel).order_by(LeaveCategoryModel.name)
                ).scalars()
            ]
        provision_year = year if year is not None else self.clock.current_year()
        balances = self._ledger.provision_year(
            employee.id, provision_year, categories, actor_id=actor_id,
        )

        logger.info(
            "employee_onboarded",
            extra={
                "employee_id": str(employee.id),
                "role": employee.role,
                "manager_id": str(manager_id) if manager_id else None,
                "year": provision_year,
                "balances_opened": len(balances),
            },
        )
        return employee.to_directory_entry()

    def create_project(
        self,
        name: str,
        description: str | None = None,
        actor_id: UUID = SYSTEM_ACTOR_ID,
    ) -> UUID:
        project = ProjectModel(
            name=name,
            description=description,
            is_active=True,
            created_at=self.clock.now(),
            created_by_id=actor_id,
        )
        self.session.add(project)
        self.session.flush()
        logger.info("project_created", extra={"project_id": str(project.id), "project_name": name})
        return project.id

    def assign_project(
        self,
        employee_id: UUID,
        project_id: UUID,
        actor_id: UUID = SYSTEM_ACTOR_ID,
    ) -> None:
        """Let an employee log time against a project.  Idempotent."""
        self._get_or_raise(EmployeeModel, employee_id, EmployeeNotFoundError)
        self._get_or_raise(ProjectModel, project_id, ProjectNotFoundError)

        existing = self.session.execute(
            select(ProjectAssignmentModel.id).where(
                ProjectAssignmentModel.employee_id == employee_id,
                ProjectAssignmentModel.project_id == project_id,
            )
        ).scalar_one_or_none()
        if existing is not None:
            return

        self.session.add(
            ProjectAssignmentModel(
                employee_id=employee_id,
                project_id=project_id,
                created_at=self.clock.now(),
                created_by_id=actor_id,
            )
        )
        self.session.flush()
        logger.info(
            "project_assigned",
            extra={"employee_id": str(employee_id), "project_id": str(project_id)},
        )
