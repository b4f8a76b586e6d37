"""Onboarding, ledger provisioning and project assignment."""

from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import select

from tests.conftest import TEST_YEAR
from workforce_kernel.domain.values import Role
from workforce_kernel.exceptions import EmployeeNotFoundError, ProjectNotFoundError
from workforce_kernel.models.leave import LeaveBalanceModel
from workforce_kernel.models.project import ProjectAssignmentModel


class TestOnboard:
    def test_onboard_returns_directory_entry(self, directory):
        boss = directory.onboard("E-1", "Maya", "Manager", role=Role.MANAGER, year=TEST_YEAR, categories=[])
        report = directory.onboard(
            "E-2", "Alice", "Smith", manager_id=boss.employee_id, year=TEST_YEAR, categories=[],
        )

        assert report.manager_id == boss.employee_id
        assert report.role == Role.EMPLOYEE
        assert report.display_name == "Alice Smith"
        assert directory.get_employee(report.employee_id) == report

    def test_defaults_to_every_category_on_file(self, directory, ledger, annual_leave, sick_leave):
        employee = directory.onboard("E-3", "New", "Hire", year=TEST_YEAR)

        assert ledger.get_balance(employee.employee_id, TEST_YEAR, annual_leave.category_id).balance == Decimal("18")
        assert ledger.get_balance(employee.employee_id, TEST_YEAR, sick_leave.category_id).balance == Decimal("10")

    def test_year_defaults_to_clock(self, session, directory, annual_leave, deterministic_clock):
        employee = directory.onboard("E-4", "Clock", "Year")

        years = session.execute(
            select(LeaveBalanceModel.year).where(LeaveBalanceModel.employee_id == employee.employee_id)
        ).scalars().all()
        assert years == [deterministic_clock.current_year()]

    def test_unknown_manager(self, directory):
        with pytest.raises(EmployeeNotFoundError):
            directory.onboard("E-5", "Lost", "Report", manager_id=uuid4(), categories=[])

    def test_unknown_employee_lookup(self, directory):
        with pytest.raises(EmployeeNotFoundError):
            directory.get_employee(uuid4())


class TestProjects:
    def test_assign_is_idempotent(self, session, directory, create_employee):
        employee = create_employee("Ida")
        project_id = directory.create_project("Orion", description="Telescope firmware")

        directory.assign_project(employee.employee_id, project_id)
        directory.assign_project(employee.employee_id, project_id)

        rows = session.execute(
            select(ProjectAssignmentModel).where(ProjectAssignmentModel.employee_id == employee.employee_id)
        ).scalars().all()
        assert len(rows) == 1

    def test_assign_unknown_project(self, directory, create_employee):
        employee = create_employee("Ida")
        with pytest.raises(ProjectNotFoundError):
            directory.assign_project(employee.employee_id, uuid4())

    def test_assign_unknown_employee(self, directory):
        project_id = directory.create_project("Vega")
        with pytest.raises(EmployeeNotFoundError):
            directory.assign_project(uuid4(), project_id)

    def test_create_project_logged(self, directory, captured_logs):
        project_id = directory.create_project("Apollo")

        [record] = [r for r in captured_logs() if r["message"] == "project_created"]
        assert record["project_id"] == str(project_id)
        assert record["project_name"] == "Apollo"
