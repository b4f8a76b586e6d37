"""
Module: workforce_kernel.selectors.approval_queue_selector
Responsibility: The reviewer's inbox -- submitted time entries and pending
    leave requests the actor is allowed to decide.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - The queue mirrors ApprovalRouter: admins see every pending item,
      managers see their direct reports' items, everyone else is refused.
    - Oldest first: time entries by submitted_at, leave requests by
      created_at.
"""

from __future__ import annotations

from sqlalchemy import Select, select
from sqlalchemy.orm import Session

from workforce_kernel.domain.leave import LeaveRequest, LeaveRequestStatus
from workforce_kernel.domain.routing import ApprovalRouter
from workforce_kernel.domain.time_entry import TimeEntry, TimeEntryStatus
from workforce_kernel.domain.values import Actor
from workforce_kernel.models.employee import EmployeeModel
from workforce_kernel.models.leave import LeaveRequestModel
from workforce_kernel.models.time_entry import TimeEntryModel
from workforce_kernel.selectors.base import BaseSelector


class ApprovalQueueSelector(BaseSelector[TimeEntryModel]):
    """Pending work for a reviewer."""

    def __init__(self, session: Session, router: ApprovalRouter | None = None):
        super().__init__(session)
        self._router = router or ApprovalRouter()

    def _scope_to_reports(self, stmt: Select, owner_column, actor: Actor) -> Select:
        if actor.is_admin:
            return stmt
        return stmt.join(EmployeeModel, EmployeeModel.id == owner_column).where(
            EmployeeModel.manager_id == actor.user_id
        )

    def pending_time_entries(self, actor: Actor) -> list[TimeEntry]:
        """
        Submitted time entries the actor may decide, oldest submission first.

        Raises:
            UnauthorizedError: actor is neither a manager nor an admin.
        """
        self._router.authorize_queue(actor)
        stmt = select(TimeEntryModel).where(
            TimeEntryModel.status == TimeEntryStatus.SUBMITTED.value
        )
        stmt = self._scope_to_reports(stmt, TimeEntryModel.employee_id, actor)
        stmt = stmt.order_by(TimeEntryModel.submitted_at, TimeEntryModel.id)

        rows = self._fetch(stmt).scalars()
        return [row.to_dto() for row in rows]

    def pending_leave_requests(self, actor: Actor) -> list[LeaveRequest]:
        """
        Pending leave requests the actor may decide, oldest first.

        Raises:
            UnauthorizedError: actor is neither a manager nor an admin.
        """
        self._router.authorize_queue(actor)
        stmt = select(LeaveRequestModel).where(
            LeaveRequestModel.status == LeaveRequestStatus.PENDING.value
        )
        stmt = self._scope_to_reports(stmt, LeaveRequestModel.employee_id, actor)
        stmt = stmt.order_by(LeaveRequestModel.created_at, LeaveRequestModel.id)

        rows = self._fetch(stmt).unique().scalars()
        return [row.to_dto() for row in rows]
