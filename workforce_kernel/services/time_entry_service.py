"""
TimeEntryService -- time entry lifecycle.

Responsibility:
    Create, edit, submit, decide (single and bulk) and delete time entries.
    Authorization for decisions is delegated to ``ApprovalRouter``; message
    wording to ``domain.notifications``; delivery to ``NotificationHook``.

Architecture position:
    Kernel > Services.  May import from domain/, models/, db/.

Invariants enforced:
    - State machine: draft -> submitted -> approved | rejected, and
      rejected -> submitted.  Approved is terminal.
    - Only the owner edits, submits or deletes; only in the states that
      permit it.
    - At most one decision succeeds from ``submitted``: the decision is a
      compare-and-set UPDATE ``WHERE status = 'submitted'``.
    - Bulk decisions are admin-only and have no cross-entry atomicity.
      Each entry runs in its own SAVEPOINT.

Failure modes:
    - TimeEntryNotFoundError, ProjectNotFoundError, EmployeeNotFoundError.
    - UnauthorizedError / ProjectNotAssignedError.
    - InvalidStateError when the stored state does not permit the action,
      including a decision that lost the compare-and-set race.
    - InvalidHoursError for hours outside [0, 24].
    - EmptyBatchError for a bulk decision over no entries.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from workforce_kernel.domain import notifications as messages
from workforce_kernel.domain.clock import Clock
from workforce_kernel.domain.routing import ApprovalRouter
from workforce_kernel.domain.time_entry import (
    DELETABLE_STATUSES,
    EDITABLE_FIELDS,
    EDITABLE_STATUSES,
    BulkDecisionResult,
    BulkItemResult,
    TimeEntry,
    TimeEntryStatus,
    can_transition,
    normalize_hours,
)
from workforce_kernel.domain.values import Actor, DecisionOutcome
from workforce_kernel.exceptions import (
    EmployeeNotFoundError,
    EmptyBatchError,
    InvalidStateError,
    ProjectNotAssignedError,
    ProjectNotFoundError,
    TimeEntryNotFoundError,
    UnauthorizedError,
    WorkforceKernelError,
)
from workforce_kernel.logging_config import LogContext, get_logger
from workforce_kernel.models.employee import EmployeeModel
from workforce_kernel.models.project import ProjectAssignmentModel, ProjectModel
from workforce_kernel.models.time_entry import TimeEntryModel
from workforce_kernel.services.base import BaseService
from workforce_kernel.services.notification_service import NotificationHook

logger = get_logger("services.time_entry")

ENTITY_TYPE = "time_entry"


class TimeEntryService(BaseService[TimeEntryModel]):
    """Manages the time entry lifecycle."""

    def __init__(
        self,
        session: Session,
        notifications: NotificationHook,
        router: ApprovalRouter | None = None,
        clock: Clock | None = None,
    ):
        super().__init__(session, clock)
        self._notifications = notifications
        self._router = router or ApprovalRouter()

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def _get_entry(self, entry_id: UUID) -> TimeEntryModel:
        return self._get_or_raise(TimeEntryModel, entry_id, TimeEntryNotFoundError)

    def _get_employee(self, employee_id: UUID) -> EmployeeModel:
        return self._get_or_raise(EmployeeModel, employee_id, EmployeeNotFoundError)

    def _get_assigned_project(self, employee_id: UUID, project_id: UUID) -> ProjectModel:
        project = self._get_or_raise(ProjectModel, project_id, ProjectNotFoundError)

        assignment = self.session.execute(
            select(ProjectAssignmentModel.id).where(
                ProjectAssignmentModel.employee_id == employee_id,
                ProjectAssignmentModel.project_id == project_id,
            )
        ).scalar_one_or_none()
        if assignment is None:
            raise ProjectNotAssignedError(str(employee_id), str(project_id))
        return project

    def _require_owner(self, actor: Actor, entry: TimeEntryModel, action: str) -> None:
        if entry.employee_id != actor.user_id:
            raise UnauthorizedError(
                str(actor.user_id), action, "only the owner may do this",
            )

    # ------------------------------------------------------------------
    # Owner operations
    # ------------------------------------------------------------------

    def create(
        self,
        actor: Actor,
        work_date: date,
        project_id: UUID,
        task: str,
        hours: Decimal | int | float | str,
        billable: bool,
        description: str | None = None,
    ) -> TimeEntry:
        """
        Log a new entry in ``draft`` for the actor.

        Raises:
            InvalidHoursError: hours outside [0, 24].
            EmployeeNotFoundError: actor is not in the directory.
            ProjectNotFoundError: unknown project.
            ProjectNotAssignedError: actor is not on the project.
        """
        normalized = normalize_hours(hours)
        self._get_employee(actor.user_id)
        self._get_assigned_project(actor.user_id, project_id)

        entry = TimeEntryModel(
            employee_id=actor.user_id,
            work_date=work_date,
            project_id=project_id,
            task=task,
            hours=normalized,
            billable=billable,
            description=description,
            status=TimeEntryStatus.DRAFT.value,
            created_at=self.clock.now(),
            created_by_id=actor.user_id,
        )
        self.session.add(entry)
        self.session.flush()

        logger.info(
            "time_entry_created",
            extra={
                "entry_id": str(entry.id),
                "employee_id": str(actor.user_id),
                "project_id": str(project_id),
                "hours": str(normalized),
            },
        )
        return entry.to_dto()

    def edit(self, actor: Actor, entry_id: UUID, **fields: Any) -> TimeEntry:
        """
        Change fields of a ``draft`` or ``rejected`` entry.

        Editing does not touch status, reviewer or review comment.

        Raises:
            TypeError: a field outside the editable set.
            TimeEntryNotFoundError, UnauthorizedError, InvalidStateError.
        """
        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise TypeError(f"Cannot edit time entry field(s): {sorted(unknown)}")

        entry = self._get_entry(entry_id)
        self._require_owner(actor, entry, "edit time entry")

        status = TimeEntryStatus(entry.status)
        if status not in EDITABLE_STATUSES:
            raise InvalidStateError(ENTITY_TYPE, str(entry_id), status.value, "edit")

        if "hours" in fields:
            fields["hours"] = normalize_hours(fields["hours"])
        if "project_id" in fields and fields["project_id"] != entry.project_id:
            self._get_assigned_project(actor.user_id, fields["project_id"])

        for name, value in fields.items():
            setattr(entry, name, value)
        entry.updated_by_id = actor.user_id
        self.session.flush()
        if "project_id" in fields:
            self.session.expire(entry, ["project"])

        logger.info(
            "time_entry_edited",
            extra={"entry_id": str(entry_id), "fields": sorted(fields)},
        )
        return entry.to_dto()

    def submit(self, actor: Actor, entry_id: UUID) -> TimeEntry:
        """
        Send a ``draft`` or ``rejected`` entry for review.

        Stamps ``submitted_at`` with the current time (also on resubmission)
        and notifies the owner's manager, if any.  A resubmission drops the
        previous reviewer and ``reviewed_at``; ``review_comment`` stays.
        """
        entry = self._get_entry(entry_id)
        self._require_owner(actor, entry, "submit time entry")

        status = TimeEntryStatus(entry.status)
        if not can_transition(status, TimeEntryStatus.SUBMITTED):
            raise InvalidStateError(ENTITY_TYPE, str(entry_id), status.value, "submit")

        entry.status = TimeEntryStatus.SUBMITTED.value
        entry.submitted_at = self.clock.now()
        entry.reviewer_id = None
        entry.reviewed_at = None
        entry.updated_by_id = actor.user_id
        self.session.flush()

        logger.info(
            "time_entry_submitted",
            extra={
                "entry_id": str(entry_id),
                "from_status": status.value,
            },
        )

        owner = self._get_employee(entry.employee_id)
        if owner.manager_id is not None:
            title, message = messages.timesheet_submitted(
                owner.display_name, entry.project.name, entry.hours, entry.work_date,
            )
            self._notifications.notify(owner.manager_id, title, message)

        return entry.to_dto()

    def delete(self, actor: Actor, entry_id: UUID) -> None:
        """Remove a ``draft`` entry."""
        entry = self._get_entry(entry_id)
        self._require_owner(actor, entry, "delete time entry")

        status = TimeEntryStatus(entry.status)
        if status not in DELETABLE_STATUSES:
            raise InvalidStateError(ENTITY_TYPE, str(entry_id), status.value, "delete")

        self.session.delete(entry)
        self.session.flush()
        logger.info("time_entry_deleted", extra={"entry_id": str(entry_id)})

    # ------------------------------------------------------------------
    # Reviewer operations
    # ------------------------------------------------------------------

    def _compare_and_set_decision(
        self,
        entry: TimeEntryModel,
        actor: Actor,
        outcome: DecisionOutcome,
        comment: str | None,
    ) -> None:
        """
        Move ``entry`` from submitted to ``outcome`` iff it is still submitted
        in the database.

        Raises:
            InvalidStateError: another decision got there first.
        """
        result = self.session.execute(
            update(TimeEntryModel)
            .where(
                TimeEntryModel.id == entry.id,
                TimeEntryModel.status == TimeEntryStatus.SUBMITTED.value,
            )
            .values(
                status=outcome.value,
                reviewer_id=actor.user_id,
                review_comment=comment,
                reviewed_at=self.clock.now(),
                updated_by_id=actor.user_id,
            )
            .execution_options(synchronize_session="evaluate")
        )
        if result.rowcount != 1:
            self.session.refresh(entry)
            logger.info(
                "time_entry_decision_lost_race",
                extra={"entry_id": str(entry.id), "current_status": entry.status},
            )
            raise InvalidStateError(
                ENTITY_TYPE, str(entry.id), entry.status, outcome.value,
            )

    def decide(
        self,
        actor: Actor,
        entry_id: UUID,
        outcome: DecisionOutcome,
        comment: str | None = None,
    ) -> TimeEntry:
        """
        Approve or reject a submitted entry.

        Preconditions:
            - The actor is an admin or the owner's direct manager.

        Postconditions:
            - status is ``outcome``; reviewer, comment and reviewed_at are set.
            - The owner has been notified (best-effort).

        Raises:
            TimeEntryNotFoundError, UnauthorizedError, InvalidStateError.
        """
        outcome = DecisionOutcome(outcome)
        entry = self._get_entry(entry_id)
        owner = self._get_employee(entry.employee_id)

        with LogContext.bind(
            actor_id=str(actor.user_id),
            entity_type=ENTITY_TYPE,
            entity_id=str(entry_id),
            operation="decide",
        ):
            self._router.authorize_decision(
                actor, owner.to_directory_entry(), "decide time entry",
            )

            status = TimeEntryStatus(entry.status)
            if status != TimeEntryStatus.SUBMITTED:
                raise InvalidStateError(
                    ENTITY_TYPE, str(entry_id), status.value, outcome.value,
                )

            self._compare_and_set_decision(entry, actor, outcome, comment)
            logger.info(
                "time_entry_decided",
                extra={"outcome": outcome.value, "reviewer_id": str(actor.user_id)},
            )

            title, message = messages.timesheet_decided(
                entry.project.name, entry.hours, entry.work_date, outcome, comment,
            )
            self._notifications.notify(entry.employee_id, title, message)

        return entry.to_dto()

    def bulk_decide(
        self,
        actor: Actor,
        entry_ids: Sequence[UUID],
        outcome: DecisionOutcome,
        comment: str | None = None,
    ) -> BulkDecisionResult:
        """
        Apply one decision to many entries, independently.

        Each entry is decided in its own SAVEPOINT; a failure is recorded
        against that entry and the loop continues.  Afterwards each distinct
        owner of a successfully decided entry gets one consolidated
        notification.

        Raises:
            UnauthorizedError: actor is not an admin.  Nothing is touched.
            EmptyBatchError: ``entry_ids`` is empty.
        """
        outcome = DecisionOutcome(outcome)
        self._router.authorize_bulk(actor, "bulk decide time entries")
        if not entry_ids:
            raise EmptyBatchError()

        items: list[BulkItemResult] = []
        seen: set[UUID] = set()
        for entry_id in entry_ids:
            if entry_id in seen:
                continue
            seen.add(entry_id)

            try:
                with self.session.begin_nested():
                    entry = self._get_entry(entry_id)
                    status = TimeEntryStatus(entry.status)
                    if status != TimeEntryStatus.SUBMITTED:
                        raise InvalidStateError(
                            ENTITY_TYPE, str(entry_id), status.value, outcome.value,
                        )
                    self._compare_and_set_decision(entry, actor, outcome, comment)
            except WorkforceKernelError as exc:
                logger.info(
                    "bulk_decision_item_failed",
                    extra={"entry_id": str(entry_id), "error_code": exc.code},
                )
                items.append(BulkItemResult(entry_id, False, error_code=exc.code))
                continue

            items.append(BulkItemResult(entry_id, True, entry=entry.to_dto()))

        result = BulkDecisionResult(tuple(items))
        logger.info(
            "time_entries_bulk_decided",
            extra={
                "actor_id": str(actor.user_id),
                "outcome": outcome.value,
                "requested": len(seen),
                "decided": result.decided_count,
            },
        )

        projects_by_owner: dict[UUID, list[str]] = defaultdict(list)
        for item in result.decided:
            entry = self._get_entry(item.entry_id)
            projects_by_owner[entry.employee_id].append(entry.project.name)

        for owner_id, project_names in projects_by_owner.items():
            title, message = messages.timesheets_bulk_decided(
                len(project_names), project_names, outcome, comment,
            )
            self._notifications.notify(owner_id, title, message)

        return result
