"""
LeaveRequestService -- leave request lifecycle.

Responsibility:
    Create leave requests with an advisory balance check, decide them with
    an authoritative ledger deduction, and let the owner cancel a request
    that is still pending.

Architecture position:
    Kernel > Services.  The only writer of ``leave_requests``.  Talks to the
    ledger exclusively through ``BalanceLedger``.

Invariants enforced:
    - A request leaves ``pending`` exactly once (compare-and-set UPDATE
      ``WHERE status = 'pending'``).
    - Approval is atomic: the status write and the ledger deduction run in
      one SAVEPOINT.  If the deduction fails the request stays ``pending``
      and the ledger row is unchanged.
    - The creation-time balance check is advisory.  Two pending requests
      may both pass it; the decision-time re-check under the row lock
      decides which one is actually funded.
    - Rejection and cancellation never touch the ledger.

Failure modes:
    - LeaveCategoryNotFoundError, LeaveRequestNotFoundError,
      EmployeeNotFoundError.
    - InvalidLeaveRequestError, AttachmentRequiredError.
    - InsufficientBalanceError at creation (advisory) or approval
      (authoritative).
    - LedgerRowMissingError at approval if onboarding never provisioned
      the row.
    - UnauthorizedError, InvalidStateError.
"""

from __future__ import annotations

from datetime import date
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.orm import Session

from workforce_kernel.domain import notifications as messages
from workforce_kernel.domain.clock import Clock
from workforce_kernel.domain.leave import (
    HalfDayPeriod,
    LeaveRequest,
    LeaveRequestStatus,
    compute_day_count,
    validate_leave_window,
)
from workforce_kernel.domain.routing import ApprovalRouter
from workforce_kernel.domain.values import Actor, DecisionOutcome
from workforce_kernel.exceptions import (
    AttachmentRequiredError,
    EmployeeNotFoundError,
    InsufficientBalanceError,
    InvalidLeaveRequestError,
    InvalidStateError,
    LeaveCategoryNotFoundError,
    LeaveRequestNotFoundError,
    UnauthorizedError,
)
from workforce_kernel.logging_config import LogContext, get_logger
from workforce_kernel.models.employee import EmployeeModel
from workforce_kernel.models.leave import LeaveCategoryModel, LeaveRequestModel
from workforce_kernel.services.balance_ledger import BalanceLedger
from workforce_kernel.services.base import BaseService
from workforce_kernel.services.notification_service import NotificationHook

logger = get_logger("services.leave_request")

ENTITY_TYPE = "leave_request"


class LeaveRequestService(BaseService[LeaveRequestModel]):
    """Manages the leave request lifecycle."""

    def __init__(
        self,
        session: Session,
        ledger: BalanceLedger,
        notifications: NotificationHook,
        router: ApprovalRouter | None = None,
        clock: Clock | None = None,
    ):
        super().__init__(session, clock)
        self._ledger = ledger
        self._notifications = notifications
        self._router = router or ApprovalRouter()

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def _get_request(self, request_id: UUID) -> LeaveRequestModel:
        return self._get_or_raise(LeaveRequestModel, request_id, LeaveRequestNotFoundError)

    def _get_employee(self, employee_id: UUID) -> EmployeeModel:
        return self._get_or_raise(EmployeeModel, employee_id, EmployeeNotFoundError)

    def _get_category(self, category_id: UUID) -> LeaveCategoryModel:
        return self._get_or_raise(LeaveCategoryModel, category_id, LeaveCategoryNotFoundError)

    @staticmethod
    def _coerce_period(value: HalfDayPeriod | str | None) -> HalfDayPeriod | None:
        if value is None or isinstance(value, HalfDayPeriod):
            return value
        try:
            return HalfDayPeriod(value)
        except ValueError:
            raise InvalidLeaveRequestError(
                f"half-day period must be AM or PM, got {value!r}"
            ) from None

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(
        self,
        actor: Actor,
        category_id: UUID,
        start_date: date,
        end_date: date,
        half_day: bool = False,
        half_day_period: HalfDayPeriod | str | None = None,
        reason: str = "",
        backup_employee_id: UUID | None = None,
        attachment_ref: str | None = None,
    ) -> LeaveRequest:
        """
        File a leave request in ``pending``.

        Nothing is reserved on the ledger.  The balance check here only
        gives early feedback.

        Raises:
            LeaveCategoryNotFoundError: unknown category.
            InvalidLeaveRequestError: bad date range, half-day fields or
                backup employee.
            AttachmentRequiredError: category needs an attachment.
            EmployeeNotFoundError: requester or backup not in the directory.
            InsufficientBalanceError: current-year balance cannot cover it.
        """
        category = self._get_category(category_id)
        period = self._coerce_period(half_day_period)
        validate_leave_window(start_date, end_date, half_day, period)

        if category.requires_attachment and not attachment_ref:
            raise AttachmentRequiredError(category.name)

        requester = self._get_employee(actor.user_id)

        backup: EmployeeModel | None = None
        if backup_employee_id is not None:
            if backup_employee_id == actor.user_id:
                raise InvalidLeaveRequestError(
                    "backup employee cannot be the requester"
                )
            backup = self._get_employee(backup_employee_id)

        day_count = compute_day_count(start_date, end_date, half_day)
        year = self.clock.current_year()
        if not self._ledger.check_sufficient(actor.user_id, year, category_id, day_count):
            available = self._ledger.available(actor.user_id, year, category_id)
            logger.info(
                "leave_request_insufficient_balance",
                extra={
                    "employee_id": str(actor.user_id),
                    "category_id": str(category_id),
                    "requested": str(day_count),
                    "available": str(available),
                },
            )
            raise InsufficientBalanceError(
                str(actor.user_id), year, str(category_id), day_count, available,
            )

        request = LeaveRequestModel(
            employee_id=actor.user_id,
            category_id=category_id,
            start_date=start_date,
            end_date=end_date,
            half_day=half_day,
            half_day_period=period.value if period else None,
            day_count=day_count,
            reason=reason,
            backup_employee_id=backup_employee_id,
            attachment_ref=attachment_ref,
            status=LeaveRequestStatus.PENDING.value,
            created_at=self.clock.now(),
            created_by_id=actor.user_id,
        )
        self.session.add(request)
        self.session.flush()

        logger.info(
            "leave_request_created",
            extra={
                "request_id": str(request.id),
                "employee_id": str(actor.user_id),
                "category": category.name,
                "day_count": str(day_count),
            },
        )

        backup_name = backup.display_name if backup is not None else None
        if requester.manager_id is not None:
            title, message = messages.leave_requested(
                requester.display_name, category.name, start_date, end_date, backup_name,
            )
            self._notifications.notify(requester.manager_id, title, message)
        if backup is not None:
            title, message = messages.backup_assigned(
                requester.display_name, category.name, start_date, end_date,
            )
            self._notifications.notify(backup.id, title, message)

        return request.to_dto()

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _compare_and_set(
        self,
        request: LeaveRequestModel,
        actor: Actor,
        target: LeaveRequestStatus,
        comment: str | None = None,
    ) -> None:
        """Move ``request`` out of pending iff it is still pending in the DB."""
        values: dict = {"status": target.value, "updated_by_id": actor.user_id}
        if target != LeaveRequestStatus.CANCELLED:
            values.update(
                reviewer_id=actor.user_id,
                review_comment=comment,
                reviewed_at=self.clock.now(),
            )

        result = self.session.execute(
            update(LeaveRequestModel)
            .where(
                LeaveRequestModel.id == request.id,
                LeaveRequestModel.status == LeaveRequestStatus.PENDING.value,
            )
            .values(**values)
            .execution_options(synchronize_session="evaluate")
        )
        if result.rowcount != 1:
            self.session.refresh(request)
            logger.info(
                "leave_request_transition_lost_race",
                extra={"request_id": str(request.id), "current_status": request.status},
            )
            raise InvalidStateError(
                ENTITY_TYPE, str(request.id), request.status, target.value,
            )

    def decide(
        self,
        actor: Actor,
        request_id: UUID,
        outcome: DecisionOutcome,
        comment: str | None = None,
    ) -> LeaveRequest:
        """
        Approve or reject a pending request.

        Preconditions:
            - The actor is an admin or the owner's direct manager.

        Postconditions (approval):
            - status is ``approved`` and the current-year ledger row for the
              request's category has ``day_count`` more used days.
            - ``ledger_year`` records that year.

        Postconditions (any failure inside the unit):
            - status is still ``pending`` and the ledger row is unchanged.

        Raises:
            LeaveRequestNotFoundError, UnauthorizedError, InvalidStateError,
            InsufficientBalanceError, LedgerRowMissingError.
        """
        outcome = DecisionOutcome(outcome)
        request = self._get_request(request_id)
        owner = self._get_employee(request.employee_id)

        with LogContext.bind(
            actor_id=str(actor.user_id),
            entity_type=ENTITY_TYPE,
            entity_id=str(request_id),
            operation="decide",
        ):
            self._router.authorize_decision(
                actor, owner.to_directory_entry(), "decide leave request",
            )

            status = LeaveRequestStatus(request.status)
            if status != LeaveRequestStatus.PENDING:
                raise InvalidStateError(
                    ENTITY_TYPE, str(request_id), status.value, outcome.value,
                )

            target = (
                LeaveRequestStatus.APPROVED
                if outcome == DecisionOutcome.APPROVED
                else LeaveRequestStatus.REJECTED
            )
            year = self.clock.current_year()
            try:
                with self.session.begin_nested():
                    self._compare_and_set(request, actor, target, comment)
                    if target == LeaveRequestStatus.APPROVED:
                        self._ledger.post_deduction(
                            owner.id, year, request.category_id, request.day_count,
                        )
                        request.ledger_year = year
                        self.session.flush()
            except Exception as exc:
                self.session.refresh(request)
                logger.info(
                    "leave_decision_rolled_back",
                    extra={
                        "outcome": outcome.value,
                        "error_code": getattr(exc, "code", type(exc).__name__),
                        "status": request.status,
                    },
                )
                raise

            logger.info(
                "leave_request_decided",
                extra={
                    "outcome": outcome.value,
                    "reviewer_id": str(actor.user_id),
                    "day_count": str(request.day_count),
                    "ledger_year": request.ledger_year,
                },
            )

            title, message = messages.leave_decided(
                request.category.name,
                request.start_date,
                request.end_date,
                outcome,
                comment,
            )
            self._notifications.notify(request.employee_id, title, message)

        return request.to_dto()

    def cancel(self, actor: Actor, request_id: UUID) -> LeaveRequest:
        """
        Withdraw a pending request.  No ledger effect.

        Raises:
            LeaveRequestNotFoundError, UnauthorizedError, InvalidStateError.
        """
        request = self._get_request(request_id)
        if request.employee_id != actor.user_id:
            raise UnauthorizedError(
                str(actor.user_id), "cancel leave request", "only the owner may do this",
            )

        status = LeaveRequestStatus(request.status)
        if status != LeaveRequestStatus.PENDING:
            raise InvalidStateError(ENTITY_TYPE, str(request_id), status.value, "cancel")

        self._compare_and_set(request, actor, LeaveRequestStatus.CANCELLED)
        logger.info("leave_request_cancelled", extra={"request_id": str(request_id)})

        owner = self._get_employee(request.employee_id)
        if owner.manager_id is not None:
            title, message = messages.leave_cancelled(
                owner.display_name,
                request.category.name,
                request.start_date,
                request.end_date,
            )
            self._notifications.notify(owner.manager_id, title, message)

        return request.to_dto()
