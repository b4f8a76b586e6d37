"""
workforce_services.approval_engine -- wiring and public operations.

Responsibility:
    Creates every kernel service exactly once for a session and exposes the
    portal-facing operations (create/edit/submit/decide time entries, bulk
    decide, create/decide leave requests) as methods.  No kernel service
    constructs another one; this class is the single point of dependency
    injection.

Architecture position:
    Services -- sits above ``workforce_kernel`` and ``workforce_config``.
    The kernel never imports this package.

Invariants enforced:
    - Single-instance lifecycle: one BalanceLedger, one NotificationHook,
      one ApprovalRouter and one Clock shared by both lifecycles.
    - The ledger the leave lifecycle deducts from is the same instance the
      directory provisions through.

Failure modes:
    - Every operation raises the kernel's typed exceptions unchanged.

Usage:
    from workforce_services.approval_engine import ApprovalEngine

    with session_scope() as session:
        engine = ApprovalEngine(session)
        engine.seed_configuration()
        entry = engine.create_time_entry(actor, work_date, project_id, ...)
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy.orm import Session

from workforce_config import WorkforceConfigurationSet, get_active_config
from workforce_config.bridges import seed_leave_categories
from workforce_kernel.domain.clock import Clock, SystemClock
from workforce_kernel.domain.leave import HalfDayPeriod, LeaveCategory, LeaveRequest
from workforce_kernel.domain.notifications import NotificationDispatcher
from workforce_kernel.domain.routing import ApprovalRouter
from workforce_kernel.domain.time_entry import BulkDecisionResult, TimeEntry
from workforce_kernel.domain.values import Actor, DecisionOutcome
from workforce_kernel.logging_config import LogContext, get_logger
from workforce_kernel.selectors.approval_queue_selector import ApprovalQueueSelector
from workforce_kernel.selectors.ledger_selector import LedgerSelector
from workforce_kernel.selectors.notification_selector import NotificationSelector
from workforce_kernel.services.balance_ledger import BalanceLedger
from workforce_kernel.services.directory_service import DirectoryService
from workforce_kernel.services.leave_request_service import LeaveRequestService
from workforce_kernel.services.notification_service import (
    NotificationHook,
    NotificationService,
)
from workforce_kernel.services.time_entry_service import TimeEntryService

logger = get_logger("services.approval_engine")


class ApprovalEngine:
    """Central factory and facade for the approval core.

    Contract:
        Receives a SQLAlchemy Session and optionally a dispatcher, router
        and clock.  Without a dispatcher, notifications are persisted
        through ``NotificationService`` in the same session.

    Non-goals:
        - Does NOT manage transaction boundaries (caller's responsibility).
        - Does NOT authenticate; callers pass an already-resolved Actor.
    """

    def __init__(
        self,
        session: Session,
        dispatcher: NotificationDispatcher | None = None,
        router: ApprovalRouter | None = None,
        clock: Clock | None = None,
    ):
        self.session = session
        self.clock = clock or SystemClock()
        self.router = router or ApprovalRouter()

        self.notification_service = NotificationService(session, self.clock)
        self.hook = NotificationHook(dispatcher or self.notification_service)

        self.ledger = BalanceLedger(session, self.clock)
        self.directory = DirectoryService(session, self.ledger, self.clock)
        self.time_entries = TimeEntryService(session, self.hook, self.router, self.clock)
        self.leave_requests = LeaveRequestService(
            session, self.ledger, self.hook, self.router, self.clock,
        )

        self.approval_queue = ApprovalQueueSelector(session, self.router)
        self.ledger_view = LedgerSelector(session)
        self.inbox = NotificationSelector(session)

    def seed_configuration(
        self, config: WorkforceConfigurationSet | None = None,
    ) -> list[LeaveCategory]:
        """Upsert leave categories from a configuration set (default set if omitted)."""
        config = config or get_active_config()
        categories = seed_leave_categories(self.session, config)
        logger.info(
            "engine_configuration_seeded",
            extra={"config_set_id": config.config_id, "checksum": config.checksum},
        )
        return categories

    # ------------------------------------------------------------------
    # Time entries
    # ------------------------------------------------------------------

    def create_time_entry(
        self,
        actor: Actor,
        work_date: date,
        project_id: UUID,
        task: str,
        hours: Decimal | int | float | str,
        billable: bool,
        description: str | None = None,
    ) -> TimeEntry:
        with LogContext.bind(actor_id=str(actor.user_id), operation="create_time_entry"):
            return self.time_entries.create(
                actor, work_date, project_id, task, hours, billable, description,
            )

    def edit_time_entry(self, actor: Actor, entry_id: UUID, **fields: Any) -> TimeEntry:
        with LogContext.bind(actor_id=str(actor.user_id), operation="edit_time_entry"):
            return self.time_entries.edit(actor, entry_id, **fields)

    def submit_time_entry(self, actor: Actor, entry_id: UUID) -> TimeEntry:
        with LogContext.bind(actor_id=str(actor.user_id), operation="submit_time_entry"):
            return self.time_entries.submit(actor, entry_id)

    def decide_time_entry(
        self,
        actor: Actor,
        entry_id: UUID,
        outcome: DecisionOutcome,
        comment: str | None = None,
    ) -> TimeEntry:
        return self.time_entries.decide(actor, entry_id, outcome, comment)

    def bulk_decide_time_entries(
        self,
        actor: Actor,
        entry_ids: Sequence[UUID],
        outcome: DecisionOutcome,
        comment: str | None = None,
    ) -> BulkDecisionResult:
        with LogContext.bind(actor_id=str(actor.user_id), operation="bulk_decide"):
            return self.time_entries.bulk_decide(actor, entry_ids, outcome, comment)

    # ------------------------------------------------------------------
    # Leave requests
    # ------------------------------------------------------------------

    def create_leave_request(
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
        with LogContext.bind(actor_id=str(actor.user_id), operation="create_leave_request"):
            return self.leave_requests.create(
                actor,
                category_id,
                start_date,
                end_date,
                half_day=half_day,
                half_day_period=half_day_period,
                reason=reason,
                backup_employee_id=backup_employee_id,
                attachment_ref=attachment_ref,
            )

    def decide_leave_request(
        self,
        actor: Actor,
        request_id: UUID,
        outcome: DecisionOutcome,
        comment: str | None = None,
    ) -> LeaveRequest:
        return self.leave_requests.decide(actor, request_id, outcome, comment)

    def cancel_leave_request(self, actor: Actor, request_id: UUID) -> LeaveRequest:
        with LogContext.bind(actor_id=str(actor.user_id), operation="cancel_leave_request"):
            return self.leave_requests.cancel(actor, request_id)
