"""
Notification delivery -- the post-transition hook and its default sink.

Responsibility:
    ``NotificationHook`` is what the lifecycles call after a visible
    transition.  It forwards to a ``NotificationDispatcher`` and never lets
    a delivery failure reach the caller.  ``NotificationService`` is the
    persistent dispatcher: it writes ``notifications`` rows and lets a
    recipient mark them read.

Architecture position:
    Kernel > Services.  Lifecycles depend on the hook, never on the
    concrete dispatcher.

Invariants enforced:
    - At-most-once, non-transactional delivery: a failed dispatch is logged
      at WARNING and dropped.  It never rolls back the transition that
      triggered it.
    - NotificationService writes inside its own SAVEPOINT, so a failed
      insert leaves the caller's transaction usable.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import update
from sqlalchemy.orm import Session

from workforce_kernel.domain.clock import Clock
from workforce_kernel.domain.notifications import NotificationDispatcher
from workforce_kernel.domain.values import Actor
from workforce_kernel.logging_config import get_logger
from workforce_kernel.models.notification import NotificationModel
from workforce_kernel.services.base import BaseService

logger = get_logger("services.notifications")


class NotificationHook:
    """Calls the dispatcher synchronously and swallows its failures."""

    def __init__(self, dispatcher: NotificationDispatcher):
        self._dispatcher = dispatcher

    def notify(self, recipient_id: UUID, title: str, message: str) -> bool:
        """
        Deliver one message.

        Returns:
            True if the dispatcher returned normally, False if it raised.
        """
        try:
            self._dispatcher.dispatch(recipient_id, title, message)
        except Exception:
            logger.warning(
                "notification_dispatch_failed",
                extra={"recipient_id": str(recipient_id), "title": title},
                exc_info=True,
            )
            return False

        logger.debug(
            "notification_dispatched",
            extra={"recipient_id": str(recipient_id), "title": title},
        )
        return True


class NotificationService(BaseService[NotificationModel]):
    """Persistent ``NotificationDispatcher`` backed by the notifications table."""

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session, clock)

    def dispatch(self, recipient_id: UUID, title: str, message: str) -> None:
        with self.session.begin_nested():
            self.session.add(
                NotificationModel(
                    recipient_id=recipient_id,
                    title=title,
                    message=message,
                    is_read=False,
                    created_at=self.clock.now(),
                )
            )
            self.session.flush()

    def mark_as_read(self, actor: Actor, notification_id: UUID) -> bool:
        """
        Mark one of the actor's notifications read.

        Scoped to the actor: another recipient's notification is left alone
        and the call returns False, exactly as for an unknown id.
        """
        result = self.session.execute(
            update(NotificationModel)
            .where(
                NotificationModel.id == notification_id,
                NotificationModel.recipient_id == actor.user_id,
            )
            .values(is_read=True)
            .execution_options(synchronize_session="evaluate")
        )
        return result.rowcount == 1

    def mark_all_as_read(self, actor: Actor) -> int:
        """Mark every unread notification of the actor read; returns how many."""
        result = self.session.execute(
            update(NotificationModel)
            .where(
                NotificationModel.recipient_id == actor.user_id,
                NotificationModel.is_read.is_(False),
            )
            .values(is_read=True)
            .execution_options(synchronize_session="evaluate")
        )
        logger.info(
            "notifications_marked_read",
            extra={"recipient_id": str(actor.user_id), "count": result.rowcount},
        )
        return result.rowcount
