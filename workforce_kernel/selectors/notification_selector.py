"""
Module: workforce_kernel.selectors.notification_selector
Responsibility: A recipient's notifications, newest first, and their unread
    count.
Architecture position: Kernel > Selectors.
"""

from uuid import UUID

from sqlalchemy import func, select

from workforce_kernel.domain.notifications import Notification
from workforce_kernel.models.notification import NotificationModel
from workforce_kernel.selectors.base import BaseSelector


class NotificationSelector(BaseSelector[NotificationModel]):
    """Read side of the notifications table."""

    def list_for(
        self,
        recipient_id: UUID,
        unread_only: bool = False,
        limit: int = 50,
    ) -> list[Notification]:
        stmt = select(NotificationModel).where(
            NotificationModel.recipient_id == recipient_id
        )
        if unread_only:
            stmt = stmt.where(NotificationModel.is_read.is_(False))
        stmt = stmt.order_by(
            NotificationModel.created_at.desc(), NotificationModel.id
        ).limit(limit)

        rows = self._fetch(stmt).scalars()
        return [row.to_dto() for row in rows]

    def unread_count(self, recipient_id: UUID) -> int:
        return self.session.execute(
            select(func.count(NotificationModel.id)).where(
                NotificationModel.recipient_id == recipient_id,
                NotificationModel.is_read.is_(False),
            )
        ).scalar_one()
