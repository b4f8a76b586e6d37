"""
Module: workforce_kernel.models.notification
Responsibility: ORM persistence for in-app notifications, the default sink
    behind NotificationDispatcher.
Architecture position: Kernel > Models.  May import from db/base.py only.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from workforce_kernel.db.base import Base, UTCDateTime, UUIDString

if TYPE_CHECKING:
    from workforce_kernel.domain.notifications import Notification


class NotificationModel(Base):
    """A message for one recipient.  Only ``is_read`` ever changes."""

    __tablename__ = "notifications"

    __table_args__ = (
        Index("idx_notifications_recipient_read", "recipient_id", "is_read"),
    )

    recipient_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("employees.id"), nullable=False,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Notification {self.recipient_id} {self.title!r} read={self.is_read}>"

    def to_dto(self) -> Notification:
        from workforce_kernel.domain.notifications import (
            Notification as NotificationDTO,
        )

        return NotificationDTO(
            notification_id=self.id,
            recipient_id=self.recipient_id,
            title=self.title,
            message=self.message,
            is_read=self.is_read,
            created_at=self.created_at,
        )
