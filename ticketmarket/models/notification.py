from __future__ import annotations

from enum import Enum

import sqlalchemy as sa
from sqlalchemy import Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ticketmarket.models.base import Base, CreatedAtMixin, IntPrimaryKeyMixin


class NotificationType(str, Enum):
    PURCHASE = "purchase"
    REVIEW = "review"
    FOLLOW = "follow"
    EVENT_UPDATE = "event_update"
    SYSTEM = "system"


class Notification(Base, IntPrimaryKeyMixin, CreatedAtMixin):
    __tablename__ = "notifications"
    __table_args__ = (sa.Index("ix_notifications_user_id_is_read", "user_id", "is_read"),)

    user_id: Mapped[int] = mapped_column(
        sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    # Purchase, review or follower user id depending on type
    related_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
