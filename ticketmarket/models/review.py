from __future__ import annotations

import sqlalchemy as sa
from sqlalchemy import Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from ticketmarket.models.base import Base, IntPrimaryKeyMixin, TimestampMixin


class Review(Base, IntPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "reviews"
    __table_args__ = (
        sa.Index("ix_reviews_event_id", "event_id"),
        sa.Index("ix_reviews_user_id", "user_id"),
        sa.CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating_range"),
    )

    event_id: Mapped[int] = mapped_column(sa.ForeignKey("events.id"), nullable=False)
    user_id: Mapped[int] = mapped_column(sa.ForeignKey("users.id"), nullable=False)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
