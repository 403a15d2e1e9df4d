from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum

import sqlalchemy as sa
from sqlalchemy import Boolean, DateTime, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from ticketmarket.models.base import Base, CreatedAtMixin, IntPrimaryKeyMixin


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class Promocode(Base, IntPrimaryKeyMixin, CreatedAtMixin):
    __tablename__ = "promocodes"
    __table_args__ = (
        sa.Index("ix_promocodes_creator_id", "creator_id"),
        sa.Index("ix_promocodes_event_id", "event_id"),
        sa.CheckConstraint("discount_amount > 0", name="ck_promocodes_discount_positive"),
        sa.CheckConstraint("uses_count >= 0", name="ck_promocodes_uses_non_negative"),
    )

    code: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    discount_type: Mapped[DiscountType] = mapped_column(
        sa.Enum(
            DiscountType,
            name="discount_type",
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
    )
    discount_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    max_uses: Mapped[int | None] = mapped_column(Integer, nullable=True)
    uses_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Null means the code applies to any event
    event_id: Mapped[int | None] = mapped_column(
        sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=True
    )
    creator_id: Mapped[int] = mapped_column(sa.ForeignKey("users.id"), nullable=False)

    start_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
