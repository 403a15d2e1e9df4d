from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum

import sqlalchemy as sa
from sqlalchemy import Boolean, DateTime, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from ticketmarket.models.base import Base, IntPrimaryKeyMixin


class PurchaseStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELED = "canceled"
    REFUNDED = "refunded"


# Statuses that hold seats against event capacity
ACTIVE_PURCHASE_STATUSES = (PurchaseStatus.PENDING, PurchaseStatus.COMPLETED)


class Purchase(Base, IntPrimaryKeyMixin):
    __tablename__ = "purchases"
    __table_args__ = (
        sa.Index("ix_purchases_event_id", "event_id"),
        sa.Index("ix_purchases_user_id", "user_id"),
        sa.Index("ix_purchases_ticket_code", "ticket_code", unique=True),
        sa.CheckConstraint("quantity > 0", name="ck_purchases_quantity_positive"),
    )

    event_id: Mapped[int] = mapped_column(sa.ForeignKey("events.id"), nullable=False)
    user_id: Mapped[int] = mapped_column(sa.ForeignKey("users.id"), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    unit_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    subtotal_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    discount_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0.00")
    )
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    status: Mapped[PurchaseStatus] = mapped_column(
        sa.Enum(
            PurchaseStatus,
            name="purchase_status",
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=PurchaseStatus.COMPLETED,
    )

    customer_name: Mapped[str] = mapped_column(String(200), nullable=False)
    customer_email: Mapped[str] = mapped_column(String(320), nullable=False)
    payment_intent_id: Mapped[str | None] = mapped_column(String(200), nullable=True)
    ticket_code: Mapped[str] = mapped_column(String(64), nullable=False)
    promocode_id: Mapped[int | None] = mapped_column(
        sa.ForeignKey("promocodes.id", ondelete="SET NULL"),
        nullable=True,
    )

    is_checked_in: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    check_in_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    purchase_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
