from __future__ import annotations

from datetime import datetime

from pydantic import EmailStr, Field, computed_field

from ticketmarket.api.schemas.common import SchemaBase
from ticketmarket.core.config import settings
from ticketmarket.models.purchase import PurchaseStatus


class PurchaseCreate(SchemaBase):
    event_id: int
    quantity: int = Field(ge=1, le=100)
    customer_name: str = Field(min_length=1, max_length=200)
    customer_email: EmailStr
    promocode: str | None = Field(default=None, max_length=64)
    payment_intent_id: str | None = Field(default=None, max_length=200)


class PurchaseOut(SchemaBase):
    id: int
    event_id: int
    user_id: int
    quantity: int
    unit_price: float
    subtotal_amount: float
    discount_amount: float
    total_amount: float
    status: PurchaseStatus
    customer_name: str
    customer_email: str
    payment_intent_id: str | None = None
    ticket_code: str
    promocode_id: int | None = None
    is_checked_in: bool
    check_in_date: datetime | None = None
    purchase_date: datetime

    @computed_field
    @property
    def qr_code_url(self) -> str:
        return f"{settings.qr_code_base_url}{self.ticket_code}"


class PurchaseCreatedOut(SchemaBase):
    message: str
    purchase: PurchaseOut


class PurchaseStatusUpdate(SchemaBase):
    status: PurchaseStatus


class CheckInIn(SchemaBase):
    ticket_code: str = Field(min_length=1, max_length=64)
