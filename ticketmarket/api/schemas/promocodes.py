from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import Field, field_validator, model_validator

from ticketmarket.api.schemas.common import SchemaBase, ensure_utc
from ticketmarket.models.promocode import DiscountType


class _WindowMixin(SchemaBase):
    @field_validator("start_date", "end_date", mode="after", check_fields=False)
    @classmethod
    def _validate_tzaware(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value)

    @model_validator(mode="after")
    def _validate_window(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        if (
            getattr(self, "discount_type", None) == DiscountType.PERCENTAGE
            and self.discount_amount is not None
            and self.discount_amount > 100
        ):
            raise ValueError("percentage discount cannot exceed 100")
        return self


class PromocodeCreate(_WindowMixin):
    code: str = Field(min_length=3, max_length=64, pattern=r"^[A-Za-z0-9_-]+$")
    discount_type: DiscountType
    discount_amount: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    max_uses: int | None = Field(default=None, ge=0)
    event_id: int | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    is_active: bool = True


class PromocodeUpdate(_WindowMixin):
    discount_amount: Decimal | None = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    max_uses: int | None = Field(default=None, ge=0)
    start_date: datetime | None = None
    end_date: datetime | None = None
    is_active: bool | None = None


class PromocodeOut(SchemaBase):
    id: int
    code: str
    discount_type: DiscountType
    discount_amount: float
    max_uses: int | None = None
    uses_count: int
    event_id: int | None = None
    creator_id: int
    start_date: datetime | None = None
    end_date: datetime | None = None
    is_active: bool
    created_at: datetime


class PromocodeValidationOut(SchemaBase):
    valid: bool
    promocode: PromocodeOut
    event_id: int | None = None
    unit_price: float | None = None
    unit_discount: float | None = None
