from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Query

from ticketmarket.api.schemas import (
    PromocodeCreate,
    PromocodeOut,
    PromocodeUpdate,
    PromocodeValidationOut,
)
from ticketmarket.auth.deps import CurrentUser, DBSession, OrganizerUser
from ticketmarket.services import events_service, promocodes_service
from ticketmarket.services.error_codes import ErrorCode
from ticketmarket.services.exceptions import NotFoundError

router = APIRouter(prefix="/promocodes", tags=["promocodes"])


@router.get("", response_model=list[PromocodeOut])
def list_promocodes(user: OrganizerUser, db: DBSession):
    return promocodes_service.list_promocodes(db, user)


@router.post("", response_model=PromocodeOut, status_code=201)
def create_promocode(payload: PromocodeCreate, user: OrganizerUser, db: DBSession):
    return promocodes_service.create_promocode(db, user, payload)


@router.get("/validate", response_model=PromocodeValidationOut)
def validate_promocode(
    user: CurrentUser,
    db: DBSession,
    code: str = Query(min_length=1, max_length=64),
    event_id: int | None = Query(default=None),
):
    promocode = promocodes_service.validate_promocode(db, code, event_id)
    if promocode is None:
        raise NotFoundError(ErrorCode.PROMOCODE_INVALID.value, "promocode is invalid or expired")

    unit_price = unit_discount = None
    if event_id is not None:
        event = events_service.get_visible_event(db, user, event_id)
        price = promocodes_service.to_cents(Decimal(event.price))
        unit_price = float(price)
        unit_discount = float(promocodes_service.discount_for(promocode, price))

    return PromocodeValidationOut(
        valid=True,
        promocode=PromocodeOut.model_validate(promocode),
        event_id=event_id,
        unit_price=unit_price,
        unit_discount=unit_discount,
    )


@router.patch("/{promocode_id}", response_model=PromocodeOut)
def update_promocode(promocode_id: int, payload: PromocodeUpdate, user: CurrentUser, db: DBSession):
    return promocodes_service.update_promocode(db, user, promocode_id, payload)
