from __future__ import annotations

from fastapi import APIRouter

from ticketmarket.api.schemas import (
    CheckInIn,
    PurchaseCreate,
    PurchaseCreatedOut,
    PurchaseOut,
    PurchaseStatusUpdate,
)
from ticketmarket.auth.deps import CurrentUser, DBSession, OrganizerUser
from ticketmarket.services import purchases_service

router = APIRouter(tags=["purchases"])


@router.post("/purchases", response_model=PurchaseCreatedOut, status_code=201)
def create_purchase(payload: PurchaseCreate, user: CurrentUser, db: DBSession):
    purchase = purchases_service.create_purchase(db, user, payload)
    return PurchaseCreatedOut(
        message="Purchase successful",
        purchase=PurchaseOut.model_validate(purchase),
    )


@router.get("/my-purchases", response_model=list[PurchaseOut])
def my_purchases(user: CurrentUser, db: DBSession):
    return purchases_service.purchases_by_user(db, user)


@router.post("/purchases/check-in", response_model=PurchaseOut)
def check_in(payload: CheckInIn, user: OrganizerUser, db: DBSession):
    return purchases_service.check_in(db, user, payload.ticket_code)


@router.get("/purchases/{purchase_id}", response_model=PurchaseOut)
def get_purchase(purchase_id: int, user: CurrentUser, db: DBSession):
    return purchases_service.get_purchase(db, user, purchase_id)


@router.patch("/purchases/{purchase_id}/status", response_model=PurchaseOut)
def update_purchase_status(
    purchase_id: int,
    payload: PurchaseStatusUpdate,
    user: CurrentUser,
    db: DBSession,
):
    return purchases_service.update_status(db, user, purchase_id, payload.status)
