from __future__ import annotations

import secrets
from decimal import Decimal

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ticketmarket.api.schemas.purchases import PurchaseCreate
from ticketmarket.core.clock import utcnow
from ticketmarket.models import Event, Purchase, User
from ticketmarket.models.notification import NotificationType
from ticketmarket.models.purchase import ACTIVE_PURCHASE_STATUSES, PurchaseStatus
from ticketmarket.models.user import UserRole
from ticketmarket.services import promocodes_service
from ticketmarket.services.error_codes import ErrorCode
from ticketmarket.services.events_service import can_manage, tickets_sold
from ticketmarket.services.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from ticketmarket.services.notifications_service import notify

logger = structlog.get_logger(__name__)


def generate_ticket_code() -> str:
    return secrets.token_urlsafe(18).replace("-", "").replace("_", "")[:24]


def create_purchase(db: Session, buyer: User, payload: PurchaseCreate) -> Purchase:
    # Row lock so concurrent checkouts for one event see each other's seats
    event = db.scalar(select(Event).where(Event.id == payload.event_id).with_for_update())
    if event is None:
        raise NotFoundError(ErrorCode.EVENT_NOT_FOUND.value, "Event not found")
    if not event.published:
        raise ConflictError(ErrorCode.EVENT_NOT_PUBLISHED.value, "event is not on sale")

    if event.capacity is not None:
        sold = tickets_sold(db, event.id)
        if sold + payload.quantity > event.capacity:
            remaining = max(0, event.capacity - sold)
            raise ConflictError(
                ErrorCode.EVENT_SOLD_OUT.value,
                f"only {remaining} ticket(s) left for this event",
            )

    unit_price = promocodes_service.to_cents(Decimal(event.price))
    subtotal = promocodes_service.to_cents(unit_price * payload.quantity)
    discount = Decimal("0.00")

    promocode = None
    if payload.promocode:
        promocode = promocodes_service.validate_promocode(db, payload.promocode, event.id)
        if promocode is None:
            raise ValidationError(
                ErrorCode.PROMOCODE_INVALID.value, "promocode is invalid or expired"
            )
        discount = promocodes_service.discount_for(promocode, subtotal)
        promocodes_service.redeem(db, promocode)

    purchase = Purchase(
        event_id=event.id,
        user_id=buyer.id,
        quantity=payload.quantity,
        unit_price=unit_price,
        subtotal_amount=subtotal,
        discount_amount=discount,
        total_amount=max(Decimal("0.00"), subtotal - discount),
        status=PurchaseStatus.COMPLETED,
        customer_name=payload.customer_name.strip(),
        customer_email=str(payload.customer_email).lower(),
        payment_intent_id=payload.payment_intent_id,
        ticket_code=generate_ticket_code(),
        promocode_id=promocode.id if promocode else None,
        is_checked_in=False,
    )
    db.add(purchase)
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(
            ErrorCode.TICKET_CODE_COLLISION.value, "could not issue a ticket code, please retry"
        ) from exc

    notify(
        db,
        buyer.id,
        NotificationType.PURCHASE,
        f'You have successfully purchased {payload.quantity} ticket(s) for "{event.title}".',
        related_id=purchase.id,
    )
    db.commit()
    db.refresh(purchase)

    logger.info(
        "purchase_created",
        purchase_id=purchase.id,
        event_id=event.id,
        user_id=buyer.id,
        quantity=purchase.quantity,
        total=str(purchase.total_amount),
        promocode_id=purchase.promocode_id,
    )
    return purchase


def purchases_by_user(db: Session, user: User) -> list[Purchase]:
    stmt = (
        select(Purchase)
        .where(Purchase.user_id == user.id)
        .order_by(Purchase.purchase_date.desc(), Purchase.id.desc())
    )
    return list(db.scalars(stmt).all())


def _get_purchase(db: Session, purchase_id: int) -> Purchase:
    purchase = db.get(Purchase, purchase_id)
    if purchase is None:
        raise NotFoundError(ErrorCode.PURCHASE_NOT_FOUND.value, "purchase not found")
    return purchase


def get_purchase(db: Session, viewer: User, purchase_id: int) -> Purchase:
    purchase = _get_purchase(db, purchase_id)
    if purchase.user_id == viewer.id:
        return purchase
    event = db.get(Event, purchase.event_id)
    if event is not None and can_manage(viewer, event):
        return purchase
    if viewer.role == UserRole.ADMIN:
        return purchase
    raise NotFoundError(ErrorCode.PURCHASE_NOT_FOUND.value, "purchase not found")


def update_status(db: Session, actor: User, purchase_id: int, status: PurchaseStatus) -> Purchase:
    purchase = _get_purchase(db, purchase_id)
    event = db.get(Event, purchase.event_id)
    if event is None or not can_manage(actor, event):
        raise PermissionDeniedError(
            ErrorCode.FORBIDDEN.value, "only the event organizer can change purchase status"
        )

    previous = purchase.status
    reactivating = (
        status in ACTIVE_PURCHASE_STATUSES and previous not in ACTIVE_PURCHASE_STATUSES
    )
    if reactivating:
        # Seats released by the cancellation may have been sold since
        event = db.scalar(select(Event).where(Event.id == event.id).with_for_update())
        if event.capacity is not None:
            sold = tickets_sold(db, event.id)
            if sold + purchase.quantity > event.capacity:
                raise ConflictError(
                    ErrorCode.EVENT_SOLD_OUT.value,
                    f"only {max(0, event.capacity - sold)} ticket(s) left for this event",
                )

    purchase.status = status
    db.add(purchase)
    db.commit()
    db.refresh(purchase)

    logger.info(
        "purchase_status_changed",
        purchase_id=purchase.id,
        previous=previous.value,
        status=status.value,
        by=actor.id,
    )
    return purchase


def check_in(db: Session, actor: User, ticket_code: str) -> Purchase:
    purchase = db.scalar(
        select(Purchase).where(Purchase.ticket_code == ticket_code.strip()).with_for_update()
    )
    if purchase is None:
        raise NotFoundError(ErrorCode.TICKET_NOT_FOUND.value, "Ticket not found")

    event = db.get(Event, purchase.event_id)
    if event is None or not can_manage(actor, event):
        raise PermissionDeniedError(
            ErrorCode.FORBIDDEN.value, "only the event organizer can check in tickets"
        )

    if purchase.is_checked_in:
        raise ConflictError(
            ErrorCode.TICKET_ALREADY_CHECKED_IN.value, "Ticket already checked in"
        )
    if purchase.status != PurchaseStatus.COMPLETED:
        raise ConflictError(
            ErrorCode.TICKET_NOT_VALID.value,
            f"ticket is {purchase.status.value} and cannot be checked in",
        )

    purchase.is_checked_in = True
    purchase.check_in_date = utcnow()
    db.add(purchase)
    db.commit()
    db.refresh(purchase)

    logger.info("ticket_checked_in", purchase_id=purchase.id, event_id=event.id, by=actor.id)
    return purchase
