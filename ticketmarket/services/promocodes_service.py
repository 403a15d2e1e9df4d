from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

import structlog
from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ticketmarket.api.schemas.promocodes import PromocodeCreate, PromocodeUpdate
from ticketmarket.core.clock import as_utc, utcnow
from ticketmarket.models import Promocode, User
from ticketmarket.models.promocode import DiscountType
from ticketmarket.models.user import UserRole
from ticketmarket.services.error_codes import ErrorCode
from ticketmarket.services.events_service import get_event_or_404, require_manage_permission
from ticketmarket.services.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)

logger = structlog.get_logger(__name__)

CENT = Decimal("0.01")


def normalize_code(code: str) -> str:
    return code.strip().upper()


def to_cents(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def discount_for(promocode: Promocode, subtotal: Decimal) -> Decimal:
    """Discount owed on ``subtotal``; never more than the subtotal itself."""
    if subtotal <= 0:
        return Decimal("0.00")
    amount = Decimal(promocode.discount_amount)
    if promocode.discount_type == DiscountType.PERCENTAGE:
        discount = subtotal * amount / Decimal(100)
    else:
        discount = amount
    return to_cents(min(discount, subtotal))


def is_usable(promocode: Promocode, event_id: int | None = None, now: datetime | None = None) -> bool:
    now = now or utcnow()

    if not promocode.is_active:
        return False

    start = as_utc(promocode.start_date)
    if start is not None and start > now:
        return False

    end = as_utc(promocode.end_date)
    if end is not None and end < now:
        return False

    # max_uses of 0 (or null) means unlimited
    if promocode.max_uses is not None and promocode.max_uses > 0:
        if (promocode.uses_count or 0) >= promocode.max_uses:
            return False

    if promocode.event_id is not None and event_id is not None and promocode.event_id != event_id:
        return False

    return True


def get_by_code(db: Session, code: str) -> Promocode | None:
    return db.scalar(select(Promocode).where(Promocode.code == normalize_code(code)))


def validate_promocode(db: Session, code: str, event_id: int | None = None) -> Promocode | None:
    promocode = get_by_code(db, code)
    if promocode is None or not is_usable(promocode, event_id):
        return None
    return promocode


def redeem(db: Session, promocode: Promocode) -> None:
    """Count one use of ``promocode`` inside the caller's transaction.

    The increment is a single conditional UPDATE so two concurrent checkouts
    cannot both take the last remaining use.
    """
    result = db.execute(
        update(Promocode)
        .where(
            Promocode.id == promocode.id,
            Promocode.is_active.is_(True),
            or_(
                Promocode.max_uses.is_(None),
                Promocode.max_uses <= 0,
                Promocode.uses_count < Promocode.max_uses,
            ),
        )
        .values(uses_count=Promocode.uses_count + 1)
        .execution_options(synchronize_session=False)
    )
    if not result.rowcount:
        raise ConflictError(
            ErrorCode.PROMOCODE_EXHAUSTED.value, "promocode has no uses left"
        )
    logger.info("promocode_redeemed", promocode_id=promocode.id, code=promocode.code)


def _is_admin(user: User) -> bool:
    return user.role == UserRole.ADMIN


def create_promocode(db: Session, creator: User, payload: PromocodeCreate) -> Promocode:
    if creator.role not in {UserRole.ORGANIZER, UserRole.ADMIN}:
        raise PermissionDeniedError(
            ErrorCode.FORBIDDEN.value, "only organizers or admins can create promocodes"
        )

    if payload.event_id is not None:
        event = get_event_or_404(db, payload.event_id)
        require_manage_permission(creator, event)

    code = normalize_code(payload.code)
    if get_by_code(db, code) is not None:
        raise ConflictError(ErrorCode.PROMOCODE_EXISTS.value, "promocode already exists")

    data = payload.model_dump()
    data["code"] = code
    promocode = Promocode(**data, creator_id=creator.id, uses_count=0)
    db.add(promocode)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(ErrorCode.PROMOCODE_EXISTS.value, "promocode already exists") from exc

    db.refresh(promocode)
    logger.info(
        "promocode_created",
        promocode_id=promocode.id,
        creator_id=creator.id,
        event_id=promocode.event_id,
    )
    return promocode


def list_promocodes(db: Session, user: User) -> list[Promocode]:
    stmt = select(Promocode).order_by(Promocode.created_at.desc(), Promocode.id.desc())
    if not _is_admin(user):
        stmt = stmt.where(Promocode.creator_id == user.id)
    return list(db.scalars(stmt).all())


def promocodes_for_event(db: Session, actor: User, event_id: int) -> list[Promocode]:
    event = get_event_or_404(db, event_id)
    require_manage_permission(actor, event)
    stmt = select(Promocode).where(Promocode.event_id == event.id).order_by(Promocode.id)
    return list(db.scalars(stmt).all())


def update_promocode(db: Session, actor: User, promocode_id: int, patch: PromocodeUpdate) -> Promocode:
    promocode = db.get(Promocode, promocode_id)
    if promocode is None:
        raise NotFoundError(ErrorCode.PROMOCODE_NOT_FOUND.value, "promocode not found")
    if promocode.creator_id != actor.id and not _is_admin(actor):
        raise PermissionDeniedError(
            ErrorCode.FORBIDDEN.value, "You can only manage your own promocodes"
        )

    changes: dict[str, Any] = patch.model_dump(exclude_unset=True)
    if "discount_amount" in changes and changes["discount_amount"] is None:
        raise ValidationError(ErrorCode.VALIDATION_ERROR.value, "discount_amount cannot be null")
    if "is_active" in changes and changes["is_active"] is None:
        raise ValidationError(ErrorCode.VALIDATION_ERROR.value, "is_active cannot be null")

    if (
        promocode.discount_type == DiscountType.PERCENTAGE
        and changes.get("discount_amount") is not None
        and changes["discount_amount"] > 100
    ):
        raise ValidationError(
            ErrorCode.VALIDATION_ERROR.value, "percentage discount cannot exceed 100"
        )

    start = as_utc(changes.get("start_date", promocode.start_date))
    end = as_utc(changes.get("end_date", promocode.end_date))
    if start and end and end < start:
        raise ValidationError(
            ErrorCode.VALIDATION_ERROR.value, "end_date must not be before start_date"
        )

    for key, value in changes.items():
        setattr(promocode, key, value)

    db.add(promocode)
    db.commit()
    db.refresh(promocode)
    return promocode
