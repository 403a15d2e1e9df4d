from __future__ import annotations

import datetime as dt
from typing import Any

import structlog
from sqlalchemy import delete, func, or_, select
from sqlalchemy.orm import Session

from ticketmarket.api.schemas.events import EventCreate, EventUpdate
from ticketmarket.core.clock import today
from ticketmarket.models import Event, Promocode, Purchase, Review, User, Wishlist
from ticketmarket.models.notification import NotificationType
from ticketmarket.models.purchase import ACTIVE_PURCHASE_STATUSES
from ticketmarket.models.user import UserRole
from ticketmarket.services.error_codes import ErrorCode
from ticketmarket.services.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from ticketmarket.services.notifications_service import notify

logger = structlog.get_logger(__name__)

ALL_GENRES = "all"

# Changes to these fields are announced to ticket holders
SCHEDULE_FIELDS = ("date", "time", "end_date", "end_time", "location")

NOT_NULL_FIELDS = (
    "title",
    "description",
    "date",
    "time",
    "location",
    "price",
    "image_url",
    "is_featured",
    "published",
)


def _is_admin(user: User | None) -> bool:
    return user is not None and user.role == UserRole.ADMIN


def can_manage(user: User | None, event: Event) -> bool:
    return user is not None and (_is_admin(user) or event.creator_id == user.id)


def require_manage_permission(user: User, event: Event) -> None:
    if not can_manage(user, event):
        raise PermissionDeniedError(
            ErrorCode.FORBIDDEN.value, "You can only manage your own events"
        )


def tickets_sold(db: Session, event_id: int) -> int:
    return int(
        db.scalar(
            select(func.coalesce(func.sum(Purchase.quantity), 0)).where(
                Purchase.event_id == event_id,
                Purchase.status.in_(ACTIVE_PURCHASE_STATUSES),
            )
        )
        or 0
    )


def _notify_ticket_holders(db: Session, event: Event) -> None:
    holder_ids = db.scalars(
        select(Purchase.user_id)
        .where(
            Purchase.event_id == event.id,
            Purchase.status.in_(ACTIVE_PURCHASE_STATUSES),
        )
        .distinct()
    ).all()
    for holder_id in holder_ids:
        notify(
            db,
            holder_id,
            NotificationType.EVENT_UPDATE,
            f'The schedule or venue of "{event.title}" has changed.',
            related_id=event.id,
        )


def _published():
    return select(Event).where(Event.published.is_(True))


def list_events(
    db: Session,
    search: str | None = None,
    genre: str | None = None,
    on_date: dt.date | None = None,
    featured: bool | None = None,
) -> list[Event]:
    stmt = _published()

    # A free-text search takes precedence over the genre filter
    if search and search.strip():
        like = f"%{search.strip().lower()}%"
        stmt = stmt.where(
            or_(
                func.lower(Event.title).like(like),
                func.lower(Event.description).like(like),
                func.lower(Event.location).like(like),
            )
        )
    elif genre and genre.strip() and genre.strip().lower() != ALL_GENRES:
        stmt = stmt.where(func.lower(Event.genre) == genre.strip().lower())

    if on_date is not None:
        stmt = stmt.where(Event.date == on_date)
    if featured is not None:
        stmt = stmt.where(Event.is_featured.is_(featured))

    stmt = stmt.order_by(Event.date, Event.time, Event.id)
    return list(db.scalars(stmt).all())


def featured_events(db: Session) -> list[Event]:
    stmt = (
        _published()
        .where(Event.is_featured.is_(True), Event.date >= today())
        .order_by(Event.date, Event.time, Event.id)
    )
    return list(db.scalars(stmt).all())


def upcoming_events(db: Session, limit: int = 10) -> list[Event]:
    stmt = (
        _published()
        .where(Event.date >= today())
        .order_by(Event.date, Event.time, Event.id)
        .limit(limit)
    )
    return list(db.scalars(stmt).all())


def events_by_creator(db: Session, creator_id: int) -> list[Event]:
    stmt = (
        select(Event)
        .where(Event.creator_id == creator_id)
        .order_by(Event.date.desc(), Event.id.desc())
    )
    return list(db.scalars(stmt).all())


def get_event_or_404(db: Session, event_id: int) -> Event:
    event = db.get(Event, event_id)
    if event is None:
        raise NotFoundError(ErrorCode.EVENT_NOT_FOUND.value, "Event not found")
    return event


def get_visible_event(db: Session, viewer: User | None, event_id: int) -> Event:
    event = get_event_or_404(db, event_id)
    if not event.published and not can_manage(viewer, event):
        raise NotFoundError(ErrorCode.EVENT_NOT_FOUND.value, "Event not found")
    return event


def create_event(db: Session, creator: User, payload: EventCreate) -> Event:
    if creator.role not in {UserRole.ORGANIZER, UserRole.ADMIN}:
        raise PermissionDeniedError(
            ErrorCode.FORBIDDEN.value, "only organizers or admins can create events"
        )

    event = Event(
        **payload.model_dump(),
        creator_id=creator.id,
        total_ratings=0,
    )
    db.add(event)
    db.commit()
    db.refresh(event)

    logger.info("event_created", event_id=event.id, creator_id=creator.id)
    return event


def update_event(db: Session, actor: User, event_id: int, patch: EventUpdate) -> Event:
    event = get_event_or_404(db, event_id)
    require_manage_permission(actor, event)

    patch_data: dict[str, Any] = patch.model_dump(exclude_unset=True)

    for required in NOT_NULL_FIELDS:
        if required in patch_data and patch_data[required] is None:
            raise ValidationError(
                ErrorCode.VALIDATION_ERROR.value, f"{required} cannot be null"
            )

    if patch_data.get("capacity") is not None:
        # Same lock as checkout so no sale lands between this check and the commit
        event = db.scalar(select(Event).where(Event.id == event.id).with_for_update())
        sold = tickets_sold(db, event.id)
        if patch_data["capacity"] < sold:
            raise ConflictError(
                ErrorCode.CAPACITY_BELOW_SOLD.value,
                f"capacity cannot be below tickets already sold ({sold})",
            )

    new_date = patch_data.get("date", event.date)
    new_end_date = patch_data.get("end_date", event.end_date)
    if new_date and new_end_date and new_end_date < new_date:
        raise ValidationError(
            ErrorCode.VALIDATION_ERROR.value, "end_date must not be before date"
        )

    schedule_changed = any(
        key in patch_data and patch_data[key] != getattr(event, key) for key in SCHEDULE_FIELDS
    )

    for key, value in patch_data.items():
        setattr(event, key, value)

    db.add(event)

    if schedule_changed:
        _notify_ticket_holders(db, event)
    db.commit()
    db.refresh(event)

    logger.info("event_updated", event_id=event.id, by=actor.id, fields=sorted(patch_data))
    return event


def delete_event(db: Session, actor: User, event_id: int) -> None:
    event = get_event_or_404(db, event_id)
    require_manage_permission(actor, event)

    has_purchases = db.scalar(
        select(func.count()).select_from(Purchase).where(Purchase.event_id == event.id)
    )
    if has_purchases:
        raise ConflictError(
            ErrorCode.EVENT_HAS_PURCHASES.value,
            "events with purchases cannot be deleted; unpublish it instead",
        )

    db.execute(delete(Review).where(Review.event_id == event.id))
    db.execute(delete(Wishlist).where(Wishlist.event_id == event.id))
    db.execute(delete(Promocode).where(Promocode.event_id == event.id))
    db.delete(event)
    db.commit()

    logger.info("event_deleted", event_id=event_id, by=actor.id)


def event_purchases(db: Session, actor: User, event_id: int) -> list[Purchase]:
    event = get_event_or_404(db, event_id)
    require_manage_permission(actor, event)
    stmt = (
        select(Purchase)
        .where(Purchase.event_id == event.id)
        .order_by(Purchase.purchase_date, Purchase.id)
    )
    return list(db.scalars(stmt).all())
