from __future__ import annotations

import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ticketmarket.models import Event, Follower, User, Wishlist
from ticketmarket.models.notification import NotificationType
from ticketmarket.models.user import UserRole
from ticketmarket.services.error_codes import ErrorCode
from ticketmarket.services.events_service import get_visible_event
from ticketmarket.services.exceptions import ConflictError, NotFoundError, ValidationError
from ticketmarket.services.notifications_service import notify
from ticketmarket.services.users_service import get_user

logger = structlog.get_logger(__name__)


# Followers


def is_following(db: Session, follower_id: int, organizer_id: int) -> bool:
    return (
        db.scalar(
            select(Follower.id).where(
                Follower.follower_id == follower_id,
                Follower.organizer_id == organizer_id,
            )
        )
        is not None
    )


def follow(db: Session, follower: User, organizer_id: int) -> Follower:
    organizer = get_user(db, organizer_id)
    if organizer.id == follower.id:
        raise ValidationError(ErrorCode.CANNOT_FOLLOW_SELF.value, "cannot follow yourself")
    if organizer.role not in {UserRole.ORGANIZER, UserRole.ADMIN}:
        raise ValidationError(ErrorCode.NOT_AN_ORGANIZER.value, "only organizers can be followed")
    if is_following(db, follower.id, organizer.id):
        raise ConflictError(
            ErrorCode.ALREADY_FOLLOWING.value, "Already following this organizer"
        )

    edge = Follower(follower_id=follower.id, organizer_id=organizer.id)
    db.add(edge)
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(
            ErrorCode.ALREADY_FOLLOWING.value, "Already following this organizer"
        ) from exc

    notify(
        db,
        organizer.id,
        NotificationType.FOLLOW,
        f"{follower.display_name} is now following you.",
        related_id=follower.id,
    )
    db.commit()
    db.refresh(edge)

    logger.info("organizer_followed", follower_id=follower.id, organizer_id=organizer.id)
    return edge


def unfollow(db: Session, follower: User, organizer_id: int) -> None:
    result = db.execute(
        delete(Follower).where(
            Follower.follower_id == follower.id,
            Follower.organizer_id == organizer_id,
        )
    )
    if not result.rowcount:
        db.rollback()
        raise NotFoundError(ErrorCode.NOT_FOLLOWING.value, "not following this organizer")
    db.commit()


def followers_of(db: Session, organizer_id: int) -> list[User]:
    get_user(db, organizer_id)
    stmt = (
        select(User)
        .join(Follower, Follower.follower_id == User.id)
        .where(Follower.organizer_id == organizer_id)
        .order_by(Follower.created_at, Follower.id)
    )
    return list(db.scalars(stmt).all())


def following_of(db: Session, follower_id: int) -> list[User]:
    get_user(db, follower_id)
    stmt = (
        select(User)
        .join(Follower, Follower.organizer_id == User.id)
        .where(Follower.follower_id == follower_id)
        .order_by(Follower.created_at, Follower.id)
    )
    return list(db.scalars(stmt).all())


# Wishlist


def in_wishlist(db: Session, user: User, event_id: int) -> bool:
    return (
        db.scalar(
            select(Wishlist.id).where(Wishlist.user_id == user.id, Wishlist.event_id == event_id)
        )
        is not None
    )


def add_to_wishlist(db: Session, user: User, event_id: int) -> Event:
    event = get_visible_event(db, user, event_id)
    if in_wishlist(db, user, event.id):
        raise ConflictError(ErrorCode.ALREADY_IN_WISHLIST.value, "Event already in wishlist")

    db.add(Wishlist(user_id=user.id, event_id=event.id))
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(
            ErrorCode.ALREADY_IN_WISHLIST.value, "Event already in wishlist"
        ) from exc
    return event


def remove_from_wishlist(db: Session, user: User, event_id: int) -> None:
    result = db.execute(
        delete(Wishlist).where(Wishlist.user_id == user.id, Wishlist.event_id == event_id)
    )
    if not result.rowcount:
        db.rollback()
        raise NotFoundError(ErrorCode.NOT_IN_WISHLIST.value, "event is not in your wishlist")
    db.commit()


def wishlist_events(db: Session, user: User) -> list[Event]:
    stmt = (
        select(Event)
        .join(Wishlist, Wishlist.event_id == Event.id)
        .where(Wishlist.user_id == user.id)
        .order_by(Wishlist.created_at.desc(), Wishlist.id.desc())
    )
    return list(db.scalars(stmt).all())
