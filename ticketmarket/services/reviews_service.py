from __future__ import annotations

from typing import Any

import structlog
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ticketmarket.api.schemas.reviews import ReviewCreate, ReviewUpdate
from ticketmarket.models import Event, Review, User
from ticketmarket.models.notification import NotificationType
from ticketmarket.models.user import UserRole
from ticketmarket.services.error_codes import ErrorCode
from ticketmarket.services.events_service import get_visible_event
from ticketmarket.services.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from ticketmarket.services.notifications_service import notify

logger = structlog.get_logger(__name__)


def recompute_event_rating(db: Session, event_id: int) -> None:
    """Rebuild the event's rating aggregate from its current reviews."""
    average, count = db.execute(
        select(func.avg(Review.rating), func.count(Review.id)).where(Review.event_id == event_id)
    ).one()
    event = db.get(Event, event_id)
    if event is None:
        return
    event.total_ratings = int(count or 0)
    event.average_rating = round(float(average), 2) if count else None
    db.add(event)


def create_review(db: Session, author: User, event_id: int, payload: ReviewCreate) -> Review:
    event = get_visible_event(db, author, event_id)

    review = Review(
        event_id=event.id,
        user_id=author.id,
        rating=payload.rating,
        comment=payload.comment,
    )
    db.add(review)
    db.flush()

    recompute_event_rating(db, event.id)
    notify(
        db,
        event.creator_id,
        NotificationType.REVIEW,
        f'Someone left a {payload.rating}-star review for your event "{event.title}".',
        related_id=review.id,
    )
    db.commit()
    db.refresh(review)

    logger.info("review_created", review_id=review.id, event_id=event.id, rating=review.rating)
    return review


def reviews_for_event(db: Session, viewer: User | None, event_id: int) -> list[Review]:
    event = get_visible_event(db, viewer, event_id)
    stmt = (
        select(Review)
        .where(Review.event_id == event.id)
        .order_by(Review.created_at.desc(), Review.id.desc())
    )
    return list(db.scalars(stmt).all())


def reviews_by_user(db: Session, user_id: int) -> list[Review]:
    stmt = (
        select(Review)
        .where(Review.user_id == user_id)
        .order_by(Review.created_at.desc(), Review.id.desc())
    )
    return list(db.scalars(stmt).all())


def _get_review(db: Session, review_id: int) -> Review:
    review = db.get(Review, review_id)
    if review is None:
        raise NotFoundError(ErrorCode.REVIEW_NOT_FOUND.value, "review not found")
    return review


def update_review(db: Session, actor: User, review_id: int, patch: ReviewUpdate) -> Review:
    review = _get_review(db, review_id)
    if review.user_id != actor.id:
        raise PermissionDeniedError(ErrorCode.FORBIDDEN.value, "You can only edit your own reviews")

    changes: dict[str, Any] = patch.model_dump(exclude_unset=True)
    if "rating" in changes and changes["rating"] is None:
        raise ValidationError(ErrorCode.VALIDATION_ERROR.value, "rating cannot be null")

    rating_changed = "rating" in changes and changes["rating"] != review.rating
    for key, value in changes.items():
        setattr(review, key, value)
    db.add(review)
    db.flush()

    if rating_changed:
        recompute_event_rating(db, review.event_id)
    db.commit()
    db.refresh(review)
    return review


def delete_review(db: Session, actor: User, review_id: int) -> None:
    review = _get_review(db, review_id)
    if review.user_id != actor.id and actor.role != UserRole.ADMIN:
        raise PermissionDeniedError(
            ErrorCode.FORBIDDEN.value, "You can only delete your own reviews"
        )

    event_id = review.event_id
    db.delete(review)
    db.flush()
    recompute_event_rating(db, event_id)
    db.commit()

    logger.info("review_deleted", review_id=review_id, event_id=event_id, by=actor.id)
