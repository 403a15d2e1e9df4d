from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from ticketmarket.models import Notification, User
from ticketmarket.models.notification import NotificationType
from ticketmarket.services.error_codes import ErrorCode
from ticketmarket.services.exceptions import NotFoundError


def notify(
    db: Session,
    user_id: int,
    type_: NotificationType,
    message: str,
    related_id: int | None = None,
) -> Notification:
    """Queue a notification in the caller's transaction. Caller commits."""
    notification = Notification(
        user_id=user_id,
        type=type_.value,
        message=message,
        related_id=related_id,
        is_read=False,
    )
    db.add(notification)
    return notification


def list_notifications(db: Session, user: User, unread_only: bool = False) -> list[Notification]:
    stmt = select(Notification).where(Notification.user_id == user.id)
    if unread_only:
        stmt = stmt.where(Notification.is_read.is_(False))
    stmt = stmt.order_by(Notification.created_at, Notification.id)
    return list(db.scalars(stmt).all())


def _own_notification(db: Session, user: User, notification_id: int) -> Notification:
    notification = db.get(Notification, notification_id)
    # Other users' notifications are reported as missing
    if notification is None or notification.user_id != user.id:
        raise NotFoundError(ErrorCode.NOTIFICATION_NOT_FOUND.value, "notification not found")
    return notification


def mark_read(db: Session, user: User, notification_id: int) -> Notification:
    notification = _own_notification(db, user, notification_id)
    notification.is_read = True
    db.add(notification)
    db.commit()
    db.refresh(notification)
    return notification


def mark_all_read(db: Session, user: User) -> int:
    result = db.execute(
        update(Notification)
        .where(Notification.user_id == user.id, Notification.is_read.is_(False))
        .values(is_read=True)
    )
    db.commit()
    return result.rowcount or 0


def delete_notification(db: Session, user: User, notification_id: int) -> None:
    notification = _own_notification(db, user, notification_id)
    db.delete(notification)
    db.commit()
