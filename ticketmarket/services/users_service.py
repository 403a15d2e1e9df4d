from __future__ import annotations

from typing import Any

import structlog
from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ticketmarket.auth.password import hash_password, needs_rehash, verify_password
from ticketmarket.auth.sessions import revoke_user_sessions
from ticketmarket.core.clock import utcnow
from ticketmarket.core.config import settings
from ticketmarket.models import (
    Event,
    Follower,
    LoginSession,
    Notification,
    Promocode,
    Purchase,
    Review,
    User,
    Wishlist,
)
from ticketmarket.models.user import UserRole
from ticketmarket.services.error_codes import ErrorCode
from ticketmarket.services.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from ticketmarket.services.reviews_service import recompute_event_rating

logger = structlog.get_logger(__name__)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def is_admin(user: User) -> bool:
    return user.role == UserRole.ADMIN


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError(ErrorCode.USER_NOT_FOUND.value, "user not found")
    return user


def _ensure_unique(
    db: Session,
    username: str | None,
    email: str | None,
    exclude_id: int | None = None,
) -> None:
    if username is not None:
        stmt = select(User.id).where(User.username == username)
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        if db.scalar(stmt) is not None:
            raise ConflictError(ErrorCode.USERNAME_TAKEN.value, "Username already exists")
    if email is not None:
        stmt = select(User.id).where(User.email == email)
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        if db.scalar(stmt) is not None:
            raise ConflictError(ErrorCode.EMAIL_TAKEN.value, "Email already in use")


def create_user(
    db: Session,
    *,
    username: str,
    email: str,
    password: str,
    role: UserRole = UserRole.USER,
    **profile: Any,
) -> User:
    email = _normalize_email(email)
    _ensure_unique(db, username, email)

    user = User(
        username=username,
        email=email,
        password_hash=hash_password(password),
        role=role,
        **profile,
    )
    db.add(user)
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(
            ErrorCode.USERNAME_TAKEN.value, "Username or email already in use"
        ) from exc

    logger.info("user_created", user_id=user.id, role=user.role.value)
    return user


def authenticate(db: Session, username: str, password: str) -> User:
    user = db.scalar(select(User).where(User.username == username.strip()))
    if user is None or not verify_password(password, user.password_hash):
        logger.info("login_failed", username=username)
        raise AuthenticationError(
            ErrorCode.INVALID_CREDENTIALS.value, "Incorrect username or password"
        )

    if needs_rehash(user.password_hash):
        user.password_hash = hash_password(password)
    user.last_login_at = utcnow()
    db.add(user)
    return user


def update_profile(
    db: Session,
    actor: User,
    user_id: int,
    changes: dict[str, Any],
    keep_session: str | None = None,
) -> User:
    user = get_user(db, user_id)
    if user.id != actor.id and not is_admin(actor):
        raise PermissionDeniedError(
            ErrorCode.FORBIDDEN.value, "You can only update your own profile"
        )

    if "role" in changes:
        role = changes.pop("role")
        if role is not None and role != user.role:
            if not is_admin(actor):
                raise PermissionDeniedError(ErrorCode.FORBIDDEN.value, "cannot change role")
            if user.id == actor.id:
                raise ValidationError(
                    ErrorCode.CANNOT_CHANGE_OWN_ROLE.value, "cannot change own role"
                )
            user.role = role

    if "password" in changes:
        password = changes.pop("password")
        if password:
            user.password_hash = hash_password(password)
            revoke_user_sessions(
                db, user.id, keep_token=keep_session if user.id == actor.id else None
            )

    if changes.get("email") is not None:
        changes["email"] = _normalize_email(changes["email"])
    _ensure_unique(db, changes.get("username"), changes.get("email"), exclude_id=user.id)

    for key, value in changes.items():
        if key in {"username", "email"} and value is None:
            continue
        setattr(user, key, value)

    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(
            ErrorCode.USERNAME_TAKEN.value, "Username or email already in use"
        ) from exc
    db.refresh(user)
    return user


def change_password(
    db: Session,
    actor: User,
    user_id: int,
    current_password: str | None,
    new_password: str,
    keep_session: str | None = None,
) -> User:
    user = get_user(db, user_id)
    if user.id != actor.id and not is_admin(actor):
        raise PermissionDeniedError(
            ErrorCode.FORBIDDEN.value, "You can only change your own password"
        )

    # Admins resetting someone else's password skip the current-password check
    if user.id == actor.id or not is_admin(actor):
        if not current_password or not verify_password(current_password, user.password_hash):
            raise ValidationError(
                ErrorCode.INVALID_PASSWORD.value, "Current password is incorrect"
            )

    user.password_hash = hash_password(new_password)
    db.add(user)
    revoked = revoke_user_sessions(
        db, user.id, keep_token=keep_session if user.id == actor.id else None
    )
    db.commit()
    db.refresh(user)

    logger.info("password_changed", user_id=user.id, by=actor.id, sessions_revoked=revoked)
    return user


def list_users(db: Session, search: str | None = None, limit: int = 100) -> list[User]:
    stmt = select(User).order_by(User.created_at.desc(), User.id.desc()).limit(limit)
    if search:
        like = f"%{search.strip().lower()}%"
        stmt = stmt.where(
            or_(
                func.lower(User.username).like(like),
                func.lower(User.email).like(like),
                func.lower(User.full_name).like(like),
            )
        )
    return list(db.scalars(stmt).all())


def delete_user(db: Session, actor: User, user_id: int) -> None:
    user = get_user(db, user_id)
    if user.id == actor.id:
        raise ValidationError(ErrorCode.CANNOT_DELETE_SELF.value, "cannot delete yourself")

    own_event_ids = list(db.scalars(select(Event.id).where(Event.creator_id == user.id)).all())
    if own_event_ids:
        sold = db.scalar(
            select(func.count())
            .select_from(Purchase)
            .where(Purchase.event_id.in_(own_event_ids), Purchase.user_id != user.id)
        )
        if sold:
            raise ConflictError(
                ErrorCode.USER_HAS_SOLD_EVENTS.value,
                "user organizes events with tickets sold to other users",
            )

    reviewed_event_ids = set(
        db.scalars(select(Review.event_id).where(Review.user_id == user.id)).all()
    )

    db.execute(delete(Purchase).where(Purchase.user_id == user.id))
    db.execute(delete(Review).where(Review.user_id == user.id))
    db.execute(delete(Follower).where(Follower.follower_id == user.id))
    db.execute(delete(Follower).where(Follower.organizer_id == user.id))
    db.execute(delete(Wishlist).where(Wishlist.user_id == user.id))
    db.execute(delete(Notification).where(Notification.user_id == user.id))
    db.execute(delete(Promocode).where(Promocode.creator_id == user.id))
    db.execute(delete(LoginSession).where(LoginSession.user_id == user.id))

    if own_event_ids:
        db.execute(delete(Review).where(Review.event_id.in_(own_event_ids)))
        db.execute(delete(Wishlist).where(Wishlist.event_id.in_(own_event_ids)))
        db.execute(delete(Promocode).where(Promocode.event_id.in_(own_event_ids)))
        db.execute(delete(Event).where(Event.id.in_(own_event_ids)))

    for event_id in reviewed_event_ids - set(own_event_ids):
        recompute_event_rating(db, event_id)

    db.delete(user)
    db.commit()
    logger.info(
        "user_deleted",
        user_id=user_id,
        by=actor.id,
        events_removed=len(own_event_ids),
    )


def bootstrap_admin(db: Session) -> User | None:
    if not settings.bootstrap_admin_password:
        return None
    if db.scalar(select(func.count()).select_from(User)):
        return None

    admin = create_user(
        db,
        username=settings.bootstrap_admin_username,
        email=settings.bootstrap_admin_email,
        password=settings.bootstrap_admin_password,
        role=UserRole.ADMIN,
        full_name="Admin User",
    )
    db.commit()
    logger.info("admin_bootstrapped", user_id=admin.id, username=admin.username)
    return admin
