"""Server-side login sessions.

The browser only ever holds an opaque random token in an http-only cookie; the
database stores a peppered SHA-256 of it together with the owning user and the
expiry, so a leaked table cannot be replayed as cookies.
"""

from __future__ import annotations

import hashlib
import secrets
from datetime import timedelta

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from ticketmarket.core.clock import as_utc, utcnow
from ticketmarket.core.config import settings
from ticketmarket.models import LoginSession, User


def hash_session_token(raw_token: str) -> str:
    data = f"{raw_token}{settings.session_token_pepper}".encode("utf-8")
    return hashlib.sha256(data).hexdigest()


def open_session(db: Session, user: User, user_agent: str | None = None) -> str:
    """Add a session row for ``user`` and return the raw token. Caller commits."""
    raw_token = secrets.token_urlsafe(48)
    now = utcnow()
    db.add(
        LoginSession(
            user_id=user.id,
            token_hash=hash_session_token(raw_token),
            issued_at=now,
            expires_at=now + timedelta(days=settings.session_ttl_days),
            user_agent=(user_agent or "")[:300] or None,
        )
    )
    db.flush()
    return raw_token


def resolve_session(db: Session, raw_token: str) -> User | None:
    row = db.scalar(
        select(LoginSession).where(LoginSession.token_hash == hash_session_token(raw_token))
    )
    if row is None or row.revoked_at is not None:
        return None
    if as_utc(row.expires_at) <= utcnow():
        return None
    return db.get(User, row.user_id)


def revoke_session(db: Session, raw_token: str) -> bool:
    row = db.scalar(
        select(LoginSession).where(LoginSession.token_hash == hash_session_token(raw_token))
    )
    if row is None or row.revoked_at is not None:
        return False
    row.revoked_at = utcnow()
    db.add(row)
    return True


def revoke_user_sessions(db: Session, user_id: int, keep_token: str | None = None) -> int:
    stmt = (
        update(LoginSession)
        .where(LoginSession.user_id == user_id)
        .where(LoginSession.revoked_at.is_(None))
    )
    if keep_token:
        stmt = stmt.where(LoginSession.token_hash != hash_session_token(keep_token))
    result = db.execute(stmt.values(revoked_at=utcnow()))
    return result.rowcount or 0
