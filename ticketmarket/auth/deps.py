from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from ticketmarket.auth.sessions import resolve_session
from ticketmarket.core.config import settings
from ticketmarket.db import get_db
from ticketmarket.models import User
from ticketmarket.models.user import UserRole
from ticketmarket.services.error_codes import ErrorCode

DBSession = Annotated[Session, Depends(get_db)]


def _unauthorized(message: str = "Authentication required") -> HTTPException:
    return HTTPException(
        status_code=401,
        detail={"code": ErrorCode.NOT_AUTHENTICATED.value, "message": message},
    )


def session_token_from_request(request: Request) -> str | None:
    token = request.cookies.get(settings.session_cookie_name)
    if token:
        return token

    auth = request.headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        return auth.removeprefix("Bearer ").strip() or None
    return None


def get_optional_user(request: Request, db: DBSession) -> User | None:
    token = session_token_from_request(request)
    if not token:
        return None
    return resolve_session(db, token)


def get_current_user(user: Annotated[User | None, Depends(get_optional_user)]) -> User:
    if user is None:
        raise _unauthorized()
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]
OptionalUser = Annotated[User | None, Depends(get_optional_user)]


def require_role(*roles: UserRole):
    allowed = set(roles)

    def _dependency(user: CurrentUser) -> User:
        if user.role not in allowed:
            raise HTTPException(
                status_code=403,
                detail={
                    "code": ErrorCode.FORBIDDEN.value,
                    "message": "You don't have permission to access this resource",
                },
            )
        return user

    return _dependency


OrganizerUser = Annotated[User, Depends(require_role(UserRole.ORGANIZER, UserRole.ADMIN))]
AdminUser = Annotated[User, Depends(require_role(UserRole.ADMIN))]
