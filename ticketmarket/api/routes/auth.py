from __future__ import annotations

from fastapi import APIRouter, Request, Response

from ticketmarket.api.schemas import LoginIn, RegisterIn, UserOut
from ticketmarket.api.schemas.common import MessageOut
from ticketmarket.auth.deps import CurrentUser, DBSession, session_token_from_request
from ticketmarket.auth.sessions import open_session, revoke_session
from ticketmarket.core.config import settings
from ticketmarket.services import users_service

router = APIRouter(tags=["auth"])


def _set_session_cookie(response: Response, raw_token: str) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=raw_token,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite=settings.session_cookie_samesite,
        max_age=int(settings.session_ttl_days * 86400),
        path="/",
    )


@router.post("/register", response_model=UserOut, status_code=201)
def register(payload: RegisterIn, request: Request, response: Response, db: DBSession):
    user = users_service.create_user(
        db,
        username=payload.username,
        email=payload.email,
        password=payload.password,
        role=payload.role,
        full_name=payload.full_name,
    )
    raw_token = open_session(db, user, request.headers.get("User-Agent"))
    db.commit()
    db.refresh(user)

    _set_session_cookie(response, raw_token)
    return user


@router.post("/login", response_model=UserOut)
def login(payload: LoginIn, request: Request, response: Response, db: DBSession):
    user = users_service.authenticate(db, payload.username, payload.password)
    raw_token = open_session(db, user, request.headers.get("User-Agent"))
    db.commit()
    db.refresh(user)

    _set_session_cookie(response, raw_token)
    return user


@router.post("/logout", response_model=MessageOut)
def logout(request: Request, response: Response, db: DBSession):
    raw_token = session_token_from_request(request)
    if raw_token:
        revoke_session(db, raw_token)
        db.commit()

    response.delete_cookie(key=settings.session_cookie_name, path="/")
    return MessageOut(message="Logged out successfully")


@router.get("/user", response_model=UserOut)
def current_user(user: CurrentUser):
    return user
