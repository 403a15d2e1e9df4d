from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request, Response

from ticketmarket.api.schemas import AdminUserCreate, AdminUserUpdate, UserOut
from ticketmarket.auth.deps import AdminUser, DBSession, require_role, session_token_from_request
from ticketmarket.models.user import UserRole
from ticketmarket.services import users_service

router = APIRouter(
    prefix="/admin/users",
    tags=["admin"],
    dependencies=[Depends(require_role(UserRole.ADMIN))],
)


@router.get("", response_model=list[UserOut])
def list_users(
    db: DBSession,
    search: str | None = Query(default=None, min_length=1),
    limit: int = Query(default=100, ge=1, le=500),
):
    return users_service.list_users(db, search=search, limit=limit)


@router.post("", response_model=UserOut, status_code=201)
def create_user(payload: AdminUserCreate, db: DBSession):
    user = users_service.create_user(db, **payload.model_dump())
    db.commit()
    db.refresh(user)
    return user


@router.patch("/{user_id}", response_model=UserOut)
def update_user(
    user_id: int,
    payload: AdminUserUpdate,
    request: Request,
    db: DBSession,
    admin: AdminUser,
):
    return users_service.update_profile(
        db,
        admin,
        user_id,
        payload.model_dump(exclude_unset=True),
        keep_session=session_token_from_request(request),
    )


@router.delete("/{user_id}", status_code=204)
def delete_user(user_id: int, db: DBSession, admin: AdminUser):
    users_service.delete_user(db, admin, user_id)
    return Response(status_code=204)
