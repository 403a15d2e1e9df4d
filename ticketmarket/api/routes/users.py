from __future__ import annotations

from fastapi import APIRouter, Request, Response

from ticketmarket.api.schemas import (
    FollowStatusOut,
    PasswordChangeIn,
    ProfileUpdate,
    PublicUserOut,
    ReviewOut,
    UserOut,
)
from ticketmarket.api.schemas.common import MessageOut
from ticketmarket.auth.deps import CurrentUser, DBSession, session_token_from_request
from ticketmarket.services import reviews_service, social_service, users_service

router = APIRouter(tags=["users"])


@router.get("/user/{user_id}", response_model=PublicUserOut)
def get_user(user_id: int, db: DBSession):
    return users_service.get_user(db, user_id)


@router.patch("/user/{user_id}", response_model=UserOut)
def update_user(user_id: int, payload: ProfileUpdate, user: CurrentUser, db: DBSession):
    return users_service.update_profile(db, user, user_id, payload.model_dump(exclude_unset=True))


@router.patch("/user/{user_id}/password", response_model=MessageOut)
def change_password(
    user_id: int,
    payload: PasswordChangeIn,
    request: Request,
    user: CurrentUser,
    db: DBSession,
):
    users_service.change_password(
        db,
        user,
        user_id,
        payload.current_password,
        payload.new_password,
        keep_session=session_token_from_request(request),
    )
    return MessageOut(message="Password updated successfully")


@router.get("/users/{user_id}/followers", response_model=list[PublicUserOut])
def followers(user_id: int, db: DBSession):
    return social_service.followers_of(db, user_id)


@router.get("/users/{user_id}/following", response_model=list[PublicUserOut])
def following(user_id: int, db: DBSession):
    return social_service.following_of(db, user_id)


@router.get("/users/{user_id}/reviews", response_model=list[ReviewOut])
def user_reviews(user_id: int, db: DBSession):
    users_service.get_user(db, user_id)
    return reviews_service.reviews_by_user(db, user_id)


@router.get("/users/{user_id}/follow", response_model=FollowStatusOut)
def follow_status(user_id: int, user: CurrentUser, db: DBSession):
    return FollowStatusOut(
        organizer_id=user_id,
        following=social_service.is_following(db, user.id, user_id),
    )


@router.post("/users/{user_id}/follow", response_model=FollowStatusOut, status_code=201)
def follow(user_id: int, user: CurrentUser, db: DBSession):
    social_service.follow(db, user, user_id)
    return FollowStatusOut(organizer_id=user_id, following=True)


@router.delete("/users/{user_id}/follow", status_code=204)
def unfollow(user_id: int, user: CurrentUser, db: DBSession):
    social_service.unfollow(db, user, user_id)
    return Response(status_code=204)
