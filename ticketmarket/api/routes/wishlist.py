from fastapi import APIRouter, Response

from ticketmarket.api.schemas import EventOut, WishlistAddIn, WishlistStatusOut
from ticketmarket.auth.deps import CurrentUser, DBSession
from ticketmarket.services import social_service

router = APIRouter(prefix="/wishlist", tags=["wishlist"])


@router.get("", response_model=list[EventOut])
def get_wishlist(user: CurrentUser, db: DBSession):
    return social_service.wishlist_events(db, user)


@router.post("", response_model=EventOut, status_code=201)
def add_to_wishlist(payload: WishlistAddIn, user: CurrentUser, db: DBSession):
    return social_service.add_to_wishlist(db, user, payload.event_id)


@router.get("/{event_id}", response_model=WishlistStatusOut)
def wishlist_status(event_id: int, user: CurrentUser, db: DBSession):
    return WishlistStatusOut(
        event_id=event_id,
        in_wishlist=social_service.in_wishlist(db, user, event_id),
    )


@router.delete("/{event_id}", status_code=204)
def remove_from_wishlist(event_id: int, user: CurrentUser, db: DBSession):
    social_service.remove_from_wishlist(db, user, event_id)
    return Response(status_code=204)
