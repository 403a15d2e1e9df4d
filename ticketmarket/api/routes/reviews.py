from fastapi import APIRouter, Response

from ticketmarket.api.schemas import ReviewOut, ReviewUpdate
from ticketmarket.auth.deps import CurrentUser, DBSession
from ticketmarket.services import reviews_service

router = APIRouter(prefix="/reviews", tags=["reviews"])


@router.patch("/{review_id}", response_model=ReviewOut)
def update_review(review_id: int, payload: ReviewUpdate, user: CurrentUser, db: DBSession):
    return reviews_service.update_review(db, user, review_id, payload)


@router.delete("/{review_id}", status_code=204)
def delete_review(review_id: int, user: CurrentUser, db: DBSession):
    reviews_service.delete_review(db, user, review_id)
    return Response(status_code=204)
