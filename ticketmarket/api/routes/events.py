from __future__ import annotations

import datetime as dt

from fastapi import APIRouter, Query, Response

from ticketmarket.api.schemas import (
    EventCreate,
    EventOut,
    EventUpdate,
    PromocodeOut,
    PurchaseOut,
    ReviewCreate,
    ReviewOut,
)
from ticketmarket.auth.deps import CurrentUser, DBSession, OptionalUser, OrganizerUser
from ticketmarket.core.config import settings
from ticketmarket.services import events_service, promocodes_service, reviews_service

router = APIRouter(tags=["events"])


@router.get("/events", response_model=list[EventOut])
def list_events(
    db: DBSession,
    search: str | None = Query(default=None, max_length=200),
    genre: str | None = Query(default=None, max_length=64),
    date: dt.date | None = Query(default=None),
    featured: bool | None = Query(default=None),
):
    return events_service.list_events(
        db, search=search, genre=genre, on_date=date, featured=featured
    )


@router.get("/events/featured", response_model=list[EventOut])
def featured_events(db: DBSession):
    return events_service.featured_events(db)


@router.get("/events/upcoming", response_model=list[EventOut])
def upcoming_events(db: DBSession, limit: int | None = Query(default=None, ge=1, le=100)):
    return events_service.upcoming_events(
        db, limit=limit or settings.upcoming_events_default_limit
    )


@router.get("/events/{event_id}", response_model=EventOut)
def get_event(event_id: int, db: DBSession, viewer: OptionalUser):
    return events_service.get_visible_event(db, viewer, event_id)


@router.post("/events", response_model=EventOut, status_code=201)
def create_event(payload: EventCreate, user: OrganizerUser, db: DBSession):
    return events_service.create_event(db, user, payload)


@router.patch("/events/{event_id}", response_model=EventOut)
def update_event(event_id: int, payload: EventUpdate, user: CurrentUser, db: DBSession):
    return events_service.update_event(db, user, event_id, payload)


@router.delete("/events/{event_id}", status_code=204)
def delete_event(event_id: int, user: CurrentUser, db: DBSession):
    events_service.delete_event(db, user, event_id)
    return Response(status_code=204)


@router.get("/events/{event_id}/purchases", response_model=list[PurchaseOut])
def event_purchases(event_id: int, user: CurrentUser, db: DBSession):
    return events_service.event_purchases(db, user, event_id)


@router.get("/events/{event_id}/promocodes", response_model=list[PromocodeOut])
def event_promocodes(event_id: int, user: CurrentUser, db: DBSession):
    return promocodes_service.promocodes_for_event(db, user, event_id)


@router.get("/events/{event_id}/reviews", response_model=list[ReviewOut])
def event_reviews(event_id: int, db: DBSession, viewer: OptionalUser):
    return reviews_service.reviews_for_event(db, viewer, event_id)


@router.post("/events/{event_id}/reviews", response_model=ReviewOut, status_code=201)
def create_review(event_id: int, payload: ReviewCreate, user: CurrentUser, db: DBSession):
    return reviews_service.create_review(db, user, event_id, payload)


@router.get("/my-events", response_model=list[EventOut])
def my_events(user: OrganizerUser, db: DBSession):
    return events_service.events_by_creator(db, user.id)
