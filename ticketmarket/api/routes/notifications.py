from fastapi import APIRouter, Query, Response

from ticketmarket.api.schemas import NotificationOut, ReadAllOut
from ticketmarket.auth.deps import CurrentUser, DBSession
from ticketmarket.services import notifications_service

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationOut])
def list_notifications(user: CurrentUser, db: DBSession, unread_only: bool = Query(default=False)):
    return notifications_service.list_notifications(db, user, unread_only=unread_only)


@router.post("/read-all", response_model=ReadAllOut)
def mark_all_read(user: CurrentUser, db: DBSession):
    return ReadAllOut(updated=notifications_service.mark_all_read(db, user))


@router.post("/{notification_id}/read", response_model=NotificationOut)
def mark_read(notification_id: int, user: CurrentUser, db: DBSession):
    return notifications_service.mark_read(db, user, notification_id)


@router.delete("/{notification_id}", status_code=204)
def delete_notification(notification_id: int, user: CurrentUser, db: DBSession):
    notifications_service.delete_notification(db, user, notification_id)
    return Response(status_code=204)
