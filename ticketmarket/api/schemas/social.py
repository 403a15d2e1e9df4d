from __future__ import annotations

from datetime import datetime

from ticketmarket.api.schemas.common import SchemaBase


class WishlistAddIn(SchemaBase):
    event_id: int


class WishlistStatusOut(SchemaBase):
    event_id: int
    in_wishlist: bool


class NotificationOut(SchemaBase):
    id: int
    user_id: int
    type: str
    message: str
    related_id: int | None = None
    is_read: bool
    created_at: datetime


class ReadAllOut(SchemaBase):
    updated: int
