from __future__ import annotations

from datetime import datetime

from pydantic import Field

from ticketmarket.api.schemas.common import SchemaBase


class ReviewCreate(SchemaBase):
    rating: int = Field(ge=1, le=5)
    comment: str | None = Field(default=None, max_length=5000)


class ReviewUpdate(SchemaBase):
    rating: int | None = Field(default=None, ge=1, le=5)
    comment: str | None = Field(default=None, max_length=5000)


class ReviewOut(SchemaBase):
    id: int
    event_id: int
    user_id: int
    rating: int
    comment: str | None = None
    created_at: datetime
    updated_at: datetime
