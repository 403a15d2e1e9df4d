from __future__ import annotations

import datetime as dt
from decimal import Decimal

from pydantic import Field, model_validator

from ticketmarket.api.schemas.common import SchemaBase


def _check_end_after_start(start: dt.date | None, end: dt.date | None) -> None:
    if start and end and end < start:
        raise ValueError("end_date must not be before date")


class EventCreate(SchemaBase):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1)
    date: dt.date
    time: str = Field(min_length=1, max_length=32)
    end_date: dt.date | None = None
    end_time: str | None = Field(default=None, max_length=32)
    location: str = Field(min_length=1, max_length=300)
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    genre: str | None = Field(default=None, max_length=64)
    image_url: str = Field(min_length=1, max_length=1024)
    capacity: int | None = Field(default=None, ge=1)
    is_featured: bool = False
    published: bool = True

    @model_validator(mode="after")
    def _validate_dates(self):
        _check_end_after_start(self.date, self.end_date)
        return self


class EventUpdate(SchemaBase):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, min_length=1)
    date: dt.date | None = None
    time: str | None = Field(default=None, min_length=1, max_length=32)
    end_date: dt.date | None = None
    end_time: str | None = Field(default=None, max_length=32)
    location: str | None = Field(default=None, min_length=1, max_length=300)
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    price: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    genre: str | None = Field(default=None, max_length=64)
    image_url: str | None = Field(default=None, min_length=1, max_length=1024)
    capacity: int | None = Field(default=None, ge=1)
    is_featured: bool | None = None
    published: bool | None = None

    @model_validator(mode="after")
    def _validate_dates(self):
        _check_end_after_start(self.date, self.end_date)
        return self


class EventOut(SchemaBase):
    id: int
    title: str
    description: str
    date: dt.date
    time: str
    end_date: dt.date | None = None
    end_time: str | None = None
    location: str
    latitude: float | None = None
    longitude: float | None = None
    price: float
    genre: str | None = None
    image_url: str
    capacity: int | None = None
    is_featured: bool
    published: bool
    creator_id: int
    average_rating: float | None = None
    total_ratings: int
    created_at: dt.datetime
    updated_at: dt.datetime
