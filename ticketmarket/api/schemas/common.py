from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict


def ensure_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return value
    if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
        raise ValueError("datetime must be timezone-aware")
    return value.astimezone(timezone.utc)


class SchemaBase(BaseModel):
    model_config = ConfigDict(from_attributes=True, extra="ignore")


class MessageOut(SchemaBase):
    message: str
