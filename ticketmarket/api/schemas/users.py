from __future__ import annotations

from datetime import datetime

from pydantic import EmailStr, Field, field_validator

from ticketmarket.api.schemas.common import SchemaBase
from ticketmarket.models.user import UserRole

USERNAME_PATTERN = r"^[A-Za-z0-9_.-]+$"


class _UsernameMixin(SchemaBase):
    @field_validator("username", mode="before", check_fields=False)
    @classmethod
    def _strip_username(cls, value):
        return value.strip() if isinstance(value, str) else value


class _AccountFields(_UsernameMixin):
    username: str = Field(min_length=3, max_length=64, pattern=USERNAME_PATTERN)
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    full_name: str | None = Field(default=None, max_length=200)


class RegisterIn(_AccountFields):
    role: UserRole = UserRole.USER

    @field_validator("role")
    @classmethod
    def _no_self_service_admin(cls, value: UserRole) -> UserRole:
        if value == UserRole.ADMIN:
            raise ValueError("admin accounts cannot be self-registered")
        return value


class LoginIn(SchemaBase):
    username: str
    password: str


class UserOut(SchemaBase):
    id: int
    username: str
    email: str
    full_name: str | None = None
    role: UserRole
    profile_image: str | None = None
    bio: str | None = None
    phone: str | None = None
    last_login_at: datetime | None = None
    created_at: datetime


class PublicUserOut(SchemaBase):
    id: int
    username: str
    full_name: str | None = None
    role: UserRole
    profile_image: str | None = None
    bio: str | None = None


class ProfileUpdate(_UsernameMixin):
    username: str | None = Field(default=None, min_length=3, max_length=64, pattern=USERNAME_PATTERN)
    email: EmailStr | None = None
    full_name: str | None = Field(default=None, max_length=200)
    profile_image: str | None = Field(default=None, max_length=500)
    bio: str | None = None
    phone: str | None = Field(default=None, max_length=32)


class PasswordChangeIn(SchemaBase):
    current_password: str | None = None
    new_password: str = Field(min_length=8, max_length=128)


class AdminUserCreate(_AccountFields):
    role: UserRole = UserRole.USER
    bio: str | None = None
    phone: str | None = Field(default=None, max_length=32)


class AdminUserUpdate(ProfileUpdate):
    role: UserRole | None = None
    password: str | None = Field(default=None, min_length=8, max_length=128)


class FollowStatusOut(SchemaBase):
    organizer_id: int
    following: bool
