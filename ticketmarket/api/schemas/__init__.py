from ticketmarket.api.schemas.events import EventCreate, EventOut, EventUpdate
from ticketmarket.api.schemas.promocodes import (
    PromocodeCreate,
    PromocodeOut,
    PromocodeUpdate,
    PromocodeValidationOut,
)
from ticketmarket.api.schemas.purchases import (
    CheckInIn,
    PurchaseCreate,
    PurchaseCreatedOut,
    PurchaseOut,
    PurchaseStatusUpdate,
)
from ticketmarket.api.schemas.reviews import ReviewCreate, ReviewOut, ReviewUpdate
from ticketmarket.api.schemas.social import (
    NotificationOut,
    ReadAllOut,
    WishlistAddIn,
    WishlistStatusOut,
)
from ticketmarket.api.schemas.users import (
    AdminUserCreate,
    AdminUserUpdate,
    FollowStatusOut,
    LoginIn,
    PasswordChangeIn,
    ProfileUpdate,
    PublicUserOut,
    RegisterIn,
    UserOut,
)

__all__ = [
    "EventCreate",
    "EventUpdate",
    "EventOut",
    "PurchaseCreate",
    "PurchaseCreatedOut",
    "PurchaseOut",
    "PurchaseStatusUpdate",
    "CheckInIn",
    "ReviewCreate",
    "ReviewUpdate",
    "ReviewOut",
    "WishlistAddIn",
    "WishlistStatusOut",
    "NotificationOut",
    "ReadAllOut",
    "PromocodeCreate",
    "PromocodeUpdate",
    "PromocodeOut",
    "PromocodeValidationOut",
    "RegisterIn",
    "LoginIn",
    "UserOut",
    "PublicUserOut",
    "ProfileUpdate",
    "PasswordChangeIn",
    "AdminUserCreate",
    "AdminUserUpdate",
    "FollowStatusOut",
]
