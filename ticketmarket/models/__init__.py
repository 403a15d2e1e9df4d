from ticketmarket.models.base import Base
from ticketmarket.models.event import Event
from ticketmarket.models.follower import Follower
from ticketmarket.models.login_session import LoginSession
from ticketmarket.models.notification import Notification
from ticketmarket.models.promocode import Promocode
from ticketmarket.models.purchase import Purchase
from ticketmarket.models.review import Review
from ticketmarket.models.user import User
from ticketmarket.models.wishlist import Wishlist

__all__ = [
    "Base",
    "User",
    "LoginSession",
    "Event",
    "Purchase",
    "Review",
    "Follower",
    "Wishlist",
    "Notification",
    "Promocode",
]
