from ticketmarket.services.events_service import create_event, delete_event, update_event
from ticketmarket.services.promocodes_service import redeem, validate_promocode
from ticketmarket.services.purchases_service import check_in, create_purchase
from ticketmarket.services.reviews_service import create_review, recompute_event_rating

__all__ = [
    "create_event",
    "update_event",
    "delete_event",
    "create_purchase",
    "check_in",
    "validate_promocode",
    "redeem",
    "create_review",
    "recompute_event_rating",
]
