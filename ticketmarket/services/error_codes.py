from enum import Enum


class ErrorCode(str, Enum):
    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    FORBIDDEN = "FORBIDDEN"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    RATE_LIMITED = "RATE_LIMITED"

    USER_NOT_FOUND = "USER_NOT_FOUND"
    USERNAME_TAKEN = "USERNAME_TAKEN"
    EMAIL_TAKEN = "EMAIL_TAKEN"
    INVALID_PASSWORD = "INVALID_PASSWORD"
    CANNOT_CHANGE_OWN_ROLE = "CANNOT_CHANGE_OWN_ROLE"
    CANNOT_DELETE_SELF = "CANNOT_DELETE_SELF"
    USER_HAS_SOLD_EVENTS = "USER_HAS_SOLD_EVENTS"

    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    EVENT_NOT_PUBLISHED = "EVENT_NOT_PUBLISHED"
    EVENT_SOLD_OUT = "EVENT_SOLD_OUT"
    EVENT_HAS_PURCHASES = "EVENT_HAS_PURCHASES"
    CAPACITY_BELOW_SOLD = "CAPACITY_BELOW_SOLD"

    PURCHASE_NOT_FOUND = "PURCHASE_NOT_FOUND"
    TICKET_NOT_FOUND = "TICKET_NOT_FOUND"
    TICKET_ALREADY_CHECKED_IN = "TICKET_ALREADY_CHECKED_IN"
    TICKET_NOT_VALID = "TICKET_NOT_VALID"
    TICKET_CODE_COLLISION = "TICKET_CODE_COLLISION"

    REVIEW_NOT_FOUND = "REVIEW_NOT_FOUND"

    NOT_AN_ORGANIZER = "NOT_AN_ORGANIZER"
    CANNOT_FOLLOW_SELF = "CANNOT_FOLLOW_SELF"
    ALREADY_FOLLOWING = "ALREADY_FOLLOWING"
    NOT_FOLLOWING = "NOT_FOLLOWING"

    ALREADY_IN_WISHLIST = "ALREADY_IN_WISHLIST"
    NOT_IN_WISHLIST = "NOT_IN_WISHLIST"

    NOTIFICATION_NOT_FOUND = "NOTIFICATION_NOT_FOUND"

    PROMOCODE_NOT_FOUND = "PROMOCODE_NOT_FOUND"
    PROMOCODE_EXISTS = "PROMOCODE_EXISTS"
    PROMOCODE_INVALID = "PROMOCODE_INVALID"
    PROMOCODE_EXHAUSTED = "PROMOCODE_EXHAUSTED"
