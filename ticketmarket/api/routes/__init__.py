from fastapi import APIRouter

from ticketmarket.api.routes.admin_users import router as admin_users_router
from ticketmarket.api.routes.auth import router as auth_router
from ticketmarket.api.routes.events import router as events_router
from ticketmarket.api.routes.notifications import router as notifications_router
from ticketmarket.api.routes.promocodes import router as promocodes_router
from ticketmarket.api.routes.purchases import router as purchases_router
from ticketmarket.api.routes.reviews import router as reviews_router
from ticketmarket.api.routes.users import router as users_router
from ticketmarket.api.routes.wishlist import router as wishlist_router

router = APIRouter()
router.include_router(auth_router)
router.include_router(users_router)
router.include_router(admin_users_router)
router.include_router(events_router)
router.include_router(purchases_router)
router.include_router(reviews_router)
router.include_router(wishlist_router)
router.include_router(notifications_router)
router.include_router(promocodes_router)
