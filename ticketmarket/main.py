from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from ticketmarket.api.errors import install_error_handlers
from ticketmarket.api.routes import router as api_router
from ticketmarket.core.config import settings
from ticketmarket.core.logging import configure_logging
from ticketmarket.db import SessionLocal, create_tables
from ticketmarket.middleware.rate_limit import RateLimitMiddleware
from ticketmarket.middleware.request_id import RequestIdMiddleware
from ticketmarket.middleware.security_headers import SecurityHeadersMiddleware
from ticketmarket.services.users_service import bootstrap_admin

configure_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.auto_create_tables:
        create_tables()
    with SessionLocal() as db:
        bootstrap_admin(db)
    logger.info("app_started", env=settings.env)
    yield


app = FastAPI(title="TicketMarket API", lifespan=lifespan)

# Starlette runs the LAST added middleware FIRST (outermost).
# RequestId and SecurityHeaders wrap CORS preflight and 429 responses too;
# RateLimit sits closest to the app.
app.add_middleware(RateLimitMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestIdMiddleware)

install_error_handlers(app)

Instrumentator().instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)


@app.get("/")
def root():
    return {"name": "TicketMarket API", "status": "ok"}


@app.get("/health")
def health():
    return {"status": "ok"}


app.include_router(api_router, prefix="/api")
