from __future__ import annotations

import os

import pytest
from fastapi.testclient import TestClient

# Settings are read at import time, so the environment goes first
os.environ.setdefault("ENV", "local")
os.environ.setdefault("DATABASE_URL", "sqlite:///./test_ticketmarket.db")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")
os.environ.setdefault("SESSION_TOKEN_PEPPER", "test_session_pepper")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("LOG_JSON", "false")

from ticketmarket.db import SessionLocal, engine  # noqa: E402
from ticketmarket.main import app  # noqa: E402
from ticketmarket.models import Base  # noqa: E402


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def clean_db():
    # Fresh schema for every test
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
