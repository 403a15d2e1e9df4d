from __future__ import annotations

from datetime import timedelta

from fastapi.testclient import TestClient
from sqlalchemy import select, update

from ticketmarket.auth.sessions import hash_session_token
from ticketmarket.core.clock import utcnow
from ticketmarket.models import LoginSession, User
from ticketmarket.models.user import UserRole

COOKIE = "ticketmarket_session"
PASSWORD = "StrongPass123"


def register(client: TestClient, username: str, password: str = PASSWORD, **extra):
    payload = {"username": username, "email": f"{username}@example.com", "password": password}
    payload.update(extra)
    return client.post("/api/register", json=payload)


def login(client: TestClient, username: str, password: str = PASSWORD):
    return client.post("/api/login", json={"username": username, "password": password})


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def signup(client: TestClient, username: str, role: str = "user", db_session=None) -> dict[str, str]:
    """Register ``username`` and return Bearer headers for its session.

    The shared client's cookie jar is cleared so several accounts can act
    through one TestClient. Pass ``db_session`` to promote the account to admin.
    """
    resp = register(client, username, role="organizer" if role == "organizer" else "user")
    assert resp.status_code == 201, resp.text
    token = resp.cookies.get(COOKIE)
    client.cookies.clear()
    assert token

    if role == "admin":
        db_session.execute(
            update(User).where(User.username == username).values(role=UserRole.ADMIN)
        )
        db_session.commit()
    return auth_headers(token)


def user_id(client: TestClient, headers: dict[str, str]) -> int:
    return client.get("/api/user", headers=headers).json()["id"]


def test_register_sets_session_cookie_and_returns_user(client: TestClient):
    resp = register(client, "alice", full_name="Alice A")
    assert resp.status_code == 201
    body = resp.json()
    assert body["username"] == "alice"
    assert body["email"] == "alice@example.com"
    assert body["role"] == "user"
    assert "password_hash" not in body

    set_cookie = resp.headers.get("set-cookie", "")
    assert COOKIE in set_cookie
    assert "httponly" in set_cookie.lower()

    me = client.get("/api/user")
    assert me.status_code == 200
    assert me.json()["username"] == "alice"


def test_register_rejects_duplicates(client: TestClient):
    assert register(client, "bob").status_code == 201

    dup_name = client.post(
        "/api/register",
        json={"username": "bob", "email": "other@example.com", "password": PASSWORD},
    )
    assert dup_name.status_code == 409
    assert dup_name.json()["detail"]["code"] == "USERNAME_TAKEN"

    dup_email = client.post(
        "/api/register",
        json={"username": "bobby", "email": "BOB@example.com", "password": PASSWORD},
    )
    assert dup_email.status_code == 409
    assert dup_email.json()["detail"]["code"] == "EMAIL_TAKEN"


def test_register_cannot_self_assign_admin(client: TestClient):
    resp = register(client, "mallory", role="admin")
    assert resp.status_code == 422


def test_register_as_organizer(client: TestClient):
    resp = register(client, "olivia", role="organizer")
    assert resp.status_code == 201
    assert resp.json()["role"] == "organizer"


def test_login_with_wrong_password_is_rejected(client: TestClient):
    register(client, "carol")
    client.cookies.clear()

    resp = login(client, "carol", "WrongPass123")
    assert resp.status_code == 401
    assert resp.json()["detail"] == {
        "code": "INVALID_CREDENTIALS",
        "message": "Incorrect username or password",
    }

    resp = login(client, "nobody")
    assert resp.status_code == 401


def test_login_records_last_login(client: TestClient):
    register(client, "dave")
    client.cookies.clear()

    resp = login(client, "dave")
    assert resp.status_code == 200
    assert resp.json()["last_login_at"] is not None
    assert resp.cookies.get(COOKIE)


def test_current_user_requires_authentication(client: TestClient):
    resp = client.get("/api/user")
    assert resp.status_code == 401
    assert resp.json()["detail"]["code"] == "NOT_AUTHENTICATED"


def test_bearer_token_is_accepted(client: TestClient):
    headers = signup(client, "erin")
    resp = client.get("/api/user", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["username"] == "erin"


def test_session_token_is_stored_hashed(client: TestClient, db_session):
    resp = register(client, "frank")
    raw = resp.cookies.get(COOKIE)

    rows = db_session.scalars(select(LoginSession)).all()
    assert len(rows) == 1
    assert rows[0].token_hash == hash_session_token(raw)
    assert rows[0].token_hash != raw


def test_logout_revokes_session(client: TestClient, db_session):
    headers = signup(client, "grace")

    resp = client.post("/api/logout", headers=headers)
    assert resp.status_code == 200
    assert resp.json() == {"message": "Logged out successfully"}

    row = db_session.scalar(select(LoginSession))
    assert row.revoked_at is not None
    assert client.get("/api/user", headers=headers).status_code == 401


def test_expired_session_is_rejected(client: TestClient, db_session):
    headers = signup(client, "heidi")
    db_session.execute(update(LoginSession).values(expires_at=utcnow() - timedelta(minutes=1)))
    db_session.commit()

    assert client.get("/api/user", headers=headers).status_code == 401


def test_password_change_revokes_other_sessions(client: TestClient):
    first = signup(client, "ivan")
    second_login = login(client, "ivan")
    second = auth_headers(second_login.cookies.get(COOKIE))
    client.cookies.clear()
    uid = user_id(client, first)

    bad = client.patch(
        f"/api/user/{uid}/password",
        json={"current_password": "nope-nope", "new_password": "NewStrongPass1"},
        headers=first,
    )
    assert bad.status_code == 400
    assert bad.json()["detail"]["code"] == "INVALID_PASSWORD"

    ok = client.patch(
        f"/api/user/{uid}/password",
        json={"current_password": PASSWORD, "new_password": "NewStrongPass1"},
        headers=first,
    )
    assert ok.status_code == 200
    assert ok.json()["message"] == "Password updated successfully"

    assert client.get("/api/user", headers=first).status_code == 200
    assert client.get("/api/user", headers=second).status_code == 401
    assert login(client, "ivan").status_code == 401
    assert login(client, "ivan", "NewStrongPass1").status_code == 200


def test_plain_user_cannot_create_events(client: TestClient):
    headers = signup(client, "judy")
    resp = client.post(
        "/api/events",
        json={
            "title": "Nope",
            "description": "d",
            "date": "2030-01-01",
            "time": "19:00",
            "location": "Somewhere",
            "price": "10.00",
            "image_url": "https://img.example.com/x.png",
        },
        headers=headers,
    )
    assert resp.status_code == 403
    assert resp.json()["detail"]["code"] == "FORBIDDEN"


def test_admin_routes_require_admin(client: TestClient, db_session):
    organizer = signup(client, "oscar", role="organizer")
    admin = signup(client, "root", role="admin", db_session=db_session)

    assert client.get("/api/admin/users").status_code == 401
    assert client.get("/api/admin/users", headers=organizer).status_code == 403
    assert client.get("/api/admin/users", headers=admin).status_code == 200
