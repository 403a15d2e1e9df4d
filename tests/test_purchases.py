from __future__ import annotations

from fastapi.testclient import TestClient
from sqlalchemy import select

from ticketmarket.models import Notification
from tests.test_auth_rbac import signup, user_id
from tests.test_events_integration import buy, create_event


def test_purchase_computes_totals_and_issues_ticket(client: TestClient, db_session):
    org = signup(client, "org1", role="organizer")
    buyer = signup(client, "buyer1")
    event = create_event(client, org, price="19.99", title="Opera")

    resp = buy(client, buyer, event["id"], quantity=3, customer_email="Buyer@Example.com")
    assert resp.status_code == 201
    body = resp.json()
    assert body["message"] == "Purchase successful"

    purchase = body["purchase"]
    assert purchase["unit_price"] == 19.99
    assert purchase["subtotal_amount"] == 59.97
    assert purchase["discount_amount"] == 0
    assert purchase["total_amount"] == 59.97
    assert purchase["status"] == "completed"
    assert purchase["customer_email"] == "buyer@example.com"
    assert purchase["is_checked_in"] is False
    assert purchase["ticket_code"]
    assert purchase["qr_code_url"].endswith(purchase["ticket_code"])

    notes = db_session.scalars(
        select(Notification).where(Notification.user_id == user_id(client, buyer))
    ).all()
    assert [n.message for n in notes] == [
        'You have successfully purchased 3 ticket(s) for "Opera".'
    ]
    assert notes[0].type == "purchase"
    assert notes[0].related_id == purchase["id"]


def test_ticket_codes_are_unique(client: TestClient):
    org = signup(client, "org2", role="organizer")
    buyer = signup(client, "buyer2")
    event = create_event(client, org)

    codes = {buy(client, buyer, event["id"]).json()["purchase"]["ticket_code"] for _ in range(5)}
    assert len(codes) == 5


def test_purchase_requires_authentication(client: TestClient):
    org = signup(client, "org3", role="organizer")
    event = create_event(client, org)

    resp = client.post(
        "/api/purchases",
        json={
            "event_id": event["id"],
            "quantity": 1,
            "customer_name": "Anon",
            "customer_email": "anon@example.com",
        },
    )
    assert resp.status_code == 401


def test_purchase_validation(client: TestClient):
    org = signup(client, "org4", role="organizer")
    buyer = signup(client, "buyer4")
    event = create_event(client, org)

    assert buy(client, buyer, event["id"], quantity=0).status_code == 422
    assert buy(client, buyer, event["id"], customer_email="not-an-email").status_code == 422
    assert buy(client, buyer, 424242).status_code == 404


def test_capacity_is_enforced(client: TestClient):
    org = signup(client, "org5", role="organizer")
    buyer = signup(client, "buyer5")
    event = create_event(client, org, capacity=3)

    assert buy(client, buyer, event["id"], quantity=2).status_code == 201

    resp = buy(client, buyer, event["id"], quantity=2)
    assert resp.status_code == 409
    assert resp.json()["detail"]["code"] == "EVENT_SOLD_OUT"

    assert buy(client, buyer, event["id"], quantity=1).status_code == 201


def test_canceled_purchase_releases_seats(client: TestClient):
    org = signup(client, "org6", role="organizer")
    buyer = signup(client, "buyer6")
    event = create_event(client, org, capacity=2)
    purchase = buy(client, buyer, event["id"], quantity=2).json()["purchase"]
    assert buy(client, buyer, event["id"]).status_code == 409

    resp = client.patch(
        f"/api/purchases/{purchase['id']}/status", json={"status": "canceled"}, headers=org
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "canceled"

    assert buy(client, buyer, event["id"], quantity=2).status_code == 201


def test_reactivating_purchase_respects_capacity(client: TestClient):
    org = signup(client, "org6b", role="organizer")
    buyer = signup(client, "buyer6b")
    other = signup(client, "other6b")
    event = create_event(client, org, capacity=2)
    first = buy(client, buyer, event["id"], quantity=2).json()["purchase"]
    client.patch(
        f"/api/purchases/{first['id']}/status", json={"status": "canceled"}, headers=org
    )
    assert buy(client, other, event["id"], quantity=2).status_code == 201

    resp = client.patch(
        f"/api/purchases/{first['id']}/status", json={"status": "completed"}, headers=org
    )
    assert resp.status_code == 409
    assert resp.json()["detail"]["code"] == "EVENT_SOLD_OUT"

    sold = sum(
        p["quantity"]
        for p in client.get(f"/api/events/{event['id']}/purchases", headers=org).json()
        if p["status"] in {"pending", "completed"}
    )
    assert sold == 2

    # moving between canceled and refunded holds no seats
    resp = client.patch(
        f"/api/purchases/{first['id']}/status", json={"status": "refunded"}, headers=org
    )
    assert resp.status_code == 200


def test_unpublished_event_is_not_on_sale(client: TestClient):
    org = signup(client, "org7", role="organizer")
    buyer = signup(client, "buyer7")
    event = create_event(client, org, published=False)

    resp = buy(client, buyer, event["id"])
    assert resp.status_code == 409
    assert resp.json()["detail"]["code"] == "EVENT_NOT_PUBLISHED"


def test_purchase_visibility(client: TestClient, db_session):
    org = signup(client, "org8", role="organizer")
    buyer = signup(client, "buyer8")
    stranger = signup(client, "stranger8")
    admin = signup(client, "admin8", role="admin", db_session=db_session)
    event = create_event(client, org)
    purchase = buy(client, buyer, event["id"]).json()["purchase"]

    for headers in (buyer, org, admin):
        resp = client.get(f"/api/purchases/{purchase['id']}", headers=headers)
        assert resp.status_code == 200

    resp = client.get(f"/api/purchases/{purchase['id']}", headers=stranger)
    assert resp.status_code == 404


def test_my_purchases_lists_own_newest_first(client: TestClient):
    org = signup(client, "org9", role="organizer")
    buyer = signup(client, "buyer9")
    other = signup(client, "other9")
    event = create_event(client, org)
    first = buy(client, buyer, event["id"]).json()["purchase"]
    second = buy(client, buyer, event["id"], quantity=2).json()["purchase"]
    buy(client, other, event["id"])

    resp = client.get("/api/my-purchases", headers=buyer)
    assert resp.status_code == 200
    assert [p["id"] for p in resp.json()] == [second["id"], first["id"]]


def test_only_manager_changes_status(client: TestClient):
    org = signup(client, "org10", role="organizer")
    buyer = signup(client, "buyer10")
    event = create_event(client, org)
    purchase = buy(client, buyer, event["id"]).json()["purchase"]

    resp = client.patch(
        f"/api/purchases/{purchase['id']}/status", json={"status": "refunded"}, headers=buyer
    )
    assert resp.status_code == 403

    resp = client.patch(
        f"/api/purchases/{purchase['id']}/status", json={"status": "bogus"}, headers=org
    )
    assert resp.status_code == 422


def test_check_in_flow(client: TestClient):
    org = signup(client, "org11", role="organizer")
    rival = signup(client, "rival11", role="organizer")
    buyer = signup(client, "buyer11")
    event = create_event(client, org)
    code = buy(client, buyer, event["id"]).json()["purchase"]["ticket_code"]

    resp = client.post("/api/purchases/check-in", json={"ticket_code": code}, headers=buyer)
    assert resp.status_code == 403

    resp = client.post("/api/purchases/check-in", json={"ticket_code": code}, headers=rival)
    assert resp.status_code == 403

    resp = client.post("/api/purchases/check-in", json={"ticket_code": "missing"}, headers=org)
    assert resp.status_code == 404
    assert resp.json()["detail"]["code"] == "TICKET_NOT_FOUND"

    resp = client.post("/api/purchases/check-in", json={"ticket_code": code}, headers=org)
    assert resp.status_code == 200
    assert resp.json()["is_checked_in"] is True
    assert resp.json()["check_in_date"] is not None

    resp = client.post("/api/purchases/check-in", json={"ticket_code": code}, headers=org)
    assert resp.status_code == 409
    assert resp.json()["detail"]["code"] == "TICKET_ALREADY_CHECKED_IN"


def test_canceled_ticket_cannot_be_checked_in(client: TestClient):
    org = signup(client, "org12", role="organizer")
    buyer = signup(client, "buyer12")
    event = create_event(client, org)
    purchase = buy(client, buyer, event["id"]).json()["purchase"]
    client.patch(
        f"/api/purchases/{purchase['id']}/status", json={"status": "canceled"}, headers=org
    )

    resp = client.post(
        "/api/purchases/check-in", json={"ticket_code": purchase["ticket_code"]}, headers=org
    )
    assert resp.status_code == 409
    assert resp.json()["detail"]["code"] == "TICKET_NOT_VALID"
