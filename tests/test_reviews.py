from __future__ import annotations

from fastapi.testclient import TestClient

from tests.test_auth_rbac import signup, user_id
from tests.test_events_integration import create_event


def review(client: TestClient, headers: dict[str, str], event_id: int, rating: int, comment: str | None = None):
    return client.post(
        f"/api/events/{event_id}/reviews",
        json={"rating": rating, "comment": comment},
        headers=headers,
    )


def _rating(client: TestClient, event_id: int, headers: dict[str, str] | None = None):
    body = client.get(f"/api/events/{event_id}", headers=headers or {}).json()
    return body["average_rating"], body["total_ratings"]


def test_rating_is_recomputed_on_every_change(client: TestClient):
    org = signup(client, "org1", role="organizer")
    ann = signup(client, "ann")
    ben = signup(client, "ben")
    event = create_event(client, org)

    first = review(client, ann, event["id"], 5, "Loved it")
    assert first.status_code == 201
    assert first.json()["comment"] == "Loved it"
    assert _rating(client, event["id"]) == (5.0, 1)

    second = review(client, ben, event["id"], 2)
    assert second.status_code == 201
    assert _rating(client, event["id"]) == (3.5, 2)

    resp = client.patch(f"/api/reviews/{second.json()['id']}", json={"rating": 4}, headers=ben)
    assert resp.status_code == 200
    assert resp.json()["rating"] == 4
    assert _rating(client, event["id"]) == (4.5, 2)

    assert client.delete(f"/api/reviews/{first.json()['id']}", headers=ann).status_code == 204
    assert _rating(client, event["id"]) == (4.0, 1)

    assert client.delete(f"/api/reviews/{second.json()['id']}", headers=ben).status_code == 204
    assert _rating(client, event["id"]) == (None, 0)


def test_average_is_rounded(client: TestClient):
    org = signup(client, "org2", role="organizer")
    event = create_event(client, org)
    for name, rating in (("r1", 5), ("r2", 4), ("r3", 4)):
        review(client, signup(client, name), event["id"], rating)

    assert _rating(client, event["id"]) == (4.33, 3)


def test_rating_bounds(client: TestClient):
    org = signup(client, "org3", role="organizer")
    ann = signup(client, "ann3")
    event = create_event(client, org)

    assert review(client, ann, event["id"], 0).status_code == 422
    assert review(client, ann, event["id"], 6).status_code == 422


def test_only_author_edits_and_admin_may_delete(client: TestClient, db_session):
    org = signup(client, "org4", role="organizer")
    ann = signup(client, "ann4")
    eve = signup(client, "eve4")
    admin = signup(client, "admin4", role="admin", db_session=db_session)
    event = create_event(client, org)
    review_id = review(client, ann, event["id"], 3).json()["id"]

    assert client.patch(f"/api/reviews/{review_id}", json={"rating": 1}, headers=eve).status_code == 403
    assert client.patch(f"/api/reviews/{review_id}", json={"rating": 1}, headers=admin).status_code == 403
    assert client.delete(f"/api/reviews/{review_id}", headers=eve).status_code == 403
    assert client.delete(f"/api/reviews/{review_id}", headers=admin).status_code == 204
    assert client.delete(f"/api/reviews/{review_id}", headers=admin).status_code == 404


def test_review_notifies_event_creator(client: TestClient):
    org = signup(client, "org5", role="organizer")
    ann = signup(client, "ann5")
    event = create_event(client, org, title="Poetry Slam")
    review(client, ann, event["id"], 4)

    notes = client.get("/api/notifications", headers=org).json()
    assert [n["message"] for n in notes] == [
        'Someone left a 4-star review for your event "Poetry Slam".'
    ]
    assert notes[0]["type"] == "review"


def test_listing_reviews_by_event_and_user(client: TestClient):
    org = signup(client, "org6", role="organizer")
    ann = signup(client, "ann6")
    first = create_event(client, org, title="One")
    second = create_event(client, org, title="Two")
    review(client, ann, first["id"], 5)
    review(client, ann, second["id"], 3)

    resp = client.get(f"/api/events/{first['id']}/reviews")
    assert resp.status_code == 200
    assert [r["rating"] for r in resp.json()] == [5]

    resp = client.get(f"/api/users/{user_id(client, ann)}/reviews")
    assert sorted(r["event_id"] for r in resp.json()) == sorted([first["id"], second["id"]])


def test_cannot_review_hidden_event(client: TestClient):
    org = signup(client, "org7", role="organizer")
    ann = signup(client, "ann7")
    event = create_event(client, org, published=False)

    assert review(client, ann, event["id"], 5).status_code == 404
    assert client.get(f"/api/events/{event['id']}/reviews").status_code == 404
