"""HTTP contract of /api/messages."""

from __future__ import annotations

from conftest import auth_headers


def _post(client, user, trip_id, content):
    return client.post("/api/messages", json={"trip": trip_id, "content": content}, headers=auth_headers(user))


def test_messages_come_back_oldest_first(client, trip, organizer, traveler):
    _post(client, organizer, trip.id, "Bus leaves at 6am")
    _post(client, traveler, trip.id, "I'll bring snacks")

    response = client.get(f"/api/messages/trip/{trip.id}", headers=auth_headers(traveler))

    body = response.json()
    assert response.status_code == 200
    assert body["count"] == 2
    assert [m["content"] for m in body["data"]] == ["Bus leaves at 6am", "I'll bring snacks"]
    assert body["data"][0]["sender"]["id"] == organizer.id
    assert body["data"][0]["trip"] == trip.id


def test_listing_is_cacheable(client, trip, organizer):
    response = client.get(f"/api/messages/trip/{trip.id}", headers=auth_headers(organizer))
    assert response.headers["Cache-Control"] == "public, max-age=60"


def test_unknown_trip_yields_empty_list(client, traveler):
    for trip_id in ("424242", "garbage"):
        response = client.get(f"/api/messages/trip/{trip_id}", headers=auth_headers(traveler))
        assert response.status_code == 200
        assert response.json() == {"success": True, "count": 0, "data": []}


def test_post_returns_message_with_sender(client, trip, organizer):
    response = _post(client, organizer, trip.id, "  See you all soon  ")

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["content"] == "See you all soon"
    assert data["sender"]["name"] == organizer.name
    assert data["createdAt"].endswith("Z")


def test_non_participant_may_post(client, trip, other_traveler):
    # posting is open to any signed-in user, seat or not
    response = _post(client, other_traveler, trip.id, "Is there space for one more?")
    assert response.status_code == 201


def test_empty_or_oversized_content_is_a_400(client, trip, organizer):
    assert _post(client, organizer, trip.id, "   ").status_code == 400
    assert _post(client, organizer, trip.id, "x" * 1001).status_code == 400


def test_requires_login(client, trip):
    assert client.get(f"/api/messages/trip/{trip.id}").status_code == 401
    assert client.post("/api/messages", json={"trip": trip.id, "content": "hi"}).status_code == 401


def test_sender_deletes_own_message(client, trip, organizer, traveler):
    message_id = _post(client, traveler, trip.id, "oops").json()["data"]["id"]

    assert client.delete(f"/api/messages/{message_id}", headers=auth_headers(organizer)).status_code == 403
    response = client.delete(f"/api/messages/{message_id}", headers=auth_headers(traveler))

    assert response.json() == {"success": True, "data": {}}
    assert client.get(f"/api/messages/trip/{trip.id}", headers=auth_headers(traveler)).json()["count"] == 0


def test_delete_unknown_message_is_404(client, traveler):
    response = client.delete("/api/messages/999", headers=auth_headers(traveler))
    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Message not found"}
