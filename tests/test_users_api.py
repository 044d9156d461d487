"""Profiles and per-user trip views."""

from __future__ import annotations

from conftest import auth_headers, make_trip
from services import join_requests as request_service


def _join(db, trip, organizer, user):
    request = request_service.submit_request(db, trip.id, user, "room for one more?")
    request_service.approve_request(db, request.id, organizer)


def test_profile_lists_created_and_joined_trips(client, db, organizer, traveler):
    own = make_trip(db, organizer, title="Organized by Rahul")
    joined = make_trip(db, traveler, title="Organized by Priya")
    _join(db, joined, traveler, organizer)

    response = client.get(f"/api/users/{organizer.id}")

    data = response.json()["data"]
    assert response.status_code == 200
    assert data["name"] == "Rahul Sharma"
    assert data["branch"] == "Computer Science"
    assert [t["id"] for t in data["tripsCreated"]] == [own.id]
    assert [t["id"] for t in data["tripsJoined"]] == [joined.id]


def test_unknown_user_is_404(client):
    response = client.get("/api/users/777")
    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "User not found"}


def test_update_own_profile(client, traveler):
    response = client.put(
        f"/api/users/{traveler.id}",
        json={"bio": "Weekend hiker", "year": "4th Year"},
        headers=auth_headers(traveler),
    )

    assert response.status_code == 200
    assert response.json()["data"]["bio"] == "Weekend hiker"
    assert response.json()["data"]["year"] == "4th Year"


def test_cannot_update_someone_else(client, organizer, traveler):
    response = client.put(f"/api/users/{organizer.id}", json={"bio": "hacked"}, headers=auth_headers(traveler))
    assert response.status_code == 403
    assert response.json() == {"success": False, "error": "Not authorized to update this profile"}


def test_trips_and_participations(client, db, organizer, traveler):
    trip = make_trip(db, organizer)
    _join(db, trip, organizer, traveler)

    created = client.get(f"/api/users/{organizer.id}/trips").json()
    participations = client.get(f"/api/users/{traveler.id}/participations").json()

    assert created["count"] == 1
    assert participations["count"] == 1
    assert participations["data"][0]["id"] == trip.id
    assert client.get(f"/api/users/{organizer.id}/participations").json()["count"] == 0


def test_stats(client, db, organizer, traveler):
    trip = make_trip(db, organizer)
    make_trip(db, organizer)
    _join(db, trip, organizer, traveler)

    organizer_stats = client.get(f"/api/users/{organizer.id}/stats").json()["data"]
    traveler_stats = client.get(f"/api/users/{traveler.id}/stats").json()["data"]

    assert organizer_stats == {"tripsCreated": 2, "tripsJoined": 0, "tripsCompleted": 0, "totalTrips": 2}
    assert traveler_stats == {"tripsCreated": 0, "tripsJoined": 1, "tripsCompleted": 0, "totalTrips": 1}
