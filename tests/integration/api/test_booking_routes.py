"""
Integration tests for the booking, availability, payment and sweep endpoints.

Runs the FastAPI app against the test database through TestClient.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Generator
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine

from booking_engine.dependencies import get_db_engine
from booking_engine.main import app

PROPERTY_ID = "prop-lekki-01"
OWNER_ID = "owner-ade"
GUEST_ID = "guest-bisi"


@pytest.fixture
def client(clean_db: Engine) -> Generator[TestClient, None, None]:
    """FastAPI test client bound to the cleaned test database."""
    app.dependency_overrides[get_db_engine] = lambda: clean_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def stay_payload(check_in: str, check_out: str, requester_id: str = GUEST_ID) -> dict[str, Any]:
    return {
        "requester_id": requester_id,
        "owner_id": OWNER_ID,
        "kind": "shortlet",
        "check_in": check_in,
        "check_out": check_out,
    }


def create_stay(client: TestClient, check_in: str = "2024-03-05", check_out: str = "2024-03-08") -> dict[str, Any]:
    response = client.post(f"/properties/{PROPERTY_ID}/bookings", json=stay_payload(check_in, check_out))
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.integration
def test_create_booking(client: TestClient) -> None:
    booking = create_stay(client)

    assert booking["status"] == "pending"
    assert booking["payment_status"] == "pending"
    assert booking["check_in"] == "2024-03-05"
    assert booking["check_out"] == "2024-03-08"
    assert booking["kind"] == "shortlet"


@pytest.mark.integration
def test_create_inspection(client: TestClient) -> None:
    response = client.post(
        f"/properties/{PROPERTY_ID}/bookings",
        json={
            "requester_id": "buyer-femi",
            "owner_id": OWNER_ID,
            "kind": "sale_inspection",
            "inspection_date": "2024-03-06",
            "inspection_time": "14:00:00",
        },
    )

    assert response.status_code == 201
    body = response.json()
    assert body["check_in"] is None
    assert body["start_at"].startswith("2024-03-06T14:00:00")
    assert body["end_at"].startswith("2024-03-06T14:30:00")


@pytest.mark.integration
def test_overlapping_booking_returns_409_without_identities(client: TestClient) -> None:
    create_stay(client)

    response = client.post(
        f"/properties/{PROPERTY_ID}/bookings",
        json=stay_payload("2024-03-06", "2024-03-10", requester_id="guest-chidi"),
    )

    assert response.status_code == 409
    body = response.json()
    assert body["error"] == "conflict"
    assert body["conflicts"] == [
        {"start": "2024-03-05T00:00:00+00:00", "end": "2024-03-08T00:00:00+00:00", "kind": "shortlet"}
    ]
    assert GUEST_ID not in response.text
    assert OWNER_ID not in response.text


@pytest.mark.integration
def test_invalid_booking_requests_return_422(client: TestClient) -> None:
    own_booking = stay_payload("2024-03-05", "2024-03-08", requester_id=OWNER_ID)
    inverted = stay_payload("2024-03-08", "2024-03-05")
    unknown_kind = {**stay_payload("2024-03-05", "2024-03-08"), "kind": "timeshare"}

    for payload in (own_booking, inverted, unknown_kind):
        response = client.post(f"/properties/{PROPERTY_ID}/bookings", json=payload)
        assert response.status_code == 422
        assert response.json()["error"] == "validation_error"


@pytest.mark.integration
def test_read_booking_and_404(client: TestClient) -> None:
    booking = create_stay(client)

    assert client.get(f"/bookings/{booking['id']}").json()["id"] == booking["id"]

    missing = client.get("/bookings/no-such-booking")
    assert missing.status_code == 404
    assert missing.json()["error"] == "not_found"


@pytest.mark.integration
def test_transition_flow(client: TestClient) -> None:
    booking = create_stay(client)
    url = f"/bookings/{booking['id']}/transitions"

    forbidden = client.post(url, json={"event": "approve", "actor_id": GUEST_ID})
    assert forbidden.status_code == 403

    approved = client.post(url, json={"event": "approve", "actor_id": OWNER_ID, "notes": "See you"})
    assert approved.status_code == 200
    assert approved.json()["status"] == "confirmed"
    assert approved.json()["owner_notes"] == "See you"

    again = client.post(url, json={"event": "approve", "actor_id": OWNER_ID})
    assert again.status_code == 409
    assert again.json()["error"] == "invalid_transition"
    assert again.json()["current_status"] == "confirmed"

    cancelled = client.post(url, json={"event": "cancel", "actor_id": GUEST_ID, "notes": "Flight moved"})
    assert cancelled.json()["status"] == "cancelled"
    assert cancelled.json()["cancellation_reason"] == "Flight moved"

    events = client.get(f"/bookings/{booking['id']}/events").json()["events"]
    assert [e["to_status"] for e in events] == ["pending", "confirmed", "cancelled"]


@pytest.mark.integration
def test_expire_is_not_accepted_over_http(client: TestClient) -> None:
    booking = create_stay(client)

    response = client.post(
        f"/bookings/{booking['id']}/transitions", json={"event": "expire", "actor_id": "system"}
    )

    assert response.status_code == 422


@pytest.mark.integration
def test_system_actor_is_rejected_over_http(client: TestClient) -> None:
    booking = create_stay(client)
    url = f"/bookings/{booking['id']}/transitions"

    for event in ("approve", "reject", "cancel", "complete"):
        response = client.post(url, json={"event": event, "actor_id": "system"})
        assert response.status_code == 422, event
        assert "reserved" in response.text

    assert client.get(f"/bookings/{booking['id']}").json()["status"] == "pending"
    events = client.get(f"/bookings/{booking['id']}/events").json()["events"]
    assert len(events) == 1

    as_requester = client.post(
        f"/properties/{PROPERTY_ID}/bookings",
        json=stay_payload("2024-04-01", "2024-04-03", requester_id="System"),
    )
    as_owner = client.post(
        f"/properties/{PROPERTY_ID}/bookings",
        json={**stay_payload("2024-04-01", "2024-04-03"), "owner_id": "system"},
    )
    assert as_requester.status_code == 422
    assert as_owner.status_code == 422


@pytest.mark.integration
def test_holds_and_availability(client: TestClient) -> None:
    create_stay(client)

    holds = client.get(f"/properties/{PROPERTY_ID}/holds").json()
    assert holds["holds"] == [
        {"start": "2024-03-05T00:00:00+00:00", "end": "2024-03-08T00:00:00+00:00", "kind": "shortlet"}
    ]

    taken = client.get(
        f"/properties/{PROPERTY_ID}/availability",
        params={"kind": "rental", "check_in": "2024-03-07", "check_out": "2024-03-20"},
    ).json()
    free = client.get(
        f"/properties/{PROPERTY_ID}/availability",
        params={"kind": "shortlet", "check_in": "2024-03-08", "check_out": "2024-03-09"},
    ).json()
    assert taken["is_available"] is False
    assert free["is_available"] is True


@pytest.mark.integration
def test_blocks_and_unavailable_dates(client: TestClient) -> None:
    created = client.post(
        f"/properties/{PROPERTY_ID}/blocks",
        json={
            "start_date": "2024-03-10",
            "end_date": "2024-03-12",
            "reason": "maintenance",
            "created_by": OWNER_ID,
        },
    )
    assert created.status_code == 201
    block_id = created.json()["id"]

    blocked = client.post(f"/properties/{PROPERTY_ID}/bookings", json=stay_payload("2024-03-11", "2024-03-13"))
    assert blocked.status_code == 409
    assert blocked.json()["conflicts"][0]["kind"] == "block"

    dates = client.get(
        f"/properties/{PROPERTY_ID}/unavailable-dates",
        params={"start": "2024-03-01", "end": "2024-03-31"},
    ).json()
    assert dates["unavailable_dates"] == ["2024-03-10", "2024-03-11"]

    listed = client.get(f"/properties/{PROPERTY_ID}/blocks").json()["blocks"]
    assert [b["id"] for b in listed] == [block_id]

    assert client.delete(f"/properties/{PROPERTY_ID}/blocks/{block_id}").json()["removed"] is True
    assert client.delete(f"/properties/{PROPERTY_ID}/blocks/{block_id}").json()["removed"] is False


@pytest.mark.integration
def test_payment_event(client: TestClient) -> None:
    booking = create_stay(client)

    response = client.post(
        "/payments/events", json={"booking_id": booking["id"], "payment_status": "failed"}
    )

    assert response.status_code == 200
    assert response.json()["payment_status"] == "failed"
    assert response.json()["status"] == "cancelled"
    assert response.json()["cancellation_reason"] == "payment_failed"

    unknown = client.post("/payments/events", json={"booking_id": booking["id"], "payment_status": "maybe"})
    assert unknown.status_code == 422


@pytest.mark.integration
def test_internal_sweep_expires_stale_bookings(client: TestClient) -> None:
    booking = create_stay(client)
    later = datetime.now(timezone.utc) + timedelta(hours=1)

    with patch("booking_engine.services.expiry.utc_now", return_value=later), patch(
        "booking_engine.services.transitions.utc_now", return_value=later
    ):
        response = client.post("/internal/sweep")

    assert response.status_code == 200
    assert response.json() == {"status": "success", "expired_count": 1, "ids": [booking["id"]]}
    assert client.get(f"/bookings/{booking['id']}").json()["status"] == "expired"


@pytest.mark.integration
def test_response_carries_request_id(client: TestClient) -> None:
    response = client.get(f"/properties/{PROPERTY_ID}/holds", headers={"X-Request-ID": "trace-1"})

    assert response.headers["X-Request-ID"] == "trace-1"


@pytest.mark.integration
def test_list_property_bookings_filters_by_status_and_kind(client: TestClient) -> None:
    first = create_stay(client, "2024-03-05", "2024-03-08")
    second = create_stay(client, "2024-03-10", "2024-03-12")
    inspection = client.post(
        f"/properties/{PROPERTY_ID}/bookings",
        json={
            "requester_id": "buyer-femi",
            "owner_id": OWNER_ID,
            "kind": "sale_inspection",
            "inspection_date": "2024-03-06",
            "inspection_time": "14:00:00",
        },
    ).json()
    client.post(
        f"/bookings/{second['id']}/transitions", json={"event": "approve", "actor_id": OWNER_ID}
    )
    url = f"/properties/{PROPERTY_ID}/bookings"

    everything = client.get(url).json()
    pending = client.get(url, params={"status": "pending"}).json()
    both = client.get(url, params=[("status", "pending"), ("status", "confirmed")]).json()
    inspections = client.get(url, params={"kind": "sale_inspection"}).json()
    paged = client.get(url, params={"page": 2, "page_size": 2}).json()

    assert [b["id"] for b in everything["bookings"]] == [first["id"], inspection["id"], second["id"]]
    assert [b["id"] for b in pending["bookings"]] == [first["id"], inspection["id"]]
    assert len(both["bookings"]) == 3
    assert [b["id"] for b in inspections["bookings"]] == [inspection["id"]]
    assert [b["id"] for b in paged["bookings"]] == [second["id"]]
    assert (paged["page"], paged["page_size"]) == (2, 2)

    unknown = client.get(url, params={"status": "lost"})
    assert unknown.status_code == 422
    assert unknown.json()["error"] == "validation_error"


@pytest.mark.integration
def test_list_bookings_for_requester_and_owner(client: TestClient) -> None:
    mine = create_stay(client, "2024-03-05", "2024-03-08")
    client.post(
        f"/properties/{PROPERTY_ID}/bookings",
        json=stay_payload("2024-03-10", "2024-03-12", requester_id="guest-chidi"),
    )

    requested = client.get("/bookings", params={"user_id": GUEST_ID}).json()
    owned = client.get("/bookings", params={"user_id": OWNER_ID, "role": "owner"}).json()
    nobody = client.get("/bookings", params={"user_id": OWNER_ID}).json()

    assert [b["id"] for b in requested["bookings"]] == [mine["id"]]
    assert len(owned["bookings"]) == 2
    assert nobody["bookings"] == []
    assert client.get("/bookings", params={"user_id": GUEST_ID, "role": "admin"}).status_code == 422
