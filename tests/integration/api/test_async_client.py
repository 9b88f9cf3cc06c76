"""
Integration tests exercising the app through httpx's ASGI transport.
"""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.engine import Engine

from booking_engine.dependencies import get_db_engine
from booking_engine.main import app


@pytest.mark.asyncio
@pytest.mark.integration
async def test_reserve_and_read_back(clean_db: Engine) -> None:
    """Test a booking created over HTTP can be read back."""
    app.dependency_overrides[get_db_engine] = lambda: clean_db
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            created = await ac.post(
                "/properties/prop-ikoyi-07/bookings",
                json={
                    "requester_id": "guest-bisi",
                    "owner_id": "owner-ade",
                    "kind": "rental",
                    "check_in": "2024-05-01",
                    "check_out": "2024-06-01",
                },
            )
            fetched = await ac.get(f"/bookings/{created.json()['id']}")
    finally:
        app.dependency_overrides.clear()

    assert created.status_code == 201
    assert fetched.status_code == 200
    assert fetched.json()["status"] == "pending"
    assert fetched.json()["check_out"] == "2024-06-01"
