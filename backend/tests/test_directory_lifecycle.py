"""End-to-end directory lifecycle.

provider signs up -> seeker signs up and logs in -> seeker searches by skill
-> narrows by location -> opens provider detail -> checks own profile
-> logs out -> profile no longer reachable.
"""

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from servicefinder.models.audit import AuditLogEvent


@pytest.mark.asyncio
async def test_full_directory_lifecycle(client: AsyncClient, db_session: AsyncSession):
    # ──────────────────────────────────────────────────────────
    # Step 1: Providers sign up
    # ──────────────────────────────────────────────────────────
    for body in (
        {
            "role": "service_provider",
            "email": "ana@example.com",
            "password": "secret123",
            "contact_number": "555-0150",
            "skills": ["House Cleaning", "Laundry"],
            "locations": ["Brooklyn", "Queens"],
            "availability": "Mon-Fri 9AM-5PM",
        },
        {
            "role": "service_provider",
            "email": "ben@example.com",
            "password": "secret123",
            "skills": ["Window Cleaning"],
            "locations": ["Manhattan"],
        },
    ):
        response = await client.post("/auth/signup", json=body)
        assert response.status_code == 201

    # ──────────────────────────────────────────────────────────
    # Step 2: Seeker signs up and logs in
    # ──────────────────────────────────────────────────────────
    response = await client.post(
        "/auth/signup",
        json={
            "role": "service_seeker",
            "email": "cara@example.com",
            "password": "secret123",
            "place": "Astoria, Queens",
        },
    )
    assert response.status_code == 201
    login = await client.post(
        "/auth/login", json={"email": "cara@example.com", "password": "secret123"}
    )
    headers = {"X-Session-Token": login.json()["token"]}

    # ──────────────────────────────────────────────────────────
    # Step 3: Search by skill, then narrow by location
    # ──────────────────────────────────────────────────────────
    response = await client.get("/providers/search", params={"q": "cleaning"}, headers=headers)
    emails = sorted(p["email"] for p in response.json()["providers"])
    assert emails == ["ana@example.com", "ben@example.com"]

    response = await client.get(
        "/providers/search", params={"q": "cleaning", "location": "queens"}, headers=headers
    )
    providers = response.json()["providers"]
    assert [p["email"] for p in providers] == ["ana@example.com"]

    # ──────────────────────────────────────────────────────────
    # Step 4: Provider detail
    # ──────────────────────────────────────────────────────────
    detail = await client.get(f"/providers/{providers[0]['user_id']}")
    assert detail.status_code == 200
    assert detail.json()["contact_number"] == "555-0150"
    assert detail.json()["availability"] == "Mon-Fri 9AM-5PM"

    # ──────────────────────────────────────────────────────────
    # Step 5: Own profile, then logout
    # ──────────────────────────────────────────────────────────
    profile = await client.get("/profile", headers=headers)
    assert profile.json()["place"] == "Astoria, Queens"

    assert (await client.post("/auth/logout", headers=headers)).status_code == 204
    assert (await client.get("/profile", headers=headers)).status_code == 401

    # ──────────────────────────────────────────────────────────
    # Step 6: Audit trail
    # ──────────────────────────────────────────────────────────
    result = await db_session.execute(select(AuditLogEvent.event_type))
    event_types = sorted(result.scalars().all())
    assert event_types == [
        "auth.login",
        "auth.logout",
        "auth.signup",
        "auth.signup",
        "auth.signup",
    ]
