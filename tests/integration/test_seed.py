import random

import httpx
import pytest
from sqlalchemy import func, select

from app.core.config import settings
from app.core.errors import Forbidden, UpstreamError
from app.main import app
from app.models import Preference, Trip, UserRole
from app.routes.trip.trip_routes import get_overpass_client
from app.services.trips.seed_service import PRICE_RANGES, seed_trips

pytestmark = pytest.mark.asyncio

ELEMENTS = [
    {"type": "node", "lat": -6.1754, "lon": 106.8272, "tags": {"name": "Monas", "tourism": "attraction"}},
    {
        "type": "way",
        "center": {"lat": -6.1376, "lon": 106.8171},
        "tags": {"name": "Museum Fatahillah", "tourism": "museum", "phone": "+62 21 000"},
    },
    {"type": "node", "lat": -6.2, "lon": 106.8, "tags": {"tourism": "viewpoint"}},
    {"type": "relation", "tags": {"name": "No coordinates", "tourism": "zoo"}},
]


def _overpass(elements=ELEMENTS, status_code=200, calls=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        return httpx.Response(status_code, json={"elements": elements})
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


async def test_seed_creates_trips_from_named_attractions(db, make_user):
    owner, _ = await make_user(UserRole.trip_owner)
    calls = []

    async with _overpass(calls=calls) as client:
        created = await seed_trips(db, owner, client, rng=random.Random(3))

    assert created == 2
    assert calls[0].url == settings.OVERPASS_URL
    assert b"tourism" in calls[0].content

    trips = (await db.execute(select(Trip).order_by(Trip.id))).scalars().all()
    assert [t.name for t in trips] == ["Monas", "Museum Fatahillah"]
    museum = trips[1]
    assert museum.user_id == owner.id
    assert (museum.start_latitude, museum.start_longitude) == (-6.1376, 106.8171)
    low, high = PRICE_RANGES["museum"]
    assert low <= museum.price <= high
    assert "Contact: +62 21 000." in museum.description


async def test_seed_reuses_preference_tags(db, make_user):
    owner, _ = await make_user(UserRole.trip_owner)

    async with _overpass() as client:
        await seed_trips(db, owner, client, rng=random.Random(1))
        await seed_trips(db, owner, client, rng=random.Random(2))

    names = (await db.execute(select(Preference.name))).scalars().all()
    assert len(names) == len(set(names))
    assert {"Sightseeing", "Education", "History"} <= set(names)
    assert await db.scalar(select(func.count()).select_from(Trip)) == 4


async def test_seed_respects_limit(db, make_user, monkeypatch):
    monkeypatch.setattr(settings, "SEED_LIMIT", 1)
    owner, _ = await make_user(UserRole.trip_owner)

    async with _overpass() as client:
        assert await seed_trips(db, owner, client) == 1


async def test_seed_with_nothing_usable(db, make_user):
    owner, _ = await make_user(UserRole.trip_owner)

    async with _overpass(elements=[]) as client:
        assert await seed_trips(db, owner, client) == 0


async def test_seed_is_for_trip_owners_only(db, make_user):
    visitor, _ = await make_user(UserRole.visitor)
    calls = []

    async with _overpass(calls=calls) as client:
        with pytest.raises(Forbidden):
            await seed_trips(db, visitor, client)
    assert calls == []


async def test_upstream_failure(db, make_user):
    owner, _ = await make_user(UserRole.trip_owner)

    async with _overpass(status_code=504) as client:
        with pytest.raises(UpstreamError):
            await seed_trips(db, owner, client)


async def test_seed_route(client, make_user):
    _, headers = await make_user(UserRole.trip_owner)

    async def overpass():
        async with _overpass() as mock_client:
            yield mock_client

    app.dependency_overrides[get_overpass_client] = overpass

    response = await client.post("/trips/seed", headers=headers)

    assert response.status_code == 200
    assert response.json() == {"message": "2 trips seeded successfully", "data": {"trips": 2}}
    trips = (await client.get("/trips")).json()["data"]
    assert all(len(t["points"]) == 3 for t in trips)
    assert "Photography" in {p["name"] for p in trips[0]["preferences"]}


async def test_seed_route_checks_role_before_calling_upstream(client, make_user):
    _, headers = await make_user(UserRole.visitor)
    calls = []

    async def overpass():
        async with _overpass(calls=calls) as mock_client:
            yield mock_client

    app.dependency_overrides[get_overpass_client] = overpass

    anonymous = await client.post("/trips/seed")
    as_visitor = await client.post("/trips/seed", headers=headers)

    assert anonymous.status_code == 401
    assert as_visitor.status_code == 403
    assert as_visitor.json()["details"]["reason"] == "role_mismatch"
    assert calls == []


async def test_seed_route_reports_upstream_error(client, make_user):
    _, headers = await make_user(UserRole.trip_owner)

    async def overpass():
        async with _overpass(status_code=500) as mock_client:
            yield mock_client

    app.dependency_overrides[get_overpass_client] = overpass

    response = await client.post("/trips/seed", headers=headers)

    assert response.status_code == 502
    assert response.json()["error"] == "upstream_error"
