import pytest

from app.core.security import verify_token
from app.models import UserRole

pytestmark = pytest.mark.asyncio

REGISTRATION = {"name": "Rina", "email": "rina@example.com", "password": "secret123", "role": "trip_owner"}


async def test_register_returns_token_and_user(client):
    response = await client.post("/auth/register", json=REGISTRATION)

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["user"]["email"] == "rina@example.com"
    assert data["user"]["role"] == "trip_owner"
    assert "hashed_password" not in data["user"]
    claims = verify_token(data["token"])
    assert claims.subject_id == data["user"]["id"]
    assert claims.role == "trip_owner"


async def test_register_cannot_pick_admin(client):
    response = await client.post("/auth/register", json={**REGISTRATION, "role": "admin"})

    assert response.status_code == 400
    assert response.json()["details"]["field"] == "role"


async def test_register_validates_password_and_email(client):
    short = await client.post("/auth/register", json={**REGISTRATION, "password": "123"})
    bad_email = await client.post("/auth/register", json={**REGISTRATION, "email": "not-an-email"})

    assert short.json()["details"]["field"] == "password"
    assert bad_email.json()["details"]["field"] == "email"


async def test_duplicate_email(client):
    await client.post("/auth/register", json=REGISTRATION)

    response = await client.post("/auth/register", json={**REGISTRATION, "name": "Other"})

    assert response.status_code == 409


async def test_login(client):
    await client.post("/auth/register", json=REGISTRATION)

    ok = await client.post("/auth/login", json={"email": REGISTRATION["email"], "password": "secret123"})
    wrong = await client.post("/auth/login", json={"email": REGISTRATION["email"], "password": "nope"})
    unknown = await client.post("/auth/login", json={"email": "ghost@example.com", "password": "secret123"})

    assert ok.status_code == 200
    assert ok.json()["data"]["user"]["name"] == "Rina"
    assert wrong.status_code == 401
    assert unknown.status_code == 401
    assert wrong.json()["message"] == unknown.json()["message"] == "Invalid email or password"


async def test_roles_lists_self_service_roles(client):
    response = await client.get("/auth/roles")

    assert [r["value"] for r in response.json()["data"]] == ["visitor", "trip_owner"]


async def test_profile(client, make_user):
    user, headers = await make_user(UserRole.visitor, name="Budi")

    profile = await client.get("/auth/profile", headers=headers)
    assert profile.json()["data"]["name"] == "Budi"

    updated = await client.put("/auth/profile", json={"name": "Budi S."}, headers=headers)
    assert updated.json()["data"]["name"] == "Budi S."

    unchanged = await client.put("/auth/profile", json={"name": ""}, headers=headers)
    assert unchanged.json()["data"]["name"] == "Budi S."


async def test_profile_requires_token(client):
    response = await client.get("/auth/profile")

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


async def test_token_of_deleted_user_is_rejected(client, make_user):
    _, admin_headers = await make_user(UserRole.admin)
    user, headers = await make_user(UserRole.visitor)
    await client.delete(f"/users/{user.id}", headers=admin_headers)

    response = await client.get("/auth/profile", headers=headers)

    assert response.status_code == 401


async def test_health(client):
    response = await client.get("http://test/health")
    assert response.json() == {"status": "healthy"}
