import os

import pytest
from sqlalchemy import func, select

from app.core.config import settings
from app.models import Image, UserRole
from app.services.images.image_service import COVERS, IMAGES

pytestmark = pytest.mark.asyncio

PNG = b"\x89PNG\r\n\x1a\nfake-image-bytes"


def _png(name="photo.png", data=PNG, content_type="image/png"):
    return (name, data, content_type)


async def _image_count(session_factory):
    async with session_factory() as session:
        return await session.scalar(select(func.count()).select_from(Image))


async def test_upload_and_fetch_image(client, blob_store, make_user, trip_payload):
    user, headers = await make_user(UserRole.trip_owner)
    trip = (await client.post("/trips", json=trip_payload, headers=headers)).json()["data"]

    response = await client.post(
        "/images/upload",
        files=[("images", _png("a.png")), ("images", _png("b.PNG"))],
        data={"trip_id": str(trip["id"])},
        headers=headers,
    )

    assert response.status_code == 200, response.text
    images = response.json()["data"]
    assert len(images) == 2
    first = images[0]
    assert first["uploaded_by"] == user.id
    assert first["trip_id"] == trip["id"]
    assert first["original_name"] == "a.png"
    assert first["file_size"] == len(PNG)
    assert first["file_name"].startswith("image_") and first["file_name"].endswith(".png")
    assert images[1]["file_name"].endswith(".png")
    assert first["url"].endswith(f"/api/v1/images/{first['file_name']}")
    assert blob_store.exists(IMAGES, first["file_name"])

    fetched = await client.get(f"/images/{first['file_name']}")
    assert fetched.status_code == 200
    assert fetched.content == PNG
    assert fetched.headers["content-type"] == "image/png"

    trip_images = await client.get(f"/images/trip/{trip['id']}")
    assert trip_images.json()["count"] == 2
    assert len((await client.get(f"/trips/{trip['id']}")).json()["data"]["images"]) == 2


async def test_upload_cover(client, blob_store, make_user):
    _, headers = await make_user(UserRole.visitor)

    response = await client.post("/images/upload-cover", files={"cover_image": _png()}, headers=headers)

    assert response.status_code == 200
    cover = response.json()["data"]
    assert cover["file_name"].startswith("cover_")
    assert cover["trip_id"] is None
    assert blob_store.exists(COVERS, cover["file_name"])
    assert (await client.get(f"/covers/{cover['file_name']}")).content == PNG


async def test_upload_requires_login(client):
    response = await client.post("/images/upload", files={"images": _png()})
    assert response.status_code == 401


async def test_upload_checks_login_before_form(client):
    response = await client.post("/images/upload", data={"trip_id": "not-a-number"})

    assert response.status_code == 401
    assert response.json()["error"] == "authentication_required"


async def test_upload_rejects_non_images(client, session_factory, make_user):
    _, headers = await make_user(UserRole.visitor)

    response = await client.post(
        "/images/upload",
        files=[("images", _png()), ("images", ("notes.txt", b"hello", "text/plain"))],
        headers=headers,
    )

    assert response.status_code == 400
    assert response.json()["details"]["field"] == "file"
    assert await _image_count(session_factory) == 0


async def test_upload_for_missing_trip(client, session_factory, make_user):
    _, headers = await make_user(UserRole.visitor)

    response = await client.post("/images/upload", files={"images": _png()}, data={"trip_id": "404"}, headers=headers)

    assert response.status_code == 400
    assert response.json()["details"]["field"] == "trip_id"
    assert await _image_count(session_factory) == 0


async def test_oversized_upload_leaves_no_files(client, blob_store, session_factory, make_user, monkeypatch):
    monkeypatch.setattr(settings, "MAX_UPLOAD_BYTES", 8)
    _, headers = await make_user(UserRole.visitor)

    response = await client.post("/images/upload", files={"images": _png()}, headers=headers)

    assert response.status_code == 400
    assert await _image_count(session_factory) == 0
    images_dir = os.path.dirname(blob_store.path(IMAGES, "x"))
    assert not os.path.isdir(images_dir) or os.listdir(images_dir) == []


async def test_my_images(client, make_user):
    _, alice_headers = await make_user(UserRole.visitor)
    _, bob_headers = await make_user(UserRole.visitor)
    await client.post("/images/upload", files={"images": _png("alice.png")}, headers=alice_headers)
    await client.post("/images/upload", files={"images": _png("bob.png")}, headers=bob_headers)

    response = await client.get("/images/my-images", headers=alice_headers)

    assert [i["original_name"] for i in response.json()["data"]] == ["alice.png"]


async def test_delete_image(client, blob_store, make_user):
    _, headers = await make_user(UserRole.visitor)
    image = (await client.post("/images/upload", files={"images": _png()}, headers=headers)).json()["data"][0]

    response = await client.delete(f"/images/{image['id']}", headers=headers)

    assert response.status_code == 200
    assert not blob_store.exists(IMAGES, image["file_name"])
    assert (await client.get(f"/images/{image['file_name']}")).status_code == 404


async def test_only_uploader_deletes_image(client, blob_store, make_user):
    _, owner_headers = await make_user(UserRole.visitor)
    _, other_headers = await make_user(UserRole.admin)
    image = (await client.post("/images/upload", files={"images": _png()}, headers=owner_headers)).json()["data"][0]

    response = await client.delete(f"/images/{image['id']}", headers=other_headers)

    assert response.status_code == 403
    assert response.json()["details"]["reason"] == "not_owner"
    assert blob_store.exists(IMAGES, image["file_name"])


async def test_delete_missing_image(client):
    assert (await client.delete("/images/999")).status_code == 404


async def test_fetch_unknown_file(client):
    response = await client.get("/images/nothing-here.png")
    assert response.status_code == 404
    assert response.json()["message"] == "Image not found"
