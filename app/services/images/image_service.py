import os
import uuid
from datetime import datetime
from typing import List, Optional, Tuple
from fastapi import UploadFile
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool
from app.core.access_control import Subject, check
from app.core.config import settings
from app.core.database import unit_of_work
from app.core.errors import NotFound, ValidationError
from app.core.logger import logger
from app.core.storage import BlobStore
from app.models.images.image_model import Image
from app.models.trips.trip_model import Trip

IMAGES = "images"
COVERS = "covers"

ALLOWED_MIME_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"}

MIME_BY_EXTENSION = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
}


def generate_file_name(prefix: str, original_name: Optional[str]) -> str:
    ext = os.path.splitext(original_name or "")[1].lower()
    return f"{prefix}_{datetime.now():%Y%m%d_%H%M%S}_{uuid.uuid4()}{ext}"


def namespace_of(file_name: str) -> str:
    return COVERS if file_name.startswith("cover_") else IMAGES


def image_url(base_url: str, namespace: str, file_name: str) -> str:
    return f"{base_url.rstrip('/')}{settings.API_PREFIX}/{namespace}/{file_name}"


def _check_upload(upload: UploadFile) -> None:
    if upload.content_type not in ALLOWED_MIME_TYPES:
        raise ValidationError("file", f"invalid file type for {upload.filename}")


async def _check_trip(db: AsyncSession, trip_id: Optional[int]) -> None:
    if trip_id is not None and await db.get(Trip, trip_id) is None:
        raise ValidationError("trip_id", f"trip {trip_id} does not exist")


async def _store_uploads(
    db: AsyncSession,
    store: BlobStore,
    subject: Subject,
    uploads: List[UploadFile],
    namespace: str,
    trip_id: Optional[int],
    base_url: str,
) -> List[Image]:
    for upload in uploads:
        _check_upload(upload)
    await _check_trip(db, trip_id)

    prefix = "cover" if namespace == COVERS else "image"
    saved: List[str] = []
    images: List[Image] = []
    try:
        async with unit_of_work(db, "save image record"):
            for upload in uploads:
                file_name = generate_file_name(prefix, upload.filename)
                size = await run_in_threadpool(store.save, namespace, file_name, upload.file, settings.MAX_UPLOAD_BYTES)
                saved.append(file_name)
                image = Image(
                    trip_id=trip_id,
                    uploaded_by=subject.id,
                    url=image_url(base_url, namespace, file_name),
                    file_name=file_name,
                    original_name=upload.filename,
                    file_size=size,
                    mime_type=upload.content_type,
                )
                db.add(image)
                images.append(image)
            await db.flush()
    except Exception:
        # No record survived the rollback, so drop the files written so far.
        for file_name in saved:
            store.delete(namespace, file_name)
        raise

    for image in images:
        await db.refresh(image)
    logger.info(f"User {subject.id} uploaded {len(images)} file(s) to {namespace}")
    return images


async def upload_images(
    db: AsyncSession,
    store: BlobStore,
    subject: Optional[Subject],
    uploads: List[UploadFile],
    trip_id: Optional[int],
    base_url: str,
) -> List[Image]:
    subject = check(subject, "upload images")
    if not uploads:
        raise ValidationError("images", "no images provided")
    return await _store_uploads(db, store, subject, uploads, IMAGES, trip_id, base_url)


async def upload_cover(
    db: AsyncSession,
    store: BlobStore,
    subject: Optional[Subject],
    upload: UploadFile,
    trip_id: Optional[int],
    base_url: str,
) -> Image:
    subject = check(subject, "upload images")
    images = await _store_uploads(db, store, subject, [upload], COVERS, trip_id, base_url)
    return images[0]


async def open_image(db: AsyncSession, store: BlobStore, namespace: str, file_name: str) -> Tuple[str, str]:
    """Path and content type of a stored file."""
    if not store.exists(namespace, file_name):
        raise NotFound("Cover image" if namespace == COVERS else "Image")

    mime_type = await db.scalar(select(Image.mime_type).where(Image.file_name == file_name))
    if not mime_type:
        ext = os.path.splitext(file_name)[1].lower()
        mime_type = MIME_BY_EXTENSION.get(ext, "application/octet-stream")
    return store.path(namespace, file_name), mime_type


async def list_my_images(db: AsyncSession, subject: Optional[Subject]) -> List[Image]:
    subject = check(subject, "view your images")
    result = await db.execute(select(Image).where(Image.uploaded_by == subject.id).order_by(Image.id))
    return result.scalars().all()


async def list_trip_images(db: AsyncSession, trip_id: int) -> List[Image]:
    result = await db.execute(select(Image).where(Image.trip_id == trip_id).order_by(Image.id))
    return result.scalars().all()


async def delete_image(db: AsyncSession, store: BlobStore, subject: Optional[Subject], image_id: int) -> None:
    image = await db.get(Image, image_id)
    if image is None:
        raise NotFound("Image")
    check(subject, "delete images", owner_id=image.uploaded_by)

    file_name = image.file_name
    async with unit_of_work(db, "delete image record"):
        await db.delete(image)

    store.delete(namespace_of(file_name), file_name)
    logger.info(f"Image {image_id} deleted by user {subject.id}")
