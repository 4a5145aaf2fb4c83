from typing import List, Optional
from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.access_control import Subject
from app.core.config import settings
from app.core.database import get_db
from app.core.storage import BlobStore, get_blob_store
from app.dependencies.auth import get_current_subject, get_optional_subject
from app.schemas.common import Envelope, ListEnvelope, MessageResponse, envelope, list_envelope
from app.schemas.image.image_schema import ImageOut
from app.services.images import image_service

router = APIRouter(tags=["Images"])

def _base_url(request: Request) -> str:
    return settings.BASE_URL or str(request.base_url)

def _out(images):
    return [ImageOut.model_validate(image) for image in images]

@router.post("/images/upload", response_model=ListEnvelope[ImageOut])
async def upload_images(
    request: Request,
    images: List[UploadFile] = File(...),
    trip_id: Optional[int] = Form(None),
    db: AsyncSession = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
    current_user: Subject = Depends(get_current_subject)
):
    saved = await image_service.upload_images(db, store, current_user, images, trip_id, _base_url(request))
    return list_envelope("Images uploaded successfully", _out(saved))

@router.post("/images/upload-cover", response_model=Envelope[ImageOut])
async def upload_cover_image(
    request: Request,
    cover_image: UploadFile = File(...),
    trip_id: Optional[int] = Form(None),
    db: AsyncSession = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
    current_user: Subject = Depends(get_current_subject)
):
    saved = await image_service.upload_cover(db, store, current_user, cover_image, trip_id, _base_url(request))
    return envelope("Cover image uploaded successfully", ImageOut.model_validate(saved))

@router.get("/images/my-images", response_model=ListEnvelope[ImageOut])
async def get_my_images(
    db: AsyncSession = Depends(get_db),
    current_user: Subject = Depends(get_current_subject)
):
    images = await image_service.list_my_images(db, current_user)
    return list_envelope("Your images retrieved successfully", _out(images))

@router.get("/images/trip/{trip_id}", response_model=ListEnvelope[ImageOut])
async def get_trip_images(
    trip_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: Optional[Subject] = Depends(get_optional_subject)
):
    images = await image_service.list_trip_images(db, trip_id)
    return list_envelope("Trip images retrieved successfully", _out(images))

@router.get("/images/{filename}", response_class=FileResponse)
async def get_image(
    filename: str,
    db: AsyncSession = Depends(get_db),
    store: BlobStore = Depends(get_blob_store)
):
    path, mime_type = await image_service.open_image(db, store, image_service.IMAGES, filename)
    return FileResponse(path, media_type=mime_type)

@router.get("/covers/{filename}", response_class=FileResponse)
async def get_cover_image(
    filename: str,
    db: AsyncSession = Depends(get_db),
    store: BlobStore = Depends(get_blob_store)
):
    path, mime_type = await image_service.open_image(db, store, image_service.COVERS, filename)
    return FileResponse(path, media_type=mime_type)

@router.delete("/images/{image_id}", response_model=MessageResponse)
async def delete_image(
    image_id: int,
    db: AsyncSession = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
    current_user: Optional[Subject] = Depends(get_optional_subject)
):
    await image_service.delete_image(db, store, current_user, image_id)
    return {"message": "Image deleted successfully"}
