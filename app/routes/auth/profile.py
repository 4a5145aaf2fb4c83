from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.access_control import Subject
from app.dependencies.auth import get_current_subject
from app.core.database import get_db

from app.schemas.common import Envelope, envelope
from app.schemas.user.user import ProfileUpdate, UserOut

from app.services.auth.profile_service import ProfileService

router = APIRouter(prefix="/auth/profile", tags=["Profile"])


@router.get("", response_model=Envelope[UserOut])
async def get_my_profile(
    current_user: Subject = Depends(get_current_subject),
    db: AsyncSession = Depends(get_db)
):
    user = await ProfileService.get_user_by_id(current_user.id, db)
    return envelope("Profile retrieved successfully", UserOut.model_validate(user))


@router.put("", response_model=Envelope[UserOut])
async def update_my_profile(
    data: ProfileUpdate,
    current_user: Subject = Depends(get_current_subject),
    db: AsyncSession = Depends(get_db)
):
    user = await ProfileService.update_user_profile(current_user.id, data, db)
    return envelope("Profile updated successfully", UserOut.model_validate(user))
