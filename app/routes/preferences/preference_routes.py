from typing import List, Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.access_control import Subject
from app.core.cache import RedisCache
from app.core.database import get_db
from app.core.redis_lifecyle import get_cache
from app.dependencies.auth import get_current_subject, get_optional_subject, require_role
from app.models.user.user import UserRole
from app.schemas.common import Envelope, ListEnvelope, MessageResponse, envelope, list_envelope
from app.schemas.preference.preference_schema import PreferenceCreate, PreferenceUpdate, PreferenceOut, PreferenceSpec
from app.services.preferences import preference_service

router = APIRouter(prefix="/preferences", tags=["Preferences"])

def _out(preferences):
    return [PreferenceOut.model_validate(pref) for pref in preferences]

@router.get("", response_model=ListEnvelope[PreferenceOut])
async def list_preferences(
    db: AsyncSession = Depends(get_db),
    cache: Optional[RedisCache] = Depends(get_cache)
):
    preferences = await preference_service.get_all_preferences(db, cache)
    return list_envelope("Preferences retrieved successfully", preferences)

@router.get("/mine", response_model=ListEnvelope[PreferenceOut])
async def list_my_preferences(
    db: AsyncSession = Depends(get_db),
    current_user: Subject = Depends(get_current_subject)
):
    preferences = await preference_service.get_user_preferences(db, current_user.id)
    return list_envelope("Your preferences retrieved successfully", _out(preferences))

@router.post("/assign", response_model=ListEnvelope[PreferenceOut], status_code=status.HTTP_201_CREATED)
async def assign_preferences(
    specs: List[PreferenceSpec],
    db: AsyncSession = Depends(get_db),
    cache: Optional[RedisCache] = Depends(get_cache),
    current_user: Subject = Depends(get_current_subject)
):
    preferences = await preference_service.assign_to_user(db, current_user.id, specs, cache)
    return list_envelope("Preference assigned successfully", _out(preferences))

@router.get("/{preference_id}", response_model=Envelope[PreferenceOut])
async def get_preference(
    preference_id: int,
    db: AsyncSession = Depends(get_db)
):
    preference = await preference_service.get_preference(db, preference_id)
    return envelope("Preference retrieved successfully", PreferenceOut.model_validate(preference))

@router.post("", response_model=Envelope[PreferenceOut], status_code=status.HTTP_201_CREATED)
async def create_preference(
    data: PreferenceCreate,
    db: AsyncSession = Depends(get_db),
    cache: Optional[RedisCache] = Depends(get_cache),
    current_user: Subject = Depends(require_role(UserRole.admin))
):
    preference = await preference_service.create_preference(db, current_user, data, cache)
    return envelope("Preference created successfully", PreferenceOut.model_validate(preference))

@router.put("/{preference_id}", response_model=Envelope[PreferenceOut])
async def update_preference(
    preference_id: int,
    data: PreferenceUpdate,
    db: AsyncSession = Depends(get_db),
    cache: Optional[RedisCache] = Depends(get_cache),
    current_user: Optional[Subject] = Depends(get_optional_subject)
):
    preference = await preference_service.update_preference(db, preference_id, current_user, data, cache)
    return envelope("Preference updated successfully", PreferenceOut.model_validate(preference))

@router.delete("/{preference_id}", response_model=MessageResponse)
async def delete_preference(
    preference_id: int,
    db: AsyncSession = Depends(get_db),
    cache: Optional[RedisCache] = Depends(get_cache),
    current_user: Optional[Subject] = Depends(get_optional_subject)
):
    await preference_service.delete_preference(db, preference_id, current_user, cache)
    return {"message": "Preference deleted successfully"}
