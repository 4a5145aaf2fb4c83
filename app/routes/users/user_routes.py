from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.access_control import Subject
from app.core.database import get_db
from app.dependencies.auth import get_current_subject, require_role
from app.models.user.user import UserRole
from app.schemas.common import Envelope, ListEnvelope, MessageResponse, envelope, list_envelope
from app.schemas.user.user import AdminUserCreate, AdminUserUpdate, UserOut
from app.services.auth.profile_service import ProfileService
from app.services.users import user_service

router = APIRouter(prefix="/users", tags=["Users"])

@router.get("", response_model=ListEnvelope[UserOut])
async def list_users(
    db: AsyncSession = Depends(get_db),
    admin: Subject = Depends(require_role(UserRole.admin))
):
    users = await user_service.list_users(db)
    return list_envelope("Users retrieved successfully", [UserOut.model_validate(u) for u in users])

@router.get("/{user_id}", response_model=Envelope[UserOut])
async def get_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: Subject = Depends(get_current_subject)
):
    user = await ProfileService.get_user_by_id(user_id, db)
    return envelope("User retrieved successfully", UserOut.model_validate(user))

@router.post("", response_model=Envelope[UserOut], status_code=status.HTTP_201_CREATED)
async def create_user(
    data: AdminUserCreate,
    db: AsyncSession = Depends(get_db),
    admin: Subject = Depends(require_role(UserRole.admin))
):
    user = await user_service.create_user(db, data)
    return envelope("User created successfully", UserOut.model_validate(user))

@router.put("/{user_id}", response_model=Envelope[UserOut])
async def update_user(
    user_id: int,
    data: AdminUserUpdate,
    db: AsyncSession = Depends(get_db),
    admin: Subject = Depends(require_role(UserRole.admin))
):
    user = await user_service.update_user(db, user_id, data)
    return envelope("User updated successfully", UserOut.model_validate(user))

@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    admin: Subject = Depends(require_role(UserRole.admin))
):
    await user_service.delete_user(db, user_id)
    return {"message": "User deleted successfully"}
