from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from app.schemas.common import Envelope, envelope
from app.schemas.user.user import UserCreate, UserLogin, UserOut, AuthData, RoleOption
from app.services.auth import auth as auth_service
from app.core.database import get_db

router = APIRouter(prefix="/auth", tags=["Auth"])

@router.post("/register", response_model=Envelope[AuthData], status_code=status.HTTP_201_CREATED)
async def register(
    user: UserCreate,
    db: AsyncSession = Depends(get_db)
):
    new_user, token = await auth_service.register_user(user, db)
    return envelope("Registration successful", AuthData(token=token, user=UserOut.model_validate(new_user)))

@router.post("/login", response_model=Envelope[AuthData])
async def login_route(
    user_data: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    user, token = await auth_service.login_user(user_data.email, user_data.password, db)
    return envelope("Login successful", AuthData(token=token, user=UserOut.model_validate(user)))

@router.get("/roles", response_model=Envelope[List[RoleOption]])
async def get_roles():
    return envelope("Available roles retrieved successfully", auth_service.ROLE_OPTIONS)
