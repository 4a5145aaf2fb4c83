from typing import List
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.database import unit_of_work
from app.core.errors import Conflict
from app.core.logger import logger
from app.core.security import hash_password
from app.models.user.user import User, UserRole
from app.schemas.user.user import AdminUserCreate, AdminUserUpdate
from app.services.auth.auth import create_account
from app.services.auth.profile_service import ProfileService


async def list_users(db: AsyncSession) -> List[User]:
    result = await db.execute(select(User).order_by(User.id))
    return result.scalars().all()


async def create_user(db: AsyncSession, data: AdminUserCreate) -> User:
    return await create_account(data, db)


async def update_user(db: AsyncSession, user_id: int, data: AdminUserUpdate) -> User:
    user = await ProfileService.get_user_by_id(user_id, db)
    update_fields = data.model_dump(exclude_unset=True, exclude_none=True)

    if "password" in update_fields:
        update_fields["hashed_password"] = hash_password(update_fields.pop("password"))
    if "role" in update_fields:
        update_fields["role"] = UserRole(update_fields["role"])

    async with unit_of_work(db, "update user"):
        for key, value in update_fields.items():
            setattr(user, key, value)
        try:
            await db.flush()
        except IntegrityError:
            raise Conflict("A user with this email address already exists")

    await db.refresh(user)
    logger.info(f"User {user_id} updated by admin: {sorted(update_fields)}")
    return user


async def delete_user(db: AsyncSession, user_id: int) -> None:
    user = await ProfileService.get_user_by_id(user_id, db)
    async with unit_of_work(db, "delete user"):
        await db.delete(user)
    logger.info(f"User {user_id} deleted")
