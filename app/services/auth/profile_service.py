from sqlalchemy.ext.asyncio import AsyncSession
from app.core.database import unit_of_work
from app.core.errors import NotFound
from app.models.user.user import User
from app.schemas.user.user import ProfileUpdate

class ProfileService:
    @staticmethod
    async def get_user_by_id(user_id: int, db: AsyncSession) -> User:
        user = await db.get(User, user_id)
        if not user:
            raise NotFound("User")
        return user

    @staticmethod
    async def update_user_profile(user_id: int, update_data: ProfileUpdate, db: AsyncSession) -> User:
        user = await ProfileService.get_user_by_id(user_id, db)

        # Only the display name is self-editable; an empty name keeps the old one.
        if update_data.name:
            async with unit_of_work(db, "update profile"):
                user.name = update_data.name
                await db.flush()
            await db.refresh(user)
        return user
