from typing import Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.exc import IntegrityError
from app.core.database import unit_of_work
from app.core.errors import AuthenticationRequired, Conflict
from app.core.logger import logger
from app.core.security import hash_password, verify_password, issue_token
from app.models.user.user import User, UserRole
from app.schemas.user.user import UserCreate

ROLE_OPTIONS = [
    {
        "value": UserRole.visitor.value,
        "label": "Visitor",
        "description": "Someone looking for travel experiences and trips",
    },
    {
        "value": UserRole.trip_owner.value,
        "label": "Trip Owner",
        "description": "Someone who creates and manages travel trips",
    },
]


def token_for(user: User) -> str:
    return issue_token(user.id, user.email, UserRole(user.role).value)


async def create_account(user_data: UserCreate, db: AsyncSession) -> User:
    """Insert a user; shared by self-registration and admin creation."""
    result = await db.execute(select(User).where(User.email == user_data.email))
    if result.scalar():
        raise Conflict("A user with this email address already exists")

    new_user = User(
        name=user_data.name,
        email=user_data.email,
        hashed_password=hash_password(user_data.password),
        role=UserRole(user_data.role),
    )

    async with unit_of_work(db, "create account"):
        db.add(new_user)
        try:
            await db.flush()
        except IntegrityError:
            # Lost a race with another registration for the same email
            raise Conflict("A user with this email address already exists")

    await db.refresh(new_user)
    logger.info(f"User {new_user.id} registered as {user_data.role}")
    return new_user


async def register_user(user_data: UserCreate, db: AsyncSession) -> Tuple[User, str]:
    new_user = await create_account(user_data, db)
    return new_user, token_for(new_user)


async def login_user(email: str, password: str, db: AsyncSession) -> Tuple[User, str]:
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar()

    if not user or not verify_password(password, user.hashed_password):
        logger.warning(f"Failed login for {email}")
        raise AuthenticationRequired("Invalid email or password")

    return user, token_for(user)
