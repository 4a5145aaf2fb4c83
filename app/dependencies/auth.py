from typing import Optional
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.models.user.user import User, UserRole
from app.core.database import get_db
from app.core.security import verify_token
from app.core.errors import AuthenticationRequired
from app.core.access_control import Subject, check

# auto_error=False so a missing header reaches us and is reported in our envelope
security = HTTPBearer(auto_error=False)


async def _resolve_subject(token: str, db: AsyncSession) -> Subject:
    claims = verify_token(token)

    stmt = select(User).filter(User.id == claims.subject_id)
    user = await db.scalar(stmt)
    if user is None:
        raise AuthenticationRequired("Could not validate credentials")

    # Role comes from the stored user so role changes apply to existing tokens.
    return Subject(id=user.id, email=user.email, role=UserRole(user.role))


async def get_optional_subject(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> Optional[Subject]:
    """Anonymous (None) without a credential; a credential that is sent must be valid."""
    if credentials is None:
        # HTTPBearer also returns None for other schemes; only a missing header is anonymous.
        if request.headers.get("Authorization"):
            raise AuthenticationRequired("Invalid authorization header")
        return None
    return await _resolve_subject(credentials.credentials, db)


async def get_current_subject(
    subject: Optional[Subject] = Depends(get_optional_subject),
) -> Subject:
    if subject is None:
        raise AuthenticationRequired("You must be logged in to access this route")
    return subject


def require_role(*roles: UserRole):
    async def role_checker(subject: Optional[Subject] = Depends(get_optional_subject)) -> Subject:
        allowed = " or ".join(role.value for role in roles)
        return check(subject, f"access this route (requires {allowed})", roles=roles)
    return role_checker
