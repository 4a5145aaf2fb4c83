from dataclasses import dataclass
from passlib.context import CryptContext
from jose import JWTError, jwt
from datetime import datetime, timedelta, timezone
from typing import Optional
from app.core.config import settings
from app.core.errors import AuthenticationRequired
import uuid

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


@dataclass(frozen=True)
class TokenClaims:
    subject_id: int
    email: str
    role: str


def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)

def issue_token(subject_id: int, email: str, role: str, expires_delta: Optional[timedelta] = None) -> str:
    """Sign an access token carrying the subject id, email and role."""
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode = {
        "sub": str(subject_id),
        "email": email,
        "role": role,
        "exp": expire,
        "jti": str(uuid.uuid4()),
        "type": "access",
    }
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)

def verify_token(token: str) -> TokenClaims:
    """Decode and check a token issued by issue_token.

    Raises AuthenticationRequired for bad signatures, expired tokens and
    payloads missing a subject.
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        raise AuthenticationRequired("Invalid or expired token")

    if payload.get("type") != "access":
        raise AuthenticationRequired("Invalid token type")

    try:
        subject_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise AuthenticationRequired("Invalid token payload")

    return TokenClaims(
        subject_id=subject_id,
        email=payload.get("email", ""),
        role=payload.get("role", ""),
    )
