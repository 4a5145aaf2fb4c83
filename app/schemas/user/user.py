from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, Literal
from datetime import datetime
from enum import Enum
from app.core.config import settings


class UserCreate(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    password: str
    role: Literal["visitor", "trip_owner"]

    @field_validator("password")
    @classmethod
    def password_length(cls, v: str) -> str:
        if len(v) < settings.PASSWORD_MIN_LENGTH:
            raise ValueError(f"must be at least {settings.PASSWORD_MIN_LENGTH} characters")
        return v


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserOut(BaseModel):
    id: int
    name: str
    email: EmailStr
    role: str
    created_at: Optional[datetime] = None

    @field_validator("role", mode="before")
    @classmethod
    def role_value(cls, v):
        return v.value if isinstance(v, Enum) else v

    class Config:
        from_attributes = True


class AuthData(BaseModel):
    token: str
    user: UserOut


class ProfileUpdate(BaseModel):
    name: Optional[str] = None


class AdminUserCreate(UserCreate):
    role: Literal["visitor", "trip_owner", "admin"]


class AdminUserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    role: Optional[Literal["visitor", "trip_owner", "admin"]] = None


class RoleOption(BaseModel):
    value: str
    label: str
    description: str
