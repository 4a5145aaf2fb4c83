from dataclasses import dataclass, fields
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime
from enum import Enum
from app.schemas.preference.preference_schema import PreferenceOut
from app.schemas.image.image_schema import ImageOut
from app.utils.patch import Patch, UNSET, field_patch


class TripPointIn(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class TripPointOut(TripPointIn):
    id: int
    trip_id: int

    class Config:
        from_attributes = True


class TripCreate(BaseModel):
    name: str = Field(min_length=1)
    description: str = ""
    cover_image: str = ""
    price: float = Field(ge=0)
    duration: int = Field(ge=1)
    start_latitude: float = Field(ge=-90, le=90)
    start_longitude: float = Field(ge=-180, le=180)
    end_latitude: float = Field(ge=-90, le=90)
    end_longitude: float = Field(ge=-180, le=180)
    preference_ids: List[int] = []
    points: List[TripPointIn] = []


@dataclass(frozen=True)
class TripPatch:
    name: Patch[str] = UNSET
    description: Patch[str] = UNSET
    cover_image: Patch[str] = UNSET
    price: Patch[float] = UNSET
    duration: Patch[int] = UNSET
    start_latitude: Patch[float] = UNSET
    start_longitude: Patch[float] = UNSET
    end_latitude: Patch[float] = UNSET
    end_longitude: Patch[float] = UNSET
    preference_ids: Patch[List[int]] = UNSET
    points: Patch[List[TripPointIn]] = UNSET


SCALAR_FIELDS = (
    "name", "description", "cover_image", "price", "duration",
    "start_latitude", "start_longitude", "end_latitude", "end_longitude",
)


class TripUpdate(BaseModel):
    """Partial update body. Omitted fields stay as they are; sent fields
    replace the stored value, so "" clears a text field and [] empties the
    preference or point set. null is rejected."""

    name: Optional[str] = None
    description: Optional[str] = None
    cover_image: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    duration: Optional[int] = Field(None, ge=1)
    start_latitude: Optional[float] = Field(None, ge=-90, le=90)
    start_longitude: Optional[float] = Field(None, ge=-180, le=180)
    end_latitude: Optional[float] = Field(None, ge=-90, le=90)
    end_longitude: Optional[float] = Field(None, ge=-180, le=180)
    preference_ids: Optional[List[int]] = None
    points: Optional[List[TripPointIn]] = None

    @field_validator(*SCALAR_FIELDS, "preference_ids", "points", mode="before")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("may not be null; omit the field to keep the current value")
        return v

    def to_patch(self) -> TripPatch:
        return TripPatch(**{f.name: field_patch(self, f.name) for f in fields(TripPatch)})


class TripOwnerOut(BaseModel):
    id: int
    name: str
    email: str
    role: str

    @field_validator("role", mode="before")
    @classmethod
    def role_value(cls, v):
        return v.value if isinstance(v, Enum) else v

    class Config:
        from_attributes = True


class TripResponse(BaseModel):
    id: int
    name: str
    description: str
    cover_image: str
    price: float
    duration: int
    start_latitude: float
    start_longitude: float
    end_latitude: float
    end_longitude: float
    user_id: int
    owner: Optional[TripOwnerOut] = None
    preferences: List[PreferenceOut] = []
    points: List[TripPointOut] = []
    images: List[ImageOut] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DeletedTrip(BaseModel):
    id: int
    name: str


class SeedResult(BaseModel):
    trips: int
