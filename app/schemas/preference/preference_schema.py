from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional


class PreferenceCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v


class PreferenceUpdate(PreferenceCreate):
    pass


class PreferenceOut(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class PreferenceSpec(BaseModel):
    """One entry of an assign request: a tag name, an existing id, or both.

    When a name is given it decides which preference is used (created if
    missing); a bare id must point at an existing preference.
    """
    id: Optional[int] = None
    name: Optional[str] = Field(None, min_length=1, max_length=100)

    @model_validator(mode="after")
    def name_or_id(self):
        if self.name is None and self.id is None:
            raise ValueError("either name or id is required")
        if self.name is not None:
            self.name = self.name.strip()
            if not self.name:
                raise ValueError("name must not be blank")
        return self
