from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class ImageOut(BaseModel):
    id: int
    trip_id: Optional[int] = None
    uploaded_by: Optional[int] = None
    url: str
    file_name: str
    original_name: Optional[str] = None
    file_size: int
    mime_type: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
