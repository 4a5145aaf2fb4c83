from pydantic import BaseModel
from typing import Generic, List, TypeVar

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    message: str
    data: T


class ListEnvelope(BaseModel, Generic[T]):
    message: str
    data: List[T]
    count: int


class MessageResponse(BaseModel):
    message: str


def envelope(message: str, data) -> dict:
    return {"message": message, "data": data}


def list_envelope(message: str, data: list) -> dict:
    return {"message": message, "data": data, "count": len(data)}
