"""
Field-level patch values for partial updates.

A patch field is either ``UNSET`` (leave the stored value alone) or
``Set(value)`` (replace it, even when the value is falsy such as ``""`` or
an empty list).
"""

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

from pydantic import BaseModel

T = TypeVar("T")


class _Unset:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET = _Unset()


@dataclass(frozen=True)
class Set(Generic[T]):
    value: T


Patch = Union[_Unset, Set[T]]


def is_set(patch: Any) -> bool:
    return isinstance(patch, Set)


def field_patch(model: BaseModel, field: str, value: Any = UNSET) -> Patch:
    """Build a patch from a request model: Set only if the caller sent the field."""
    if field not in model.model_fields_set:
        return UNSET
    return Set(getattr(model, field) if value is UNSET else value)
