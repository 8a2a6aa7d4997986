import math
from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


def is_missing(value: Any) -> bool:
    """True for values a client left out: absent, null or a blank string."""
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def to_number(value: Any) -> Optional[float]:
    """
    Parse a JSON value as a finite number.

    Accepts ints, floats and numeric strings. Returns None for anything
    else, including booleans, NaN and infinity.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


class MessageResponse(BaseModel):
    """Schema for responses that carry only a status message."""
    success: bool = True
    message: str


class DataResponse(MessageResponse, Generic[T]):
    """Schema for responses wrapping a single object."""
    data: T


class ListResponse(MessageResponse, Generic[T]):
    """Schema for responses wrapping a list of objects."""
    data: List[T]
    count: int


class ErrorResponse(BaseModel):
    """Schema for validation, not-found and conflict failures."""
    success: bool = False
    message: str


class StorageErrorResponse(BaseModel):
    """Schema for unhandled database failures."""
    error: str
