"""Response envelope shared by every endpoint."""

from typing import Generic, Optional, TypeVar
from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope: {success, message?, data}."""

    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None


class ApiListResponse(ApiResponse[T], Generic[T]):
    """Success envelope for collections, with a top-level item count."""

    count: int = 0


class ApiErrorResponse(BaseModel):
    """Failure envelope: {success: false, message, error}."""

    success: bool = False
    message: str
    error: str
