from typing import Generic, TypeVar, List
from pydantic import BaseModel

T = TypeVar("T")

class BaseResponse(BaseModel):
    """Base response model."""
    pass

class Pagination(BaseModel):
    current: int
    pages: int
    total: int

class PaginatedResponse(BaseResponse, Generic[T]):
    """Standard pagination response."""
    records: List[T]
    pagination: Pagination
