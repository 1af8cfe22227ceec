import math
from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Pagination(BaseModel):
    """
    Paging block attached to list responses.

    Field names are part of the wire contract (camelCase).
    """

    page: int
    limit: int
    total: int
    totalPages: int
    hasNext: bool
    hasPrev: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        total_pages = math.ceil(total / limit) if limit > 0 else 0
        return cls(
            page=page,
            limit=limit,
            total=total,
            totalPages=total_pages,
            hasNext=page < total_pages,
            hasPrev=page > 1,
        )


class ApiResponse(BaseModel, Generic[T]):
    """
    Envelope shared by every endpoint:

        { success, data?, error?, message? }
    """

    success: bool = True
    data: T | None = None
    error: str | None = None
    message: str | None = None


class PaginatedResponse(BaseModel, Generic[T]):
    """Envelope for list endpoints, adding `pagination`."""

    success: bool = True
    data: list[T]
    pagination: Pagination
    message: str | None = None


class MessageResponse(BaseModel):
    """Envelope without a payload (e.g. logout, delete)."""

    success: bool = True
    message: str | None = None
