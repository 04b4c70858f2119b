"""Common schemas for the RiskFlow API."""

from typing import Generic, TypeVar, Optional, List
from pydantic import BaseModel, Field

from riskflow.core.config import get_settings

T = TypeVar("T")


class PaginationParams(BaseModel):
    """Pagination parameters.

    Out of range values are clamped rather than rejected: page below 1 becomes
    1, page_size below 1 becomes the default and anything above the maximum
    is capped.
    """
    page: int = Field(1, ge=1, description="Page number")
    page_size: int = Field(10, ge=1, description="Items per page")

    @classmethod
    def normalize(cls, page: Optional[int], page_size: Optional[int]) -> "PaginationParams":
        settings = get_settings()
        if not page or page < 1:
            page = 1
        if not page_size or page_size < 1:
            page_size = settings.default_page_size
        return cls(page=page, page_size=min(page_size, settings.max_page_size))

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        return self.page_size


class PaginatedResponse(BaseModel, Generic[T]):
    """Paginated response wrapper."""
    items: List[T]
    total_items: int
    total_pages: int
    page: int
    page_size: int

    @classmethod
    def create(cls, items: List[T], total_items: int, page: int, page_size: int):
        total_pages = (total_items + page_size - 1) // page_size if page_size > 0 else 0
        return cls(
            items=items,
            total_items=total_items,
            total_pages=total_pages,
            page=page,
            page_size=page_size,
        )


class ErrorResponse(BaseModel):
    """Error body produced by HTTPException."""
    detail: str
