"""Schemas shared by several routers."""

from datetime import datetime
from math import ceil
from typing import Generic, TypeVar
from pydantic import BaseModel, ConfigDict, Field


T = TypeVar("T")


class PaginationParams(BaseModel):
    """Page window over an offset/limit query."""

    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=18, ge=1, le=100)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    def page_count(self, total: int) -> int:
        """Pages needed for ``total`` rows; zero when there are none."""
        return ceil(total / self.page_size) if total else 0


class PaginatedResponse(BaseModel, Generic[T]):
    """One page of a listing plus the totals the client pages with."""

    items: list[T]
    total: int = Field(ge=0)
    page: int = Field(ge=1)
    page_size: int = Field(ge=1)
    total_pages: int = Field(ge=0)

    @classmethod
    def create(cls, items: list[T], total: int, pagination: PaginationParams):
        return cls(
            items=items,
            total=total,
            page=pagination.page,
            page_size=pagination.page_size,
            total_pages=pagination.page_count(total),
        )


class TimestampMixin(BaseModel):
    """Row timestamps read straight off ORM objects."""

    model_config = ConfigDict(from_attributes=True)

    created_at: datetime
    updated_at: datetime


class MessageResponse(BaseModel):
    message: str
