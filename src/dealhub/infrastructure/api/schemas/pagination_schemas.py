"""Pydantic schemas shared by cursor-paginated list endpoints."""

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class PageResponse(BaseModel, Generic[T]):
    """One page of a listing."""

    items: list[T] = Field(default_factory=list, description="Items of this page")
    cursor: str | None = Field(
        None, description="Opaque cursor for the next page, null on the last page"
    )
