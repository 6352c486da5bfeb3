"""Pagination entities."""

from dataclasses import dataclass, field
from typing import Generic, NamedTuple, TypeVar

T = TypeVar("T")


class Watermark(NamedTuple):
    """Position of the last row a client has seen.

    Rows are ordered by ``(key DESC, id DESC)``; the next page starts strictly
    below this pair.
    """

    key: str
    id: int


@dataclass
class Page(Generic[T]):
    """One page of a cursor-paginated listing.

    Attributes:
        items: Rows of this page, in ``(key DESC, id DESC)`` order.
        next_cursor: Opaque cursor for the following page, or None at the end.
    """

    items: list[T] = field(default_factory=list)
    next_cursor: str | None = None
