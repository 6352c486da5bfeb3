"""Opaque cursor pagination.

A cursor encodes the watermark ``(key, id)`` of the last row of a page as
unpadded URL-safe base64 of ``"<key>|<id>"``. Listings are ordered by
``(key DESC, id DESC)`` and the next page is everything strictly below the
watermark, so rows inserted above it never show up in later pages and rows
sharing a key are never skipped or repeated.

Decoding is fail-soft: anything the encoder could not have produced decodes
to None, which callers treat as "start from the first page".
"""

import base64
import re
from collections.abc import Callable, Sequence
from typing import TypeVar

from dealhub.domain.entities.page import Watermark

T = TypeVar("T")

_SEPARATOR = "|"
_ID_PATTERN = re.compile(r"-?[0-9]+")
# Row ids are bound as signed 64-bit integers
_MAX_ID = 2**63 - 1
_MIN_ID = -(2**63)


class CursorPager:
    """Encode/decode pagination cursors and bound page sizes.

    Args:
        default_limit: Page size used when the caller gives none.
        max_limit: Largest page size a caller may request.
    """

    def __init__(self, default_limit: int = 20, max_limit: int = 500) -> None:
        if max_limit < 1:
            raise ValueError("max_limit must be at least 1")
        if not 1 <= default_limit <= max_limit:
            raise ValueError("default_limit must be between 1 and max_limit")
        self.default_limit = default_limit
        self.max_limit = max_limit

    @staticmethod
    def encode(watermark: tuple[str, int]) -> str:
        """Encode a ``(key, id)`` watermark into an opaque cursor.

        Deterministic: the same watermark always yields the same cursor.

        Examples:
            >>> CursorPager.encode(("2024-01-01T00:00:00", 7))
            'MjAyNC0wMS0wMVQwMDowMDowMHw3'
        """
        key, row_id = watermark
        raw = f"{key}{_SEPARATOR}{int(row_id)}".encode("utf-8")
        return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")

    @staticmethod
    def decode(cursor: str | None) -> Watermark | None:
        """Decode a cursor back into its watermark.

        Returns:
            The watermark, or None for empty, malformed or foreign input.
        """
        if not cursor or not isinstance(cursor, str):
            return None

        padded = cursor + "=" * (-len(cursor) % 4)
        try:
            raw = base64.b64decode(padded, altchars=b"-_", validate=True).decode("utf-8")
        except ValueError:
            # binascii.Error and UnicodeDecodeError are both ValueErrors
            return None

        key, separator, row_id = raw.rpartition(_SEPARATOR)
        if not separator or not _ID_PATTERN.fullmatch(row_id):
            return None
        value = int(row_id)
        if not _MIN_ID <= value <= _MAX_ID:
            return None
        return Watermark(key=key, id=value)

    def clamp_limit(self, limit: int | None) -> int:
        """Bound a caller-supplied page size to ``[1, max_limit]``."""
        if limit is None:
            return self.default_limit
        return max(1, min(int(limit), self.max_limit))

    def next_cursor(
        self,
        rows: Sequence[T],
        limit: int,
        watermark_of: Callable[[T], tuple[str, int]],
    ) -> str | None:
        """Compute the cursor for the page after ``rows``.

        A full page may have a successor; a short page is the last one.
        """
        if not rows or len(rows) < limit:
            return None
        return self.encode(watermark_of(rows[-1]))
