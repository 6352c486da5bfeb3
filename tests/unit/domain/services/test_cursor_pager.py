"""Unit tests for CursorPager."""

import base64

import pytest

from dealhub.domain.entities import Watermark
from dealhub.domain.services import CursorPager


@pytest.fixture
def pager() -> CursorPager:
    return CursorPager(default_limit=20, max_limit=500)


class TestEncode:
    """Tests for cursor encoding."""

    def test_encode_is_unpadded_urlsafe_base64(self):
        """Test that the cursor is base64url of 'key|id' without padding."""
        cursor = CursorPager.encode(("2024-01-01T00:00:00", 7))

        assert cursor == "MjAyNC0wMS0wMVQwMDowMDowMHw3"
        assert "=" not in cursor

    def test_encode_is_deterministic(self):
        assert CursorPager.encode(("k", 1)) == CursorPager.encode(("k", 1))

    def test_encode_never_emits_non_urlsafe_characters(self):
        """Test keys that base64 to '+' and '/' in the standard alphabet."""
        cursor = CursorPager.encode(("\xff\xfe>>??", 99))

        assert "+" not in cursor
        assert "/" not in cursor


class TestDecode:
    """Tests for cursor decoding."""

    @pytest.mark.parametrize(
        "watermark",
        [
            ("2024-01-01T00:00:00", 7),
            ("2024-01-01T00:00:00.123456", 123456789),
            ("", 0),
            ("a|b|c", 3),
            ("ünïcode ✓", 42),
            ("x", -5),
        ],
    )
    def test_decode_returns_encoded_watermark(self, watermark):
        """Test that decoding returns the encoded watermark."""
        assert CursorPager.decode(CursorPager.encode(watermark)) == watermark

    def test_decode_returns_watermark_tuple(self):
        decoded = CursorPager.decode(CursorPager.encode(("key", 5)))

        assert isinstance(decoded, Watermark)
        assert decoded.key == "key"
        assert decoded.id == 5

    def test_decode_splits_on_last_separator(self):
        """Test that keys containing the separator survive."""
        cursor = base64.urlsafe_b64encode(b"a|b|12").decode().rstrip("=")

        assert CursorPager.decode(cursor) == ("a|b", 12)

    def test_decode_accepts_padded_input(self):
        cursor = base64.urlsafe_b64encode(b"key|1").decode()

        assert cursor.endswith("=")
        assert CursorPager.decode(cursor) == ("key", 1)

    @pytest.mark.parametrize(
        "garbage",
        [
            None,
            "",
            "!!!!",
            "not base64 at all",
            "a",
            "====",
            base64.urlsafe_b64encode(b"no-separator").decode(),
            base64.urlsafe_b64encode(b"key|").decode(),
            base64.urlsafe_b64encode(b"key|12abc").decode(),
            base64.urlsafe_b64encode(b"key|1.5").decode(),
            base64.urlsafe_b64encode(b"\xff\xfe|1").decode(),
            "🙂",
        ],
    )
    def test_decode_garbage_returns_none(self, garbage):
        """Test that malformed cursors decode to None instead of raising."""
        assert CursorPager.decode(garbage) is None

    @pytest.mark.parametrize("row_id", [2**63, -(2**63) - 1, 10**30])
    def test_decode_id_outside_int64_returns_none(self, row_id):
        assert CursorPager.decode(CursorPager.encode(("2024-01-01T00:00:00", row_id))) is None

    @pytest.mark.parametrize("row_id", [2**63 - 1, -(2**63)])
    def test_decode_int64_bounds_accepted(self, row_id):
        assert CursorPager.decode(CursorPager.encode(("k", row_id))) == ("k", row_id)

    def test_decode_non_string_returns_none(self):
        assert CursorPager.decode(12345) is None  # type: ignore[arg-type]


class TestClampLimit:
    """Tests for page size bounding."""

    def test_none_uses_default(self, pager):
        assert pager.clamp_limit(None) == 20

    @pytest.mark.parametrize("limit", [0, -1, -1000])
    def test_non_positive_limit_clamped_to_one(self, pager, limit):
        assert pager.clamp_limit(limit) == 1

    def test_limit_above_maximum_clamped_down(self, pager):
        assert pager.clamp_limit(10_000) == 500

    def test_limit_in_range_unchanged(self, pager):
        assert pager.clamp_limit(37) == 37

    def test_invalid_configuration_rejected(self):
        with pytest.raises(ValueError):
            CursorPager(default_limit=0)
        with pytest.raises(ValueError):
            CursorPager(default_limit=50, max_limit=10)


class TestNextCursor:
    """Tests for next-page cursor computation."""

    def test_full_page_yields_cursor_of_last_row(self, pager):
        rows = [("c", 3), ("b", 2)]

        cursor = pager.next_cursor(rows, 2, lambda row: row)

        assert CursorPager.decode(cursor) == ("b", 2)

    def test_short_page_yields_no_cursor(self, pager):
        assert pager.next_cursor([("c", 3)], 2, lambda row: row) is None

    def test_empty_page_yields_no_cursor(self, pager):
        assert pager.next_cursor([], 2, lambda row: row) is None
