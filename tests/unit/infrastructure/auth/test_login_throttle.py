"""Unit tests for LoginThrottle."""

from datetime import datetime, timedelta, timezone

import pytest

from dealhub.infrastructure.auth.exceptions import TooManyAttempts
from dealhub.infrastructure.auth.login_throttle import LoginThrottle
from dealhub.infrastructure.persistence.repositories import RateLimitRepository

NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def throttle(db_session) -> LoginThrottle:
    return LoginThrottle(RateLimitRepository(db_session), max_attempts=3, window_seconds=60)


@pytest.mark.asyncio
async def test_attempts_within_budget_pass(throttle):
    assert [await throttle.register_attempt("alice", NOW) for _ in range(3)] == [1, 2, 3]


@pytest.mark.asyncio
async def test_attempt_over_budget_raises(throttle):
    for _ in range(3):
        await throttle.register_attempt("alice", NOW)

    with pytest.raises(TooManyAttempts) as exc_info:
        await throttle.register_attempt("alice", NOW)

    assert exc_info.value.retry_after == 60


@pytest.mark.asyncio
async def test_identifier_is_normalised(throttle):
    """Test that case and whitespace variants share one counter."""
    await throttle.register_attempt("Alice@Example.com", NOW)
    await throttle.register_attempt(" alice@example.com ", NOW)

    assert await throttle.register_attempt("ALICE@EXAMPLE.COM", NOW) == 3


@pytest.mark.asyncio
async def test_window_expiry_and_reset(throttle):
    for _ in range(3):
        await throttle.register_attempt("alice", NOW)

    assert await throttle.register_attempt("alice", NOW + timedelta(seconds=61)) == 1

    await throttle.reset("alice")

    assert await throttle.register_attempt("alice", NOW + timedelta(seconds=62)) == 1


@pytest.mark.asyncio
async def test_key_prefixes_keep_separate_counters(db_session, throttle):
    resets = LoginThrottle(
        RateLimitRepository(db_session), max_attempts=3, window_seconds=60, key_prefix="reset:"
    )
    for _ in range(3):
        await throttle.register_attempt("alice", NOW)

    assert await resets.register_attempt("alice", NOW) == 1
    assert resets.key_for(" Alice ") == "reset:alice"
