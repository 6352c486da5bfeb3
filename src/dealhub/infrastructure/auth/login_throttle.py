"""Per-identifier login attempt throttle backed by the shared store."""

from datetime import datetime

from dealhub.core.logging import get_logger
from dealhub.infrastructure.auth.exceptions import TooManyAttempts
from dealhub.infrastructure.persistence.repositories import RateLimitRepository

logger = get_logger(__name__)


class LoginThrottle:
    """Fixed-window limit on login attempts per identifier.

    Every attempt counts, successful or not; a successful login resets the
    counter. Password reset requests are counted by a second throttle with
    its own ``key_prefix``.
    """

    def __init__(
        self,
        repository: RateLimitRepository,
        max_attempts: int,
        window_seconds: int,
        key_prefix: str = "login:",
    ) -> None:
        self._repository = repository
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self.key_prefix = key_prefix

    def key_for(self, identifier: str) -> str:
        return f"{self.key_prefix}{identifier.strip().lower()}"

    async def register_attempt(self, identifier: str, now: datetime) -> int:
        """Count a login attempt.

        Returns:
            Attempts in the current window, this one included.

        Raises:
            TooManyAttempts: If the attempt exceeds the budget.
        """
        count = await self._repository.hit(self.key_for(identifier), self.window_seconds, now)
        if count > self.max_attempts:
            logger.warning(
                "Attempts throttled",
                key_prefix=self.key_prefix,
                attempts=count,
                max_attempts=self.max_attempts,
            )
            raise TooManyAttempts(retry_after=self.window_seconds)
        return count

    async def reset(self, identifier: str) -> None:
        await self._repository.reset(self.key_for(identifier))
