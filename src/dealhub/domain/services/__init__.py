"""Domain services for DealHub.

Services contain business logic that doesn't naturally fit within a single entity.
They have no dependencies on infrastructure or external frameworks.
"""

from dealhub.domain.services.cursor_pager import CursorPager
from dealhub.domain.services.password_validator import (
    PasswordValidationError,
    PasswordValidator,
    default_password_validator,
)

__all__ = [
    "CursorPager",
    "PasswordValidationError",
    "PasswordValidator",
    "default_password_validator",
]
