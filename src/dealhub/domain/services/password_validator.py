"""Password strength policy applied when a user sets a new password."""

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class PasswordValidationError:
    """A single failed password rule.

    Attributes:
        field: The request field the rule applies to.
        message: Human-readable error message.
        code: Machine-readable error code.
    """

    field: str
    message: str
    code: str


class PasswordValidator:
    """Validates password strength.

    Default policy: at least 10 characters containing an uppercase letter,
    a lowercase letter and a digit.
    """

    def __init__(
        self,
        min_length: int = 10,
        require_uppercase: bool = True,
        require_lowercase: bool = True,
        require_digit: bool = True,
        field: str = "new_password",
    ) -> None:
        self.min_length = min_length
        self.require_uppercase = require_uppercase
        self.require_lowercase = require_lowercase
        self.require_digit = require_digit
        self.field = field

    def validate(self, password: str) -> list[PasswordValidationError]:
        """Validate a password against the policy.

        Returns:
            List of validation errors. Empty list if password is valid.
        """
        rules = [
            (
                len(password) >= self.min_length,
                f"Password must be at least {self.min_length} characters",
                "password_too_short",
            ),
            (
                not self.require_uppercase or re.search(r"[A-Z]", password),
                "Password must contain at least one uppercase letter",
                "password_no_uppercase",
            ),
            (
                not self.require_lowercase or re.search(r"[a-z]", password),
                "Password must contain at least one lowercase letter",
                "password_no_lowercase",
            ),
            (
                not self.require_digit or re.search(r"\d", password),
                "Password must contain at least one digit",
                "password_no_digit",
            ),
        ]
        return [
            PasswordValidationError(field=self.field, message=message, code=code)
            for passed, message, code in rules
            if not passed
        ]

    def is_valid(self, password: str) -> bool:
        return not self.validate(password)


default_password_validator = PasswordValidator()
