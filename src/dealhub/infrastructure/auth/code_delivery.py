"""Delivery of one-time codes to users.

The authorizer hands every code it issues to a :class:`CodeSender`. Real
deployments plug in an SMS or email provider; the default sender only logs.
"""

from abc import ABC, abstractmethod

from dealhub.core.logging import get_logger
from dealhub.domain.entities import CodePurpose
from dealhub.infrastructure.persistence.models import UserModel

logger = get_logger(__name__)


class CodeSender(ABC):
    """Abstract base class for code senders."""

    @abstractmethod
    async def send(self, user: UserModel, purpose: CodePurpose, code: str) -> None:
        """Get a code to the user it was issued for.

        Args:
            user: Recipient; its email or mobile number is the address.
            purpose: What the code authorizes.
            code: The raw code.
        """
        pass


class LoggingCodeSender(CodeSender):
    """Sender that writes issued codes to the log instead of delivering them.

    The code itself is only logged when ``reveal_codes`` is set, which the
    application does in development.
    """

    def __init__(self, reveal_codes: bool = False) -> None:
        self.reveal_codes = reveal_codes

    async def send(self, user: UserModel, purpose: CodePurpose, code: str) -> None:
        if self.reveal_codes:
            logger.info("One-time code issued", user_id=user.id, purpose=purpose.value, code=code)
        else:
            logger.info("One-time code issued", user_id=user.id, purpose=purpose.value)
