"""Domain entities for DealHub.

Entities are pure Python dataclasses and enums that represent core business
concepts. They have no dependencies on infrastructure or external frameworks.
"""

from dealhub.domain.entities.auth import (
    MUTATING_ROLES,
    AuthErrorKind,
    CodePurpose,
    TenantDecision,
    TenantRole,
    TokenPair,
)
from dealhub.domain.entities.page import Page, Watermark

__all__ = [
    "MUTATING_ROLES",
    "AuthErrorKind",
    "CodePurpose",
    "Page",
    "TenantDecision",
    "TenantRole",
    "TokenPair",
    "Watermark",
]
