"""Claims carried by access tokens.

Access tokens carry a fixed, versioned set of claims. Tokens whose claims do
not match this structure exactly are rejected.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

CLAIMS_VERSION = 1


class AccessClaims(BaseModel):
    """Structure of the data contained within an access token."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    ver: Literal[1] = Field(default=CLAIMS_VERSION, description="Claims format version")
    iss: str = Field(..., description="Issuer")
    sub: str = Field(..., pattern=r"^[0-9]+$", description="User ID of the subject")
    role: str = Field(default="user", description="Platform role of the user")
    identifier: str = Field(..., description="Email or mobile the user logged in with")
    iat: int = Field(..., description="Unix timestamp when the token was issued")
    exp: int = Field(..., description="Unix timestamp when the token expires")
    jti: str = Field(..., pattern=r"^[0-9a-f]{32}$", description="Unique token ID")
    type: Literal["access"] = Field(default="access", description="Token type")

    @property
    def user_id(self) -> int:
        return int(self.sub)
