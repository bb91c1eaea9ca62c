"""Type definitions for key refresh and code exchange results."""

from pydantic import BaseModel, Field

from tokenbridge.crypto.types import SigningKey


class RefreshResult(BaseModel):
    """Outcome of one JWKS refresh cycle."""

    updated: list[SigningKey]
    evicted: list[str] = Field(default_factory=list)
    failed: list[str] = Field(default_factory=list)


class TokenPair(BaseModel):
    """Tokens returned by the IdP for an authorization code."""

    id_token: str
    access_token: str = ""
