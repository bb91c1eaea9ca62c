"""Type definitions for signing keys, JWKS documents, and verified identities."""

from pydantic import BaseModel, ConfigDict, Field


class SigningKey(BaseModel):
    """One public key advertised in the IdP's JWKS."""

    model_config = ConfigDict(extra="ignore")

    kid: str = Field(min_length=1)
    kty: str = "RSA"
    use: str | None = None
    alg: str | None = None
    x5t: str | None = None
    n: str | None = None
    e: str | None = None
    x5c: list[str] = Field(default_factory=list)
    issuer: str | None = None


class JWKSDocument(BaseModel):
    """JSON Web Key Set as served by the IdP discovery endpoint."""

    model_config = ConfigDict(extra="ignore")

    keys: list[SigningKey] = Field(min_length=1)


class VerifiedUserIdentity(BaseModel):
    """Identity extracted from a fully verified id-token."""

    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str | None = None
