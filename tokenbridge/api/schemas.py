"""Request and response schemas for the HTTP surface."""

from pydantic import BaseModel, ConfigDict, Field

from tokenbridge.idp.types import RefreshResult


class CustomTokenRequest(BaseModel):
    """Id-token received from the browser after the IdP redirect."""

    id_token: str = Field(min_length=1)
    access_token: str | None = None


class CustomTokenResponse(BaseModel):
    """Downstream token minted for the verified user."""

    model_config = ConfigDict(populate_by_name=True)

    custom_token: str = Field(alias="customToken")


class RefreshResponse(BaseModel):
    """Summary of a key refresh run."""

    updated: list[str]
    evicted: list[str]
    failed: list[str]

    @classmethod
    def from_result(cls, result: RefreshResult) -> "RefreshResponse":
        return cls(
            updated=[k.kid for k in result.updated],
            evicted=result.evicted,
            failed=result.failed,
        )
