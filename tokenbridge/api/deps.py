"""FastAPI dependency injection for services and internal authentication."""

import secrets
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from tokenbridge.core.services import Services
from tokenbridge.core.settings import AppSettings

_security = HTTPBearer()


def _load_settings() -> AppSettings:
    return AppSettings()


def get_services(request: Request) -> Services:
    """Return the components built during application startup."""
    return request.app.state.services


async def require_internal_token(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(_security)],
    settings: Annotated[AppSettings, Depends(_load_settings)],
) -> str:
    """Verify the TOKENBRIDGE_INTERNAL_TOKEN Bearer token."""
    expected = settings.internal_token
    if not expected:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    if not secrets.compare_digest(
        credentials.credentials.encode(), expected.encode()
    ):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
        )
    return credentials.credentials
