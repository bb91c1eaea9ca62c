"""Downstream custom-token minting."""

import logging
from datetime import UTC, datetime, timedelta
from typing import Protocol

import jwt
import uuid_utils
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from tokenbridge.core.errors import IssuanceError
from tokenbridge.core.settings import IssuerSettings
from tokenbridge.crypto.keys import load_private_key

logger = logging.getLogger(__name__)

MAX_CUSTOM_TOKEN_TTL = 3600


class TokenIssuer(Protocol):
    """Mints an opaque downstream token for a verified user identifier."""

    def issue(self, user_id: str) -> str: ...


class CustomTokenIssuer:
    """Signs RS256 custom tokens in the Firebase Auth custom-token layout."""

    def __init__(
        self,
        private_key: RSAPrivateKey,
        service_account_email: str,
        audience: str,
        ttl_seconds: int = MAX_CUSTOM_TOKEN_TTL,
    ) -> None:
        self._private_key = private_key
        self._service_account_email = service_account_email
        self._audience = audience
        self._ttl = min(ttl_seconds, MAX_CUSTOM_TOKEN_TTL)

    @classmethod
    def from_settings(cls, settings: IssuerSettings) -> "CustomTokenIssuer":
        """Build an issuer from configured credentials."""
        if not settings.private_key_pem or not settings.service_account_email:
            raise IssuanceError("issuer credentials are not configured")
        private_key = load_private_key(
            settings.private_key_pem, settings.private_key_encryption_key
        )
        return cls(
            private_key=private_key,
            service_account_email=settings.service_account_email,
            audience=settings.audience,
            ttl_seconds=settings.token_ttl,
        )

    def issue(self, user_id: str) -> str:
        """Create a signed custom token whose ``uid`` is ``user_id``."""
        if not user_id:
            raise IssuanceError("cannot issue a token without a user id")
        now = datetime.now(UTC)
        payload = {
            "iss": self._service_account_email,
            "sub": self._service_account_email,
            "aud": self._audience,
            "uid": user_id,
            "iat": now,
            "exp": now + timedelta(seconds=self._ttl),
            "jti": str(uuid_utils.uuid7()),
        }
        try:
            token = jwt.encode(payload, self._private_key, algorithm="RS256")
        except (jwt.PyJWTError, ValueError, TypeError) as exc:
            raise IssuanceError("custom token signing failed") from exc
        logger.info("custom_token_issued", extra={"uid": user_id})
        return token
