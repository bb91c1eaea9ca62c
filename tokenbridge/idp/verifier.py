"""Id-token verification against the IdP's advertised signing keys."""

import logging
from typing import Any

import jwt

from tokenbridge.core.errors import TokenInvalid
from tokenbridge.crypto.certificates import public_key_for
from tokenbridge.crypto.types import VerifiedUserIdentity
from tokenbridge.idp.key_provider import KeyProvider

logger = logging.getLogger(__name__)

EXPECTED_ALGORITHM = "RS256"
USER_ID_CLAIMS = ("upn", "unique_name", "preferred_username")
REQUIRED_CLAIMS = ["exp", "iss"]


def extract_user_id(claims: dict[str, Any]) -> str | None:
    """Pick the user identifier by claim precedence."""
    for name in USER_ID_CLAIMS:
        value = claims.get(name)
        if isinstance(value, str) and value:
            return value
    return None


def _reason_for(exc: jwt.PyJWTError) -> str:
    if isinstance(exc, jwt.InvalidSignatureError):
        return "bad_signature"
    if isinstance(exc, jwt.ExpiredSignatureError):
        return "expired"
    if isinstance(exc, jwt.InvalidIssuerError):
        return "issuer_mismatch"
    if isinstance(exc, jwt.InvalidAudienceError):
        return "audience_mismatch"
    if isinstance(exc, jwt.MissingRequiredClaimError):
        return "missing_claim"
    return "verification_failed"


class TokenVerifier:
    """Validates IdP id-tokens and produces a ``VerifiedUserIdentity``.

    Issuer, algorithm, and kid are checked on the unverified token before any
    key lookup or cryptographic work. The signature is then verified with the
    matching key, pinned to the single expected algorithm.
    """

    def __init__(
        self,
        provider: KeyProvider,
        algorithm: str = EXPECTED_ALGORITHM,
        audience: str | None = None,
        leeway: int = 0,
    ) -> None:
        self._provider = provider
        self._algorithm = algorithm
        self._audience = audience
        self._leeway = leeway

    async def verify(self, id_token: str, issuer_uri: str) -> VerifiedUserIdentity:
        """Verify ``id_token`` was issued by ``issuer_uri``.

        Raises:
            TokenInvalid: on any failed check; ``reason`` names which one.
        """
        header, unverified = self._decode_unverified(id_token)

        if unverified.get("iss") != issuer_uri:
            logger.warning(
                "id_token_issuer_mismatch",
                extra={"expected": issuer_uri, "actual": unverified.get("iss")},
            )
            raise TokenInvalid("issuer_mismatch", "token issuer is not trusted")

        if header.get("alg") != self._algorithm:
            logger.warning("id_token_alg_rejected", extra={"alg": header.get("alg")})
            raise TokenInvalid("algorithm_rejected", "unexpected signing algorithm")

        kid = header.get("kid")
        if not isinstance(kid, str) or not kid:
            raise TokenInvalid("missing_kid", "token header has no key id")

        key = await self._provider.get_key(kid)
        if key is None:
            raise TokenInvalid("unknown_kid", f"no signing key advertised for {kid}")
        if key.alg is not None and key.alg != self._algorithm:
            raise TokenInvalid("algorithm_rejected", "key is not for this algorithm")
        if key.use is not None and key.use != "sig":
            raise TokenInvalid("unusable_key", "key is not a signing key")

        public_key = public_key_for(key)
        try:
            claims = jwt.decode(
                id_token,
                public_key,
                algorithms=[self._algorithm],
                issuer=issuer_uri,
                audience=self._audience,
                leeway=self._leeway,
                options={
                    "verify_aud": self._audience is not None,
                    "require": REQUIRED_CLAIMS,
                },
            )
        except jwt.PyJWTError as exc:
            reason = _reason_for(exc)
            logger.warning("id_token_rejected", extra={"kid": kid, "reason": reason})
            raise TokenInvalid(reason, "id-token verification failed") from exc

        user_id = extract_user_id(claims)
        if user_id is None:
            logger.warning("id_token_missing_identity", extra={"kid": kid})
            raise TokenInvalid("missing_identity", "no user identifier claim")

        name = claims.get("name")
        identity = VerifiedUserIdentity(
            id=user_id,
            display_name=name if isinstance(name, str) else None,
        )
        logger.info("id_token_verified", extra={"uid": identity.id, "kid": kid})
        return identity

    @staticmethod
    def _decode_unverified(id_token: str) -> tuple[dict[str, Any], dict[str, Any]]:
        try:
            header = jwt.get_unverified_header(id_token)
            payload = jwt.decode(id_token, options={"verify_signature": False})
        except jwt.PyJWTError as exc:
            raise TokenInvalid("malformed", "token could not be decoded") from exc
        return header, payload
