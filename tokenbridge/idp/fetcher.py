"""Retrieval of the IdP's JSON Web Key Set over HTTPS."""

import logging

import httpx
from pydantic import ValidationError

from tokenbridge.core.errors import FetchError
from tokenbridge.core.settings import HTTP_TIMEOUT_DEFAULT
from tokenbridge.crypto.types import JWKSDocument, SigningKey

logger = logging.getLogger(__name__)


class KeyFetcher:
    """Fetches whole JWKS snapshots from the IdP.

    The ``httpx.AsyncClient`` is injected so the application can share one
    connection pool and tests can mount a ``MockTransport``.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        timeout: float = HTTP_TIMEOUT_DEFAULT,
    ) -> None:
        self._client = client
        self._timeout = timeout

    async def fetch_all(self, jwks_uri: str) -> list[SigningKey]:
        """GET ``jwks_uri`` and return its keys.

        Raises:
            FetchError: transport failure, timeout, non-2xx status, a body
                that is not JSON, or a document without a non-empty ``keys``
                array of valid keys.
        """
        try:
            resp = await self._client.get(jwks_uri, timeout=self._timeout)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "jwks_fetch_bad_status",
                extra={"jwks_uri": jwks_uri, "status": exc.response.status_code},
            )
            raise FetchError(
                f"JWKS endpoint returned {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning(
                "jwks_fetch_transport_error",
                extra={"jwks_uri": jwks_uri, "error": type(exc).__name__},
            )
            raise FetchError("JWKS endpoint unreachable") from exc

        try:
            data = resp.json()
        except ValueError as exc:
            raise FetchError("JWKS response is not JSON") from exc
        if not isinstance(data, dict):
            raise FetchError("JWKS response is not an object")

        try:
            document = JWKSDocument.model_validate(data)
        except ValidationError as exc:
            logger.error("jwks_document_invalid", extra={"jwks_uri": jwks_uri})
            raise FetchError("could not read keys from the JWKS response") from exc

        logger.info(
            "jwks_fetched",
            extra={"jwks_uri": jwks_uri, "kids": [k.kid for k in document.keys]},
        )
        return document.keys
