"""Authorization-code exchange against the IdP token endpoint."""

import logging

import httpx
from pydantic import ValidationError

from tokenbridge.core.errors import FetchError
from tokenbridge.core.settings import IdpSettings
from tokenbridge.idp.types import TokenPair

logger = logging.getLogger(__name__)


class CodeExchangeClient:
    """Redeems an authorization code for an id-token/access-token pair."""

    def __init__(self, client: httpx.AsyncClient, settings: IdpSettings) -> None:
        self._client = client
        self._settings = settings

    async def exchange(self, code: str) -> TokenPair:
        form = {
            "client_id": self._settings.client_id,
            "client_secret": self._settings.client_secret,
            "redirect_uri": self._settings.redirect_uri,
            "grant_type": "authorization_code",
            "code": code,
        }
        try:
            resp = await self._client.post(
                self._settings.token_uri,
                data=form,
                timeout=self._settings.http_timeout,
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "code_exchange_rejected",
                extra={"status": exc.response.status_code},
            )
            raise FetchError("token endpoint rejected the code") from exc
        except httpx.HTTPError as exc:
            raise FetchError("token endpoint unreachable") from exc

        try:
            return TokenPair.model_validate(resp.json())
        except (ValueError, ValidationError) as exc:
            raise FetchError("token endpoint returned no id_token") from exc
