"""Browser-facing login, callback, and custom-token endpoints."""

import logging
from typing import Annotated
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from fastapi import APIRouter, Depends, Form, Query
from fastapi.responses import PlainTextResponse, RedirectResponse

from tokenbridge.api.deps import get_services
from tokenbridge.api.schemas import CustomTokenRequest, CustomTokenResponse
from tokenbridge.core.errors import FetchError, IssuanceError, TokenInvalid
from tokenbridge.core.services import Services

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

HTTP_BAD_REQUEST = 400
HTTP_REDIRECT = 302
GENERIC_FAILURE = (
    "Oh oh, something went wrong. Please contact support with the following "
    "message: see the logs for more information."
)

ServicesDep = Annotated[Services, Depends(get_services)]


def _failure(message: str = GENERIC_FAILURE) -> PlainTextResponse:
    return PlainTextResponse(message, status_code=HTTP_BAD_REQUEST)


def _with_query(url: str, params: dict[str, str]) -> str:
    """Append ``params`` to ``url``, keeping any query it already carries."""
    parts = urlsplit(url)
    query = parse_qsl(parts.query, keep_blank_values=True) + list(params.items())
    return urlunsplit(parts._replace(query=urlencode(query)))


@router.get("/login", response_model=None)
async def login(
    services: ServicesDep,
    error: Annotated[str | None, Query()] = None,
    error_description: Annotated[str | None, Query()] = None,
) -> RedirectResponse | PlainTextResponse:
    """GET /auth/login -- redirect to the IdP, or report an IdP error."""
    if error:
        logger.error(
            "idp_authentication_error",
            extra={"error": error, "error_description": error_description},
        )
        return _failure(
            "Oh oh, something went wrong. Please contact support with the "
            f"following message: Invalid authentication request: {error_description}"
        )

    idp = services.idp
    params = {
        "client_id": idp.client_id,
        "response_type": "code",
        "scope": "openid",
        "nonce": idp.nonce,
        "response_mode": "form_post",
    }
    if idp.redirect_uri:
        params["redirect_uri"] = idp.redirect_uri
    return RedirectResponse(
        url=f"{idp.authorize_uri}?{urlencode(params)}",
        status_code=HTTP_REDIRECT,
    )


@router.post("/callback", response_model=None)
async def callback(
    services: ServicesDep,
    code: Annotated[str, Form()],
) -> RedirectResponse | PlainTextResponse:
    """POST /auth/callback -- redeem the code and hand tokens to the client."""
    try:
        pair = await services.exchange.exchange(code)
    except FetchError:
        logger.exception("code_exchange_failed")
        return _failure()

    tokens = {"id_token": pair.id_token, "access_token": pair.access_token}
    return RedirectResponse(
        url=_with_query(services.idp.redirect_uri, tokens),
        status_code=HTTP_REDIRECT,
    )


async def _mint(
    services: Services, id_token: str
) -> CustomTokenResponse | PlainTextResponse:
    try:
        identity = await services.verifier.verify(id_token, services.idp.issuer)
        if services.issuer is None:
            raise IssuanceError("no token issuer configured")
        token = services.issuer.issue(identity.id)
    except TokenInvalid as exc:
        logger.warning("custom_token_denied", extra={"reason": exc.reason})
        return _failure()
    except IssuanceError:
        logger.exception("custom_token_issuance_failed")
        return _failure()
    return CustomTokenResponse(custom_token=token)


@router.post("/custom-token", response_model=None)
async def custom_token(
    services: ServicesDep,
    payload: CustomTokenRequest,
) -> CustomTokenResponse | PlainTextResponse:
    """POST /auth/custom-token -- verify an id-token and mint a custom token."""
    return await _mint(services, payload.id_token)


@router.get("/custom-token", response_model=None)
async def custom_token_from_redirect(
    services: ServicesDep,
    id_token: Annotated[str, Query(min_length=1)],
) -> CustomTokenResponse | PlainTextResponse:
    """GET /auth/custom-token?id_token=... -- same as POST, for redirect targets."""
    return await _mint(services, id_token)
