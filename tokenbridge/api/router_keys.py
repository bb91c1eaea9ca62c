"""Internal endpoint the scheduler calls to refresh IdP signing keys."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from starlette.responses import JSONResponse

from tokenbridge.api.deps import get_services, require_internal_token
from tokenbridge.api.schemas import RefreshResponse
from tokenbridge.core.errors import FetchError, StoreError
from tokenbridge.core.services import Services

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/internal/keys", tags=["keys"])

HTTP_BAD_GATEWAY = 502

InternalToken = Annotated[str, Depends(require_internal_token)]


@router.post("/refresh", response_model=None)
async def refresh_keys(
    services: Annotated[Services, Depends(get_services)],
    _token: InternalToken,
) -> RefreshResponse | JSONResponse:
    """POST /internal/keys/refresh -- run one JWKS refresh cycle."""
    try:
        result = await services.refresh_job.refresh()
    except (FetchError, StoreError) as exc:
        logger.exception("key_refresh_failed")
        return JSONResponse(
            {"error": type(exc).__name__}, status_code=HTTP_BAD_GATEWAY
        )
    return RefreshResponse.from_result(result)
