"""FastAPI application factory for the tokenbridge service."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tokenbridge.api.router_auth import router as auth_router
from tokenbridge.api.router_keys import router as keys_router
from tokenbridge.core.errors import StoreError
from tokenbridge.core.logging import configure_logging
from tokenbridge.core.services import Services, build_default_services
from tokenbridge.core.settings import AppSettings
from tokenbridge.db.engine import dispose_engine, get_session_factory

logger = logging.getLogger(__name__)


def create_app(services: Services | None = None) -> FastAPI:
    """Build and configure the FastAPI application.

    When ``services`` is given it is used as-is and startup wiring is skipped.
    """
    settings = AppSettings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if services is not None:
            yield
            return
        async with httpx.AsyncClient() as http_client:
            built = build_default_services(http_client, get_session_factory())
            try:
                loaded = await built.provider.warm()
                logger.info("key_cache_warmed", extra={"count": loaded})
            except StoreError:
                logger.warning("key_cache_warm_failed")
            app.state.services = built
            yield
        await dispose_engine()

    app = FastAPI(
        title="tokenbridge",
        version="0.1.0",
        lifespan=lifespan,
    )
    if services is not None:
        app.state.services = services

    origins = settings.get_cors_origin_list()
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["GET", "POST"],
            allow_headers=["Authorization", "Content-Type"],
        )

    app.include_router(auth_router)
    app.include_router(keys_router)

    return app
