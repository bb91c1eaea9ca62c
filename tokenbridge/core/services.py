"""Construction of the long-lived components owned by the application."""

import logging
from dataclasses import dataclass

import httpx
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tokenbridge.core.errors import IssuanceError
from tokenbridge.core.settings import IdpSettings, IssuerSettings
from tokenbridge.crypto.token_issuer import CustomTokenIssuer, TokenIssuer
from tokenbridge.idp.exchange import CodeExchangeClient
from tokenbridge.idp.fetcher import KeyFetcher
from tokenbridge.idp.key_cache import KeyCache
from tokenbridge.idp.key_provider import KeyProvider
from tokenbridge.idp.key_store import KeyStore, SqlKeyStore
from tokenbridge.idp.refresh import KeyRefreshJob
from tokenbridge.idp.verifier import TokenVerifier

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Everything a request handler needs, wired once per process."""

    idp: IdpSettings
    provider: KeyProvider
    verifier: TokenVerifier
    refresh_job: KeyRefreshJob
    exchange: CodeExchangeClient
    issuer: TokenIssuer | None = None


def build_services(
    http_client: httpx.AsyncClient,
    store: KeyStore,
    idp: IdpSettings,
    issuer: TokenIssuer | None = None,
) -> Services:
    """Wire cache, store, fetcher, verifier, and refresh job together."""
    cache = KeyCache()
    fetcher = KeyFetcher(http_client, timeout=idp.http_timeout)
    provider = KeyProvider(cache, store, fetcher, idp.keys_uri)
    verifier = TokenVerifier(
        provider,
        algorithm=idp.algorithm,
        audience=idp.client_id if idp.verify_audience else None,
        leeway=idp.leeway_seconds,
    )
    return Services(
        idp=idp,
        provider=provider,
        verifier=verifier,
        refresh_job=KeyRefreshJob(fetcher, store, idp.keys_uri, cache=cache),
        exchange=CodeExchangeClient(http_client, idp),
        issuer=issuer,
    )


def build_issuer(settings: IssuerSettings) -> TokenIssuer | None:
    """Load the custom-token issuer, or None when credentials are missing."""
    try:
        return CustomTokenIssuer.from_settings(settings)
    except IssuanceError as exc:
        logger.warning("token_issuer_unavailable", extra={"error": str(exc)})
        return None


def build_default_services(
    http_client: httpx.AsyncClient,
    session_factory: async_sessionmaker[AsyncSession],
) -> Services:
    """Build services from environment settings."""
    idp = IdpSettings()
    store = SqlKeyStore(session_factory, timeout=idp.store_timeout)
    return build_services(http_client, store, idp, build_issuer(IssuerSettings()))
