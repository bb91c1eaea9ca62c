"""Shared test fixtures for tokenbridge."""

from collections.abc import AsyncIterator

import httpx
import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from factories import (
    JWKS_URI,
    TENANT,
    FakeIdp,
    IssuerKeypair,
    make_issuer_keypair,
)
from tokenbridge.core.app import create_app
from tokenbridge.core.services import Services, build_services
from tokenbridge.core.settings import IdpSettings, IssuerSettings
from tokenbridge.crypto.token_issuer import CustomTokenIssuer
from tokenbridge.db.base import BaseEntity
from tokenbridge.idp.fetcher import KeyFetcher
from tokenbridge.idp.key_cache import KeyCache
from tokenbridge.idp.key_provider import KeyProvider
from tokenbridge.idp.key_store import SqlKeyStore


@pytest.fixture(autouse=True)
def _set_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Set environment variables for test settings."""
    monkeypatch.setenv("TOKENBRIDGE_IDP_TENANT_ID", TENANT)
    monkeypatch.setenv("TOKENBRIDGE_IDP_CLIENT_ID", "client-1")
    monkeypatch.setenv("TOKENBRIDGE_IDP_CLIENT_SECRET", "s3cret")
    monkeypatch.setenv("TOKENBRIDGE_IDP_REDIRECT_URI", "https://app.example.com/cb")


@pytest.fixture
async def session_factory() -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    """Create an in-memory SQLite session factory with the schema in place."""
    engine = create_async_engine(
        "sqlite+aiosqlite://", echo=False, poolclass=StaticPool
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, _rec) -> None:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(BaseEntity.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def key_store(session_factory: async_sessionmaker[AsyncSession]) -> SqlKeyStore:
    return SqlKeyStore(session_factory, timeout=5.0)


@pytest.fixture
def fake_idp() -> FakeIdp:
    return FakeIdp()


@pytest.fixture
async def http_client(fake_idp: FakeIdp) -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(transport=fake_idp.transport) as client:
        yield client


@pytest.fixture
def fetcher(http_client: httpx.AsyncClient) -> KeyFetcher:
    return KeyFetcher(http_client, timeout=5.0)


@pytest.fixture
def key_cache() -> KeyCache:
    return KeyCache()


@pytest.fixture
def provider(
    key_cache: KeyCache, key_store: SqlKeyStore, fetcher: KeyFetcher
) -> KeyProvider:
    return KeyProvider(key_cache, key_store, fetcher, JWKS_URI)


@pytest.fixture(scope="session")
def issuer_keypair() -> IssuerKeypair:
    return make_issuer_keypair()


@pytest.fixture
def token_issuer(issuer_keypair: IssuerKeypair) -> CustomTokenIssuer:
    return CustomTokenIssuer.from_settings(
        IssuerSettings(
            service_account_email="minter@project.iam.gserviceaccount.com",
            private_key_pem=issuer_keypair.private_key_pem,
        )
    )


@pytest.fixture
def services(
    http_client: httpx.AsyncClient,
    key_store: SqlKeyStore,
    token_issuer: CustomTokenIssuer,
) -> Services:
    return build_services(http_client, key_store, IdpSettings(), token_issuer)


@pytest.fixture
async def client(services: Services) -> AsyncIterator[httpx.AsyncClient]:
    """Create an httpx test client bound to the app with test services."""
    app = create_app(services=services)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
