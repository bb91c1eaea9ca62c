"""Durable key store shared by every process instance."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tokenbridge.core.errors import StoreError
from tokenbridge.core.settings import STORE_TIMEOUT_DEFAULT
from tokenbridge.crypto.types import SigningKey
from tokenbridge.db.repo_idp_keys import (
    delete_key,
    get_all_keys,
    to_signing_key,
    upsert_key,
)

logger = logging.getLogger(__name__)


class KeyStore(Protocol):
    """Durable ``kid -> SigningKey`` mapping."""

    async def get_all(self) -> list[SigningKey]: ...

    async def put(self, key: SigningKey) -> None: ...

    async def delete(self, kid: str) -> None: ...


class SqlKeyStore:
    """Key store backed by the ``idp_keys`` table.

    Each operation runs in its own transaction and is bounded by ``timeout``
    seconds. Backend failures surface as ``StoreError``; an empty table is
    reported as an empty list.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        timeout: float = STORE_TIMEOUT_DEFAULT,
    ) -> None:
        self._session_factory = session_factory
        self._timeout = timeout

    @asynccontextmanager
    async def _transaction(self, operation: str) -> AsyncIterator[AsyncSession]:
        try:
            async with asyncio.timeout(self._timeout):
                async with self._session_factory() as session, session.begin():
                    yield session
        except (SQLAlchemyError, OSError, TimeoutError) as exc:
            logger.warning(
                "key_store_failed",
                extra={"operation": operation, "error": type(exc).__name__},
            )
            raise StoreError(f"key store {operation} failed") from exc

    async def get_all(self) -> list[SigningKey]:
        async with self._transaction("get_all") as session:
            entities = await get_all_keys(session)
            return [to_signing_key(e) for e in entities]

    async def put(self, key: SigningKey) -> None:
        async with self._transaction("put") as session:
            await upsert_key(session, key)

    async def delete(self, kid: str) -> None:
        """Delete by kid; deleting an absent kid is not an error."""
        async with self._transaction("delete") as session:
            await delete_key(session, kid)
