"""Two-tier key resolution: process cache, then durable store, then the IdP."""

import logging

from tokenbridge.core.errors import FetchError, StoreError
from tokenbridge.crypto.types import SigningKey
from tokenbridge.idp.fetcher import KeyFetcher
from tokenbridge.idp.key_cache import KeyCache
from tokenbridge.idp.key_store import KeyStore

logger = logging.getLogger(__name__)

REFILL_ATTEMPTS = 2


class KeyProvider:
    """Resolves a ``kid`` to a signing key, refilling the cache on a miss.

    A miss triggers one refill: the store is loaded into the cache and, if
    the kid is still unknown, the IdP is asked for its current key set, which
    is written back to the store. Only the fetch is retried, once.
    """

    def __init__(
        self,
        cache: KeyCache,
        store: KeyStore,
        fetcher: KeyFetcher,
        jwks_uri: str,
    ) -> None:
        self._cache = cache
        self._store = store
        self._fetcher = fetcher
        self._jwks_uri = jwks_uri

    @property
    def cache(self) -> KeyCache:
        return self._cache

    async def get_key(self, kid: str) -> SigningKey | None:
        """Return the key for ``kid``, or None when the IdP does not advertise it."""
        key = self._cache.get(kid)
        if key is not None:
            return key

        for attempt in range(1, REFILL_ATTEMPTS + 1):
            try:
                return await self._refill(kid)
            except FetchError as exc:
                logger.warning(
                    "key_refill_failed",
                    extra={"kid": kid, "attempt": attempt, "error": str(exc)},
                )
        return None

    async def warm(self) -> int:
        """Cold-start the cache from the store. Returns the number of keys loaded."""
        keys = await self._store.get_all()
        if keys:
            self._cache.load_all(keys)
        return len(keys)

    async def _refill(self, kid: str) -> SigningKey | None:
        try:
            stored = await self._store.get_all()
        except StoreError:
            stored = []
        if stored:
            self._cache.load_all(stored)
            key = self._cache.get(kid)
            if key is not None:
                logger.info("key_loaded_from_store", extra={"kid": kid})
                return key

        fetched = await self._fetcher.fetch_all(self._jwks_uri)
        await self._persist(fetched)
        self._cache.load_all(fetched)
        key = self._cache.get(kid)
        if key is None:
            logger.warning(
                "key_not_advertised",
                extra={"kid": kid, "advertised": [k.kid for k in fetched]},
            )
        return key

    async def _persist(self, keys: list[SigningKey]) -> None:
        for key in keys:
            try:
                await self._store.put(key)
            except StoreError:
                logger.warning("key_persist_failed", extra={"kid": key.kid})
