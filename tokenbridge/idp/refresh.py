"""Scheduled JWKS refresh with full-diff eviction of retired keys."""

import logging

from tokenbridge.core.errors import StoreError
from tokenbridge.idp.fetcher import KeyFetcher
from tokenbridge.idp.key_cache import KeyCache
from tokenbridge.idp.key_store import KeyStore
from tokenbridge.idp.types import RefreshResult

logger = logging.getLogger(__name__)


class KeyRefreshJob:
    """Re-fetches the IdP key set and converges the key store onto it.

    JWKS responses are whole snapshots, so eviction is a diff of the stored
    kids against the fetched ones rather than an incremental update.
    """

    def __init__(
        self,
        fetcher: KeyFetcher,
        store: KeyStore,
        jwks_uri: str,
        cache: KeyCache | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._store = store
        self._jwks_uri = jwks_uri
        self._cache = cache

    async def refresh(self) -> RefreshResult:
        """Run one refresh cycle.

        Raises:
            FetchError: the IdP could not be read; the store is untouched.
            StoreError: an upsert or the post-upsert read failed.
        """
        fetched = await self._fetcher.fetch_all(self._jwks_uri)
        for key in fetched:
            await self._store.put(key)

        advertised = {key.kid for key in fetched}
        stored = await self._store.get_all()
        candidates = [key.kid for key in stored if key.kid not in advertised]
        logger.info("keys_to_evict", extra={"count": len(candidates)})

        evicted: list[str] = []
        failed: list[str] = []
        for kid in candidates:
            try:
                await self._store.delete(kid)
            except StoreError:
                logger.exception("key_eviction_failed", extra={"kid": kid})
                failed.append(kid)
            else:
                logger.info("key_evicted", extra={"kid": kid})
                evicted.append(kid)

        if self._cache is not None:
            self._cache.load_all(fetched)

        return RefreshResult(updated=fetched, evicted=evicted, failed=failed)
